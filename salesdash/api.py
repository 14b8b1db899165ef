"""
HTTP API for the sales dashboard.

Routes are thin pass-throughs to `SalesService`. Listing reads the raw query
string so malformed filter values are normalized by the service instead of
being rejected with a 422.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salesdash import __version__
from salesdash.config import Settings, get_settings
from salesdash.domain.models import FilterCatalog, PageEnvelope, SaleRecord
from salesdash.service import SalesService
from salesdash.stores.abstract import StorageError
from salesdash.stores.postgres import PostgresSalesStore
from salesdash.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api")

NOT_FOUND_BODY = {"error": "Not found"}
SERVER_ERROR_BODY = {"error": "Server error"}


def get_sales_service(request: Request) -> SalesService:
    """Dependency returning the service bound to the running app."""
    return request.app.state.sales_service


@router.get("/health", tags=["health"])
def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/sales", response_model=PageEnvelope, tags=["sales"])
def list_sales(
    request: Request,
    service: SalesService = Depends(get_sales_service),
) -> PageEnvelope:
    """
    Paginated, filtered, sorted sale records.

    Accepts `search, region, gender, ageMin, ageMax, category, tags, payment,
    startDate, endDate, sortBy, sortOrder, page, limit`.
    """
    return service.list_sales(request.query_params)


@router.get(
    "/sales/{sale_id}",
    response_model=SaleRecord,
    responses={404: {"description": "No record with this identifier"}},
    tags=["sales"],
)
def get_sale(
    sale_id: str,
    service: SalesService = Depends(get_sales_service),
) -> Any:
    """One record by native id, or by transaction id as a fallback."""
    sale = service.get_sale(sale_id)
    if sale is None:
        return JSONResponse(status_code=404, content=NOT_FOUND_BODY)
    return sale


@router.get("/filters", response_model=FilterCatalog, tags=["filters"])
def get_filters(service: SalesService = Depends(get_sales_service)) -> FilterCatalog:
    return service.filter_catalog()


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "Request failed",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return JSONResponse(status_code=500, content=SERVER_ERROR_BODY)


def create_app(
    service: Optional[SalesService] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    service : SalesService, optional
        Service to serve. When omitted, the app builds a PostgreSQL-backed
        service on startup and closes its pool on shutdown.
    settings : Settings, optional
        Configuration; defaults to `get_settings()`.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = getattr(app.state, "sales_service", None) is None
        if owned:
            app.state.sales_service = SalesService(PostgresSalesStore.from_settings(settings))
        log.info(
            "API started",
            extra={"store": app.state.sales_service.store.name, "env": settings.app_env},
        )
        try:
            yield
        finally:
            if owned:
                app.state.sales_service.close()
                app.state.sales_service = None

    app = FastAPI(title="Sales Dashboard API", version=__version__, lifespan=lifespan)
    app.state.sales_service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageError, _server_error)
    app.add_exception_handler(Exception, _server_error)
    app.include_router(router)
    return app


__all__ = ["create_app", "get_sales_service", "router"]
