"""
Request parameter parsing for sale listings.

Turns the flat, untrusted string parameters of a listing request into a frozen
`SalesQuery` whose fields are fully resolved. Every coercion here is lenient:
a value that does not parse is treated as absent, never as an error.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_END_OF_DAY = time(23, 59, 59, 999_000)
# OFFSET and LIMIT are bound as signed 64-bit integers.
_INT64_MAX = 2**63 - 1


class SortField(str, Enum):
    """Sort keys accepted by the listing endpoint."""

    DATE = "date"
    QUANTITY = "quantity"
    CUSTOMER_NAME = "customerName"

    @property
    def attribute(self) -> str:
        """Name of the `SaleRecord` attribute this key sorts on."""
        return _SORT_ATTRIBUTES[self]


_SORT_ATTRIBUTES = {
    SortField.DATE: "date",
    SortField.QUANTITY: "quantity",
    SortField.CUSTOMER_NAME: "customer_name",
}


class SalesQuery(BaseModel):
    """
    Fully resolved listing request.

    Empty tuples and `None` mean "no constraint". The age bounds are already
    cleared when the requested range was inverted, and `end_date` is already
    pushed to the last millisecond of its calendar day.
    """

    search: Optional[str] = None
    regions: Tuple[str, ...] = ()
    genders: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    payment_methods: Tuple[str, ...] = ()
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: SortField = SortField.DATE
    descending: bool = True
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    model_config = ConfigDict(frozen=True)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _raw_values(params: Mapping[str, Any], key: str) -> List[str]:
    """All non-empty raw values for `key`, whatever the mapping flavour."""
    if hasattr(params, "getlist"):
        raw: Any = params.getlist(key)
    else:
        raw = params.get(key)
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raw = [raw]
    # NUL cannot be stored or bound as text, so it can never match anything.
    values = (str(value).replace("\x00", "") for value in raw if value is not None)
    return [value for value in values if value != ""]


def _first(params: Mapping[str, Any], key: str) -> Optional[str]:
    values = _raw_values(params, key)
    return values[0] if values else None


def split_csv(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated value, trimming tokens and dropping empty ones."""
    if not value:
        return ()
    return tuple(token.strip() for token in value.split(",") if token.strip())


def parse_int(value: Any) -> Optional[int]:
    """
    Parse the leading integer of `value`.

    `"40"`, `" 40"` and `"40yrs"` all give 40; a value with no leading digits
    gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime into a naive local datetime.

    Offset-aware input is converted to local time. Unparseable input gives None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        try:
            text = str(value).strip()
            if text[-1:] in ("Z", "z"):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), _END_OF_DAY)


def _positive_or(value: Optional[int], default: int) -> int:
    if value is None or value < 1:
        return default
    return value


def _page_window(page: int, limit: int) -> Tuple[int, int]:
    """Clamp `page` and `limit` so that `limit` and `skip` both fit in int64."""
    limit = min(limit, _INT64_MAX)
    page = min(page, _INT64_MAX // limit + 1)
    return page, limit


def _resolve_sort_field(value: Optional[str]) -> SortField:
    try:
        return SortField(value)
    except ValueError:
        return SortField.DATE


def _merged_list(params: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    # Repeated keys (?region=A&region=B) merge with comma-separated ones.
    return split_csv(",".join(_raw_values(params, key)))


def parse_sales_query(params: Mapping[str, Any]) -> SalesQuery:
    """
    Resolve raw listing parameters into a `SalesQuery`.

    Parameters
    ----------
    params : Mapping[str, Any]
        Request parameters using the wire names (`search`, `region`, `gender`,
        `ageMin`, `ageMax`, `category`, `tags`, `payment`, `startDate`,
        `endDate`, `sortBy`, `sortOrder`, `page`, `limit`). Multi-valued
        mappings exposing `getlist` are supported.

    Returns
    -------
    SalesQuery
        The typed query. Nothing in `params` can make this raise.
    """
    age_min = parse_int(_first(params, "ageMin"))
    age_max = parse_int(_first(params, "ageMax"))
    if age_min is not None and age_max is not None and age_min > age_max:
        age_min = age_max = None

    page, limit = _page_window(
        _positive_or(parse_int(_first(params, "page")), DEFAULT_PAGE),
        _positive_or(parse_int(_first(params, "limit")), DEFAULT_LIMIT),
    )

    start_date = parse_datetime(_first(params, "startDate"))
    end_date = parse_datetime(_first(params, "endDate"))
    if end_date is not None:
        end_date = end_of_day(end_date)

    return SalesQuery(
        search=_first(params, "search"),
        regions=_merged_list(params, "region"),
        genders=_merged_list(params, "gender"),
        categories=_merged_list(params, "category"),
        tags=_merged_list(params, "tags"),
        payment_methods=_merged_list(params, "payment"),
        age_min=age_min,
        age_max=age_max,
        start_date=start_date,
        end_date=end_date,
        sort_by=_resolve_sort_field(_first(params, "sortBy")),
        descending=_first(params, "sortOrder") != "asc",
        page=page,
        limit=limit,
    )


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_PAGE",
    "SalesQuery",
    "SortField",
    "end_of_day",
    "parse_datetime",
    "parse_int",
    "parse_sales_query",
    "split_csv",
]
