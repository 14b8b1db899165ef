"""
PostgreSQL-backed sales store.

Predicates compile to a parameterized WHERE clause; column names come from a
fixed whitelist and every user-supplied value travels as a bound parameter.
Each call borrows a connection from a psycopg pool, so the count and fetch of
one listing run on independent snapshots.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import psycopg
from psycopg import Connection
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from salesdash.config import Settings, get_settings
from salesdash.domain.models import SaleRecord
from salesdash.infrastructure.db_factory import apply_statement_timeout, build_dsn, create_pool
from salesdash.query.predicate import AllOf, AnyOf, Between, Predicate, SortSpec, TextSearch
from salesdash.stores.abstract import AbstractSalesStore, StorageError
from salesdash.utils.logging import get_logger

log = get_logger(__name__)

TABLE = "public.sales"

# Column name -> type, in SaleRecord field order.
COLUMN_TYPES: Dict[str, str] = {
    "id": "uuid",
    "transaction_id": "bigint",
    "date": "timestamp",
    "customer_id": "text",
    "customer_name": "text",
    "phone_number": "text",
    "gender": "text",
    "age": "integer",
    "customer_region": "text",
    "customer_type": "text",
    "product_id": "text",
    "product_name": "text",
    "brand": "text",
    "product_category": "text",
    "tags": "text[]",
    "quantity": "integer",
    "price_per_unit": "double precision",
    "discount_percentage": "double precision",
    "total_amount": "double precision",
    "final_amount": "double precision",
    "payment_method": "text",
    "order_status": "text",
    "delivery_type": "text",
    "store_id": "text",
    "store_location": "text",
    "salesperson_id": "text",
    "employee_name": "text",
}
COLUMNS: Tuple[str, ...] = tuple(COLUMN_TYPES)

_COLUMN_DDL = ",\n".join(
    f"    {name} {sql_type}" for name, sql_type in COLUMN_TYPES.items() if name != "id"
)

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
{_COLUMN_DDL}
);
CREATE INDEX IF NOT EXISTS sales_transaction_id_idx ON {TABLE} (transaction_id);
CREATE INDEX IF NOT EXISTS sales_date_idx ON {TABLE} (date);
CREATE INDEX IF NOT EXISTS sales_quantity_idx ON {TABLE} (quantity);
CREATE INDEX IF NOT EXISTS sales_customer_name_idx ON {TABLE} (customer_name COLLATE "C");
CREATE INDEX IF NOT EXISTS sales_tags_idx ON {TABLE} USING gin (tags);
"""

# Binary collation so name ordering matches plain code-point comparison.
_COLLATIONS = {"customer_name": ' COLLATE "C"'}


def _column(field: str) -> str:
    if field not in COLUMN_TYPES:
        raise ValueError(f"Unknown sales column '{field}'")
    return field


def compile_predicate(predicate: Predicate) -> Tuple[str, List[Any]]:
    """
    Compile a predicate into a SQL boolean expression and its parameters.

    Returns
    -------
    tuple[str, list]
        Expression using `%s` placeholders, and the values to bind in order.
    """
    if isinstance(predicate, AllOf):
        if not predicate.clauses:
            return "TRUE", []
        parts: List[str] = []
        params: List[Any] = []
        for clause in predicate.clauses:
            clause_sql, clause_params = compile_predicate(clause)
            parts.append(f"({clause_sql})")
            params.extend(clause_params)
        return " AND ".join(parts), params

    if isinstance(predicate, TextSearch):
        columns = [_column(field) for field in predicate.fields]
        parts = [f"strpos(lower({column}), lower(%s)) > 0" for column in columns]
        return " OR ".join(parts), [predicate.needle] * len(columns)

    if isinstance(predicate, AnyOf):
        column = _column(predicate.field)
        if COLUMN_TYPES[column] == "text[]":
            return f"{column} && %s::text[]", [list(predicate.values)]
        return f"{column} = ANY(%s)", [list(predicate.values)]

    if isinstance(predicate, Between):
        column = _column(predicate.field)
        parts = []
        params = []
        if predicate.lower is not None:
            parts.append(f"{column} >= %s")
            params.append(predicate.lower)
        if predicate.upper is not None:
            parts.append(f"{column} <= %s")
            params.append(predicate.upper)
        return (" AND ".join(parts) or "TRUE"), params

    raise TypeError(f"Unsupported predicate: {predicate!r}")


def compile_order(sort: SortSpec) -> str:
    """ORDER BY body for `sort`, with missing values lowest and id as tie-break."""
    column = _column(sort.field)
    collation = _COLLATIONS.get(column, "")
    direction = "DESC NULLS LAST" if sort.descending else "ASC NULLS FIRST"
    return f"{column}{collation} {direction}, id ASC"


def record_to_row(record: SaleRecord) -> Tuple[Any, ...]:
    """Column values of `record` in COLUMNS order, for COPY or INSERT."""
    return tuple(getattr(record, name) for name in COLUMNS)


def _row_to_record(row: Dict[str, Any]) -> SaleRecord:
    if row.get("tags") is None:
        row = {**row, "tags": []}
    return SaleRecord.model_validate(row)


def ensure_schema(conn: Connection) -> None:
    """Create the sales table and its indexes when missing."""
    with conn.cursor() as cur:
        cur.execute(SCHEMA_SQL)
    conn.commit()


class PostgresSalesStore(AbstractSalesStore):
    """
    Store reading the `public.sales` table through a psycopg ConnectionPool.

    Driver errors surface as `StorageError`; nothing is retried here.
    """

    name: str = "postgres"

    def __init__(self, pool: ConnectionPool, statement_timeout_ms: int = 0) -> None:
        self._pool = pool
        self._statement_timeout_ms = statement_timeout_ms

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, dsn_override: Optional[str] = None
    ) -> "PostgresSalesStore":
        settings = settings or get_settings()
        pool = create_pool(
            dsn_override or build_dsn(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        return cls(pool, statement_timeout_ms=settings.db_statement_timeout_ms)

    def _query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    apply_statement_timeout(cur, self._statement_timeout_ms)
                    cur.execute(sql, params)
                    return cur.fetchall()
        except psycopg.Error as exc:
            raise StorageError(f"Sales store query failed: {type(exc).__name__}") from exc

    def count(self, predicate: Predicate) -> int:
        where, params = compile_predicate(predicate)
        rows = self._query(f"SELECT COUNT(*) AS total FROM {TABLE} WHERE {where}", params)
        return int(rows[0]["total"])

    def find(
        self, predicate: Predicate, sort: SortSpec, skip: int, limit: int
    ) -> List[SaleRecord]:
        where, params = compile_predicate(predicate)
        sql = (
            f"SELECT {', '.join(COLUMNS)} FROM {TABLE} WHERE {where} "
            f"ORDER BY {compile_order(sort)} OFFSET %s LIMIT %s"
        )
        rows = self._query(sql, [*params, skip, limit])
        return [_row_to_record(row) for row in rows]

    def distinct(self, field: str) -> List[Any]:
        self._check_distinct_field(field)
        column = _column(field)
        if COLUMN_TYPES[column] == "text[]":
            sql = f"SELECT DISTINCT unnest({column}) AS value FROM {TABLE}"
        else:
            sql = f"SELECT DISTINCT {column} AS value FROM {TABLE}"
        return [row["value"] for row in self._query(sql)]

    def find_by_id(self, record_id: UUID) -> Optional[SaleRecord]:
        rows = self._query(
            f"SELECT {', '.join(COLUMNS)} FROM {TABLE} WHERE id = %s", [record_id]
        )
        return _row_to_record(rows[0]) if rows else None

    def find_by_transaction_id(self, transaction_id: int) -> Optional[SaleRecord]:
        rows = self._query(
            f"SELECT {', '.join(COLUMNS)} FROM {TABLE} "
            "WHERE transaction_id = %s ORDER BY id LIMIT 1",
            [transaction_id],
        )
        return _row_to_record(rows[0]) if rows else None

    def close(self) -> None:
        self._pool.close()
        log.info("Connection pool closed", extra={"store": self.name})


__all__ = [
    "COLUMNS",
    "COLUMN_TYPES",
    "PostgresSalesStore",
    "SCHEMA_SQL",
    "TABLE",
    "compile_order",
    "compile_predicate",
    "ensure_schema",
    "record_to_row",
]
