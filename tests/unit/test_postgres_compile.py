"""
SQL generation for the PostgreSQL store.

These tests only inspect the generated text and parameters; no database is
needed.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import pytest

from salesdash.domain.models import SaleRecord
from salesdash.query.params import parse_sales_query
from salesdash.query.predicate import (
    SEARCH_FIELDS,
    AllOf,
    AnyOf,
    Between,
    SortSpec,
    TextSearch,
    build_predicate,
)
from salesdash.stores.postgres import (
    COLUMNS,
    SCHEMA_SQL,
    compile_order,
    compile_predicate,
    record_to_row,
)


class TestCompilePredicate:
    """WHERE clause generation."""

    def test_empty_conjunction_is_true(self):
        assert compile_predicate(AllOf()) == ("TRUE", [])

    def test_text_search_binds_needle_per_column(self):
        sql, params = compile_predicate(TextSearch(SEARCH_FIELDS, "ali"))

        assert sql == (
            "strpos(lower(customer_name), lower(%s)) > 0 OR "
            "strpos(lower(phone_number), lower(%s)) > 0"
        )
        assert params == ["ali", "ali"]

    def test_any_of_scalar_column(self):
        assert compile_predicate(AnyOf("gender", ("Male", "Female"))) == (
            "gender = ANY(%s)",
            [["Male", "Female"]],
        )

    def test_any_of_tags_uses_array_overlap(self):
        assert compile_predicate(AnyOf("tags", ("organic",))) == (
            "tags && %s::text[]",
            [["organic"]],
        )

    def test_between_bounds(self):
        assert compile_predicate(Between("age", 20, 40)) == ("age >= %s AND age <= %s", [20, 40])
        assert compile_predicate(Between("age", None, 40)) == ("age <= %s", [40])
        assert compile_predicate(Between("age")) == ("TRUE", [])

    def test_conjunction_parenthesizes_clauses_in_order(self):
        predicate = build_predicate(
            parse_sales_query({"search": "x", "region": "North", "startDate": "2023-01-01"})
        )

        sql, params = compile_predicate(predicate)

        assert sql.count("(") >= 3
        assert sql.index("customer_name") < sql.index("customer_region") < sql.index("date >=")
        assert params == ["x", "x", ["North"], datetime(2023, 1, 1)]

    def test_user_values_never_reach_sql_text(self):
        needle = "'; DROP TABLE sales; --"
        sql, params = compile_predicate(TextSearch(SEARCH_FIELDS, needle))

        assert needle not in sql
        assert needle in params

    def test_unknown_column_is_rejected(self):
        with pytest.raises(ValueError):
            compile_predicate(AnyOf("gender; DROP TABLE sales", ("x",)))

    def test_unknown_predicate_type_is_rejected(self):
        with pytest.raises(TypeError):
            compile_predicate("age > 3")  # type: ignore[arg-type]


class TestCompileOrder:
    """ORDER BY generation."""

    def test_descending_puts_nulls_last(self):
        assert compile_order(SortSpec("date", True)) == "date DESC NULLS LAST, id ASC"

    def test_ascending_puts_nulls_first(self):
        assert compile_order(SortSpec("quantity", False)) == "quantity ASC NULLS FIRST, id ASC"

    def test_customer_name_uses_binary_collation(self):
        assert compile_order(SortSpec("customer_name", False)) == (
            'customer_name COLLATE "C" ASC NULLS FIRST, id ASC'
        )


def test_record_to_row_follows_column_order():
    record = SaleRecord(id=UUID(int=1), transaction_id=9, tags=["a"], employee_name="Kim")

    row = record_to_row(record)

    assert len(row) == len(COLUMNS)
    assert row[0] == UUID(int=1)
    assert row[COLUMNS.index("transaction_id")] == 9
    assert row[COLUMNS.index("tags")] == ["a"]
    assert row[-1] == "Kim"


def test_schema_declares_every_column():
    for column in COLUMNS:
        assert f"{column} " in SCHEMA_SQL


def test_bound_values_never_contain_nul():
    predicate = build_predicate(
        parse_sales_query({"search": "ali\x00", "region": "No\x00rth", "tags": "a\x00b,\x00"})
    )

    _, params = compile_predicate(predicate)

    flat = [item for value in params for item in (value if isinstance(value, list) else [value])]
    assert flat == ["ali", "ali", "North", "ab"]
    assert all("\x00" not in item for item in flat)
