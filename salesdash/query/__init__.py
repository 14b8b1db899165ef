"""
Query package for the sales dashboard backend.

`params` resolves raw request parameters into a typed `SalesQuery`;
`predicate` turns that query into immutable filter and sort values.
"""

from salesdash.query.params import SalesQuery, SortField, parse_sales_query
from salesdash.query.predicate import (
    AllOf,
    AnyOf,
    Between,
    Predicate,
    SortSpec,
    TextSearch,
    build_predicate,
    build_sort,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "Between",
    "Predicate",
    "SalesQuery",
    "SortField",
    "SortSpec",
    "TextSearch",
    "build_predicate",
    "build_sort",
    "parse_sales_query",
]
