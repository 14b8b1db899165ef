"""
Immutable filter predicates and sort specs for sale listings.

`build_predicate` turns a resolved `SalesQuery` into an `AllOf` of per-field
clauses. Each clause can evaluate itself against a record (`matches`), which
is what the in-memory store uses; the PostgreSQL store compiles the same
values to SQL instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from salesdash.query.params import SalesQuery

SEARCH_FIELDS: Tuple[str, ...] = ("customer_name", "phone_number")


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match on any of `fields`."""

    fields: Tuple[str, ...]
    needle: str

    def matches(self, record: Any) -> bool:
        needle = self.needle.lower()
        for name in self.fields:
            value = getattr(record, name, None)
            if value is not None and needle in str(value).lower():
                return True
        return False


@dataclass(frozen=True)
class AnyOf:
    """
    Set membership on `field`.

    For list-valued fields (tags) the record matches when any of its items is
    in `values`.
    """

    field: str
    values: Tuple[str, ...]

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field, None)
        if value is None:
            return False
        if isinstance(value, (list, tuple)):
            return any(item in self.values for item in value)
        return value in self.values


@dataclass(frozen=True)
class Between:
    """Inclusive range on `field`; a `None` bound is open."""

    field: str
    lower: Any = None
    upper: Any = None

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field, None)
        if value is None:
            return False
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None and value > self.upper:
            return False
        return True


@dataclass(frozen=True)
class AllOf:
    """Conjunction of clauses. No clauses matches every record."""

    clauses: Tuple["Predicate", ...] = ()

    def matches(self, record: Any) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


Predicate = Union[TextSearch, AnyOf, Between, AllOf]


@dataclass(frozen=True)
class SortSpec:
    """
    Sort on one record attribute.

    Stores break ties on the native identifier ascending and put missing values
    lowest (first ascending, last descending).
    """

    field: str = "date"
    descending: bool = True


def build_predicate(query: SalesQuery) -> AllOf:
    """Combine the constraints of `query` into a single conjunction."""
    clauses: List[Predicate] = []

    if query.search:
        clauses.append(TextSearch(SEARCH_FIELDS, query.search))

    for field, values in (
        ("customer_region", query.regions),
        ("gender", query.genders),
    ):
        if values:
            clauses.append(AnyOf(field, values))

    if query.age_min is not None or query.age_max is not None:
        clauses.append(Between("age", query.age_min, query.age_max))

    for field, values in (
        ("product_category", query.categories),
        ("tags", query.tags),
        ("payment_method", query.payment_methods),
    ):
        if values:
            clauses.append(AnyOf(field, values))

    if query.start_date is not None or query.end_date is not None:
        clauses.append(Between("date", query.start_date, query.end_date))

    return AllOf(tuple(clauses))


def build_sort(query: SalesQuery) -> SortSpec:
    return SortSpec(field=query.sort_by.attribute, descending=query.descending)


__all__ = [
    "AllOf",
    "AnyOf",
    "Between",
    "Predicate",
    "SEARCH_FIELDS",
    "SortSpec",
    "TextSearch",
    "build_predicate",
    "build_sort",
]
