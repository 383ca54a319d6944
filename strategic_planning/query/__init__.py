"""Safe list-query construction: filters, ordering and pagination."""

from .filters import (
    PROJECT_FILTERS,
    PUBLIC_PROJECT_FILTERS,
    STRATEGIC_ISSUE_FILTERS,
    STRATEGY_FILTERS,
    USER_FILTERS,
    FilterField,
    FilterSpec,
    ListQuery,
    Predicate,
    PredicateKind,
    apply,
    build,
    fetch_page,
    to_clauses,
)

__all__ = [
    "FilterField",
    "FilterSpec",
    "ListQuery",
    "PROJECT_FILTERS",
    "PUBLIC_PROJECT_FILTERS",
    "Predicate",
    "PredicateKind",
    "STRATEGIC_ISSUE_FILTERS",
    "STRATEGY_FILTERS",
    "USER_FILTERS",
    "apply",
    "build",
    "fetch_page",
    "to_clauses",
]
