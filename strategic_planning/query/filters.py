"""
Filter and pagination builder.

Turns a loosely-typed query-parameter bag into a validated ``ListQuery``:
predicates, an allow-listed sort column and direction, and a bounded
limit/offset. Malformed values never raise; they are treated as absent.

Column names only ever come from a ``FilterSpec`` (server-side constants) and
every value reaches SQL as a bound parameter.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import and_, asc, desc, or_
from sqlalchemy.orm import Query

from ..config import get_settings

_settings = get_settings()

DEFAULT_ORDER_COLUMN = "created_at"
DEFAULT_ORDER_DIRECTION = "desc"
OWNER_COLUMN = "created_by"
MAX_INT64 = 2**63 - 1
MIN_INT64 = -(2**63)


class PredicateKind(str, Enum):
    """Supported predicate shapes."""

    EQ = "eq"
    GTE = "gte"
    LTE = "lte"
    SEARCH = "search"
    YEAR_WITHIN = "year_within"


# =============================================================================
# Value parsers: return None for anything that does not parse
# =============================================================================


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def parse_str(value: Any) -> Optional[str]:
    value = _first(value)
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    text = str(value).strip()
    return text or None


def _in_int64(number: int) -> Optional[int]:
    if MIN_INT64 <= number <= MAX_INT64:
        return number
    return None


def parse_int(value: Any) -> Optional[int]:
    """Integers outside the signed 64-bit range cannot be bound, so they are absent."""
    value = _first(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return _in_int64(value)
    text = parse_str(value)
    if text is None:
        return None
    try:
        return _in_int64(int(text))
    except ValueError:
        return None


def parse_float(value: Any) -> Optional[float]:
    value = _first(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = parse_str(value)
    if text is None:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    # Reject nan/inf
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def parse_date(value: Any) -> Optional[date]:
    value = _first(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = parse_str(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def parse_bool(value: Any) -> Optional[bool]:
    value = _first(value)
    if isinstance(value, bool):
        return value
    text = parse_str(value)
    if text is None:
        return None
    text = text.lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


# =============================================================================
# Specs and results
# =============================================================================


@dataclass(frozen=True)
class FilterField:
    """One accepted query parameter (plus aliases) and the predicate it yields."""

    params: Tuple[str, ...]
    kind: PredicateKind
    columns: Tuple[str, ...]
    parser: Callable[[Any], Any] = parse_str


@dataclass(frozen=True)
class FilterSpec:
    """Per-resource filter definition."""

    resource: str
    fields: Tuple[FilterField, ...]
    order_columns: Tuple[str, ...]
    default_limit: Optional[int] = None
    max_limit: int = _settings.max_list_limit


@dataclass(frozen=True)
class Predicate:
    kind: PredicateKind
    columns: Tuple[str, ...]
    value: Any


@dataclass
class ListQuery:
    """Validated list request."""

    predicates: List[Predicate] = field(default_factory=list)
    order_column: str = DEFAULT_ORDER_COLUMN
    order_direction: str = DEFAULT_ORDER_DIRECTION
    limit: Optional[int] = None
    offset: int = 0


def _lookup(params: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in params:
            value = params.get(name)
            if parse_str(value) is not None:
                return value
    return None


def _parse_limit(raw: Any, spec: FilterSpec) -> Optional[int]:
    limit = parse_int(raw)
    if limit is None or limit <= 0:
        return spec.default_limit
    return min(limit, spec.max_limit)


def build(
    raw_params: Optional[Mapping[str, Any]],
    spec: FilterSpec,
    owner_override: Optional[str] = None,
) -> ListQuery:
    """
    Build a ``ListQuery`` from raw request parameters.

    ``owner_override`` (from the guard) is ANDed as ``created_by == owner``
    and any client-supplied ``created_by`` is discarded.
    """
    params = raw_params or {}
    predicates: List[Predicate] = []

    for spec_field in spec.fields:
        if owner_override is not None and OWNER_COLUMN in spec_field.columns:
            continue
        value = spec_field.parser(_lookup(params, *spec_field.params))
        if value is None:
            continue
        predicates.append(Predicate(spec_field.kind, spec_field.columns, value))

    if owner_override is not None:
        predicates.append(Predicate(PredicateKind.EQ, (OWNER_COLUMN,), owner_override))

    order_column = parse_str(_lookup(params, "orderBy", "order_by"))
    direction = parse_str(_lookup(params, "orderDirection", "order_direction"))
    if order_column in spec.order_columns:
        direction = (direction or "").lower()
        if direction not in ("asc", "desc"):
            direction = DEFAULT_ORDER_DIRECTION
    else:
        order_column = DEFAULT_ORDER_COLUMN
        direction = DEFAULT_ORDER_DIRECTION

    limit = _parse_limit(_lookup(params, "limit"), spec)

    offset = parse_int(_lookup(params, "offset"))
    if offset is None:
        page = parse_int(_lookup(params, "page"))
        if page is not None and page >= 1 and limit is not None:
            offset = _in_int64((page - 1) * limit)
    offset = max(offset or 0, 0)

    return ListQuery(
        predicates=predicates,
        order_column=order_column,
        order_direction=direction,
        limit=limit,
        offset=offset,
    )


# =============================================================================
# Translation to SQLAlchemy
# =============================================================================


def _clause(model: Any, predicate: Predicate) -> Any:
    columns = [getattr(model, name) for name in predicate.columns]

    if predicate.kind == PredicateKind.EQ:
        return columns[0] == predicate.value
    if predicate.kind == PredicateKind.GTE:
        return columns[0] >= predicate.value
    if predicate.kind == PredicateKind.LTE:
        return columns[0] <= predicate.value
    if predicate.kind == PredicateKind.SEARCH:
        return or_(
            *(column.icontains(predicate.value, autoescape=True) for column in columns)
        )
    if predicate.kind == PredicateKind.YEAR_WITHIN:
        start, end = columns
        return and_(start <= predicate.value, end >= predicate.value)
    raise ValueError(f"Unsupported predicate kind: {predicate.kind}")


def to_clauses(model: Any, predicates: Sequence[Predicate]) -> List[Any]:
    """SQLAlchemy boolean expressions for ``predicates``, all values bound."""
    return [_clause(model, predicate) for predicate in predicates]


def apply_filters(query: Query, model: Any, list_query: ListQuery) -> Query:
    """Apply only the predicates (used for counting)."""
    clauses = to_clauses(model, list_query.predicates)
    if clauses:
        query = query.filter(*clauses)
    return query


def apply(query: Query, model: Any, list_query: ListQuery) -> Query:
    """Apply predicates, ordering and limit/offset."""
    query = apply_filters(query, model, list_query)

    column = getattr(model, list_query.order_column)
    direction = asc if list_query.order_direction == "asc" else desc
    query = query.order_by(direction(column), direction(model.id))

    if list_query.offset:
        query = query.offset(list_query.offset)
    if list_query.limit is not None:
        query = query.limit(list_query.limit)
    return query


def fetch_page(query: Query, model: Any, list_query: ListQuery) -> Tuple[List[Any], int]:
    """Return ``(items, total)``; ``total`` counts with the same predicates."""
    total = apply_filters(query, model, list_query).count()
    items = apply(query, model, list_query).all()
    return items, total


# =============================================================================
# Per-resource specs
# =============================================================================

_PROJECT_SEARCH = ("name", "key_activities", "expected_results")

PROJECT_FILTERS = FilterSpec(
    resource="projects",
    fields=(
        FilterField(("status",), PredicateKind.EQ, ("status",)),
        FilterField(("project_type",), PredicateKind.EQ, ("project_type",)),
        FilterField(("created_by",), PredicateKind.EQ, ("created_by",)),
        FilterField(("start_date",), PredicateKind.GTE, ("start_date",), parse_date),
        FilterField(("end_date",), PredicateKind.LTE, ("end_date",), parse_date),
        FilterField(
            ("min_budget", "budget_min"), PredicateKind.GTE, ("budget",), parse_float
        ),
        FilterField(
            ("max_budget", "budget_max"), PredicateKind.LTE, ("budget",), parse_float
        ),
        FilterField(("search",), PredicateKind.SEARCH, _PROJECT_SEARCH),
    ),
    order_columns=(
        "created_at",
        "updated_at",
        "name",
        "budget",
        "start_date",
        "end_date",
        "status",
    ),
)

PUBLIC_PROJECT_FILTERS = replace(
    PROJECT_FILTERS, default_limit=_settings.public_list_limit
)

STRATEGIC_ISSUE_FILTERS = FilterSpec(
    resource="strategic_issues",
    fields=(
        FilterField(("status",), PredicateKind.EQ, ("status",)),
        FilterField(("created_by",), PredicateKind.EQ, ("created_by",)),
        FilterField(
            ("year",), PredicateKind.YEAR_WITHIN, ("start_year", "end_year"), parse_int
        ),
        FilterField(("start_year",), PredicateKind.GTE, ("start_year",), parse_int),
        FilterField(("end_year",), PredicateKind.LTE, ("end_year",), parse_int),
        FilterField(("search",), PredicateKind.SEARCH, ("title", "description")),
    ),
    order_columns=(
        "created_at",
        "updated_at",
        "title",
        "start_year",
        "end_year",
        "order",
        "status",
    ),
)

STRATEGY_FILTERS = FilterSpec(
    resource="strategies",
    fields=(
        FilterField(("strategic_issue_id",), PredicateKind.EQ, ("strategic_issue_id",)),
        FilterField(("created_by",), PredicateKind.EQ, ("created_by",)),
        FilterField(("search",), PredicateKind.SEARCH, ("name", "description")),
    ),
    order_columns=("created_at", "updated_at", "name", "order"),
)

USER_FILTERS = FilterSpec(
    resource="users",
    fields=(
        FilterField(("role",), PredicateKind.EQ, ("role",)),
        FilterField(("department",), PredicateKind.EQ, ("department",)),
        FilterField(("is_active",), PredicateKind.EQ, ("is_active",), parse_bool),
        FilterField(
            ("search",),
            PredicateKind.SEARCH,
            ("email", "first_name", "last_name", "position"),
        ),
    ),
    order_columns=("created_at", "email", "first_name", "last_name", "role", "department"),
    default_limit=_settings.public_list_limit,
)
