"""
Shared building blocks for record schemas and responses.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

# Buddhist Era years accepted for strategic-issue periods (1920-2030 CE)
MIN_BE_YEAR = 2463
MAX_BE_YEAR = 2573

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class DocumentLink(BaseModel):
    """A named link to a supporting document."""

    model_config = ConfigDict(extra="ignore")

    name: constr(strip_whitespace=True, min_length=1, max_length=255) = Field(
        ..., description="Display name"
    )
    url: constr(strip_whitespace=True, min_length=1, max_length=2000) = Field(
        ..., description="Document URL"
    )


def coerce_date(value: Any) -> Any:
    """Accept ``YYYY-MM-DD`` as well as full ISO timestamps for date fields."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if "T" in value:
            return value.split("T", 1)[0]
    return value


def reject_nulls(model: BaseModel, fields: Iterable[str]) -> None:
    """Raise if any of ``fields`` was explicitly sent as null."""
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


def check_period(start: Optional[Any], end: Optional[Any], label: str) -> None:
    if start is not None and end is not None and end < start:
        raise ValueError(f"{label} end must not precede its start")


def page_info(total: int, limit: Optional[int], offset: int) -> Dict[str, int]:
    """Pagination block; an unbounded list reports ``limit == total``."""
    return {
        "total": total,
        "limit": limit or total,
        "offset": offset,
        "pages": (math.ceil(total / limit) or 1) if limit else 1,
    }


def envelope(
    data: Any = None,
    message: str = "OK",
    pagination: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    """Standard success response body."""
    body: Dict[str, Any] = {"success": True, "message": message, "data": data}
    if pagination is not None:
        body["pagination"] = pagination
    return body

