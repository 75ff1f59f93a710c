"""Pagination and sort normalization for list endpoints."""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from issue_gateway.core.config import settings
from issue_gateway.core.exceptions import PayloadValidationError

logger = logging.getLogger(__name__)

DEFAULT_SORT_FIELD = "createdAt"


class SortDirection(str, enum.Enum):
    asc = "asc"
    desc = "desc"


@dataclass(frozen=True)
class Sort:
    field: str = DEFAULT_SORT_FIELD
    direction: SortDirection = SortDirection.asc

    def to_param(self) -> str:
        return f"{self.field},{self.direction.value}"


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 10
    sort: Sort = Sort()

    def to_params(self) -> dict[str, Any]:
        return {"page": self.page, "size": self.size, "sort": self.sort.to_param()}


def resolve_direction(value: str | None) -> SortDirection:
    # Anything other than "desc" sorts ascending, invalid values included.
    if value is not None and value.lower() == "desc":
        return SortDirection.desc
    return SortDirection.asc


def build_sort(sort_by: str | None, direction: str | None) -> Sort:
    field = (sort_by or "").strip() or DEFAULT_SORT_FIELD
    return Sort(field=field, direction=resolve_direction(direction))


def parse_sort_param(value: str | None, *, default: Sort) -> Sort:
    """Parse a ``field,direction`` sort parameter."""
    if not value or not value.strip():
        return default
    field, _, direction = value.partition(",")
    field = field.strip() or default.field
    return Sort(field=field, direction=resolve_direction(direction.strip() or default.direction.value))


def clamp_page_size(size: int, *, max_size: int | None = None) -> int:
    limit = settings.MAX_PAGE_SIZE if max_size is None else max_size
    if limit > 0 and size > limit:
        logger.debug("Clamping page size %s to %s", size, limit)
        return limit
    return size


def build_page_request(
    page: int | None,
    size: int | None,
    sort_by: str | None = None,
    direction: str | None = None,
    *,
    sort: Sort | None = None,
) -> PageRequest:
    page = 0 if page is None else page
    size = settings.DEFAULT_PAGE_SIZE if size is None else size
    violations = []
    if page < 0:
        violations.append({"field": "page", "message": "Page index must not be less than zero", "type": "greater_than_equal"})
    if size < 1:
        violations.append({"field": "size", "message": "Page size must not be less than one", "type": "greater_than_equal"})
    if violations:
        raise PayloadValidationError(violations)
    return PageRequest(
        page=page,
        size=clamp_page_size(size),
        sort=sort or build_sort(sort_by, direction),
    )


def normalize_status_pages(raw: Mapping[str, Any] | None) -> dict[str, int]:
    """Validate a ``status id -> page index`` map used by the grouped board view."""
    if not raw:
        return {}
    pages: dict[str, int] = {}
    violations = []
    for status_id, value in raw.items():
        key = str(status_id).strip()
        if not key:
            violations.append({"field": "statusPageMap", "message": "Status id must not be blank", "type": "string_too_short"})
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            violations.append(
                {
                    "field": f"statusPageMap.{key}",
                    "message": "Page index must be a non-negative integer",
                    "type": "greater_than_equal",
                }
            )
            continue
        pages[key] = value
    if violations:
        raise PayloadValidationError(violations)
    return pages
