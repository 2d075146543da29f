"""Filter state for the news list.

A ``FilterState`` is never mutated: every user interaction produces a new
state through ``update``, ``reset`` or ``toggle_sort``. Malformed input is
normalized to "unset" by the field validators instead of being rejected.
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from news_admin.categories import Category

DEFAULT_PAGE_SIZE = 50
MAX_PAGE = 1_000_000
MAX_PAGE_SIZE = 1_000

# Largest value an SQL INTEGER column can hold
MAX_SQL_INT = 2**63 - 1

# Fields that light up the "filters active" badge. search_text is left out on purpose.
ACTIVE_FILTER_FIELDS = ("category", "source_id", "start_date", "end_date", "min_score")

_UNSET_MARKERS = ("", "any", "all")


class SortField(str, Enum):
    """Columns the news list can be sorted by."""

    fetched_at = "fetched_at"
    priority_score = "priority_score"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.asc if self is SortDirection.desc else SortDirection.desc


class FilterState(BaseModel):
    """Current news-list criteria plus the sort and pagination cursor."""

    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    category: Category | None = None
    source_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    min_score: float | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_field: SortField = SortField.fetched_at
    sort_direction: SortDirection = SortDirection.desc

    # === Normalization ===

    @field_validator("search_text", mode="before")
    @classmethod
    def _normalize_search(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Category | None:
        if value is None or _is_unset(value):
            return None
        return Category.parse(value)

    @field_validator("source_id", mode="before")
    @classmethod
    def _normalize_source_id(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool) or _is_unset(value):
            return None
        try:
            source_id = int(str(value).strip())
        except ValueError:
            return None
        return source_id if 0 < source_id <= MAX_SQL_INT else None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> date | None:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str) and value.strip():
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError:
                return None
        return None

    @field_validator("min_score", mode="before")
    @classmethod
    def _normalize_min_score(cls, value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        try:
            score = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(score) or score < 0:
            return None
        return score

    @field_validator("page", mode="before")
    @classmethod
    def _normalize_page(cls, value: Any) -> int:
        page = _to_int(value)
        if page is None or page < 1:
            return 1
        return min(page, MAX_PAGE)

    @field_validator("page_size", mode="before")
    @classmethod
    def _normalize_page_size(cls, value: Any) -> int:
        page_size = _to_int(value)
        if page_size is None or page_size < 1:
            return DEFAULT_PAGE_SIZE
        return min(page_size, MAX_PAGE_SIZE)

    @field_validator("sort_field", mode="before")
    @classmethod
    def _normalize_sort_field(cls, value: Any) -> SortField:
        try:
            return SortField(value)
        except ValueError:
            return SortField.fetched_at

    @field_validator("sort_direction", mode="before")
    @classmethod
    def _normalize_sort_direction(cls, value: Any) -> SortDirection:
        if isinstance(value, str):
            value = value.lower()
        try:
            return SortDirection(value)
        except ValueError:
            return SortDirection.desc

    # === Operations ===

    @classmethod
    def from_params(cls, **params: Any) -> "FilterState":
        """Build a state from raw request parameters, skipping missing ones."""
        return cls.model_validate({key: value for key, value in params.items() if value is not None})

    def update(self, field: str, value: Any) -> "FilterState":
        """
        Return a new state with ``field`` set to ``value``.

        Any change other than the page itself sends the list back to page 1.

        Raises:
            ValueError: if ``field`` is not a filter field.
        """
        if field not in type(self).model_fields:
            raise ValueError(f"Unknown filter field: {field}")
        data = self.model_dump()
        data[field] = value
        if field != "page":
            data["page"] = 1
        return type(self).model_validate(data)

    def reset(self) -> "FilterState":
        """Default state, keeping the current page size."""
        return type(self)(page_size=self.page_size)

    def toggle_sort(self, field: SortField | str) -> "FilterState":
        """Flip the direction on the current column, or sort a new column descending."""
        sort_field = SortField(field)
        if sort_field is self.sort_field:
            return self.update("sort_direction", self.sort_direction.flipped())
        data = self.model_dump()
        data.update(sort_field=sort_field, sort_direction=SortDirection.desc, page=1)
        return type(self).model_validate(data)

    def has_active_filters(self) -> bool:
        return any(getattr(self, name) is not None for name in ACTIVE_FILTER_FIELDS)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _is_unset(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in _UNSET_MARKERS


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
