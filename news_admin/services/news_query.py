"""News query composition and execution.

``compose_news_query`` turns a ``FilterState`` into a ``NewsQuery``: a plain
description of predicates, ordering and slice that can be inspected (and
tested) without a database. ``NewsQuery`` then renders itself into SQLAlchemy
statements for the row slice and the exact total count.
"""

import math
from datetime import datetime, time, timedelta
from typing import Any, Literal, Union

from loguru import logger
from pydantic import BaseModel, computed_field
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.errors import QueryError
from news_admin.models import NewsItem, NewsItemRead, Source
from news_admin.services.filters import FilterState, SortDirection, SortField

# Columns that predicates and sorting may reference
QUERYABLE_COLUMNS = {
    "category": NewsItem.category,
    "source_id": NewsItem.source_id,
    "title": NewsItem.title,
    "description": NewsItem.description,
    "fetched_at": NewsItem.fetched_at,
    "priority_score": NewsItem.priority_score,
}


# === Predicates ===

class Equals(BaseModel):
    """``field = value``"""

    kind: Literal["eq"] = "eq"
    field: str
    value: Any

    def to_clause(self) -> ColumnElement[bool]:
        return _column(self.field) == self.value


class ContainsAny(BaseModel):
    """Case-insensitive substring match on any of ``fields``."""

    kind: Literal["contains_any"] = "contains_any"
    fields: tuple[str, ...]
    term: str

    def to_clause(self) -> ColumnElement[bool]:
        return or_(*(_column(name).icontains(self.term, autoescape=True) for name in self.fields))


class Range(BaseModel):
    """``field <op> value`` for one range bound."""

    kind: Literal["range"] = "range"
    field: str
    op: Literal["gte", "lte", "lt"]
    value: Any

    def to_clause(self) -> ColumnElement[bool]:
        column = _column(self.field)
        if self.op == "gte":
            return column >= self.value
        if self.op == "lte":
            return column <= self.value
        return column < self.value


Predicate = Union[Equals, ContainsAny, Range]


class SortSpec(BaseModel):
    field: SortField = SortField.fetched_at
    direction: SortDirection = SortDirection.desc


class NewsQuery(BaseModel):
    """A composed news query: ANDed predicates, one sort column and a slice."""

    predicates: list[Predicate] = []
    sort: SortSpec = SortSpec()
    offset: int = 0
    limit: int

    def where_clauses(self) -> list[ColumnElement[bool]]:
        return [predicate.to_clause() for predicate in self.predicates]

    def select_count(self):
        """Exact match count over the same predicates, ignoring the slice."""
        return select(func.count(NewsItem.id)).where(*self.where_clauses())

    def select_rows(self):
        """The requested slice, each row joined with its source name."""
        column = _column(self.sort.field.value)
        order = column.asc() if self.sort.direction is SortDirection.asc else column.desc()
        return (
            select(NewsItem, Source.name)
            .outerjoin(Source, Source.id == NewsItem.source_id)
            .where(*self.where_clauses())
            .order_by(order)
            .offset(self.offset)
            .limit(self.limit)
        )


# === Results ===

def page_count(total_count: int, page_size: int) -> int:
    """Number of pages needed for ``total_count`` rows, 0 when there are none."""
    if total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


class QueryResult(BaseModel):
    """One page of news plus the exact total for the same filters."""

    rows: list[NewsItemRead]
    total_count: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return page_count(self.total_count, self.page_size)

    @computed_field
    @property
    def range_start(self) -> int:
        """1-based index of the first row shown, 0 when the page is empty."""
        if not self.rows:
            return 0
        return (self.page - 1) * self.page_size + 1

    @computed_field
    @property
    def range_end(self) -> int:
        if not self.rows:
            return 0
        return self.range_start + len(self.rows) - 1


# === Composition ===

def compose_news_query(state: FilterState) -> NewsQuery:
    """Translate a filter state into a ``NewsQuery``."""
    predicates: list[Predicate] = []

    if state.category is not None:
        predicates.append(Equals(field="category", value=state.category.value))

    if state.source_id is not None:
        predicates.append(Equals(field="source_id", value=state.source_id))

    term = state.search_text.strip()
    if term:
        predicates.append(ContainsAny(fields=("title", "description"), term=term))

    if state.start_date is not None:
        predicates.append(
            Range(field="fetched_at", op="gte", value=datetime.combine(state.start_date, time.min))
        )

    if state.end_date is not None:
        # Whole end day included
        next_day = datetime.combine(state.end_date + timedelta(days=1), time.min)
        predicates.append(Range(field="fetched_at", op="lt", value=next_day))

    if state.min_score is not None:
        predicates.append(Range(field="priority_score", op="gte", value=state.min_score))

    return NewsQuery(
        predicates=predicates,
        sort=SortSpec(field=state.sort_field, direction=state.sort_direction),
        offset=state.offset,
        limit=state.page_size,
    )


# === Execution ===

async def execute_news_query(session: AsyncSession, state: FilterState) -> QueryResult:
    """
    Run the composed query: exact count plus the requested page.

    Raises:
        QueryError: if the store fails either statement. Not retried.
    """
    query = compose_news_query(state)
    logger.debug(
        f"[NEWS] Query page={state.page} size={state.page_size} "
        f"predicates={[p.kind + ':' + _describe(p) for p in query.predicates]}"
    )

    try:
        total_count = await session.scalar(query.select_count()) or 0
        result = await session.execute(query.select_rows())
        rows = [
            NewsItemRead.model_validate(item, update={"source_name": source_name})
            for item, source_name in result.all()
        ]
    except (SQLAlchemyError, OSError, OverflowError) as e:
        logger.error(f"[NEWS] Query failed: {e}")
        raise QueryError(str(e)) from e

    return QueryResult(
        rows=rows,
        total_count=total_count,
        page=state.page,
        page_size=state.page_size,
    )


async def get_news_item(session: AsyncSession, news_id: int) -> NewsItemRead | None:
    """Fetch one news item with its source name, or None if it does not exist."""
    statement = (
        select(NewsItem, Source.name)
        .outerjoin(Source, Source.id == NewsItem.source_id)
        .where(NewsItem.id == news_id)
    )
    try:
        result = await session.execute(statement)
        row = result.first()
    except (SQLAlchemyError, OSError, OverflowError) as e:
        logger.error(f"[NEWS] Lookup of {news_id} failed: {e}")
        raise QueryError(str(e)) from e

    if row is None:
        return None
    item, source_name = row
    return NewsItemRead.model_validate(item, update={"source_name": source_name})


async def top_priority_news(session: AsyncSession, limit: int = 10) -> list[NewsItemRead]:
    """Highest-priority news across all filters, for the dashboard."""
    state = FilterState(
        page_size=limit,
        sort_field=SortField.priority_score,
        sort_direction=SortDirection.desc,
    )
    result = await execute_news_query(session, state)
    return result.rows


def _column(name: str):
    try:
        return QUERYABLE_COLUMNS[name]
    except KeyError:
        raise QueryError(f"Unknown query field: {name}") from None


def _describe(predicate: Predicate) -> str:
    if isinstance(predicate, ContainsAny):
        return f"{'|'.join(predicate.fields)}~{predicate.term!r}"
    if isinstance(predicate, Range):
        return f"{predicate.field} {predicate.op} {predicate.value}"
    return f"{predicate.field}={predicate.value}"
