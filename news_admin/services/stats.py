"""Statistics aggregator for the dashboard and stats views.

Six independent read-only queries are folded into one ``StatsSummary``.
They do not share a transaction, so under concurrent ingestion the numbers
may disagree slightly with each other.
"""

from collections import Counter
from datetime import datetime, timedelta

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.categories import Category
from news_admin.config import get_settings
from news_admin.errors import AggregateError
from news_admin.models import NewsItem, Source
from news_admin.utils import utcnow


class CategoryShare(BaseModel):
    """One bar of the category histogram."""

    category: str
    label: str
    color: str
    count: int
    percent: float


class StatsSummary(BaseModel):
    """Overview counts for the dashboard."""

    total_news: int = 0
    news_last_24h: int = 0
    high_priority_count: int = 0
    active_sources: int = 0
    total_sources: int = 0
    by_category: dict[str, int] = {}

    @property
    def source_activity_ratio(self) -> float:
        if self.total_sources == 0:
            return 0.0
        return self.active_sources / self.total_sources

    def category_breakdown(self) -> list[CategoryShare]:
        """
        One row per category for the stats table.

        Every known category is listed in option order, zero counts included,
        followed by any unknown stored values. Percentages are relative to
        ``total_news`` (falling back to the histogram sum when it is unset).
        """
        total = self.total_news or sum(self.by_category.values())
        values = [category.value for category in Category]
        values += [value for value in self.by_category if value not in values]

        shares = []
        for value in values:
            info = Category.describe(value)
            count = self.by_category.get(value, 0)
            percent = (count / total * 100) if total > 0 else 0
            shares.append(
                CategoryShare(
                    category=value,
                    label=info.label,
                    color=info.color,
                    count=count,
                    percent=round(percent, 1),
                )
            )
        return shares


async def compute_summary(
    session: AsyncSession,
    now: datetime | None = None,
    high_priority_threshold: float | None = None,
) -> StatsSummary:
    """
    Run the six aggregate queries and combine them.

    Args:
        session: Database session
        now: Reference time for the 24h window (naive UTC), defaults to now
        high_priority_threshold: Minimum priority score counted as high priority

    Returns:
        StatsSummary

    Raises:
        AggregateError: as soon as any sub-query fails. No partial summary.
    """
    if now is None:
        now = utcnow()
    if high_priority_threshold is None:
        high_priority_threshold = get_settings().high_priority_threshold

    last_24h_start = now - timedelta(hours=24)

    total_news = await _count(session, "total_news", select(func.count(NewsItem.id)))

    news_last_24h = await _count(
        session,
        "news_last_24h",
        select(func.count(NewsItem.id)).where(NewsItem.fetched_at >= last_24h_start),
    )

    # Histogram is folded here from the raw column
    try:
        result = await session.execute(select(NewsItem.category))
        by_category = dict(Counter(category for (category,) in result.all()))
    except (SQLAlchemyError, OSError, OverflowError) as e:
        logger.error(f"[STATS] by_category failed: {e}")
        raise AggregateError("by_category", str(e)) from e

    high_priority_count = await _count(
        session,
        "high_priority_count",
        select(func.count(NewsItem.id)).where(NewsItem.priority_score >= high_priority_threshold),
    )

    active_sources = await _count(
        session,
        "active_sources",
        select(func.count(Source.id)).where(Source.is_active == True),  # noqa: E712
    )

    total_sources = await _count(session, "total_sources", select(func.count(Source.id)))

    summary = StatsSummary(
        total_news=total_news,
        news_last_24h=news_last_24h,
        high_priority_count=high_priority_count,
        active_sources=active_sources,
        total_sources=total_sources,
        by_category=by_category,
    )
    logger.debug(f"[STATS] Summary: total={total_news} last_24h={news_last_24h} sources={active_sources}/{total_sources}")
    return summary


async def _count(session: AsyncSession, name: str, statement) -> int:
    try:
        return await session.scalar(statement) or 0
    except (SQLAlchemyError, OSError, OverflowError) as e:
        logger.error(f"[STATS] {name} failed: {e}")
        raise AggregateError(name, str(e)) from e
