"""Source and fetch-log listing."""

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.categories import Category
from news_admin.errors import QueryError
from news_admin.models import FetchLog, FetchLogRead, Source, SourceRead


async def list_sources(session: AsyncSession) -> list[SourceRead]:
    """All sources, ordered by category then name. The list is small enough to load in full."""
    statement = select(Source).order_by(Source.category, Source.name)
    try:
        result = await session.execute(statement)
        sources = result.scalars().all()
    except (SQLAlchemyError, OSError, OverflowError) as e:
        logger.error(f"[SOURCES] Listing failed: {e}")
        raise QueryError(str(e)) from e
    return [SourceRead.model_validate(source) for source in sources]


def filter_sources(
    sources: list[SourceRead],
    search: str = "",
    category: Category | str | None = None,
) -> list[SourceRead]:
    """Filter an already loaded source list by name/url text and category."""
    needle = (search or "").strip().lower()
    if isinstance(category, Category):
        category = category.value
    category = category or None

    def matches(source: SourceRead) -> bool:
        if needle and needle not in source.name.lower() and needle not in source.url.lower():
            return False
        if category is not None and source.category != category:
            return False
        return True

    return [source for source in sources if matches(source)]


async def list_fetch_logs(session: AsyncSession, limit: int = 50) -> list[FetchLogRead]:
    """Most recent fetch logs, newest first, each with its source name."""
    statement = (
        select(FetchLog, Source.name)
        .outerjoin(Source, Source.id == FetchLog.source_id)
        .order_by(FetchLog.created_at.desc())
        .limit(limit)
    )
    try:
        result = await session.execute(statement)
        rows = result.all()
    except (SQLAlchemyError, OSError, OverflowError) as e:
        logger.error(f"[LOGS] Listing failed: {e}")
        raise QueryError(str(e)) from e
    return [
        FetchLogRead.model_validate(log, update={"source_name": source_name})
        for log, source_name in rows
    ]
