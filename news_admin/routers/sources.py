"""Sources and fetch logs API router."""

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.auth import AdminSession, require_admin
from news_admin.config import Settings, get_settings
from news_admin.database import get_session
from news_admin.models import FetchLogRead
from news_admin.services.sources import filter_sources, list_fetch_logs, list_sources

router = APIRouter(tags=["sources"])


@router.get("/sources", response_model=dict)
async def get_sources(
    session: AsyncSession = Depends(get_session),
    _: AdminSession = Depends(require_admin),
    search: str = "",
    category: str | None = None,
):
    """List sources, filtered in memory by name/url text and category."""
    sources = await list_sources(session)
    filtered = filter_sources(sources, search=search, category=category)
    return {
        "items": [source.model_dump(mode="json") for source in filtered],
        "total": len(sources),
        "active": sum(1 for source in sources if source.is_active),
    }


@router.get("/logs", response_model=list[FetchLogRead])
async def get_logs(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    _: AdminSession = Depends(require_admin),
    limit: int | None = Query(None, ge=1, le=500),
):
    """Most recent fetch logs."""
    return await list_fetch_logs(session, limit=limit or settings.recent_logs_limit)
