"""Stats router for dashboard overview."""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.auth import AdminSession, require_admin
from news_admin.config import Settings, get_settings
from news_admin.database import get_session
from news_admin.services.news_query import top_priority_news
from news_admin.services.stats import StatsSummary, compute_summary

router = APIRouter(tags=["stats"])


def _summary_payload(summary: StatsSummary) -> dict:
    return {
        **summary.model_dump(),
        "source_activity_ratio": round(summary.source_activity_ratio, 3),
        "category_breakdown": [share.model_dump() for share in summary.category_breakdown()],
    }


@router.get("/stats")
async def get_stats(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    _: AdminSession = Depends(require_admin),
):
    """Get overview stats for the dashboard."""
    summary = await compute_summary(session, high_priority_threshold=settings.high_priority_threshold)
    return _summary_payload(summary)


@router.get("/dashboard")
async def get_dashboard(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    _: AdminSession = Depends(require_admin),
):
    """Stats plus the highest-priority news."""
    summary = await compute_summary(session, high_priority_threshold=settings.high_priority_threshold)
    top_news = await top_priority_news(session, limit=settings.dashboard_top_news)
    return {
        "stats": _summary_payload(summary),
        "top_news": [item.model_dump(mode="json") for item in top_news],
    }
