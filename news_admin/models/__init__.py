"""SQLModel database models."""

from news_admin.models.fetch_log import (
    FetchLog,
    FetchLogBase,
    FetchLogRead,
    FetchStatus,
)
from news_admin.models.news import (
    NewsItem,
    NewsItemBase,
    NewsItemRead,
)
from news_admin.models.source import (
    Source,
    SourceBase,
    SourceRead,
)

__all__ = [
    # Fetch Log
    "FetchLog",
    "FetchLogBase",
    "FetchLogRead",
    "FetchStatus",
    # News
    "NewsItem",
    "NewsItemBase",
    "NewsItemRead",
    # Source
    "Source",
    "SourceBase",
    "SourceRead",
]
