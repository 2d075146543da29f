"""News item model."""

from datetime import datetime

from sqlalchemy import JSON, DateTime
from sqlmodel import Column, Field, SQLModel

from news_admin.utils import utcnow


class NewsItemBase(SQLModel):
    """Base model for aggregated news items."""

    title: str = Field(max_length=1024)
    link: str = Field(max_length=2048)
    description: str | None = Field(default=None)
    author: str | None = Field(default=None, max_length=256)

    # Dates, naive UTC as written by the ingester
    published_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    fetched_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=False))

    # Classification (set by the ingester)
    category: str = Field(max_length=50, index=True)
    priority_score: float = Field(default=0.0, ge=0, index=True)
    matched_keywords: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    source_id: int = Field(foreign_key="sources.id", index=True)


class NewsItem(NewsItemBase, table=True):
    """Stored news item."""

    __tablename__ = "news"

    id: int | None = Field(default=None, primary_key=True)


class NewsItemRead(NewsItemBase):
    """Schema for reading a news item, with its source name joined in."""

    id: int
    source_name: str | None = None
