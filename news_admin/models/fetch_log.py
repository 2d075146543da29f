"""Fetch log model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from news_admin.utils import utcnow


class FetchStatus(str, Enum):
    """Outcome of one ingester fetch of a source."""

    success = "success"
    error = "error"


class FetchLogBase(SQLModel):
    """Base model for fetch logs."""

    source_id: int = Field(foreign_key="sources.id", index=True)
    status: FetchStatus = Field(index=True)
    news_count: int = Field(default=0)
    duration_ms: int | None = Field(default=None)
    error_message: str | None = Field(default=None)


class FetchLog(FetchLogBase, table=True):
    """Append-only record of an ingester fetch."""

    __tablename__ = "fetch_logs"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=False))


class FetchLogRead(FetchLogBase):
    """Schema for reading a fetch log, with its source name joined in."""

    id: int
    created_at: datetime
    source_name: str | None = None
