"""RSS source model."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class SourceBase(SQLModel):
    """Base model for RSS sources."""

    name: str = Field(max_length=256)
    url: str = Field(max_length=2048)
    category: str = Field(max_length=50, index=True)
    country: str | None = Field(default=None, max_length=8)
    language: str = Field(default="en", max_length=8)

    # Fetch bookkeeping, maintained by the ingester
    is_active: bool = Field(default=True, index=True)
    last_fetch_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    fetch_count: int = Field(default=0, ge=0)
    error_count: int = Field(default=0, ge=0)


class Source(SourceBase, table=True):
    """Stored RSS source."""

    __tablename__ = "sources"

    id: int | None = Field(default=None, primary_key=True)


class SourceRead(SourceBase):
    """Schema for reading a source."""

    id: int
