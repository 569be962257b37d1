"""
Feed schemas.

Request and response models for feed-related operations.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class FeedType(str, Enum):
    """Kind of content source behind a feed."""

    RSS = "rss"
    REDDIT = "reddit"
    YOUTUBE = "youtube"


class FeedResponse(BaseModel):
    """Feed response model."""

    model_config = ConfigDict(extra="ignore")

    id: int
    url: str
    title: str
    type: FeedType = FeedType.RSS
    site_url: str | None = None
    description: str | None = None
    last_error: str | None = None
    last_fetched_at: datetime | None = None

    @field_validator("last_error", mode="before")
    @classmethod
    def _empty_error_is_none(cls, value: str | None) -> str | None:
        # The backend serializes "no error" as an empty string.
        return value or None


class FeedCreate(BaseModel):
    """Feed creation payload, the single shape every source normalizes into."""

    url: str
    title: str
