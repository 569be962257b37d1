"""
Article schemas.

Response model for articles returned by the backend.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ArticleResponse(BaseModel):
    """Article response model."""

    model_config = ConfigDict(extra="ignore")

    id: int
    feed_id: int
    title: str
    url: str
    description: str | None = None
    content: str | None = None
    image_url: str | None = None
    author: str | None = None
    feed_title: str | None = None
    published_at: datetime
    # User-specific state, mirrored locally
    is_read: bool = False
    is_starred: bool = False
