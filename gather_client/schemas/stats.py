"""Stats schema."""

from pydantic import BaseModel, ConfigDict


class StatsResponse(BaseModel):
    """Eventually-consistent counters snapshot."""

    model_config = ConfigDict(extra="ignore")

    total_feeds: int = 0
    total_articles: int = 0
    unread_count: int = 0
