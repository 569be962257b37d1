"""
Discovery and resolution schemas.

Transient values produced by server-assisted discovery and YouTube
resolution; neither is persisted by the client.
"""

from pydantic import BaseModel, ConfigDict


class DiscoveredFeedCandidate(BaseModel):
    """Feed proposed by a discovery scan of a website."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str
    title: str = ""
    type: str = "unknown"  # "rss", "atom" or "unknown"


class YouTubeResolution(BaseModel):
    """Authoritative feed URL for a YouTube reference."""

    model_config = ConfigDict(extra="ignore")

    rss_url: str
    channel_id: str | None = None
