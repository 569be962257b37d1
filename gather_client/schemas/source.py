"""
Feed source schemas.

The four user inputs a feed can be created from, as one tagged variant
discriminated by ``kind``.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .discovery import DiscoveredFeedCandidate

RedditSort = Literal["hot", "new", "top", "rising"]


class RssSource(BaseModel):
    """Direct RSS/Atom feed URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["rss"] = "rss"
    url: str


class RedditSource(BaseModel):
    """Subreddit listing, e.g. ``technology`` or ``r/technology``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["reddit"] = "reddit"
    subreddit: str
    sort: RedditSort = "hot"


class YouTubeSource(BaseModel):
    """Channel id, channel URL, handle or legacy custom/user URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["youtube"] = "youtube"
    reference: str


class DiscoverSource(BaseModel):
    """Candidate chosen by the user from a discovery scan."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["discover"] = "discover"
    candidate: DiscoveredFeedCandidate


FeedSource = Annotated[
    RssSource | RedditSource | YouTubeSource | DiscoverSource,
    Field(discriminator="kind"),
]
