"""
Pydantic schemas for backend payloads and client-side value objects.
"""

from .article import ArticleResponse
from .discovery import DiscoveredFeedCandidate, YouTubeResolution
from .feed import FeedCreate, FeedResponse, FeedType
from .filter import FilterContext
from .source import (
    DiscoverSource,
    FeedSource,
    RedditSource,
    RssSource,
    YouTubeSource,
)
from .stats import StatsResponse

__all__ = [
    # Article
    "ArticleResponse",
    # Feed
    "FeedCreate",
    "FeedResponse",
    "FeedType",
    # Stats
    "StatsResponse",
    # Filter
    "FilterContext",
    # Discovery
    "DiscoveredFeedCandidate",
    "YouTubeResolution",
    # Feed sources
    "FeedSource",
    "RssSource",
    "RedditSource",
    "YouTubeSource",
    "DiscoverSource",
]
