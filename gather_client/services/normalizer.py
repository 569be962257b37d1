"""
Feed ingestion normalizer.

Converts the four feed-source inputs (RSS URL, subreddit, YouTube reference,
discovered candidate) into one ``FeedCreate`` payload.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from gather_client import get_logger
from gather_client.api_client import ApiClient
from gather_client.config import REDDIT_SORTS, RSS_TITLE_PLACEHOLDER
from gather_client.errors import GatherError, ResolutionError, ValidationError
from gather_client.schemas import (
    DiscoveredFeedCandidate,
    DiscoverSource,
    FeedCreate,
    FeedSource,
    RedditSource,
    RssSource,
    YouTubeSource,
)

logger = get_logger(__name__)

YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"

_CHANNEL_ID_RE = re.compile(r"^UC[\w-]{22}$")

# Tried in order; the first match wins.
_YOUTUBE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"youtube\.com/channel/(UC[\w-]{22})"), "channel_id"),
    (re.compile(r"youtube\.com/@([\w-]+)"), "handle"),
    (re.compile(r"youtube\.com/c/([\w-]+)"), "custom"),
    (re.compile(r"youtube\.com/user/([\w-]+)"), "user"),
)


@dataclass(frozen=True)
class YouTubeIdentifier:
    """Identifier extracted from a YouTube reference."""

    value: str
    kind: str  # "channel_id", "handle", "custom" or "user"

    @property
    def is_channel_id(self) -> bool:
        return self.kind == "channel_id"


def normalize_rss(url: str) -> FeedCreate:
    cleaned = url.strip()
    if not cleaned:
        raise ValidationError("Feed URL is required")
    return FeedCreate(url=cleaned, title=RSS_TITLE_PLACEHOLDER)


def normalize_reddit(subreddit: str, sort: str = "hot") -> FeedCreate:
    """
    Build the RSS listing for a subreddit.

    Args:
        subreddit: Name with or without a leading ``r/``.
        sort: One of hot, new, top, rising.

    Returns:
        Payload such as ``https://www.reddit.com/r/technology/new.rss``
        titled ``r/technology (new)``.
    """
    name = subreddit.strip().removeprefix("r/").strip()
    if not name:
        raise ValidationError("Subreddit name is required")
    if sort not in REDDIT_SORTS:
        raise ValidationError(f"Unsupported Reddit sort: {sort!r}")
    return FeedCreate(
        url=f"https://www.reddit.com/r/{name}/{sort}.rss",
        title=f"r/{name} ({sort})",
    )


def extract_youtube_identifier(reference: str) -> YouTubeIdentifier:
    """
    Extract a channel id or handle from a YouTube reference.

    Accepts a bare channel id, or a ``/channel/<id>``, ``/@handle``,
    ``/c/<name>`` or ``/user/<name>`` URL. Anything else is treated as a
    bare handle. Only channel ids are authoritative; handles still need
    backend resolution.
    """
    cleaned = reference.strip()
    if not cleaned:
        raise ValidationError("YouTube channel reference is required")

    if _CHANNEL_ID_RE.match(cleaned):
        return YouTubeIdentifier(cleaned, "channel_id")

    for pattern, kind in _YOUTUBE_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            return YouTubeIdentifier(match.group(1), kind)

    return YouTubeIdentifier(cleaned.removeprefix("@"), "handle")


def normalize_candidate(candidate: DiscoveredFeedCandidate) -> FeedCreate:
    """Relay a user-chosen discovery candidate unchanged."""
    if not candidate.url.strip():
        raise ValidationError("Discovered feed has no URL")
    return FeedCreate(url=candidate.url, title=candidate.title or RSS_TITLE_PLACEHOLDER)


class FeedNormalizer:
    """Turns any feed source into a creation payload, resolving via the backend when needed."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self._handlers: dict[str, Callable[..., Awaitable[FeedCreate]]] = {
            "rss": self._from_rss,
            "reddit": self._from_reddit,
            "youtube": self._from_youtube,
            "discover": self._from_discover,
        }

    async def normalize(self, source: FeedSource) -> FeedCreate:
        """
        Normalize one feed source.

        Raises:
            ValidationError: If the input is malformed or empty.
            ResolutionError: If a YouTube reference cannot be resolved.
        """
        handler = self._handlers.get(source.kind)
        if handler is None:
            raise ValidationError(f"Unsupported feed source: {source.kind!r}")
        return await handler(source)

    async def discover(self, site_url: str) -> list[DiscoveredFeedCandidate]:
        """
        Ask the backend to scan a website for feeds.

        Returns:
            Zero or more candidates; the user picks one to subscribe to.

        Raises:
            ValidationError: If the URL is empty.
            ResolutionError: If the discovery round trip failed.
        """
        url = site_url.strip()
        if not url:
            raise ValidationError("Website URL is required")
        try:
            candidates = await self.api.discover(url)
        except GatherError as e:
            logger.warning("Feed discovery failed", extra={"url": url, "error": str(e)})
            raise ResolutionError(f"Failed to discover feeds: {e}") from e
        logger.info("Feed discovery finished", extra={"url": url, "candidates": len(candidates)})
        return candidates

    async def resolve_youtube(self, reference: str) -> str:
        """
        Resolve a YouTube reference to its authoritative feed URL.

        Channel ids map to the feed URL directly; handles and legacy
        names go through the backend.

        Raises:
            ResolutionError: If the backend fails or returns no feed URL.
        """
        identifier = extract_youtube_identifier(reference)
        if identifier.is_channel_id:
            return YOUTUBE_FEED_URL.format(channel_id=identifier.value)

        try:
            resolution = await self.api.resolve_youtube(reference.strip())
        except GatherError as e:
            logger.warning(
                "YouTube resolution failed",
                extra={"reference": reference, "kind": identifier.kind, "error": str(e)},
            )
            raise ResolutionError(f"Failed to resolve YouTube channel: {e}") from e

        if resolution is None or not resolution.rss_url:
            raise ResolutionError(f"YouTube channel not found: {reference.strip()}")
        return resolution.rss_url

    async def _from_rss(self, source: RssSource) -> FeedCreate:
        return normalize_rss(source.url)

    async def _from_reddit(self, source: RedditSource) -> FeedCreate:
        return normalize_reddit(source.subreddit, source.sort)

    async def _from_youtube(self, source: YouTubeSource) -> FeedCreate:
        feed_url = await self.resolve_youtube(source.reference)
        return FeedCreate(url=feed_url, title=RSS_TITLE_PLACEHOLDER)

    async def _from_discover(self, source: DiscoverSource) -> FeedCreate:
        return normalize_candidate(source.candidate)
