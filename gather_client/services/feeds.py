"""
Feed lifecycle service.

Handles loading feeds and stats, creating feeds from any source through the
normalizer, and deleting/refreshing feeds with the matching cache
invalidation.
"""

from enum import Enum

from gather_client import get_logger
from gather_client.api_client import ApiClient
from gather_client.cache import CacheSection, EntityCache
from gather_client.errors import GatherError, ValidationError
from gather_client.schemas import (
    DiscoveredFeedCandidate,
    FeedResponse,
    FeedSource,
    StatsResponse,
)

from .invalidation import InvalidationScheduler
from .normalizer import FeedNormalizer

logger = get_logger(__name__)


class FeedService:
    """Feed and stats management service."""

    def __init__(
        self,
        api: ApiClient,
        cache: EntityCache,
        scheduler: InvalidationScheduler,
        normalizer: FeedNormalizer,
    ) -> None:
        """
        Initialize feed service.

        Args:
            api: Backend client.
            cache: Entity cache.
            scheduler: Invalidation scheduler for lifecycle actions.
            normalizer: Source normalizer used by feed creation.
        """
        self.api = api
        self.cache = cache
        self.scheduler = scheduler
        self.normalizer = normalizer

    async def load_feeds(self, force: bool = False) -> list[FeedResponse]:
        """
        Get all feeds, refetching when the cached list is stale.

        Args:
            force: Refetch even if the cache is fresh.

        Returns:
            List of feeds.
        """
        if force or self.cache.is_stale(CacheSection.FEEDS):
            try:
                feeds = await self.api.list_feeds()
            except GatherError:
                logger.exception("Failed to load feeds")
                raise
            self.cache.replace_feeds(feeds)
        return list(self.cache.feeds.values())

    async def load_stats(self, force: bool = False) -> StatsResponse:
        """Get the stats snapshot, refetching when stale."""
        if force or self.cache.stats is None or self.cache.is_stale(CacheSection.STATS):
            try:
                stats = await self.api.get_stats()
            except GatherError:
                logger.exception("Failed to load stats")
                raise
            self.cache.set_stats(stats)
        return self.cache.stats

    async def discover(self, site_url: str) -> list[DiscoveredFeedCandidate]:
        """List feed candidates found on a website."""
        return await self.normalizer.discover(site_url)

    async def create_feed(self, source: FeedSource) -> FeedResponse:
        """
        Normalize a source and create the feed.

        Returns:
            The created feed.

        Raises:
            ValidationError: If the source input is malformed.
            ResolutionError: If the source could not be resolved.
            GatherError: If the create request failed.
        """
        payload = await self.normalizer.normalize(source)
        try:
            feed = await self.api.create_feed(payload)
        except GatherError:
            logger.exception("Failed to create feed", extra={"url": payload.url})
            raise

        self.cache.upsert_feed(feed)
        self.scheduler.after_create(feed.id)
        logger.info("Feed created", extra={"feed_id": feed.id, "url": feed.url})
        return feed

    async def delete_feed(self, feed_id: int) -> None:
        """
        Delete a feed.

        The backend deletes its articles too; the cache drops them at once.

        Raises:
            GatherError: If the delete request failed.
        """
        try:
            await self.api.delete_feed(feed_id)
        except GatherError:
            logger.exception("Failed to delete feed", extra={"feed_id": feed_id})
            raise
        self.scheduler.after_delete(feed_id)

    async def refresh_feed(self, feed_id: int) -> None:
        """
        Ask the backend to refetch a feed now.

        Raises:
            GatherError: If the refresh request failed.
        """
        try:
            await self.api.refresh_feed(feed_id)
        except GatherError:
            logger.exception("Failed to refresh feed", extra={"feed_id": feed_id})
            raise
        self.scheduler.after_refresh(feed_id)


class CreationState(str, Enum):
    """Feed creation form state."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"


class FeedComposer:
    """
    Feed creation state machine.

    IDLE -> SUBMITTING -> SUCCESS (input cleared) or back to IDLE with
    ``last_error`` set and the input retained. A submission while one is in
    progress is rejected without issuing a request.
    """

    def __init__(self, feeds: FeedService) -> None:
        self.feeds = feeds
        self.source: FeedSource | None = None
        self.state = CreationState.IDLE
        self.last_error: GatherError | None = None
        self.created: FeedResponse | None = None

    @property
    def is_submitting(self) -> bool:
        return self.state is CreationState.SUBMITTING

    def set_source(self, source: FeedSource) -> None:
        self.source = source

    async def submit(self, source: FeedSource | None = None) -> FeedResponse:
        """
        Create a feed from the held (or given) source.

        Raises:
            ValidationError: If already submitting or no source is set.
            GatherError: If creation failed; the input is kept for a retry.
        """
        if self.is_submitting:
            raise ValidationError("Feed creation already in progress")
        if source is not None:
            self.source = source
        if self.source is None:
            raise ValidationError("No feed source to submit")

        self.state = CreationState.SUBMITTING
        self.last_error = None
        try:
            feed = await self.feeds.create_feed(self.source)
        except GatherError as e:
            self.state = CreationState.IDLE
            self.last_error = e
            raise
        except BaseException:
            # Cancellation or an unexpected payload must not wedge the form.
            self.state = CreationState.IDLE
            raise

        self.state = CreationState.SUCCESS
        self.created = feed
        self.source = None
        return feed
