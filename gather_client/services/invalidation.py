"""
Cache invalidation after feed lifecycle actions.

Feed data is invalidated as soon as the backend accepts a create, delete or
refresh. Article data follows on a different timeline: deletes invalidate it
immediately (the backend cascades), while creates and refreshes wait
``article_ingestion_delay`` seconds because ingestion runs asynchronously on
the backend with no completion signal. That wait is best-effort only;
articles may still be stale when it elapses.
"""

import asyncio

from gather_client import get_logger
from gather_client.cache import CacheSection, EntityCache
from gather_client.config import ARTICLE_INGESTION_DELAY

logger = get_logger(__name__)


class InvalidationScheduler:
    """Decides when cached sections must be refetched after feed mutations."""

    def __init__(
        self, cache: EntityCache, article_ingestion_delay: float = ARTICLE_INGESTION_DELAY
    ) -> None:
        self.cache = cache
        self.article_ingestion_delay = article_ingestion_delay
        self._pending: set[asyncio.TimerHandle] = set()

    @property
    def pending(self) -> int:
        """Number of delayed article invalidations not yet fired."""
        return len(self._pending)

    def after_create(self, feed_id: int | None = None) -> None:
        self.cache.invalidate(CacheSection.FEEDS)
        self.cache.invalidate(CacheSection.STATS)
        self._schedule_articles(reason="create", feed_id=feed_id)

    def after_refresh(self, feed_id: int) -> None:
        # The refresh updates last_fetched_at/last_error on the feed row.
        self.cache.invalidate(CacheSection.FEEDS)
        self._schedule_articles(reason="refresh", feed_id=feed_id)

    def after_delete(self, feed_id: int) -> None:
        """Drop the feed locally and invalidate everything that depended on it."""
        removed = self.cache.remove_feed(feed_id)
        self.cache.invalidate(CacheSection.FEEDS)
        self.cache.invalidate(CacheSection.ARTICLES)
        self.cache.invalidate(CacheSection.STATS)
        logger.info(
            "Feed deleted; caches invalidated",
            extra={"feed_id": feed_id, "removed_articles": len(removed)},
        )

    def _schedule_articles(self, reason: str, feed_id: int | None) -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def fire() -> None:
            self._pending.discard(handle)
            logger.debug(
                "Delayed article invalidation fired",
                extra={"reason": reason, "feed_id": feed_id},
            )
            self.cache.invalidate(CacheSection.ARTICLES)
            self.cache.invalidate(CacheSection.STATS)

        handle = loop.call_later(self.article_ingestion_delay, fire)
        self._pending.add(handle)

    def cancel_pending(self) -> None:
        """Cancel every delayed invalidation that has not fired yet."""
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()

    async def aclose(self) -> None:
        self.cancel_pending()
