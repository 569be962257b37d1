"""
Optimistic article mutations.

Applies read/star changes to the cache immediately, sends the matching
request, and restores the captured values if the request fails. Mutations
touching the same article are serialized through per-article locks, so a
rollback from an earlier failure can never overwrite a later success.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager

from gather_client import get_logger
from gather_client.api_client import ApiClient
from gather_client.cache import CacheSection, EntityCache
from gather_client.errors import GatherError
from gather_client.schemas import ArticleResponse

logger = get_logger(__name__)


class KeyedLocks:
    """Registry of asyncio locks keyed by article id, dropped once idle."""

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._waiters: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, key: int) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, keys: Iterable[int]) -> AsyncIterator[None]:
        """
        Hold the locks for every key.

        Keys are acquired in sorted order so overlapping bulk and point
        mutations cannot deadlock.
        """
        ordered = sorted(set(keys))
        acquired: list[int] = []
        try:
            for key in ordered:
                lock = self._locks.setdefault(key, asyncio.Lock())
                self._waiters[key] = self._waiters.get(key, 0) + 1
                try:
                    await lock.acquire()
                except BaseException:
                    self._release_ref(key)
                    raise
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                self._release_ref(key)

    def _release_ref(self, key: int) -> None:
        remaining = self._waiters[key] - 1
        if remaining:
            self._waiters[key] = remaining
        else:
            del self._waiters[key]
            del self._locks[key]


class MutationEngine:
    """Optimistic read/star mutation service."""

    def __init__(self, api: ApiClient, cache: EntityCache) -> None:
        """
        Initialize mutation engine.

        Args:
            api: Backend client.
            cache: Entity cache the optimistic values are written to.
        """
        self.api = api
        self.cache = cache
        self.locks = KeyedLocks()

    async def set_read(self, article_id: int, is_read: bool) -> ArticleResponse | None:
        """
        Set ``is_read`` on one article.

        Returns:
            The cached article after the mutation resolved.

        Raises:
            GatherError: If the request failed; the cache is rolled back first.
        """
        return await self._mutate_one(
            article_id, "is_read", is_read, lambda: self.api.mark_read(article_id, is_read)
        )

    async def set_starred(self, article_id: int, is_starred: bool) -> ArticleResponse | None:
        """
        Set ``is_starred`` on one article.

        Raises:
            GatherError: If the request failed; the cache is rolled back first.
        """
        return await self._mutate_one(
            article_id, "is_starred", is_starred, lambda: self.api.star(article_id, is_starred)
        )

    async def mark_all_read(self, feed_id: int | None = None) -> int:
        """
        Mark every cached article (optionally of one feed) as read.

        Args:
            feed_id: Restrict to one feed; None means all feeds.

        Returns:
            Number of cached articles that changed.

        Raises:
            GatherError: If the request failed; every affected article is rolled back.
        """
        affected = [article.id for article in self.cache.find_articles(feed_id)]
        async with self.locks.hold(affected):
            # Re-read under the locks: queued point mutations may have landed.
            snapshot = {
                article.id: {"is_read": article.is_read}
                for article in self.cache.find_articles(feed_id)
                if article.id in affected and not article.is_read
            }
            for article_id in snapshot:
                self.cache.update_article(article_id, is_read=True)

            try:
                await self.api.mark_all_read(feed_id)
            except GatherError:
                self.cache.restore_fields(snapshot)
                logger.exception(
                    "Mark all read failed; rolled back",
                    extra={"feed_id": feed_id, "articles": len(snapshot)},
                )
                raise

        self.cache.invalidate(CacheSection.STATS)
        return len(snapshot)

    async def _mutate_one(
        self,
        article_id: int,
        field: str,
        value: bool,
        send: Callable[[], Awaitable[ArticleResponse | None]],
    ) -> ArticleResponse | None:
        async with self.locks.hold([article_id]):
            previous = self.cache.get_article(article_id)
            snapshot = {article_id: {field: getattr(previous, field)}} if previous else {}
            self.cache.update_article(article_id, **{field: value})

            try:
                confirmed = await send()
            except GatherError:
                self.cache.restore_fields(snapshot)
                logger.exception(
                    "Article mutation failed; rolled back",
                    extra={"article_id": article_id, "field": field, "value": value},
                )
                raise

            # A page fetched while the request was in flight may have brought
            # back the old value; the server's answer (or our value) wins.
            if confirmed is not None:
                server_fields = {"is_read": confirmed.is_read, "is_starred": confirmed.is_starred}
            else:
                server_fields = {field: value}
            current = self.cache.get_article(article_id)
            if current is not None and any(
                getattr(current, name) != val for name, val in server_fields.items()
            ):
                self.cache.update_article(article_id, **server_fields)

        self.cache.invalidate(CacheSection.STATS)
        return self.cache.get_article(article_id)
