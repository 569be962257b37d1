"""
Reader context.

Explicit, passed-around context that owns the API client, the entity cache
and every synchronization component. Replaces a shared global store: UI code
receives a ``Reader`` and subscribes to its cache.
"""

import asyncio

import httpx

from gather_client import get_logger, init_logging

from .api_client import ApiClient
from .cache import CacheAction, CacheEvent, CacheSection, EntityCache
from .config import ClientSettings
from .schemas import ArticleResponse, FilterContext
from .services import (
    FeedComposer,
    FeedNormalizer,
    FeedService,
    FilterController,
    InvalidationScheduler,
    MutationEngine,
    PaginationController,
)

logger = get_logger(__name__)


class Reader:
    """Wires the synchronization layer together for one user session."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        api: ApiClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the reader context.

        Args:
            settings: Client settings; loaded from the environment if omitted.
            api: Pre-built API client, mainly for tests.
            transport: httpx transport override used when ``api`` is omitted.
        """
        self.settings = settings or ClientSettings()
        self.api = api or ApiClient(self.settings, transport=transport)
        self.cache = EntityCache()

        self.pagination = PaginationController(self.api, self.cache, self.settings.page_size)
        self.filters = FilterController(self.pagination)
        self.mutations = MutationEngine(self.api, self.cache)
        self.scheduler = InvalidationScheduler(self.cache, self.settings.article_ingestion_delay)
        self.normalizer = FeedNormalizer(self.api)
        self.feeds = FeedService(self.api, self.cache, self.scheduler, self.normalizer)

        self._reloads: set[asyncio.Task] = set()
        self._unsubscribe = self.cache.subscribe(self._on_cache_event)

    async def __aenter__(self) -> "Reader":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def open(self, context: FilterContext | None = None) -> None:
        """Load feeds and the first article page for ``context``."""
        init_logging(self.settings.log_level)
        logger.info("Opening reader", extra={"api_url": self.settings.api_url})
        await self.feeds.load_feeds()
        self.pagination.reset(context or FilterContext())
        await self.pagination.load_next()

    async def aclose(self) -> None:
        self._unsubscribe()
        await self.scheduler.aclose()
        for task in list(self._reloads):
            task.cancel()
        if self._reloads:
            await asyncio.gather(*self._reloads, return_exceptions=True)
        await self.api.aclose()

    def composer(self) -> FeedComposer:
        """New feed creation form bound to this reader."""
        return FeedComposer(self.feeds)

    async def get_article(self, article_id: int) -> ArticleResponse:
        """
        Get one article, from the cache when it is fresh.

        Raises:
            GatherError: If the backend lookup failed.
        """
        cached = self.cache.get_article(article_id)
        if cached is not None and not self.cache.is_stale(CacheSection.ARTICLES):
            return cached
        article = await self.api.get_article(article_id)
        self.cache.upsert_articles([article])
        return self.cache.get_article(article_id) or article

    def _on_cache_event(self, event: CacheEvent) -> None:
        # Article invalidation refetches the active view, mirroring an
        # active query being refetched when its key is invalidated.
        if event.section is CacheSection.ARTICLES and event.action is CacheAction.INVALIDATED:
            task = asyncio.get_running_loop().create_task(self._reload_view())
            self._reloads.add(task)
            task.add_done_callback(self._reloads.discard)

    async def _reload_view(self) -> None:
        await self.pagination.reload()
