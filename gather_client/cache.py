"""
Entity cache.

Normalized, id-keyed storage for articles and feeds, a stats snapshot, and
per-view ordered id lists. Reactivity is explicit: components subscribe to
``CacheEvent`` notifications instead of watching shared state.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gather_client import get_logger

from .schemas import ArticleResponse, FeedResponse, FilterContext, StatsResponse

logger = get_logger(__name__)


class CacheSection(str, Enum):
    """Independently invalidated portions of the cache."""

    FEEDS = "feeds"
    ARTICLES = "articles"
    STATS = "stats"


class CacheAction(str, Enum):
    """What happened to a section."""

    UPDATED = "updated"
    REMOVED = "removed"
    INVALIDATED = "invalidated"


@dataclass(frozen=True)
class CacheEvent:
    """Notification delivered to cache subscribers."""

    section: CacheSection
    action: CacheAction
    ids: tuple[int, ...] = field(default_factory=tuple)


Listener = Callable[[CacheEvent], None]


class EntityCache:
    """In-memory entity tables shared by the synchronization components."""

    def __init__(self) -> None:
        self.articles: dict[int, ArticleResponse] = {}
        self.feeds: dict[int, FeedResponse] = {}
        self.stats: StatsResponse | None = None
        self._views: dict[FilterContext, list[int]] = {}
        self._feeds_loaded = False
        # Nothing has been fetched yet, so every section starts stale.
        self._stale: set[CacheSection] = set(CacheSection)
        self._listeners: list[Listener] = []

    # Subscription

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for cache events.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, section: CacheSection, action: CacheAction, ids: Iterable[int] = ()) -> None:
        event = CacheEvent(section, action, tuple(ids))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Cache listener failed",
                    extra={"section": section.value, "action": action.value},
                )

    # Staleness

    def invalidate(self, section: CacheSection) -> None:
        """Mark a section stale so the next read refetches it."""
        self._stale.add(section)
        self._notify(section, CacheAction.INVALIDATED)

    def is_stale(self, section: CacheSection) -> bool:
        return section in self._stale

    def _mark_fresh(self, section: CacheSection) -> None:
        self._stale.discard(section)

    # Articles

    def get_article(self, article_id: int) -> ArticleResponse | None:
        return self.articles.get(article_id)

    def upsert_articles(self, articles: Iterable[ArticleResponse]) -> list[int]:
        ids = []
        for article in articles:
            self.articles[article.id] = article
            ids.append(article.id)
        if ids:
            self._notify(CacheSection.ARTICLES, CacheAction.UPDATED, ids)
        return ids

    def update_article(self, article_id: int, **fields: Any) -> ArticleResponse | None:
        """
        Replace fields on one cached article.

        Returns:
            The updated article, or None if it is not cached.
        """
        article = self.articles.get(article_id)
        if article is None:
            return None
        updated = article.model_copy(update=fields)
        self.articles[article_id] = updated
        self._notify(CacheSection.ARTICLES, CacheAction.UPDATED, [article_id])
        return updated

    def restore_fields(self, snapshot: dict[int, dict[str, Any]]) -> None:
        """Put previously captured field values back, skipping since-removed ids."""
        restored = [aid for aid in snapshot if aid in self.articles]
        for article_id in restored:
            self.articles[article_id] = self.articles[article_id].model_copy(
                update=snapshot[article_id]
            )
        if restored:
            self._notify(CacheSection.ARTICLES, CacheAction.UPDATED, restored)

    def find_articles(self, feed_id: int | None = None) -> list[ArticleResponse]:
        """Cached articles, optionally restricted to one feed."""
        return [
            article
            for article in self.articles.values()
            if feed_id is None or article.feed_id == feed_id
        ]

    # Views

    def view_ids(self, context: FilterContext) -> list[int]:
        return list(self._views.get(context, ()))

    def view_articles(self, context: FilterContext) -> list[ArticleResponse]:
        """
        Ordered articles of one view.

        Ids whose article was evicted, or whose feed is known to be gone,
        are skipped so deleted feeds never leave orphans visible.
        """
        result = []
        for article_id in self._views.get(context, ()):
            article = self.articles.get(article_id)
            if article is None:
                continue
            if self._feeds_loaded and article.feed_id not in self.feeds:
                continue
            result.append(article)
        return result

    def clear_view(self, context: FilterContext) -> None:
        self._views[context] = []

    def append_to_view(self, context: FilterContext, articles: list[ArticleResponse]) -> int:
        """
        Cache a fetched page and append its ids to a view.

        Ids already present in the view are not appended again.

        Returns:
            Number of ids appended.
        """
        self.upsert_articles(articles)
        view = self._views.setdefault(context, [])
        seen = set(view)
        appended = 0
        for article in articles:
            if article.id in seen:
                continue
            view.append(article.id)
            seen.add(article.id)
            appended += 1
        self._mark_fresh(CacheSection.ARTICLES)
        return appended

    # Feeds

    def replace_feeds(self, feeds: Iterable[FeedResponse]) -> None:
        """Replace the feed table with a fresh server listing."""
        self.feeds = {feed.id: feed for feed in feeds}
        self._feeds_loaded = True
        self._mark_fresh(CacheSection.FEEDS)
        self._notify(CacheSection.FEEDS, CacheAction.UPDATED, self.feeds.keys())

    def upsert_feed(self, feed: FeedResponse) -> None:
        self.feeds[feed.id] = feed
        self._notify(CacheSection.FEEDS, CacheAction.UPDATED, [feed.id])

    def remove_feed(self, feed_id: int) -> list[int]:
        """
        Remove a feed and cascade to its cached articles and view entries.

        Returns:
            Ids of the removed articles.
        """
        self.feeds.pop(feed_id, None)
        removed = [aid for aid, article in self.articles.items() if article.feed_id == feed_id]
        for article_id in removed:
            del self.articles[article_id]

        removed_set = set(removed)
        for context, ids in self._views.items():
            if context.feed_id == feed_id:
                self._views[context] = []
            elif removed_set:
                self._views[context] = [aid for aid in ids if aid not in removed_set]

        self._notify(CacheSection.FEEDS, CacheAction.REMOVED, [feed_id])
        if removed:
            self._notify(CacheSection.ARTICLES, CacheAction.REMOVED, removed)
        return removed

    # Stats

    def set_stats(self, stats: StatsResponse) -> None:
        self.stats = stats
        self._mark_fresh(CacheSection.STATS)
        self._notify(CacheSection.STATS, CacheAction.UPDATED)
