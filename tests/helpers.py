"""Shared test doubles and builders."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

from gather_client.errors import ServerError
from gather_client.schemas import (
    ArticleResponse,
    DiscoveredFeedCandidate,
    FeedCreate,
    FeedResponse,
    StatsResponse,
    YouTubeResolution,
)

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_article(article_id: int, feed_id: int = 1, **overrides: Any) -> ArticleResponse:
    """Build an article whose publish time decreases as the id grows."""
    data: dict[str, Any] = {
        "id": article_id,
        "feed_id": feed_id,
        "title": f"Article {article_id}",
        "url": f"https://example.com/articles/{article_id}",
        "published_at": _EPOCH - timedelta(minutes=article_id),
        "is_read": False,
        "is_starred": False,
    }
    data.update(overrides)
    return ArticleResponse.model_validate(data)


def make_feed(feed_id: int, **overrides: Any) -> FeedResponse:
    data: dict[str, Any] = {
        "id": feed_id,
        "url": f"https://example.com/feeds/{feed_id}.xml",
        "title": f"Feed {feed_id}",
        "type": "rss",
    }
    data.update(overrides)
    return FeedResponse.model_validate(data)


class MockBackend:
    """
    In-memory stand-in for ``ApiClient``.

    Every call is recorded. A call can be held open with ``gate`` (the
    coroutine waits until the returned event is set) and made to fail with
    ``fail``.
    """

    def __init__(self) -> None:
        self.feeds: dict[int, FeedResponse] = {}
        self.articles: dict[int, ArticleResponse] = {}
        self.stats = StatsResponse()
        self.candidates: list[DiscoveredFeedCandidate] = []
        self.resolution: YouTubeResolution | None = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._gates: dict[str, list[asyncio.Event]] = {}
        self._failures: dict[str, list[Exception]] = {}
        self._next_feed_id = 100
        self.closed = False

    def seed(self, feeds: list[FeedResponse], articles: list[ArticleResponse]) -> None:
        for feed in feeds:
            self.feeds[feed.id] = feed
        for article in articles:
            self.articles[article.id] = article

    def gate(self, method: str) -> asyncio.Event:
        """Hold the next call to ``method`` until the returned event is set."""
        event = asyncio.Event()
        self._gates.setdefault(method, []).append(event)
        return event

    def fail(self, method: str, error: Exception | None = None) -> None:
        """Make the next call to ``method`` raise."""
        error = error or ServerError(500, "Internal Server Error")
        self._failures.setdefault(method, []).append(error)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    async def _enter(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        gates = self._gates.get(method)
        if gates:
            await gates.pop(0).wait()
        failures = self._failures.get(method)
        if failures:
            raise failures.pop(0)

    async def aclose(self) -> None:
        self.closed = True

    async def list_articles(
        self, offset: int = 0, limit: int = 20, unread: bool = False, feed_id: int | None = None
    ) -> list[ArticleResponse]:
        await self._enter("list_articles", offset, limit, unread, feed_id)
        rows = [
            article
            for article in self.articles.values()
            if (not unread or not article.is_read)
            and (feed_id is None or article.feed_id == feed_id)
            and article.feed_id in self.feeds
        ]
        rows.sort(key=lambda a: (a.published_at, a.id), reverse=True)
        return rows[offset : offset + limit]

    async def get_article(self, article_id: int) -> ArticleResponse:
        await self._enter("get_article", article_id)
        if article_id not in self.articles:
            raise ServerError(404, "Not Found")
        return self.articles[article_id]

    async def mark_read(self, article_id: int, is_read: bool) -> ArticleResponse | None:
        await self._enter("mark_read", article_id, is_read)
        self.articles[article_id] = self.articles[article_id].model_copy(update={"is_read": is_read})
        return None

    async def star(self, article_id: int, is_starred: bool) -> ArticleResponse | None:
        await self._enter("star", article_id, is_starred)
        updated = self.articles[article_id].model_copy(update={"is_starred": is_starred})
        self.articles[article_id] = updated
        return updated

    async def mark_all_read(self, feed_id: int | None = None) -> None:
        await self._enter("mark_all_read", feed_id)
        for article_id, article in list(self.articles.items()):
            if feed_id is None or article.feed_id == feed_id:
                self.articles[article_id] = article.model_copy(update={"is_read": True})

    async def list_feeds(self) -> list[FeedResponse]:
        await self._enter("list_feeds")
        return list(self.feeds.values())

    async def create_feed(self, payload: FeedCreate) -> FeedResponse:
        await self._enter("create_feed", payload)
        feed = make_feed(self._next_feed_id, url=payload.url, title=payload.title)
        self._next_feed_id += 1
        self.feeds[feed.id] = feed
        return feed

    async def delete_feed(self, feed_id: int) -> None:
        await self._enter("delete_feed", feed_id)
        self.feeds.pop(feed_id, None)
        for article_id in [a.id for a in self.articles.values() if a.feed_id == feed_id]:
            del self.articles[article_id]

    async def refresh_feed(self, feed_id: int) -> None:
        await self._enter("refresh_feed", feed_id)

    async def get_stats(self) -> StatsResponse:
        await self._enter("get_stats")
        return self.stats

    async def discover(self, url: str) -> list[DiscoveredFeedCandidate]:
        await self._enter("discover", url)
        return list(self.candidates)

    async def resolve_youtube(self, reference: str) -> YouTubeResolution | None:
        await self._enter("resolve_youtube", reference)
        return self.resolution


async def settle() -> None:
    """Let every ready task run until the loop is idle."""
    for _ in range(10):
        await asyncio.sleep(0)

