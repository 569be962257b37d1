"""
Backend HTTP client.

Thin async wrapper over the Gather backend API. Maps transport failures to
``NetworkError``, non-2xx responses to ``ServerError`` and undecodable or
schema-violating bodies to ``ResponseError``; a 204 (or an empty body) maps
to ``None``.
"""

from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from gather_client import get_logger

from .config import ClientSettings
from .errors import NetworkError, ResponseError, ServerError
from .schemas import (
    ArticleResponse,
    DiscoveredFeedCandidate,
    FeedCreate,
    FeedResponse,
    StatsResponse,
    YouTubeResolution,
)

logger = get_logger(__name__)

_articles_adapter = TypeAdapter(list[ArticleResponse])
_feeds_adapter = TypeAdapter(list[FeedResponse])
_candidates_adapter = TypeAdapter(list[DiscoveredFeedCandidate])


class ApiClient:
    """Async client for the Gather backend."""

    def __init__(
        self,
        settings: ClientSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize API client.

        Args:
            settings: Client settings (base URL, timeout, retries).
            transport: Optional transport override, mainly for tests.
        """
        self.read_retries = settings.read_retries
        self._client = httpx.AsyncClient(
            base_url=settings.api_url.rstrip("/"),
            timeout=settings.request_timeout,
            headers={
                "Content-Type": "application/json",
                "User-Agent": settings.user_agent,
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send one request and decode its JSON body.

        Returns:
            Decoded JSON, or None for 204/empty responses.

        Raises:
            NetworkError: If the request never completed.
            ServerError: If the response status is not 2xx.
            ResponseError: If the body is not valid JSON.
        """
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            raise ServerError(response.status_code, response.reason_phrase)

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ResponseError(f"{method} {path} returned invalid JSON") from e

    async def _get(self, path: str, **kwargs: Any) -> Any:
        """GET with the read-query retry policy (network errors and 5xx only)."""
        attempt = 0
        while True:
            try:
                return await self._request("GET", path, **kwargs)
            except (NetworkError, ServerError) as e:
                retryable = isinstance(e, NetworkError) or e.is_server_side
                if not retryable or attempt >= self.read_retries:
                    raise
                attempt += 1
                logger.warning(
                    "Read query failed; retrying",
                    extra={"path": path, "attempt": attempt, "error": str(e)},
                )

    # Articles

    async def list_articles(
        self,
        offset: int = 0,
        limit: int = 20,
        unread: bool = False,
        feed_id: int | None = None,
    ) -> list[ArticleResponse]:
        params: dict[str, str] = {"offset": str(offset), "limit": str(limit)}
        if unread:
            params["unread"] = "true"
        if feed_id is not None:
            params["feed_id"] = str(feed_id)
        data = await self._get("/api/articles", params=params)
        return _validate(_articles_adapter, data or [])

    async def get_article(self, article_id: int) -> ArticleResponse:
        data = await self._get(f"/api/articles/{article_id}")
        return _validate(ArticleResponse, data)

    async def mark_read(self, article_id: int, is_read: bool) -> ArticleResponse | None:
        data = await self._request(
            "PUT", f"/api/articles/{article_id}/read", json={"is_read": is_read}
        )
        return _article_or_none(data)

    async def star(self, article_id: int, is_starred: bool) -> ArticleResponse | None:
        data = await self._request(
            "PUT", f"/api/articles/{article_id}/star", json={"is_starred": is_starred}
        )
        return _article_or_none(data)

    async def mark_all_read(self, feed_id: int | None = None) -> None:
        params = {"feed_id": str(feed_id)} if feed_id is not None else None
        await self._request("POST", "/api/articles/mark-all-read", params=params)

    # Feeds

    async def list_feeds(self) -> list[FeedResponse]:
        data = await self._get("/api/feeds")
        return _validate(_feeds_adapter, data or [])

    async def create_feed(self, payload: FeedCreate) -> FeedResponse:
        data = await self._request("POST", "/api/feeds", json=payload.model_dump())
        return _validate(FeedResponse, data)

    async def delete_feed(self, feed_id: int) -> None:
        await self._request("DELETE", f"/api/feeds/{feed_id}")

    async def refresh_feed(self, feed_id: int) -> None:
        await self._request("POST", f"/api/feeds/{feed_id}/refresh")

    # Stats, discovery and resolution

    async def get_stats(self) -> StatsResponse:
        data = await self._get("/api/stats")
        return _validate(StatsResponse, data or {})

    async def discover(self, url: str) -> list[DiscoveredFeedCandidate]:
        data = await self._get("/api/discover", params={"url": url})
        return _validate(_candidates_adapter, data or [])

    async def resolve_youtube(self, reference: str) -> YouTubeResolution | None:
        data = await self._get("/api/youtube/resolve", params={"input": reference})
        if not data:
            return None
        return _validate(YouTubeResolution, data)


def _article_or_none(data: Any) -> ArticleResponse | None:
    # Flag endpoints answer either with the updated article or with no body.
    if isinstance(data, dict) and "id" in data:
        return _validate(ArticleResponse, data)
    return None


def _validate(schema: Any, data: Any) -> Any:
    """Validate a decoded body against a model class or a ``TypeAdapter``."""
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(data)
        return schema.model_validate(data)
    except SchemaError as e:
        raise ResponseError(
            f"Unexpected response body: {e.error_count()} invalid field(s)"
        ) from e
