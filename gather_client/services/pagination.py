"""
Article pagination.

Maintains one ordered, infinitely-scrollable article view for the active
filter context, fetching pages on demand.
"""

from gather_client import get_logger
from gather_client.api_client import ApiClient
from gather_client.cache import EntityCache
from gather_client.errors import GatherError
from gather_client.schemas import ArticleResponse, FilterContext

logger = get_logger(__name__)


class PaginationController:
    """
    Offset-based pager over the article list for one filter context.

    ``has_more`` turns False only when a page comes back shorter than the
    page size. A final page of exactly ``page_size`` articles is therefore
    indistinguishable from "more data exists" until the following fetch
    returns empty; that extra round trip is accepted.
    """

    def __init__(self, api: ApiClient, cache: EntityCache, page_size: int) -> None:
        """
        Initialize pagination controller.

        Args:
            api: Backend client.
            cache: Entity cache holding the view.
            page_size: Articles requested per page.
        """
        self.api = api
        self.cache = cache
        self.page_size = page_size

        self._filter = FilterContext()
        self._cursor = 0
        self._has_more = True
        self._error: GatherError | None = None
        # Bumped on every reset; results from an older generation are discarded.
        self._generation = 0
        self._inflight: tuple[FilterContext, int] | None = None

    @property
    def filter(self) -> FilterContext:
        return self._filter

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_loading(self) -> bool:
        return self._inflight == (self._filter, self._generation)

    @property
    def error(self) -> GatherError | None:
        """Failure of the most recent fetch, cleared by the next attempt."""
        return self._error

    @property
    def articles(self) -> list[ArticleResponse]:
        return self.cache.view_articles(self._filter)

    def reset(self, context: FilterContext) -> None:
        """Clear the view and cursor for ``context`` and make it active."""
        self._filter = context
        self._generation += 1
        self._cursor = 0
        self._has_more = True
        self._error = None
        self.cache.clear_view(context)

    async def load_next(self) -> bool:
        """
        Fetch the page at the current cursor and append it to the view.

        A call while a fetch for the active context is pending is a no-op.
        On failure the view and cursor are left unchanged and ``error`` is
        set; calling again retries.

        Returns:
            True if a page was applied to the view.
        """
        if self.is_loading or not self._has_more:
            return False

        origin = (self._filter, self._generation)
        self._inflight = origin
        self._error = None
        context, _ = origin
        offset = self._cursor

        try:
            page = await self.api.list_articles(
                offset=offset,
                limit=self.page_size,
                unread=context.unread,
                feed_id=context.feed_id,
            )
        except GatherError as e:
            if (self._filter, self._generation) != origin:
                return False
            self._error = e
            logger.warning(
                "Failed to load articles",
                extra={"offset": offset, "unread": context.unread, "feed_id": context.feed_id},
            )
            return False
        finally:
            # Cancellation and unexpected errors must not leave the view loading.
            if self._inflight == origin:
                self._inflight = None

        if (self._filter, self._generation) != origin:
            logger.debug(
                "Discarding page from superseded filter",
                extra={"offset": offset, "unread": context.unread, "feed_id": context.feed_id},
            )
            return False

        self.cache.append_to_view(context, page)
        self._cursor = offset + self.page_size
        if len(page) < self.page_size:
            self._has_more = False
        return True

    async def reload(self) -> bool:
        """
        Refetch the active view from the top, as deep as it was loaded.

        Pages are fetched in order until the previous cursor is reached, the
        view runs out, a fetch fails or the context is superseded.

        Returns:
            True if at least one page was applied.
        """
        depth = max(self._cursor, self.page_size)
        self.reset(self._filter)
        generation = self._generation

        loaded = False
        while self._cursor < depth and self._generation == generation:
            if not await self.load_next():
                break
            loaded = True
        return loaded
