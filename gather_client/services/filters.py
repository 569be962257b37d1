"""Active article filter selection."""

from gather_client.schemas import FilterContext

from .pagination import PaginationController


class FilterController:
    """Sole writer of the active filter context."""

    def __init__(self, pagination: PaginationController) -> None:
        self.pagination = pagination

    @property
    def current(self) -> FilterContext:
        return self.pagination.filter

    async def set_filter(self, context: FilterContext) -> bool:
        """
        Replace the active filter and load the first page of its view.

        Setting a filter equal to the current one is a no-op.

        Returns:
            True if the filter changed.
        """
        if context == self.pagination.filter:
            return False
        self.pagination.reset(context)
        await self.pagination.load_next()
        return True

    async def show_unread(self, unread: bool) -> bool:
        return await self.set_filter(self.current.with_unread(unread))

    async def select_feed(self, feed_id: int | None) -> bool:
        return await self.set_filter(self.current.with_feed(feed_id))
