"""
Article filter context.

The (unread, feed_id) pair defining the active article view.
"""

from pydantic import BaseModel, ConfigDict


class FilterContext(BaseModel):
    """
    Value object selecting an article view.

    Frozen and hashable: two contexts are equal iff both fields match, and a
    context can key the cache's view table.
    """

    model_config = ConfigDict(frozen=True)

    unread: bool = False
    feed_id: int | None = None

    def with_unread(self, unread: bool) -> "FilterContext":
        return self.model_copy(update={"unread": unread})

    def with_feed(self, feed_id: int | None) -> "FilterContext":
        return self.model_copy(update={"feed_id": feed_id})
