"""
Service layer.

Synchronization components of the client.
"""

from .feeds import CreationState, FeedComposer, FeedService
from .filters import FilterController
from .invalidation import InvalidationScheduler
from .mutations import KeyedLocks, MutationEngine
from .normalizer import FeedNormalizer, extract_youtube_identifier, normalize_reddit
from .pagination import PaginationController

__all__ = [
    "PaginationController",
    "FilterController",
    "MutationEngine",
    "KeyedLocks",
    "InvalidationScheduler",
    "FeedNormalizer",
    "extract_youtube_identifier",
    "normalize_reddit",
    "FeedService",
    "FeedComposer",
    "CreationState",
]
