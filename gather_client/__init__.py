"""
Gather Client Package.

This package contains the client-side synchronization layer for the
Gather feed reader: pagination, the entity cache, optimistic mutations,
cache invalidation and feed-source normalization.
"""

__version__ = "0.1.0"

from .logging_config import get_logger, init_logging

__all__ = ["init_logging", "get_logger"]
