"""
Client configuration.

This module provides configuration settings for the synchronization layer
loaded from environment variables, plus the named constants the components
share.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file in project root
_env_file = Path(__file__).parent.parent / ".env"

# Canonical article page size. Earlier clients used both 12 and 20; 20 wins.
DEFAULT_PAGE_SIZE = 20

# Seconds to wait after a feed is created or refreshed before article caches
# are invalidated. The backend ingests asynchronously and sends no completion
# signal, so this is a heuristic wait: articles may still be stale afterwards.
ARTICLE_INGESTION_DELAY = 2.0

# Title sent for RSS feeds until the backend resolves the real one.
RSS_TITLE_PLACEHOLDER = "Loading..."

REDDIT_SORTS = ("hot", "new", "top", "rising")


class ClientSettings(BaseSettings):
    """
    Client configuration from environment variables.

    All settings are prefixed with GATHER_ in environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="GATHER_",
        env_file=str(_env_file) if _env_file.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = "http://localhost:8080"
    user_agent: str = "Gather/0.1"
    request_timeout: float = Field(default=30.0, gt=0)

    # Read queries are retried this many times; mutations never are.
    read_retries: int = Field(default=1, ge=0, le=5)

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)
    article_ingestion_delay: float = Field(default=ARTICLE_INGESTION_DELAY, ge=0)

    log_level: str = "INFO"
