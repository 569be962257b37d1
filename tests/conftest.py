"""Global pytest fixtures for testing."""

import contextlib

import dotenv
import pytest
from helpers import MockBackend

from gather_client.cache import EntityCache
from gather_client.config import ClientSettings

with contextlib.suppress(OSError):
    dotenv.load_dotenv()


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def cache() -> EntityCache:
    return EntityCache()


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        api_url="http://test",
        page_size=3,
        article_ingestion_delay=0.05,
        read_retries=1,
    )
