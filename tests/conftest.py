"""Shared test fixtures for the json_api processor tests.

All outbound HTTP is intercepted by pytest-httpx; no test reaches the
network.
"""

from collections.abc import Generator
from typing import Any

import pytest

from ingest_jsonapi.config.settings import HTTPSettings
from ingest_jsonapi.core.document import IngestDocument
from ingest_jsonapi.core.logging import setup_logging
from ingest_jsonapi.processor import (
    JsonApiProcessor,
    JsonApiProcessorConfig,
    JsonApiProcessorFactory,
)
from ingest_jsonapi.services.cache import ResponseCache
from ingest_jsonapi.services.fetcher import HTTPFetcher
from tests.helpers.test_data import IP, IP_API_URL, TEST_CACHE_SIZE


def pytest_configure(config: pytest.Config) -> None:
    """Configure logging the same way the CLI does."""
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep proxy, TLS and settings variables from leaking into tests."""
    for name in (
        "HTTPS_PROXY",
        "https_proxy",
        "HTTP_PROXY",
        "http_proxy",
        "ALL_PROXY",
        "all_proxy",
        "REQUESTS_CA_BUNDLE",
        "SSL_CERT_FILE",
        "SSL_VERIFY",
        "INGEST_JSONAPI_CONFIG_FILE",
        "INGEST_JSONAPI_CACHE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def cache() -> ResponseCache:
    return ResponseCache(max_weight=TEST_CACHE_SIZE)


@pytest.fixture
def fetcher() -> HTTPFetcher:
    return HTTPFetcher(HTTPSettings(timeout_connect=1.0, timeout_read=1.0))


@pytest.fixture
def make_processor(cache: ResponseCache, fetcher: HTTPFetcher) -> Any:
    """Build a processor from keyword options on the shared test cache."""

    def _make(**options: Any) -> JsonApiProcessor:
        options.setdefault("url_prefix", IP_API_URL)
        config = JsonApiProcessorConfig(**options)
        return JsonApiProcessor("test-tag", config, cache, fetcher)

    return _make


@pytest.fixture
def factory(cache: ResponseCache, fetcher: HTTPFetcher) -> JsonApiProcessorFactory:
    return JsonApiProcessorFactory(cache, fetcher)


@pytest.fixture
def ip_document() -> IngestDocument:
    return IngestDocument({"ip": IP}, metadata={"_index": "test", "_id": "1"})
