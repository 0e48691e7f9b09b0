"""Tests for the plugin entry point."""

import pytest
from pytest_httpx import HTTPXMock

from ingest_jsonapi.config.settings import Settings
from ingest_jsonapi.core.document import IngestDocument
from ingest_jsonapi.core.interfaces import Processor, ProcessorFactory
from ingest_jsonapi.plugin import IngestJsonApiPlugin
from ingest_jsonapi.processor import TYPE, JsonApiProcessorFactory
from tests.helpers.test_data import IP, IP_API_URL, IP_RESPONSE, IP_URL


@pytest.mark.unit
class TestIngestJsonApiPlugin:
    def test_settings(self):
        assert IngestJsonApiPlugin().get_settings() == ["cache_size"]

    def test_registers_json_api_factory(self):
        plugin = IngestJsonApiPlugin(Settings(cache_size=5))

        processors = plugin.get_processors()

        assert list(processors) == [TYPE]
        factory = processors[TYPE]
        assert isinstance(factory, JsonApiProcessorFactory)
        assert isinstance(factory, ProcessorFactory)
        assert factory.cache is plugin.cache
        assert plugin.cache.max_weight == 5

    def test_cache_shared_across_calls(self):
        plugin = IngestJsonApiPlugin(Settings(cache_size=5))

        first = plugin.get_processors()[TYPE]
        second = plugin.get_processors()[TYPE]

        assert first.cache is second.cache

    def test_processors_share_cache(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=IP_URL, json=IP_RESPONSE)
        plugin = IngestJsonApiPlugin(Settings(cache_size=10))
        processors = plugin.get_processors()
        factory = processors[TYPE]

        country = factory.create(
            processors,
            "country",
            {"field": "ip", "url_prefix": IP_API_URL, "target_field": "country", "json_path": "country_name"},
        )
        city = factory.create(
            processors,
            "city",
            {"field": "ip", "url_prefix": IP_API_URL, "target_field": "city", "json_path": "city"},
        )
        assert isinstance(country, Processor)

        first = country.execute(IngestDocument({"ip": IP}))
        second = city.execute(IngestDocument({"ip": IP}))

        assert first.source["country"] == "United States"
        assert second.source["city"] == "Oakland"
        assert len(httpx_mock.get_requests()) == 1
        assert plugin.cache.stats()["hits"] == 1

    def test_close_clears_cache(self):
        plugin = IngestJsonApiPlugin(Settings(cache_size=5))
        plugin.cache.put("http://x", "{}")

        plugin.close()

        assert len(plugin.cache) == 0
