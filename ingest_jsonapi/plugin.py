"""Plugin entry point registering the json_api processor with an ingest host."""

from ingest_jsonapi.config.settings import Settings
from ingest_jsonapi.core.interfaces import ProcessorFactory
from ingest_jsonapi.core.logging import get_logger
from ingest_jsonapi.processor import TYPE, JsonApiProcessorFactory
from ingest_jsonapi.services.cache import ResponseCache
from ingest_jsonapi.services.fetcher import HTTPFetcher


logger = get_logger(__name__)

CACHE_SIZE_SETTING = "cache_size"


class IngestJsonApiPlugin:
    """Owns the response cache shared by every json_api processor.

    The cache is built from ``settings.cache_size`` the first time the host
    asks for processors and lives as long as the plugin.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._cache: ResponseCache | None = None
        self._factories: dict[str, ProcessorFactory] | None = None

    def get_settings(self) -> list[str]:
        """Names of the process-wide settings this plugin reads."""
        return [CACHE_SIZE_SETTING]

    @property
    def cache(self) -> ResponseCache:
        if self._cache is None:
            self._cache = ResponseCache(self.settings.cache_size)
            logger.info("json_api_cache_created", size=self.settings.cache_size)
        return self._cache

    def get_processors(self) -> dict[str, ProcessorFactory]:
        """Return processor factories keyed by processor type."""
        if self._factories is None:
            fetcher = HTTPFetcher(self.settings.http)
            self._factories = {TYPE: JsonApiProcessorFactory(self.cache, fetcher)}
        return dict(self._factories)

    def close(self) -> None:
        """Drop cached responses on teardown."""
        if self._cache is not None:
            self._cache.clear()
