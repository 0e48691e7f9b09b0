"""The json_api ingest processor.

Reads a field from the document, builds a URL from it, retrieves JSON from
that URL (through the shared response cache), extracts a value with a
JSONPath expression and writes it into the target field.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ingest_jsonapi.core.document import IngestDocument
from ingest_jsonapi.core.errors import ConfigError, ConfigErrorKind, ExtractionError
from ingest_jsonapi.core.interfaces import ProcessorFactory
from ingest_jsonapi.core.logging import get_logger
from ingest_jsonapi.services.cache import ResponseCache
from ingest_jsonapi.services.extractor import compile_path, extract
from ingest_jsonapi.services.fetcher import HTTPFetcher
from ingest_jsonapi.utils.url import build_url, has_placeholder


logger = get_logger(__name__)

TYPE = "json_api"


class JsonApiProcessorConfig(BaseModel):
    """Options accepted by the json_api processor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(description="Source field holding the value to look up")
    url_prefix: str = Field(description="URL template with one {} placeholder")
    target_field: str = Field(
        default="out", description="Field the extracted value is written to"
    )
    extra_header: str = Field(
        default="", description="One extra 'Name: Value' request header"
    )
    ignore_missing: bool = Field(
        default=False,
        description="Treat a missing or null source field as a no-op",
    )
    json_path: str = Field(default="$..*", description="JSONPath expression")
    multi_value: bool = Field(
        default=False,
        description="Write every match instead of the first one",
    )

    @classmethod
    def from_options(
        cls, config: Mapping[str, Any], processor_tag: str | None = None
    ) -> "JsonApiProcessorConfig":
        """Validate raw processor options.

        Raises:
            ConfigError: If a required option is missing, an option has the
                wrong type, or an unknown option is present
        """
        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise _config_error_from(e, processor_tag) from e


class JsonApiProcessor:
    """Enriches documents with values taken from a JSON API."""

    type = TYPE

    def __init__(
        self,
        tag: str | None,
        config: JsonApiProcessorConfig,
        cache: ResponseCache,
        fetcher: HTTPFetcher | None = None,
    ) -> None:
        self.tag = tag
        self.config = config
        self.cache = cache
        self.fetcher = fetcher or HTTPFetcher()
        self.logger = logger.bind(processor=TYPE, tag=tag)

    def execute(self, document: IngestDocument) -> IngestDocument:
        """Apply the processor to ``document`` and return it.

        The target field is written only once the value has been fetched and
        extracted; on any error the document is left untouched.

        Raises:
            ConfigError: The source field is missing or null and
                ignore_missing is off, or it holds a non-scalar value
            FetchError: The JSON could not be retrieved
            ExtractionError: No value could be extracted
        """
        config = self.config
        value = document.get_field_value(config.field, ignore_missing=config.ignore_missing)
        if value is None:
            if config.ignore_missing:
                self.logger.debug("json_api_field_missing_ignored", field=config.field)
                return document
            raise ConfigError(
                f"field [{config.field}] is null, cannot extract URL.",
                ConfigErrorKind.FIELD_MISSING,
                field=config.field,
            )

        url = build_url(config.url_prefix, _as_url_value(value, config.field))
        self.logger.debug("json_api_url_resolved", field_value=value, url=url)

        body = self._fetch_cached(url)
        result = extract(body, config.json_path, config.multi_value)

        document.set_field_value(config.target_field, result)
        return document

    def _fetch_cached(self, url: str) -> str:
        body = self.cache.get(url)
        if body is not None:
            self.logger.debug("json_api_cache_hit", url=url)
            return body

        self.logger.debug("json_api_cache_miss", url=url)
        body = self.fetcher.fetch(url, self.config.extra_header or None)
        self.cache.put(url, body)
        return body

    def __repr__(self) -> str:
        return f"JsonApiProcessor(tag={self.tag!r}, config={self.config!r})"


class JsonApiProcessorFactory:
    """Creates json_api processors sharing one response cache and fetcher."""

    def __init__(self, cache: ResponseCache, fetcher: HTTPFetcher | None = None) -> None:
        self.cache = cache
        self.fetcher = fetcher or HTTPFetcher()

    def create(
        self,
        registry: Mapping[str, ProcessorFactory],
        processor_tag: str | None,
        config: dict[str, Any],
    ) -> JsonApiProcessor:
        processor_config = JsonApiProcessorConfig.from_options(config, processor_tag)

        try:
            compile_path(processor_config.json_path)
        except ExtractionError as e:
            raise ConfigError(
                f"[json_path] {e.message}",
                ConfigErrorKind.INVALID_PROPERTY,
                field="json_path",
                details={"processor_type": TYPE, "processor_tag": processor_tag},
            ) from e

        if not has_placeholder(processor_config.url_prefix):
            logger.warning(
                "json_api_url_prefix_without_placeholder",
                tag=processor_tag,
                url_prefix=processor_config.url_prefix,
            )

        return JsonApiProcessor(processor_tag, processor_config, self.cache, self.fetcher)


def _as_url_value(value: Any, field: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    raise ConfigError(
        f"field [{field}] of type [{type(value).__name__}] cannot be used to build a URL",
        ConfigErrorKind.FIELD_TYPE,
        field=field,
    )


def _config_error_from(error: ValidationError, processor_tag: str | None) -> ConfigError:
    """Translate the first validation failure into an ingest-style ConfigError."""
    details = {"processor_type": TYPE, "processor_tag": processor_tag}
    first = error.errors()[0]
    name = ".".join(str(part) for part in first["loc"]) or "config"

    if first["type"] == "missing":
        return ConfigError(
            f"[{name}] required property is missing",
            ConfigErrorKind.MISSING_PROPERTY,
            field=name,
            details=details,
        )
    if first["type"] == "extra_forbidden":
        unknown = sorted(
            ".".join(str(part) for part in err["loc"])
            for err in error.errors()
            if err["type"] == "extra_forbidden"
        )
        return ConfigError(
            f"processor [{TYPE}] doesn't support one or more provided "
            f"configuration parameters [{', '.join(unknown)}]",
            ConfigErrorKind.INVALID_PROPERTY,
            field=name,
            details=details,
        )
    return ConfigError(
        f"[{name}] {first['msg']}",
        ConfigErrorKind.INVALID_PROPERTY,
        field=name,
        details=details,
    )
