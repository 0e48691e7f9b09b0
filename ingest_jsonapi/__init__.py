from ._version import __version__
from .core.document import IngestDocument
from .core.errors import (
    ConfigError,
    ConfigErrorKind,
    ExtractionError,
    ExtractionErrorKind,
    FetchError,
    FetchErrorKind,
    JsonApiError,
)
from .plugin import IngestJsonApiPlugin
from .processor import JsonApiProcessor, JsonApiProcessorConfig, JsonApiProcessorFactory
from .services.cache import ResponseCache


__all__ = [
    "__version__",
    "ConfigError",
    "ConfigErrorKind",
    "ExtractionError",
    "ExtractionErrorKind",
    "FetchError",
    "FetchErrorKind",
    "IngestDocument",
    "IngestJsonApiPlugin",
    "JsonApiError",
    "JsonApiProcessor",
    "JsonApiProcessorConfig",
    "JsonApiProcessorFactory",
    "ResponseCache",
]
