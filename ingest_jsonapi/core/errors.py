"""Custom exceptions for the json_api ingest processor."""

from enum import Enum
from typing import Any


class ConfigErrorKind(str, Enum):
    """Reasons a processor configuration or input document is rejected."""

    FIELD_MISSING = "field_missing"
    FIELD_TYPE = "field_type"
    MISSING_PROPERTY = "missing_property"
    INVALID_PROPERTY = "invalid_property"


class FetchErrorKind(str, Enum):
    """Reasons retrieving a response body failed."""

    UNEXPECTED_STATUS = "unexpected_status"
    NETWORK_FAILURE = "network_failure"


class ExtractionErrorKind(str, Enum):
    """Reasons extracting a value from a response body failed."""

    INVALID_JSON = "invalid_json"
    NO_MATCH = "no_match"
    EMPTY_RESULT = "empty_result"


class JsonApiError(Exception):
    """Base exception for json_api processor errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(JsonApiError):
    """Raised for invalid processor configuration or unusable source fields."""

    def __init__(
        self,
        message: str,
        kind: ConfigErrorKind,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind
        self.field = field


class FetchError(JsonApiError):
    """Raised when the remote JSON document cannot be retrieved."""

    def __init__(
        self,
        message: str,
        kind: FetchErrorKind,
        url: str | None = None,
        status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, {"url": url, "status": status})
        self.kind = kind
        self.url = url
        self.status = status
        self.cause = cause

    @classmethod
    def unexpected_status(cls, status: int, url: str | None = None) -> "FetchError":
        return cls(
            f"Unexpected response status: {status}",
            FetchErrorKind.UNEXPECTED_STATUS,
            url=url,
            status=status,
        )

    @classmethod
    def network_failure(cls, cause: BaseException, url: str | None = None) -> "FetchError":
        return cls(
            f"Request to [{url}] failed: {cause}",
            FetchErrorKind.NETWORK_FAILURE,
            url=url,
            cause=cause,
        )


class ExtractionError(JsonApiError):
    """Raised when a value cannot be extracted from a response body."""

    def __init__(
        self,
        message: str,
        kind: ExtractionErrorKind,
        path: str | None = None,
    ) -> None:
        super().__init__(message, {"path": path})
        self.kind = kind
        self.path = path
