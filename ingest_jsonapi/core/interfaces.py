"""Interfaces between the json_api processor and the ingest host.

The host only needs two capabilities: a processor that transforms one
document at a time, and a factory that builds processors from a raw
configuration mapping.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ingest_jsonapi.core.document import IngestDocument


__all__ = ["Processor", "ProcessorFactory"]


@runtime_checkable
class Processor(Protocol):
    """A configured pipeline step applied to one document at a time."""

    @property
    def type(self) -> str: ...

    @property
    def tag(self) -> str | None: ...

    def execute(self, document: IngestDocument) -> IngestDocument:
        """Transform ``document`` in place and return it.

        Raises:
            JsonApiError: If the document cannot be transformed. The document
                is left unmodified in that case.
        """
        ...


@runtime_checkable
class ProcessorFactory(Protocol):
    """Builds processors from the configuration the host was given."""

    def create(
        self,
        registry: Mapping[str, "ProcessorFactory"],
        processor_tag: str | None,
        config: dict[str, Any],
    ) -> Processor:
        """Create a processor.

        Args:
            registry: All factories known to the host, keyed by type
            processor_tag: Optional tag identifying the processor instance
            config: Raw configuration options for the processor

        Raises:
            ConfigError: If ``config`` is invalid
        """
        ...
