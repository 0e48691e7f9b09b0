"""Field-path addressable document passed through an ingest pipeline."""

from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any

from ingest_jsonapi.core.errors import ConfigError, ConfigErrorKind


SOURCE_KEY = "_source"
INGEST_KEY = "_ingest"

_MISSING = object()


class IngestDocument:
    """A document made of a source mapping plus metadata.

    Fields are addressed with dotted paths (``geo.country``). Integer
    segments index into lists (``tags.0``). A leading ``_source.`` segment
    addresses the source explicitly and ``_ingest.`` addresses the ingest
    metadata (``_ingest.timestamp``).

    The source mapping is not copied: writes land in the mapping the caller
    handed in.
    """

    def __init__(
        self,
        source: MutableMapping[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self._source = source
        self._metadata = dict(metadata or {})
        self._ingest_metadata: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat()
        }

    @property
    def source(self) -> MutableMapping[str, Any]:
        return self._source

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata

    @property
    def ingest_metadata(self) -> dict[str, Any]:
        return self._ingest_metadata

    def get_source_and_metadata(self) -> dict[str, Any]:
        """Return a combined view of the metadata and the source fields."""
        return {**self._metadata, **self._source}

    def has_field(self, path: str) -> bool:
        try:
            self._resolve(path)
        except ConfigError:
            return False
        return True

    def get_field_value(self, path: str, ignore_missing: bool = False) -> Any:
        """Return the value at ``path``.

        Raises:
            ConfigError: If the path cannot be resolved, unless
                ``ignore_missing`` is set, in which case ``None`` is returned.
        """
        try:
            return self._resolve(path)
        except ConfigError:
            if ignore_missing:
                return None
            raise

    def set_field_value(self, path: str, value: Any) -> None:
        """Set ``value`` at ``path``, creating intermediate objects as needed."""
        container, segments = self._root_for(path)
        if not segments:
            raise ConfigError(
                f"path [{path}] is not valid",
                ConfigErrorKind.FIELD_TYPE,
                field=path,
            )

        for segment in segments[:-1]:
            if isinstance(container, MutableMapping):
                child = container.get(segment, _MISSING)
                if child is _MISSING or child is None:
                    child = {}
                    container[segment] = child
                container = child
            elif isinstance(container, list):
                container = container[_list_index(container, segment, path)]
            else:
                raise ConfigError(
                    f"cannot set [{segment}] with parent object of type "
                    f"[{type(container).__name__}] as part of path [{path}]",
                    ConfigErrorKind.FIELD_TYPE,
                    field=path,
                )

        leaf = segments[-1]
        if isinstance(container, MutableMapping):
            container[leaf] = value
        elif isinstance(container, list):
            container[_list_index(container, leaf, path)] = value
        else:
            raise ConfigError(
                f"cannot set [{leaf}] with parent object of type "
                f"[{type(container).__name__}] as part of path [{path}]",
                ConfigErrorKind.FIELD_TYPE,
                field=path,
            )

    def remove_field(self, path: str) -> None:
        container, segments = self._root_for(path)
        parent = self._walk(container, segments[:-1], path) if segments else None
        leaf = segments[-1] if segments else path
        if isinstance(parent, MutableMapping) and leaf in parent:
            del parent[leaf]
        elif isinstance(parent, list):
            del parent[_list_index(parent, leaf, path)]
        else:
            raise ConfigError(
                f"field [{leaf}] not present as part of path [{path}]",
                ConfigErrorKind.FIELD_MISSING,
                field=path,
            )

    def _root_for(self, path: str) -> tuple[Any, list[str]]:
        if not path:
            raise ConfigError(
                "path cannot be null nor empty",
                ConfigErrorKind.FIELD_TYPE,
                field=path,
            )
        segments = path.split(".")
        if segments[0] == SOURCE_KEY:
            return self._source, segments[1:]
        if segments[0] == INGEST_KEY:
            return self._ingest_metadata, segments[1:]
        return self._source, segments

    def _resolve(self, path: str) -> Any:
        container, segments = self._root_for(path)
        return self._walk(container, segments, path)

    @staticmethod
    def _walk(container: Any, segments: list[str], path: str) -> Any:
        for segment in segments:
            if isinstance(container, MutableMapping):
                if segment not in container:
                    raise ConfigError(
                        f"field [{segment}] not present as part of path [{path}]",
                        ConfigErrorKind.FIELD_MISSING,
                        field=path,
                    )
                container = container[segment]
            elif isinstance(container, list):
                container = container[_list_index(container, segment, path)]
            else:
                kind = (
                    ConfigErrorKind.FIELD_MISSING
                    if container is None
                    else ConfigErrorKind.FIELD_TYPE
                )
                raise ConfigError(
                    f"cannot resolve [{segment}] from object of type "
                    f"[{type(container).__name__}] as part of path [{path}]",
                    kind,
                    field=path,
                )
        return container

    def __repr__(self) -> str:
        return (
            f"IngestDocument(source={dict(self._source)!r}, "
            f"metadata={self._metadata!r})"
        )


def _list_index(container: list[Any], segment: str, path: str) -> int:
    try:
        index = int(segment)
    except ValueError:
        raise ConfigError(
            f"[{segment}] is not an integer, cannot be used as an index as "
            f"part of path [{path}]",
            ConfigErrorKind.FIELD_TYPE,
            field=path,
        ) from None
    if index < 0 or index >= len(container):
        raise ConfigError(
            f"[{index}] is out of bounds for array with length "
            f"[{len(container)}] as part of path [{path}]",
            ConfigErrorKind.FIELD_MISSING,
            field=path,
        )
    return index
