"""JSONPath extraction from response bodies.

Every expression is evaluated in list mode: the evaluator always yields a
list of matches, and projection to a single value happens afterwards.

``jsonpath_ng`` only lets ``*`` select the values of an object. Compiled
expressions have every ``*`` replaced with :class:`Wildcard`, which also
selects array elements, so ``$..*`` and ``$.*`` walk arrays as well.
"""

import json
import threading
from functools import lru_cache
from typing import Any

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as jsonpath_parse
from jsonpath_ng.jsonpath import (
    Child,
    DatumInContext,
    Fields,
    Index,
    JSONPath,
    Root,
    This,
)

from ingest_jsonapi.core.errors import ExtractionError, ExtractionErrorKind


_parse_lock = threading.Lock()


class Wildcard(Fields):
    """``*`` matching every object value and every array element."""

    def __init__(self) -> None:
        super().__init__("*")

    def find(self, datum: Any) -> list[DatumInContext]:
        datum = DatumInContext.wrap(datum)
        if isinstance(datum.value, list):
            return [
                DatumInContext(value, path=Index(i), context=datum)
                for i, value in enumerate(datum.value)
            ]
        return super().find(datum)


def _widen_wildcards(node: Any) -> Any:
    if type(node) is Fields and node.fields == ("*",):
        return Wildcard()

    for attr in ("left", "right", "target"):
        child = getattr(node, attr, None)
        if isinstance(child, JSONPath):
            setattr(node, attr, _widen_wildcards(child))

    # Filter conditions
    expressions = getattr(node, "expressions", None)
    if isinstance(expressions, list):
        node.expressions = [_widen_wildcards(expression) for expression in expressions]
    return node


def is_definite(expression: JSONPath) -> bool:
    """Return True if ``expression`` can match at most one value.

    Definite paths are built only from the root, named fields and single
    array indices. Deep scans, wildcards, filters, slices, unions and
    multi-field or multi-index selectors are indefinite.
    """
    if type(expression) in (Root, This):
        return True
    if type(expression) is Fields:
        return len(expression.fields) == 1 and expression.fields[0] != "*"
    if type(expression) is Index:
        return len(expression.indices) == 1
    if type(expression) is Child:
        return is_definite(expression.left) and is_definite(expression.right)
    return False


@lru_cache(maxsize=256)
def compile_path(path_expression: str) -> JSONPath:
    """Compile a JSONPath expression, caching the result.

    Raises:
        ExtractionError: If the expression cannot be parsed
    """
    with _parse_lock:
        try:
            return _widen_wildcards(jsonpath_parse(path_expression))
        except (JSONPathError, ValueError) as e:
            raise ExtractionError(
                f"Invalid JSONPath '{path_expression}': {e}",
                ExtractionErrorKind.NO_MATCH,
                path=path_expression,
            ) from e


def find_all(document: Any, path_expression: str) -> list[Any]:
    """Return every value matching ``path_expression``, in document order.

    Raises:
        ExtractionError: If the expression is invalid, cannot be applied to
            ``document``, or is definite and matches nothing
    """
    expression = compile_path(path_expression)
    try:
        matches = expression.find(document)
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise ExtractionError(
            f"JSONPath '{path_expression}' cannot be applied to the response: {e}",
            ExtractionErrorKind.NO_MATCH,
            path=path_expression,
        ) from e

    if not matches and is_definite(expression):
        raise ExtractionError(
            f"No results for path: {path_expression}",
            ExtractionErrorKind.NO_MATCH,
            path=path_expression,
        )
    return [match.value for match in matches]


def extract(body: str, path_expression: str, multi_value: bool) -> Any:
    """Parse ``body`` as JSON and extract the value(s) at ``path_expression``.

    Returns the full list of matches when ``multi_value`` is set, otherwise
    the first match. An indefinite expression with no match yields ``[]``
    in multi-value mode.

    Raises:
        ExtractionError: If the body is not JSON, the expression does not
            apply, or a single value was requested and nothing matched
    """
    try:
        document = json.loads(body)
    except (json.JSONDecodeError, TypeError) as e:
        raise ExtractionError(
            f"Response body is not valid JSON: {e}",
            ExtractionErrorKind.INVALID_JSON,
            path=path_expression,
        ) from e

    values = find_all(document, path_expression)
    if multi_value:
        return values

    if not values:
        raise ExtractionError(
            f"JSONPath '{path_expression}' did not match any value",
            ExtractionErrorKind.EMPTY_RESULT,
            path=path_expression,
        )
    return values[0]
