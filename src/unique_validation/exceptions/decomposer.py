"""
Decomposition of a duplicate-key error into (index name, value source).

Two value strategies, in order of preference:

  - structured: the values the caller tried to write (document, replacement or
    update payload) and/or the driver's `keyValue` detail. Exact and typed.
  - textual: the `dup key: { ... }` clause of the diagnostic text. Lossy; only
    used when no structured source exists.
"""

import logging
from typing import Any, Mapping, NamedTuple, Sequence

from .classifier import unwrap_write_error
from .diagnostics import DEFAULT_PARSER, DiagnosticParser, parse_key_values

logger = logging.getLogger(__name__)

# Update operators whose arguments are the values stored in the document.
_VALUE_OPERATORS = ("$set", "$setOnInsert")


def flatten_write_payload(payload: Any) -> dict[str, Any]:
    """
    Return the field -> value mapping a write payload would store.

    A plain document is returned as is. For an update document, top-level
    non-operator keys are kept and `$set` / `$setOnInsert` are merged in;
    other operators ($inc, $push, ...) do not carry final values and are skipped.
    Aggregation-pipeline updates (lists) yield nothing.
    """
    if not isinstance(payload, Mapping):
        return {}

    if not any(isinstance(key, str) and key.startswith("$") for key in payload):
        return dict(payload)

    flattened: dict[str, Any] = {
        key: value for key, value in payload.items() if not str(key).startswith("$")
    }
    for operator in _VALUE_OPERATORS:
        values = payload.get(operator)
        if isinstance(values, Mapping):
            flattened.update(values)
    return flattened


def lookup_path(document: Mapping[str, Any], path: str) -> tuple[bool, Any]:
    """
    Find `path` in `document`: the exact key first (field names may contain
    dots or spaces), then a walk through nested mappings.
    """
    if path in document:
        return True, document[path]

    current: Any = document
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return False, None
        current = current[part]
    return True, current


class StructuredValues:
    """Values taken from typed mappings, searched in order."""

    strategy = "structured"

    def __init__(self, *sources: Mapping[str, Any]):
        self.sources = [source for source in sources if source]

    def resolve(self, fields: Sequence[str]) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for field in fields:
            for source in self.sources:
                found, value = lookup_path(source, field)
                if found:
                    resolved[field] = value
                    break
        return resolved


class TextualValues:
    """Values parsed out of the diagnostic's `dup key` clause."""

    strategy = "textual"

    def __init__(self, pairs: Sequence[tuple[str | None, Any]]):
        self.pairs = list(pairs)

    def resolve(self, fields: Sequence[str]) -> dict[str, Any]:
        if not self.pairs:
            return {}

        # Newer servers name every key; match by name.
        if all(key is not None for key, _ in self.pairs):
            keyed = dict(self.pairs)
            return {field: keyed[field] for field in fields if field in keyed}

        # Unnamed keys: the server prints them in index order, so position is
        # the only link back to the field names. Refuse when the counts differ.
        if len(self.pairs) != len(fields):
            logger.debug(
                "decomposer.textual_positional_mismatch",
                extra={"fields": list(fields), "value_count": len(self.pairs)},
            )
            return {}
        return {field: value for field, (_, value) in zip(fields, self.pairs)}


class DecomposedError(NamedTuple):
    index_name: str
    namespace: str | None
    values: StructuredValues | TextualValues
    shape: str


def diagnostic_text(exc: BaseException) -> str:
    """The server's message for a write failure: `errmsg` if present, else the exception text."""
    _, details = unwrap_write_error(exc)
    errmsg = details.get("errmsg") if details else None
    if errmsg:
        return str(errmsg)
    return str(exc.args[0]) if exc.args else str(exc)


def decompose(
    exc: BaseException,
    values: Any = None,
    parser: DiagnosticParser = DEFAULT_PARSER,
) -> DecomposedError:
    """
    Split a classified duplicate-key error into its index name and a value source.

    Args:
        exc: the driver exception (already classified as duplicate-key).
        values: what the caller tried to write, if known (document, replacement
            or update payload).
        parser: diagnostic parser; the default knows every supported server wording.

    Raises:
        UnrecognizedErrorPattern: the diagnostic text matches no known shape.
    """
    parsed = parser.parse(diagnostic_text(exc))

    _, details = unwrap_write_error(exc)
    key_value = details.get("keyValue") if details else None
    payload = flatten_write_payload(values)

    source: StructuredValues | TextualValues
    if payload or (isinstance(key_value, Mapping) and key_value):
        source = StructuredValues(payload, key_value if isinstance(key_value, Mapping) else {})
    else:
        source = TextualValues(parse_key_values(parsed.key_body))

    logger.debug(
        "decomposer.decomposed",
        extra={"index": parsed.index_name, "shape": parsed.shape, "strategy": source.strategy},
    )
    return DecomposedError(
        index_name=parsed.index_name,
        namespace=parsed.namespace,
        values=source,
        shape=parsed.shape,
    )
