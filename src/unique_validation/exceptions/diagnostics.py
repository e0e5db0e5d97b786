"""
Parsing of the server's duplicate-key diagnostic text.

The server reports duplicate keys only as free text, and its wording changed
between releases:

    # 3.4 and later
    E11000 duplicate key error collection: shop.users index: email_1 dup key: { email: "a@b.c" }
    E11000 duplicate key error collection: shop.users index: name_1 collation: { locale: "en" } dup key: { name: "x" }

    # before 3.4
    E11000 duplicate key error index: shop.users.$email_1  dup key: { : "a@b.c" }

All pattern matching lives here, behind `DiagnosticParser` and its table of
known shapes. A new server wording only needs a new `DiagnosticShape` entry.
Text that matches no shape raises `UnrecognizedErrorPattern`; the parser never guesses.
"""

import json
import re
from typing import Any, NamedTuple, Sequence

from .base import UnrecognizedErrorPattern

# pymongo appends the raw server reply to str(OperationFailure)
_FULL_ERROR_SUFFIX = ", full error: "


class DiagnosticShape(NamedTuple):
    name: str
    since: str
    pattern: re.Pattern


class ParsedDiagnostic(NamedTuple):
    shape: str
    namespace: str | None
    index_name: str
    key_body: str | None


KNOWN_SHAPES: tuple[DiagnosticShape, ...] = (
    DiagnosticShape(
        name="collection-index",
        since="3.4",
        pattern=re.compile(
            r"collection: (?P<namespace>.+?) index: (?P<index>.+?)"
            r"(?: collation: \{.*?\})?"
            r"(?: dup key: \{(?P<key>.*)\})?\s*$"
        ),
    ),
    DiagnosticShape(
        name="namespace-dollar-index",
        since="2.6",
        pattern=re.compile(
            r"index: (?P<namespace>.+?)\.\$(?P<index>.+?)"
            r"(?:\s+dup key: \{(?P<key>.*)\})?\s*$"
        ),
    ),
)


def clean_diagnostic(text: str) -> str:
    return text.split(_FULL_ERROR_SUFFIX, 1)[0].strip()


class DiagnosticParser:
    """
    Extract the index name (and the raw `dup key` body) from a diagnostic string.

    Shapes are tried in table order; the first match wins.
    """

    def __init__(self, shapes: Sequence[DiagnosticShape] = KNOWN_SHAPES):
        self.shapes = tuple(shapes)

    def parse(self, text: str | None) -> ParsedDiagnostic:
        cleaned = clean_diagnostic(text or "")
        for shape in self.shapes:
            match = shape.pattern.search(cleaned)
            if match is None:
                continue
            index_name = match.group("index").strip()
            if not index_name:
                continue
            return ParsedDiagnostic(
                shape=shape.name,
                namespace=match.group("namespace"),
                index_name=index_name,
                key_body=match.group("key"),
            )

        raise UnrecognizedErrorPattern(
            "Duplicate key diagnostic does not match any known message shape",
            diagnostic=cleaned[:200],
        )


DEFAULT_PARSER = DiagnosticParser()


# =================================================================================================================
# `dup key: { ... }` body
# =================================================================================================================

# One `key: value` pair. Keys are empty on servers before 3.4.
# Values are either a double-quoted string (with escapes) or raw text up to the next comma.
_PAIR = re.compile(
    r'\s*(?P<key>[^:"]*?)\s*:\s*'
    r'(?P<value>"(?:[^"\\]|\\.)*"|[^,]*?)\s*(?:,|$)'
)
_INT = re.compile(r"[+-]?\d+")


def coerce_value(raw: str) -> Any:
    """
    Best-effort typing of a value printed by the server.

    Quoted text becomes `str`, integers and floats become numbers; anything
    else (ObjectId('...'), new Date(...), nested documents) stays raw text.
    """
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        try:
            return json.loads(raw)
        except ValueError:
            return raw[1:-1]

    if _INT.fullmatch(raw):
        return int(raw)

    try:
        return float(raw)
    except ValueError:
        return raw


def parse_key_values(body: str | None) -> list[tuple[str | None, Any]]:
    """
    Split a `dup key` body into (key, value) pairs, keeping server order.

    `key` is None when the server omitted field names.
    """
    if not body or not body.strip():
        return []

    pairs: list[tuple[str | None, Any]] = []
    for match in _PAIR.finditer(body.strip()):
        key = match.group("key").strip() or None
        raw = match.group("value").strip()
        if key is None and not raw:
            continue
        pairs.append((key, coerce_value(raw)))
    return pairs
