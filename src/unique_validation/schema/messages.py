"""
Field -> duplicate message resolution.

Messages come from the schema's `unique` options. They are collected once,
when a translator is attached to the schema, and each string option is then
replaced with plain `True` so the index-building code only ever sees a boolean.
The collected messages stay on the schema for later translators.
"""

import logging
from typing import Any, Mapping

from unique_validation.config.settings import DEFAULT_UNIQUE_MESSAGE

from .declaration import Schema

logger = logging.getLogger(__name__)


def render_message(template: str, path: str, value: Any) -> str:
    """
    Substitute {PATH} and {VALUE}. Plain replacement: other braces in a
    custom message are left untouched.
    """
    return template.replace("{PATH}", path).replace("{VALUE}", str(value))


class FieldMessages:
    """Custom messages by field path, plus the template used for every other field."""

    def __init__(self, custom: Mapping[str, str] | None = None, default_message: str = DEFAULT_UNIQUE_MESSAGE):
        self.custom = dict(custom or {})
        self.default_message = default_message

    def template_for(self, path: str) -> str:
        return self.custom.get(path, self.default_message)

    def render(self, path: str, value: Any) -> str:
        return render_message(self.template_for(path), path, value)

    def __repr__(self) -> str:
        return f"<FieldMessages(custom={sorted(self.custom)!r})>"


def collect_field_messages(schema: Schema, default_message: str = DEFAULT_UNIQUE_MESSAGE) -> FieldMessages:
    """
    Collect custom duplicate messages from `schema` and normalize its options.

    1. Every tree field (nested paths dotted) with `unique="..."` records its
       message and becomes `unique=True`.
    2. Every declared index with `unique="..."` records its message for each of
       its keys (overriding a tree message for the same path) and becomes
       `unique=True`.

    An empty string is falsy and is left alone (the field is not unique).

    Collected messages are kept on the schema, so every translator built on the
    same schema gets them, including options declared after an earlier call.
    """
    custom: dict[str, str] = dict(schema._unique_messages)

    for path, spec in schema.iter_fields():
        if isinstance(spec.unique, str) and spec.unique:
            custom[path] = spec.unique
            spec.unique = True

    for index in schema.indexes:
        if isinstance(index.unique, str) and index.unique:
            for key in index.keys:
                custom[key] = index.unique
            index.unique = True

    schema._unique_messages = custom
    logger.debug("messages.collected", extra={"fields": sorted(custom)})
    return FieldMessages(custom, default_message=default_message)
