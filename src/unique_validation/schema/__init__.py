from .declaration import Schema, FieldSpec, IndexSpec
from .messages import FieldMessages, collect_field_messages, render_message

__all__ = [
    "Schema",
    "FieldSpec",
    "IndexSpec",
    "FieldMessages",
    "collect_field_messages",
    "render_message",
]
