"""
mongo-unique-validation: turn MongoDB duplicate-key write errors into
per-field validation errors.

    from unique_validation import BaseRepository, DocumentValidationError, DuplicateKeyTranslator, Schema

    schema = Schema.model_validate({
        "tree": {"email": {"unique": "Email {VALUE} is already registered"}},
        "indexes": [{"keys": {"name": 1, "age": 1}, "unique": True}],
    })
    users = BaseRepository(db["users"], DuplicateKeyTranslator(schema))
    await users.ensure_indexes()

    try:
        await users.insert_one({"email": "a@b.c", "name": "Ann", "age": 30})
    except DocumentValidationError as exc:
        exc.errors["email"].message  # 'Email a@b.c is already registered'
"""

from .schema import Schema, FieldSpec, IndexSpec, FieldMessages, collect_field_messages
from .exceptions import (
    UniqueValidationError,
    ValidatorError,
    DocumentValidationError,
    TranslationError,
)
from .exceptions.classifier import is_duplicate_key_error
from .exceptions.mapper import DuplicateKeyTranslator, duplicate_error_handler, synthesize_validation_error
from .indexes import IndexDescriptor, IndexRegistry
from .interceptor import WriteOutcome, WriteState, intercept
from .repositories import BaseRepository

__all__ = [
    "Schema",
    "FieldSpec",
    "IndexSpec",
    "FieldMessages",
    "collect_field_messages",
    "UniqueValidationError",
    "ValidatorError",
    "DocumentValidationError",
    "TranslationError",
    "is_duplicate_key_error",
    "DuplicateKeyTranslator",
    "duplicate_error_handler",
    "synthesize_validation_error",
    "IndexDescriptor",
    "IndexRegistry",
    "WriteOutcome",
    "WriteState",
    "intercept",
    "BaseRepository",
]
