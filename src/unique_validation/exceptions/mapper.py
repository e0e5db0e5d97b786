import logging
from contextlib import asynccontextmanager
from typing import Any

from unique_validation.config.settings import get_settings
from unique_validation.indexes.registry import IndexDescriptor, IndexRegistry, collection_key
from unique_validation.schema.declaration import Schema
from unique_validation.schema.messages import FieldMessages, collect_field_messages

from .base import (
    DocumentValidationError,
    IndexNotFound,
    RegistryFetchFailure,
    TranslationError,
    UnresolvedValues,
    ValidatorError,
)
from .classifier import is_duplicate_key_error
from .decomposer import StructuredValues, TextualValues, decompose
from .diagnostics import DEFAULT_PARSER, DiagnosticParser

logger = logging.getLogger(__name__)


# -----------------------
# Synthesis
# -----------------------

def synthesize_validation_error(
    descriptor: IndexDescriptor,
    values: StructuredValues | TextualValues,
    messages: FieldMessages,
) -> DocumentValidationError:
    """
    Build one ValidatorError per field of the violated index.

    Fields whose value cannot be resolved are left out rather than reported
    with a made-up value.

    Raises:
        UnresolvedValues: not a single field of the index could be resolved.
    """
    resolved = values.resolve(descriptor.fields)
    if not resolved:
        raise UnresolvedValues(
            f"No value found for any field of index {descriptor.name!r}",
            index=descriptor.name,
        )

    errors: dict[str, ValidatorError] = {}
    for path in descriptor.fields:
        if path not in resolved:
            logger.debug(
                "mapper.value_unresolved",
                extra={"index": descriptor.name, "path": path, "strategy": values.strategy},
            )
            continue
        value = resolved[path]
        errors[path] = ValidatorError(path=path, value=value, message=messages.render(path, value))

    return DocumentValidationError(errors)


# -----------------------
# Translator
# -----------------------

class DuplicateKeyTranslator:
    """
    Turns duplicate-key write errors on collections using `schema` into
    DocumentValidationError.

    Creating the translator attaches it to the schema: custom messages are
    collected and the schema's `unique` options are normalized to booleans.
    """

    def __init__(
        self,
        schema: Schema,
        *,
        registry: IndexRegistry | None = None,
        default_message: str | None = None,
        parser: DiagnosticParser = DEFAULT_PARSER,
    ):
        self.schema = schema
        self.registry = registry if registry is not None else IndexRegistry()
        self.parser = parser
        self.messages = collect_field_messages(
            schema,
            default_message=default_message or get_settings().DEFAULT_MESSAGE,
        )

    async def translate(self, exc: BaseException, collection: Any, values: Any = None) -> BaseException:
        """
        Return the error the caller should see for a failed write.

        - not a duplicate-key error: `exc` itself, untouched
        - duplicate-key error: the synthesized DocumentValidationError
        - the translation itself failed: `exc` itself; the failure is logged
        """
        if not is_duplicate_key_error(exc):
            return exc

        try:
            decomposed = decompose(exc, values, parser=self.parser)
            descriptor = await self._descriptor(collection, decomposed.index_name)
            translated = synthesize_validation_error(descriptor, decomposed.values, self.messages)
        except TranslationError as failure:
            # Expected failure modes (unknown wording, dropped index, ...): the
            # original error still reaches the caller.
            logger.warning(
                "translator.translation_failed",
                extra={
                    "collection": collection_key(collection),
                    "failure": type(failure).__name__,
                    "index": failure.index,
                    "reason": failure.message,
                    "error_code": getattr(exc, "code", None),
                },
            )
            return exc
        except Exception:
            logger.exception(
                "translator.unexpected_error",
                extra={"collection": collection_key(collection), "error_code": getattr(exc, "code", None)},
            )
            return exc

        logger.info(
            "translator.translated",
            extra={
                "collection": collection_key(collection),
                "index": descriptor.name,
                "fields": list(translated.errors),
                "strategy": decomposed.values.strategy,
            },
        )
        return translated

    async def _descriptor(self, collection: Any, index_name: str) -> IndexDescriptor:
        try:
            indexes = await self.registry.get_indexes(collection)
        except Exception as exc:
            raise RegistryFetchFailure(
                f"Index introspection failed: {exc}",
                index=index_name,
                collection=collection_key(collection),
            ) from exc

        descriptor = indexes.get(index_name)
        if descriptor is None:
            raise IndexNotFound(
                f"Index {index_name!r} not found on {collection_key(collection)}",
                index=index_name,
                collection=collection_key(collection),
            )
        return descriptor


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def duplicate_error_handler(translator: DuplicateKeyTranslator, collection: Any, values: Any = None):
    """
    Usage:
        async with duplicate_error_handler(translator, collection, document):
            await collection.insert_one(document)

    Duplicate-key errors leave the block as DocumentValidationError (chained
    to the driver error); everything else is re-raised unchanged.
    """
    try:
        yield
    except Exception as exc:
        translated = await translator.translate(exc, collection, values)
        if translated is exc:
            raise
        raise translated from exc
