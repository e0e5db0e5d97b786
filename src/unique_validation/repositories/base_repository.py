"""
Base repository: the write path through which duplicate-key errors are translated.

Wraps a pymongo `AsyncCollection` and a `DuplicateKeyTranslator`. Every write
method sends the operation, and on failure either re-raises the driver error
unchanged or raises the synthesized `DocumentValidationError` in its place.

Each write method also accepts a `callback`. When given, the method does not
raise: it calls `callback(error, result)` and returns whatever the callback returns.

Model-specific repositories can subclass this and add their own queries.
"""

import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

from pydantic import BaseModel

from unique_validation.core.logging.filters import reset_operation_id, set_operation_id
from unique_validation.exceptions.mapper import DuplicateKeyTranslator
from unique_validation.interceptor import WriteCallback, WriteOutcome, WriteState, intercept

logger = logging.getLogger(__name__)

DocumentType = TypeVar("DocumentType", bound=BaseModel)

Document = Mapping[str, Any] | BaseModel


def to_document(document: Document) -> dict[str, Any]:
    """
    Dump pydantic models the way they are stored (by alias); copy mappings.

    The caller's mapping is never written to, so the driver cannot add the
    generated `_id` to it. Read it from the write result instead.
    """
    if isinstance(document, BaseModel):
        return document.model_dump(by_alias=True)
    return dict(document)


class BaseRepository(Generic[DocumentType]):
    """
    Generic repository over one collection.

    Type Parameters:
        DocumentType: the pydantic model stored in the collection (optional;
            plain dicts are accepted everywhere a document is expected).
    """

    def __init__(self, collection: Any, translator: DuplicateKeyTranslator):
        """
        Args:
            collection: a pymongo AsyncCollection (anything with the same async
                write methods, `index_information()` and `full_name`).
            translator: translator attached to the schema of this collection.
        """
        self.collection = collection
        self.translator = translator

    # =================================================================================================================
    # Index management
    # =================================================================================================================

    async def ensure_indexes(self) -> list[str]:
        """
        Create the unique indexes declared by the schema and forget any cached
        index metadata for the collection. Returns the index names.
        """
        models = self.translator.schema.index_models()
        if not models:
            return []
        names = await self.collection.create_indexes(models)
        self.translator.registry.clear(self.collection)
        logger.info(
            "repo.ensure_indexes.success",
            extra={"collection": self.collection.full_name, "indexes": list(names)},
        )
        return list(names)

    # =================================================================================================================
    # Write operations
    # =================================================================================================================

    async def insert_one(self, document: Document, *, callback: WriteCallback | None = None, **kwargs) -> Any:
        """
        Insert a copy of `document`. The generated `_id` is on the result
        (`inserted_id`), not on `document`.
        """
        payload = to_document(document)
        return await self._write(
            "insert_one",
            lambda: self.collection.insert_one(payload, **kwargs),
            payload,
            callback,
        )

    async def save(self, document: Document, *, callback: WriteCallback | None = None) -> Any:
        """
        Insert a new document, or replace the stored one when `_id` is present
        (upsert). Like insert_one, `document` itself is left unchanged.
        """
        payload = to_document(document)
        if "_id" not in payload:
            return await self.insert_one(payload, callback=callback)
        return await self.replace_one({"_id": payload["_id"]}, payload, upsert=True, callback=callback)

    async def replace_one(self, filter: Mapping[str, Any], replacement: Document, *,
                          callback: WriteCallback | None = None, **kwargs) -> Any:
        payload = to_document(replacement)
        return await self._write(
            "replace_one",
            lambda: self.collection.replace_one(filter, payload, **kwargs),
            payload,
            callback,
        )

    async def update_one(self, filter: Mapping[str, Any], update: Any, *,
                         callback: WriteCallback | None = None, **kwargs) -> Any:
        return await self._write(
            "update_one",
            lambda: self.collection.update_one(filter, update, **kwargs),
            update,
            callback,
        )

    async def find_one_and_update(self, filter: Mapping[str, Any], update: Any, *,
                                  callback: WriteCallback | None = None, **kwargs) -> Any:
        return await self._write(
            "find_one_and_update",
            lambda: self.collection.find_one_and_update(filter, update, **kwargs),
            update,
            callback,
        )

    # =================================================================================================================
    # Internals
    # =================================================================================================================

    async def _write(
        self,
        operation: str,
        write: Callable[[], Awaitable[Any]],
        values: Any,
        callback: WriteCallback | None,
    ) -> Any:
        token = set_operation_id(uuid.uuid4().hex[:12])
        start = time.perf_counter()
        try:
            logger.debug(
                "repo.write.start",
                extra={
                    "collection": self.collection.full_name,
                    "operation": operation,
                    # keys only, values may be sensitive
                    "provided_keys": sorted(str(key) for key in values) if isinstance(values, Mapping) else None,
                },
            )
            outcome = await intercept(write, self.translator, self.collection, values)
            self._log_outcome(operation, outcome, start)
        finally:
            reset_operation_id(token)

        if callback is not None:
            return outcome.notify(callback)
        return outcome.unwrap()

    def _log_outcome(self, operation: str, outcome: WriteOutcome, start: float) -> None:
        extra = {
            "collection": self.collection.full_name,
            "operation": operation,
            "state": outcome.state.value,
            "duration_ms": int((time.perf_counter() - start) * 1000),
        }
        if outcome.state is WriteState.SUCCESS:
            logger.debug("repo.write.success", extra=extra)
        elif outcome.state is WriteState.DUPLICATE_FAILURE:
            # Expected client-level scenario; no stack trace.
            logger.info("repo.write.duplicate", extra={**extra, "translated": outcome.translated})
        else:
            logger.warning(
                "repo.write.failed",
                extra={**extra, "error_type": type(outcome.error).__name__, "error_code": getattr(outcome.error, "code", None)},
            )
