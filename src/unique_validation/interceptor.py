"""
Write-path interception as a typed outcome.

`intercept()` runs one write and classifies what happened:

    PENDING -> SUCCESS            result passed through
            -> ORDINARY_FAILURE   original error passed through unchanged
            -> DUPLICATE_FAILURE  error replaced by the synthesized validation
                                  error (or kept, when translation failed)

The outcome does not care how the caller wants to be told. Adapters cover the
usual conventions:

    outcome.unwrap()            # return the result or raise the error
    outcome.notify(callback)    # callback(error, result)
    outcome.settle(future)      # resolve / reject an asyncio.Future
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

from unique_validation.exceptions.classifier import is_duplicate_key_error
from unique_validation.exceptions.mapper import DuplicateKeyTranslator

logger = logging.getLogger(__name__)

T = TypeVar("T")

WriteCallback = Callable[[BaseException | None, Any], Any]


class WriteState(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ORDINARY_FAILURE = "ordinary_failure"
    DUPLICATE_FAILURE = "duplicate_failure"


class WriteOutcome(Generic[T]):
    """Result of one intercepted write."""

    def __init__(
        self,
        state: WriteState = WriteState.PENDING,
        *,
        result: T | None = None,
        error: BaseException | None = None,
        original: BaseException | None = None,
    ):
        self.state = state
        self.result = result
        self.error = error
        # The driver exception, kept even when `error` is the translated one.
        self.original = original if original is not None else error

    @property
    def ok(self) -> bool:
        return self.state is WriteState.SUCCESS

    @property
    def translated(self) -> bool:
        return self.error is not None and self.error is not self.original

    def unwrap(self) -> T:
        if self.state is WriteState.PENDING:
            raise RuntimeError("write has not completed")
        if self.error is not None:
            if self.translated:
                raise self.error from self.original
            raise self.error
        return self.result  # type: ignore[return-value]

    def notify(self, callback: WriteCallback) -> Any:
        """Call `callback(error, result)`; error is None on success."""
        if self.error is not None:
            return callback(self.error, None)
        return callback(None, self.result)

    def settle(self, future: asyncio.Future) -> None:
        """Resolve or reject `future` (no-op when it was cancelled meanwhile)."""
        if future.done():
            return
        if self.error is not None:
            future.set_exception(self.error)
        else:
            future.set_result(self.result)

    def __repr__(self) -> str:
        return f"<WriteOutcome(state={self.state.value!r}, error={type(self.error).__name__ if self.error else None})>"


async def intercept(
    write: Callable[[], Awaitable[T]],
    translator: DuplicateKeyTranslator,
    collection: Any,
    values: Any = None,
) -> WriteOutcome[T]:
    """
    Run `write()` and return its outcome, translating duplicate-key failures.

    Args:
        write: zero-argument callable returning the write coroutine.
        translator: translator attached to the collection's schema.
        collection: the collection written to (used for index lookups).
        values: the document / update payload sent, used to recover typed values.

    Cancellation is not intercepted: CancelledError propagates to the caller.
    """
    try:
        result = await write()
    except Exception as exc:
        if not is_duplicate_key_error(exc):
            return WriteOutcome(WriteState.ORDINARY_FAILURE, error=exc)

        translated = await translator.translate(exc, collection, values)
        return WriteOutcome(WriteState.DUPLICATE_FAILURE, error=translated, original=exc)

    return WriteOutcome(WriteState.SUCCESS, result=result)
