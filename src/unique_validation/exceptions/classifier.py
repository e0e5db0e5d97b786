import logging
from enum import IntEnum
from typing import Any, Mapping

from pymongo.errors import BulkWriteError, OperationFailure

logger = logging.getLogger(__name__)

# =================================================================================================================
# MongoDB error code mapping
# =================================================================================================================

# https://www.mongodb.com/docs/manual/reference/error-codes/
class MongoErrorCodes(IntEnum):
    DUPLICATE_KEY = 11000
    # Legacy servers reported duplicates caused by updates with a separate code.
    DUPLICATE_KEY_ON_UPDATE = 11001


DUPLICATE_KEY_CODES = frozenset(MongoErrorCodes)


# =================================================================================================================
# Classifier
# =================================================================================================================

def _single_bulk_write_error(exc: BulkWriteError) -> Mapping[str, Any] | None:
    details = exc.details or {}
    write_errors = details.get("writeErrors") or []
    if len(write_errors) != 1:
        return None
    return write_errors[0]


def unwrap_write_error(exc: BaseException) -> tuple[int | None, Mapping[str, Any]]:
    """
    Return (code, details) of the write failure carried by `exc`.

    Plain OperationFailure subclasses (WriteError, DuplicateKeyError) carry them
    directly. A BulkWriteError is unwrapped only when it holds exactly one write
    error; anything else yields (None, {}).
    """
    if isinstance(exc, BulkWriteError):
        write_error = _single_bulk_write_error(exc)
        if write_error is None:
            return None, {}
        return write_error.get("code"), write_error

    if isinstance(exc, OperationFailure):
        return exc.code, exc.details or {}

    return None, {}


def is_duplicate_key_error(exc: BaseException | None) -> bool:
    """
    True when `exc` is a driver write failure whose code is a duplicate-key code.

    Runs after every failed write, so it only inspects attributes already in memory.
    """
    if not isinstance(exc, OperationFailure):
        return False

    code, _ = unwrap_write_error(exc)
    if code not in DUPLICATE_KEY_CODES:
        return False

    logger.debug("classifier.duplicate_key", extra={"code": code, "error_type": type(exc).__name__})
    return True
