# src/unique_validation/core/logging/filters.py
"""
Logging filters

Operation ID filter and helpers for logging.

Every write that goes through a repository gets a short operation identifier.
The repository stores it in a `contextvars.ContextVar` for the duration of the
write, and `OperationIdFilter` copies it onto each `LogRecord`, so the lines
emitted by the classifier, the index registry and the translator for one
failing write can be grouped together.

Usage
-----
1. The filter is declared in the dictConfig built by `builder.make_dict_config`
   and attached to every handler:

     "filters": {"operation_id": {"()": OperationIdFilter}}

2. Code that starts a logical operation calls `set_operation_id(...)` and
   resets the returned token afterwards:

     token = set_operation_id(uuid.uuid4().hex)
     try:
         ...
     finally:
         reset_operation_id(token)

3. Formatters reference `%(operation_id)s`; the filter guarantees it exists
   (the sentinel "-" is used when no operation is active).

ContextVar (and not threading.local) is used because writes run as asyncio
tasks that share a thread; each task keeps its own value across awaits.
"""

import logging
from logging import LogRecord
import contextvars

_operation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation_id", default=None
)


def set_operation_id(operation_id: str | None):
    """
    Set the operation id in the current context and return the token to allow reset.
    """
    return _operation_id_ctx.set(operation_id)


def reset_operation_id(token) -> None:
    _operation_id_ctx.reset(token)


def get_operation_id() -> str | None:
    return _operation_id_ctx.get()


class OperationIdFilter(logging.Filter):
    """
    Guarantee that every LogRecord has an `operation_id` attribute.

    Priority: a value passed explicitly via `extra`, then the contextvar,
    then the sentinel "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.operation_id = (
            getattr(record, "operation_id", None) or get_operation_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """
    Mask record attributes whose name looks sensitive.

    Duplicate-key diagnostics carry user values; callers are expected to log
    field names, not values, but extras such as `password` are still scrubbed here.
    """

    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "ssn", "authorization"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
