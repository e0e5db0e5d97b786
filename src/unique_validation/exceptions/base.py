"""
Exceptions raised (or returned) by the duplicate-key translation pipeline.
"""

from typing import Any, Iterable, Mapping


class UniqueValidationError(Exception):
    """
    Base exception for the package.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field paths related to the error (e.g., ['email'])
    - error_code: canonical short code (e.g., 'duplicate', 'validation') used by clients
    """

    # Map canonical error_code -> default HTTP status.
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "validation": 422,
        # fallback: 400 for anything else
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.error_code = error_code

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> dict:
        """
        Return a JSON-friendly dict for HTTP responses:
            {"detail": "...", "code": "validation", "fields": ["email"]}
        """
        payload: dict[str, Any] = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


# =================================================================================================================
# Synthetic validation error (what callers receive)
# =================================================================================================================

class ValidatorError(UniqueValidationError):
    """
    Failure of a single field. Mirrors the per-path errors of a schema
    validation error so both can be handled by the same code.
    """

    def __init__(self, *, path: str, value: Any, message: str, kind: str = "duplicate"):
        super().__init__(message, fields=[path], error_code="duplicate")
        self.kind = kind
        self.path = path
        self.value = value

    @property
    def properties(self) -> dict[str, Any]:
        return {"type": self.kind, "path": self.path, "value": self.value, "message": self.message}

    def to_payload(self) -> dict:
        return {"kind": self.kind, "path": self.path, "value": self.value, "message": self.message}

    def __repr__(self) -> str:
        return f"<ValidatorError(kind={self.kind!r}, path={self.path!r}, value={self.value!r})>"


class DocumentValidationError(UniqueValidationError):
    """
    Field-keyed validation error built from a duplicate-key failure.

    `errors` maps each field path of the violated index to its ValidatorError.
    """

    name = "ValidationError"

    def __init__(self, errors: Mapping[str, ValidatorError] | None = None, message: str | None = None):
        self.errors: dict[str, ValidatorError] = dict(errors or {})
        if message is None:
            details = ", ".join(f"{path}: {err.message}" for path, err in self.errors.items())
            message = f"Validation failed: {details}" if details else "Validation failed"
        super().__init__(message, fields=list(self.errors), error_code="validation")

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["errors"] = {path: err.to_payload() for path, err in self.errors.items()}
        return payload


# =================================================================================================================
# Translation failures (internal; reported through logging, never raised to writers)
# =================================================================================================================

class TranslationError(UniqueValidationError):
    """Base for failures of the translation pipeline itself."""

    def __init__(self, message: str, *, index: str | None = None, collection: str | None = None):
        super().__init__(message, error_code="translation_failed")
        self.index = index
        self.collection = collection


class UnrecognizedErrorPattern(TranslationError):
    """The driver diagnostic text matched none of the known message shapes."""

    def __init__(self, message: str, *, diagnostic: str | None = None):
        super().__init__(message)
        self.diagnostic = diagnostic


class IndexNotFound(TranslationError):
    """The index named in the diagnostic is not known for the collection."""


class RegistryFetchFailure(TranslationError):
    """Index introspection on the collection failed."""


class UnresolvedValues(TranslationError):
    """None of the violated index's fields could be matched to a value."""


__all__ = [
    "UniqueValidationError",
    "ValidatorError",
    "DocumentValidationError",
    "TranslationError",
    "UnrecognizedErrorPattern",
    "IndexNotFound",
    "RegistryFetchFailure",
    "UnresolvedValues",
]
