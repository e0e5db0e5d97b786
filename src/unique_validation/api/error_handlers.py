# src/unique_validation/api/error_handlers.py
"""
FastAPI exception handlers that render the package's errors as HTTP responses.

How to use:
    from fastapi import FastAPI
    from unique_validation.api.error_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

A route whose repository write hits a unique index then answers 422 with:

    {
      "detail": "Validation failed: email: Path `email` (a@b.c) is not unique.",
      "code": "validation",
      "fields": ["email"],
      "errors": {"email": {"kind": "duplicate", "path": "email", "value": "a@b.c",
                           "message": "Path `email` (a@b.c) is not unique."}}
    }
"""

import logging

from bson import ObjectId
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from unique_validation.exceptions.base import DocumentValidationError, UniqueValidationError

logger = logging.getLogger(__name__)

# Duplicate values can be any BSON type; the ones pydantic does not know are stringified.
_CUSTOM_ENCODERS = {ObjectId: str}


def _render(exc: UniqueValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status(),
        content=jsonable_encoder(exc.to_payload(), custom_encoder=_CUSTOM_ENCODERS),
    )


async def validation_error_handler(request: Request, exc: DocumentValidationError) -> JSONResponse:
    """
    422 Unprocessable Entity for duplicate values.
    """
    # Field names only; the duplicated values may be personal data.
    logger.info("DocumentValidationError for %s %s: fields=%s", request.method, request.url.path, exc.fields)
    return _render(exc)


async def unique_validation_error_handler(request: Request, exc: UniqueValidationError) -> JSONResponse:
    """
    Fallback for the other package errors (status from the error code, 400 by default).
    """
    logger.warning("UniqueValidationError for %s %s: %s", request.method, request.url.path, str(exc))
    return _render(exc)


# Call this from your app factory
def register_exception_handlers(app) -> None:
    app.add_exception_handler(DocumentValidationError, validation_error_handler)
    app.add_exception_handler(UniqueValidationError, unique_validation_error_handler)
