# unique_validation/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py          # public errors (DocumentValidationError, ValidatorError) + translation failures
# │   ├── classifier.py    # is this driver error a duplicate-key error?
# │   ├── diagnostics.py   # versioned parser for the server's duplicate-key message
# │   ├── decomposer.py    # index name + value source out of a duplicate-key error
# │   └── mapper.py        # synthesis, DuplicateKeyTranslator, duplicate_error_handler
#
# Only base.py is re-exported here: mapper.py depends on the index registry,
# which itself imports from this package.

from .base import (
    UniqueValidationError,
    ValidatorError,
    DocumentValidationError,
    TranslationError,
    UnrecognizedErrorPattern,
    IndexNotFound,
    RegistryFetchFailure,
    UnresolvedValues,
)

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
