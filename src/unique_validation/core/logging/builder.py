# src/unique_validation/core/logging/builder.py
"""
Logging builder: create and apply a dictConfig logging configuration.

  - make_dict_config(settings) builds the mapping (pure, easy to test)
  - setup_logging(settings) creates LOG_DIR when needed and applies it

Handler selection:

| LOG_TO_STDOUT | LOG_DIR set | Active handlers                 |
| ------------- | ----------- | ------------------------------- |
| true          | any         | console + error_console         |
| false         | no          | console + error_console         |
| false         | yes         | console + file + error_file     |

The driver's own loggers ("pymongo", "pymongo.command", ...) are kept at
WARNING unless ENABLE_DRIVER_LOGGING is set: command logging includes
documents, which may contain user data.
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from unique_validation.utils.logging import get_project_name
from unique_validation.config.settings import Settings

from .formatters import JsonFormatter, ColorFormatter
from .filters import OperationIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping using the provided settings.

    The returned mapping includes:
      - formatters: "standard" (color in text mode) and "json"
      - filters: "operation_id", "redact"
      - handlers: console, plus (file, error_file) or error_console
      - loggers: root, "unique_validation", "pymongo"
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(operation_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(),
        },
    }

    filters = {
        "operation_id": {"()": OperationIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            # package loggers propagate to root; only the level is pinned here
            "unique_validation": {
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            "pymongo": {
                "level": "DEBUG" if settings.ENABLE_DRIVER_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Initialize logging from settings.

    Creates LOG_DIR when file handlers are in use, applies the dictConfig and
    attaches an OperationIdFilter to the root logger so `%(operation_id)s`
    never raises KeyError, even for handlers added later by other code.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    logging.getLogger().addFilter(OperationIdFilter())
