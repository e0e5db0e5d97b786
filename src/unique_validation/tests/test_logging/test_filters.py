# src/unique_validation/tests/test_logging/test_filters.py
import logging

from unique_validation.core.logging.filters import (
    OperationIdFilter,
    RedactFilter,
    get_operation_id,
    reset_operation_id,
    set_operation_id,
)


def make_record():
    # name, level, pathname, lineno, msg, args, exc_info
    return logging.LogRecord("test", logging.INFO, __file__, 1, "hello %s", ("world",), None)


def test_operation_id_filter_defaults_to_dash():
    rec = make_record()
    # ensure no operation id set in context
    token = set_operation_id(None)
    try:
        f = OperationIdFilter()
        assert f.filter(rec) is True
        assert rec.operation_id == "-"  # fallback sentinel
    finally:
        reset_operation_id(token)


def test_operation_id_filter_uses_contextvar():
    rec = make_record()
    token = set_operation_id("abc-123")
    try:
        OperationIdFilter().filter(rec)
        assert rec.operation_id == "abc-123"
    finally:
        reset_operation_id(token)


def test_operation_id_filter_respects_record_extra():
    rec = make_record()
    rec.operation_id = "explicit"
    token = set_operation_id("context-id")
    try:
        OperationIdFilter().filter(rec)
        # record.operation_id should keep explicit value (respect extra)
        assert rec.operation_id == "explicit"
    finally:
        reset_operation_id(token)


def test_reset_operation_id_restores_previous_value():
    outer = set_operation_id("outer")
    inner = set_operation_id("inner")
    assert get_operation_id() == "inner"

    reset_operation_id(inner)
    assert get_operation_id() == "outer"

    reset_operation_id(outer)


def test_redact_filter_masks_sensitive_extras():
    rec = make_record()
    rec.password = "secret1234"
    rec.collection = "test.users"

    assert RedactFilter().filter(rec) is True

    assert rec.password == "***REDACTED***"
    assert rec.collection == "test.users"
