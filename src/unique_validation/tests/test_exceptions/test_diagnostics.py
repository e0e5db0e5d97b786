import re

import pytest

from unique_validation.exceptions.base import UnrecognizedErrorPattern
from unique_validation.exceptions.diagnostics import (
    DEFAULT_PARSER,
    DiagnosticParser,
    DiagnosticShape,
    KNOWN_SHAPES,
    clean_diagnostic,
    coerce_value,
    parse_key_values,
)
from unique_validation.tests.test_fixtures.collection_fixtures import make_duplicate_error


class TestDiagnosticParser:

    def test_modern_wording(self):
        """
        Behavior:
                - Parse the 3.4+ diagnostic: namespace, index name and raw `dup key` body.
        """
        parsed = DEFAULT_PARSER.parse(
            'E11000 duplicate key error collection: test.users index: email_1 dup key: { email: "a@b.c" }'
        )

        assert parsed.shape == "collection-index"
        assert parsed.namespace == "test.users"
        assert parsed.index_name == "email_1"
        assert parse_key_values(parsed.key_body) == [("email", "a@b.c")]

    def test_modern_wording_with_collation(self):
        parsed = DEFAULT_PARSER.parse(
            "E11000 duplicate key error collection: test.users index: name_1 "
            'collation: { locale: "en", strength: 2 } dup key: { name: "ann" }'
        )

        assert parsed.index_name == "name_1"
        assert parse_key_values(parsed.key_body) == [("name", "ann")]

    def test_index_name_with_spaces(self):
        """
        Behavior:
                - Index names are not restricted to identifier characters; a name with
                        spaces is captured in full.
        """
        parsed = DEFAULT_PARSER.parse(
            "E11000 duplicate key error collection: test.users index: my unique index dup key: { a: 1 }"
        )

        assert parsed.index_name == "my unique index"

    @pytest.mark.parametrize(
        ("text", "shape"),
        [
            (
                'E11000 duplicate key error collection: test.my users index: email_1 dup key: { email: "a@b.c" }',
                "collection-index",
            ),
            (
                'E11000 duplicate key error index: test.my users.$email_1  dup key: { : "a@b.c" }',
                "namespace-dollar-index",
            ),
        ],
    )
    def test_collection_name_with_spaces(self, text, shape):
        """
        Behavior:
                - Collection names may contain spaces; the namespace is captured in full
                        and the index name is still found, in both wordings.
        """
        parsed = DEFAULT_PARSER.parse(text)

        assert parsed.shape == shape
        assert parsed.namespace == "test.my users"
        assert parsed.index_name == "email_1"

    def test_modern_wording_without_dup_key_clause(self):
        parsed = DEFAULT_PARSER.parse("E11000 duplicate key error collection: test.users index: email_1")

        assert parsed.index_name == "email_1"
        assert parsed.key_body is None

    def test_legacy_wording(self):
        """
        Behavior:
                - Parse the pre-3.4 diagnostic, where the index follows `<namespace>.$`
                        and key names are omitted from the `dup key` body.
        """
        parsed = DEFAULT_PARSER.parse(
            'E11000 duplicate key error index: test.users.$name_1_age_1  dup key: { : "Ann", : 30 }'
        )

        assert parsed.shape == "namespace-dollar-index"
        assert parsed.namespace == "test.users"
        assert parsed.index_name == "name_1_age_1"
        assert parse_key_values(parsed.key_body) == [(None, "Ann"), (None, 30)]

    def test_driver_full_error_suffix_is_ignored(self):
        """
        Behavior:
                - str(DuplicateKeyError) ends with ", full error: {...}"; parsing the
                        exception text gives the same result as parsing `errmsg`.
        """
        exc = make_duplicate_error(
            'E11000 duplicate key error collection: test.users index: email_1 dup key: { email: "a@b.c" }'
        )

        parsed = DEFAULT_PARSER.parse(str(exc))

        assert parsed.index_name == "email_1"
        assert parse_key_values(parsed.key_body) == [("email", "a@b.c")]

    @pytest.mark.parametrize("text", ["E11000 duplicate key error", "", None, "index: no-dollar-here"])
    def test_unrecognized_text_raises(self, text):
        with pytest.raises(UnrecognizedErrorPattern) as exc_info:
            DEFAULT_PARSER.parse(text)

        assert exc_info.value.error_code == "translation_failed"

    def test_additional_shape(self):
        """
        Behavior:
                - A parser built with an extra shape understands a new server wording
                        without changes elsewhere.
        """
        future = DiagnosticShape(
            name="future",
            since="99.0",
            pattern=re.compile(r"duplicate on (?P<namespace>\S+) via (?P<index>\S+)(?: key \{(?P<key>.*)\})?$"),
        )
        parser = DiagnosticParser(shapes=(*KNOWN_SHAPES, future))

        parsed = parser.parse("E11000 duplicate on test.users via email_1 key { email: \"x\" }")

        assert parsed.shape == "future"
        assert parsed.index_name == "email_1"


def test_clean_diagnostic_strips_suffix():
    assert clean_diagnostic("E11000 text , full error: {'code': 11000}") == "E11000 text"
    assert clean_diagnostic("  plain  ") == "plain"


class TestCoerceValue:

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('"a@b.c"', "a@b.c"),
            ('"say \\"hi\\""', 'say "hi"'),
            ("42", 42),
            ("-3", -3),
            ("1.5", 1.5),
            ("ObjectId('5f43a1b2c3d4e5f6a7b8c9d0')", "ObjectId('5f43a1b2c3d4e5f6a7b8c9d0')"),
            ("true", "true"),
        ],
    )
    def test_coercion(self, raw, expected):
        value = coerce_value(raw)

        assert value == expected
        assert type(value) is type(expected)


class TestParseKeyValues:

    def test_quoted_values_may_contain_commas(self):
        assert parse_key_values(' name: "Doe, Jane", age: 3 ') == [("name", "Doe, Jane"), ("age", 3)]

    def test_dotted_and_spaced_keys(self):
        assert parse_key_values(' address.city: "Oslo", first name: "Ann" ') == [
            ("address.city", "Oslo"),
            ("first name", "Ann"),
        ]

    def test_raw_values_are_kept(self):
        assert parse_key_values(" _id: ObjectId('5f43a1b2c3d4e5f6a7b8c9d0') ") == [
            ("_id", "ObjectId('5f43a1b2c3d4e5f6a7b8c9d0')")
        ]

    @pytest.mark.parametrize("body", [None, "", "   "])
    def test_empty_body(self, body):
        assert parse_key_values(body) == []
