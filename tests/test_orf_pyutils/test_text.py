import pytest

from orf_pyutils.errors import PayloadValidationError, UnsupportedSchemaVersionError
from orf_pyutils.jsonable import dump_json, load_json
from orf_pyutils.text import clean, strip_non_alphanumeric


@pytest.mark.unit
class TestClean:
    """Test cases for clean."""

    def test_none_and_empty(self: "TestClean") -> None:
        """Test that missing text cleans to the empty string."""
        assert clean(text=None) == ""
        assert clean(text="") == ""

    def test_apostrophes_folded(self: "TestClean") -> None:
        """Test that typographic apostrophes become ASCII."""
        assert clean(text="It’s") == "it's"
        assert clean(text="don`t") == "don't"

    def test_whitespace_collapsed(self: "TestClean") -> None:
        """Test lower-casing and whitespace collapsing."""
        assert clean(text="  You \t Know ") == "you know"

    def test_compatibility_forms(self: "TestClean") -> None:
        """Test NFKC folding of full-width characters."""
        assert clean(text="ＣＡＴ") == "cat"


@pytest.mark.unit
class TestStripNonAlphanumeric:
    """Test cases for strip_non_alphanumeric."""

    def test_keeps_letters_and_digits(self: "TestStripNonAlphanumeric") -> None:
        """Test that punctuation is dropped and any script is kept."""
        assert strip_non_alphanumeric(text="can't!") == "cant"
        assert strip_non_alphanumeric(text="café-42") == "café42"
        assert strip_non_alphanumeric(text="—") == ""


@pytest.mark.unit
class TestJsonHelpers:
    """Test cases for the orjson helpers and error types."""

    def test_dump_plain_value(self: "TestJsonHelpers") -> None:
        """Test compact and indented output of plain values."""
        assert dump_json({"a": 1}) == b'{"a":1}'
        assert dump_json({"a": 1}, indent=True) == b'{\n  "a": 1\n}'

    def test_load(self: "TestJsonHelpers") -> None:
        """Test parsing of bytes and str documents."""
        assert load_json(b'{"a": [1, 2]}') == {"a": [1, 2]}
        assert load_json("null") is None

    def test_payload_error_is_not_retryable(self: "TestJsonHelpers") -> None:
        """Test that payload errors carry their source and cause."""
        cause = ValueError("bad")
        error = PayloadValidationError(exception=cause, source="ocr")
        assert not error.retryable
        assert error.source == "ocr"
        assert error.details is cause
        assert "bad" in str(error)

    def test_schema_version_message(self: "TestJsonHelpers") -> None:
        """Test that the supported versions are listed."""
        error = UnsupportedSchemaVersionError(version=7, supported_versions=(1, 2))
        assert str(error) == "Unsupported record schema version 7 (supported are 1, 2)"
