"""Tests for word normalization and filler detection."""

import pytest

from orf_fluency.matching.normalizer import expand_contraction, is_filler_word, normalize


@pytest.mark.unit
class TestNormalize:
    """Test cases for normalize."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Hello,", "hello"),
            ("CAT!", "cat"),
            ("don't", "dont"),
            ("They're", "theyre"),
            ("you're", "youre"),
            ("She'll", "shell"),
            ("I'd", "id"),
            ("cat's", "cats"),
            ("it’s", "its"),
            ("10", "ten"),
            ("0", "zero"),
            ("12.", "twelve"),
            ("13", "13"),
            ("“quoted”", "quoted"),
        ],
    )
    def test_normalize_examples(self: "TestNormalize", raw: str, expected: str) -> None:
        """Test normalization of representative OCR and speech tokens."""
        assert normalize(raw) == expected, f"normalize({raw!r}) should be {expected!r}"

    @pytest.mark.parametrize("raw", [None, "", "   ", "!!!", "—"])
    def test_normalize_degenerate_input(self: "TestNormalize", raw: str | None) -> None:
        """Test that missing or punctuation-only tokens normalize to the empty string."""
        assert normalize(raw) == "", f"normalize({raw!r}) should be empty"

    @pytest.mark.parametrize(
        "raw", ["Hello,", "don't", "10", "it’s", "Mother's", "can't!", "", "wouldn't've"]
    )
    def test_normalize_is_idempotent(self: "TestNormalize", raw: str) -> None:
        """Test that normalizing twice equals normalizing once."""
        once = normalize(raw)
        assert normalize(once) == once, f"normalize is not idempotent on {raw!r}"

    def test_digit_and_word_compare_equal(self: "TestNormalize") -> None:
        """Test that digit tokens and their number words normalize identically."""
        assert normalize("10") == normalize("ten"), "'10' and 'ten' should compare equal"


@pytest.mark.unit
class TestExpandContraction:
    """Test cases for expand_contraction."""

    def test_only_first_matching_suffix_is_expanded(self: "TestExpandContraction") -> None:
        """Test that a single suffix is rewritten."""
        assert expand_contraction(word="can't") == "canot"
        assert expand_contraction(word="cat") == "cat", "Words without a suffix are unchanged"

    def test_stripped_words_are_unchanged(self: "TestExpandContraction") -> None:
        """Test that words without apostrophes keep their spelling."""
        assert expand_contraction(word="theyre") == "theyre"
        assert expand_contraction(word="there") == "there", "'re' alone is not a contraction"


@pytest.mark.unit
class TestIsFillerWord:
    """Test cases for is_filler_word."""

    @pytest.mark.parametrize("raw", ["um", "Um,", "UH", "er...", "like", "you know", "I mean"])
    def test_fillers(self: "TestIsFillerWord", raw: str) -> None:
        """Test that filler tokens are detected regardless of case and punctuation."""
        assert is_filler_word(raw), f"{raw!r} should be a filler"

    @pytest.mark.parametrize("raw", ["umbrella", "cat", "", None, "mean"])
    def test_non_fillers(self: "TestIsFillerWord", raw: str | None) -> None:
        """Test that ordinary and empty tokens are not fillers."""
        assert not is_filler_word(raw), f"{raw!r} should not be a filler"
