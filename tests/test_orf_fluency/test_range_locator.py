"""
Test suite for locating the spoken range of a passage.

Covers the forward sweep, the reduction over start offsets, the anchor
fallback and the public locate/select entry points.
"""

from collections.abc import Callable

import numpy as np
import pytest

from orf_fluency.alignment.range_locator import (
    build_similarity_matrix,
    find_best_alignment,
    find_range_by_anchors,
    locate_range,
    select_expected_words,
    sweep_from_offset,
)
from orf_fluency.models import OcrWord, RangeMatch, SpokenWord

OcrFactory = Callable[[str], list[OcrWord]]
SpokenFactory = Callable[..., list[SpokenWord]]


def _untimed(make_spoken: SpokenFactory, text: str) -> list[SpokenWord]:
    return make_spoken([(word, None, None) for word in text.split()])


@pytest.mark.unit
class TestSweepFromOffset:
    """Test cases for the per-offset forward DP."""

    def test_gap_is_cheaper_than_reset(self: "TestSweepFromOffset") -> None:
        """Test that an unmatched spoken word is dropped at the gap penalty."""
        matrix = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

        state = sweep_from_offset(0, matrix=matrix)

        assert state.score == pytest.approx(1.6), "1.0 - 0.4 gap + 1.0"
        assert state.match_count == 2
        assert state.first_ocr_index == 0
        assert state.last_ocr_index == 1

    def test_skipped_ocr_words_are_penalized(self: "TestSweepFromOffset") -> None:
        """Test the per-word skip penalty when jumping ahead in the passage."""
        matrix = np.array([[0.0, 0.0, 1.0]])

        state = sweep_from_offset(0, matrix=matrix)

        assert state.score == pytest.approx(0.4), "1.0 - 2 * 0.3"
        assert state.first_ocr_index == 2

    def test_below_threshold_never_matches(self: "TestSweepFromOffset") -> None:
        """Test that similarities under the threshold are not extensions."""
        matrix = np.array([[0.5, 0.54]])

        state = sweep_from_offset(0, matrix=matrix)

        assert state.match_count == 0
        assert state.first_ocr_index == -1

    def test_earliest_index_wins_ties(self: "TestSweepFromOffset") -> None:
        """Test that equal-scoring extensions keep the earliest OCR word."""
        matrix = np.array([[0.7, 1.0]])

        state = sweep_from_offset(0, matrix=matrix)

        assert state.last_ocr_index == 0, "0.7 at index 0 ties 1.0 - 0.3 at index 1"


@pytest.mark.unit
class TestFindBestAlignment:
    """Test cases for reducing sweeps to the best range."""

    def test_single_match_does_not_qualify(self: "TestFindBestAlignment") -> None:
        """Test that at least two matches are required."""
        matrix = np.array([[1.0, 0.0]])
        assert find_best_alignment(matrix) == RangeMatch.no_match()

    def test_best_range(self: "TestFindBestAlignment") -> None:
        """Test the range of the gap matrix."""
        matrix = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        assert find_best_alignment(matrix) == RangeMatch(
            first_index=0, last_index=1, matched_count=2
        )


@pytest.mark.unit
class TestFindRangeByAnchors:
    """Test cases for the anchor fallback."""

    def test_longest_run_wins_earliest_on_ties(self: "TestFindRangeByAnchors") -> None:
        """Test that anchors 2, 3, 0, 1 give the first run of two."""
        spoken = ["aaaa", "bbbb", "cccc", "dddd"]
        ocr = ["cccc", "dddd", "aaaa", "bbbb"]
        matrix = build_similarity_matrix(spoken, ocr)

        result = find_range_by_anchors(spoken, ocr, matrix)

        assert result == RangeMatch(first_index=2, last_index=3, matched_count=2)

    def test_short_spoken_words_are_not_anchors(self: "TestFindRangeByAnchors") -> None:
        """Test that words under four characters never anchor."""
        spoken = ["cat"]
        ocr = ["cat"]
        matrix = build_similarity_matrix(spoken, ocr)

        assert find_range_by_anchors(spoken, ocr, matrix) == RangeMatch.no_match()

    def test_frequent_ocr_words_are_not_anchors(self: "TestFindRangeByAnchors") -> None:
        """Test that OCR words occurring three times are ignored."""
        spoken = ["bird"]
        ocr = ["bird", "bird", "bird"]
        matrix = build_similarity_matrix(spoken, ocr)

        assert find_range_by_anchors(spoken, ocr, matrix) == RangeMatch.no_match()


@pytest.mark.unit
class TestLocateRange:
    """Test cases for locate_range."""

    def test_locates_passage_span(
        self: "TestLocateRange",
        passage_ocr_words: list[OcrWord],
        cat_sat_spoken: list[SpokenWord],
    ) -> None:
        """Test that the reading is located at 'cat sat on the mat'."""
        result = locate_range(cat_sat_spoken, passage_ocr_words)

        assert result == RangeMatch(first_index=5, last_index=9, matched_count=4)

    def test_locates_middle_of_sentence(
        self: "TestLocateRange", make_ocr: OcrFactory, make_spoken: SpokenFactory
    ) -> None:
        """Test a reading that starts mid-passage."""
        ocr_words = make_ocr("the quick brown fox jumps over the lazy dog")
        spoken_words = _untimed(make_spoken, "brown fox jumps over")

        result = locate_range(spoken_words, ocr_words)

        assert result == RangeMatch(first_index=2, last_index=5, matched_count=4)

    def test_anchor_fallback(
        self: "TestLocateRange", make_ocr: OcrFactory, make_spoken: SpokenFactory
    ) -> None:
        """Test that a single distinctive word still yields a range."""
        ocr_words = make_ocr("elephant walked slowly")
        spoken_words = _untimed(make_spoken, "elephant")

        result = locate_range(spoken_words, ocr_words)

        assert result == RangeMatch(first_index=0, last_index=0, matched_count=1)

    @pytest.mark.parametrize("speech", ["zzzz qqqq", "um uh", ""])
    def test_no_match(
        self: "TestLocateRange",
        make_ocr: OcrFactory,
        make_spoken: SpokenFactory,
        speech: str,
    ) -> None:
        """Test the sentinel for unrelated, filler-only and empty speech."""
        ocr_words = make_ocr("the cat sat")

        result = locate_range(_untimed(make_spoken, speech), ocr_words)

        assert result == RangeMatch.no_match()
        assert not result.is_match

    def test_empty_passage(
        self: "TestLocateRange", cat_sat_spoken: list[SpokenWord]
    ) -> None:
        """Test that an empty passage yields the sentinel."""
        assert locate_range(cat_sat_spoken, []) == RangeMatch.no_match()

    def test_result_independent_of_workers(
        self: "TestLocateRange",
        passage_ocr_words: list[OcrWord],
        cat_sat_spoken: list[SpokenWord],
    ) -> None:
        """Test that parallel sweeps reduce to the sequential answer."""
        sequential = locate_range(cat_sat_spoken, passage_ocr_words, max_workers=1)
        parallel = locate_range(cat_sat_spoken, passage_ocr_words, max_workers=4)

        assert parallel == sequential

    def test_range_bounds_within_passage(
        self: "TestLocateRange",
        passage_ocr_words: list[OcrWord],
        cat_sat_spoken: list[SpokenWord],
    ) -> None:
        """Test that a located range lies inside the passage."""
        result = locate_range(cat_sat_spoken, passage_ocr_words)

        assert 0 <= result.first_index <= result.last_index < len(passage_ocr_words)


@pytest.mark.unit
class TestSelectExpectedWords:
    """Test cases for select_expected_words."""

    def test_selects_inclusive_range(
        self: "TestSelectExpectedWords", passage_ocr_words: list[OcrWord]
    ) -> None:
        """Test that both bounds are included."""
        range_match = RangeMatch(first_index=5, last_index=9, matched_count=4)

        assert select_expected_words(passage_ocr_words, range_match) == [
            "cat",
            "sat",
            "on",
            "the",
            "mat",
        ]

    def test_sentinel_selects_nothing(
        self: "TestSelectExpectedWords", passage_ocr_words: list[OcrWord]
    ) -> None:
        """Test that the no-match sentinel selects no words."""
        assert select_expected_words(passage_ocr_words, RangeMatch.no_match()) == []
