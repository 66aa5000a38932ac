"""
Test suite for error pattern analysis.

Alignments are built directly from misread pairs so each rule can be
exercised in isolation.
"""

import pytest

from orf_fluency.models import AlignmentErrors, AlignmentResult, MisreadWord
from orf_fluency.rules.error_patterns import (
    ErrorPatterns,
    PatternHit,
    Severity,
    analyze_error_patterns,
    severity_for,
)


def _alignment(*pairs: tuple[str, str], skipped: tuple[int, ...] = ()) -> AlignmentResult:
    misread = tuple(
        MisreadWord(index=index, expected=expected, spoken=spoken)
        for index, (expected, spoken) in enumerate(pairs)
    )
    return AlignmentResult(
        errors=AlignmentErrors(skipped_words=skipped, misread_words=misread)
    )


@pytest.mark.unit
class TestPatternRules:
    """Test cases for the individual pattern rules."""

    def test_r_to_w_substitution(self: "TestPatternRules") -> None:
        """Test 'rabbit' read as 'wabbit'."""
        patterns = analyze_error_patterns(_alignment(("rabbit", "wabbit")))

        assert len(patterns.speech.r_sound_issues) == 1
        assert len(patterns.phonics.initial_sound_errors) == 1
        assert patterns.phonics.final_sound_errors == ()
        assert patterns.visual_similarity == (), "No visually confusable letters involved"
        assert patterns.summary.severity == Severity.MILD

    def test_blend_reduction(self: "TestPatternRules") -> None:
        """Test 'stop' read as 'top'."""
        patterns = analyze_error_patterns(_alignment(("stop", "top")))

        assert [hit.feature for hit in patterns.phonics.consonant_blends] == ["st"]
        assert len(patterns.phonics.initial_sound_errors) == 1

    def test_first_letter_guessing(self: "TestPatternRules") -> None:
        """Test guesses that share only the first letter."""
        patterns = analyze_error_patterns(_alignment(("elephant", "egg"), ("morning", "mat")))

        guesses = patterns.reading_strategies.first_letter_guessing
        assert [(hit.expected, hit.actual) for hit in guesses] == [
            ("elephant", "egg"),
            ("morning", "mat"),
        ]
        assert [hit.feature for hit in patterns.phonics.digraphs] == ["ph"]
        assert len(patterns.phonics.final_sound_errors) == 2
        assert len(patterns.visual_similarity) == 1, "'n' in morning against 'm' in mat"
        assert "Guessing based on first letter" in patterns.summary.primary_issues
        assert "Encourage sounding out entire word" in patterns.summary.recommendations

    def test_th_substitution(self: "TestPatternRules") -> None:
        """Test that two TH substitutions raise the speech issue."""
        patterns = analyze_error_patterns(_alignment(("three", "free"), ("this", "dis")))

        assert len(patterns.speech.th_sound_issues) == 2
        assert patterns.summary.primary_issues == ("Speech sound difficulties detected",)
        assert patterns.summary.recommendations == ("Consider speech-language evaluation",)

    def test_inputs_are_normalized(self: "TestPatternRules") -> None:
        """Test that case and punctuation do not create spurious hits."""
        patterns = analyze_error_patterns(_alignment(("Stop!", "top")))

        assert len(patterns.phonics.consonant_blends) == 1
        assert patterns.phonics.final_sound_errors == ()

    def test_spoken_digits_are_compared_as_number_words(self: "TestPatternRules") -> None:
        """Test 'tree' read as '3' is judged against 'three', not the digit."""
        patterns = analyze_error_patterns(_alignment(("tree", "3")))

        assert patterns.phonics.initial_sound_errors == (), "'three' starts like 'tree'"
        assert [hit.feature for hit in patterns.phonics.consonant_blends] == ["tr"]
        assert patterns.phonics.consonant_blends[0].actual == "three"

    def test_empty_forms_are_ignored(self: "TestPatternRules") -> None:
        """Test that pairs normalizing to nothing are skipped."""
        patterns = analyze_error_patterns(_alignment(("...", "cat")))

        assert patterns.phonics.total == 0
        assert patterns.summary.severity == Severity.MILD, "The misread still counts as an error"

    def test_clean_reading(self: "TestPatternRules") -> None:
        """Test that an alignment without errors is excellent."""
        patterns = analyze_error_patterns(AlignmentResult.empty())

        assert patterns == ErrorPatterns()
        assert patterns.summary.severity == Severity.EXCELLENT


@pytest.mark.unit
class TestSummary:
    """Test cases for severity and summary thresholds."""

    @pytest.mark.parametrize(
        ("total", "expected"),
        [
            (0, Severity.EXCELLENT),
            (1, Severity.MILD),
            (4, Severity.MILD),
            (5, Severity.MODERATE),
            (9, Severity.MODERATE),
            (10, Severity.SIGNIFICANT),
        ],
    )
    def test_severity(self: "TestSummary", total: int, expected: Severity) -> None:
        """Test the severity bands."""
        assert severity_for(total) == expected

    def test_skips_count_towards_severity(self: "TestSummary") -> None:
        """Test that skipped words raise the severity."""
        patterns = analyze_error_patterns(_alignment(skipped=tuple(range(5))))

        assert patterns.summary.severity == Severity.MODERATE

    def test_initial_sound_issue(self: "TestSummary") -> None:
        """Test that three initial sound errors raise an issue."""
        patterns = analyze_error_patterns(
            _alignment(("cat", "bat"), ("dog", "log"), ("pig", "wig"))
        )

        assert patterns.summary.primary_issues[0] == "Consistent initial sound errors"
        assert patterns.summary.recommendations[0] == "Focus on initial consonant sounds"


@pytest.mark.unit
class TestErrorPatternsJson:
    """Test cases for persisting error patterns."""

    def test_camel_case_keys(self: "TestErrorPatternsJson") -> None:
        """Test the persisted field names."""
        payload = analyze_error_patterns(_alignment(("stop", "top"))).to_json()

        assert set(payload) == {
            "phonicsPatterns",
            "readingStrategies",
            "speechPatterns",
            "visualSimilarityErrors",
            "summary",
        }
        blend = payload["phonicsPatterns"]["consonantBlends"][0]
        assert blend == {
            "expected": "stop",
            "actual": "top",
            "pattern": "Consonant blend reduction",
            "feature": "st",
        }

    def test_reads_rule_named_feature(self: "TestErrorPatternsJson") -> None:
        """Test that hits persisted with a 'blend' key keep their feature."""
        hit = PatternHit.from_json(
            {
                "expected": "stop",
                "actual": "top",
                "pattern": "Consonant blend reduction",
                "blend": "st",
            }
        )

        assert hit.feature == "st"

    def test_round_trip(self: "TestErrorPatternsJson") -> None:
        """Test that a populated analysis survives to_json / from_json."""
        patterns = analyze_error_patterns(_alignment(("three", "free"), ("this", "dis")))

        assert ErrorPatterns.from_json(patterns.to_json()) == patterns
