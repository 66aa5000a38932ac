"""Tests for cross-assessment pattern aggregation and macro insights."""

import pytest

from orf_fluency.models import AlignmentErrors, AlignmentResult, MisreadWord
from orf_fluency.rules.aggregation import (
    DEFAULT_INSIGHT,
    NO_PATTERN_DATA_INSIGHT,
    aggregate_error_patterns,
    generate_macro_insights,
)
from orf_fluency.rules.error_patterns import ErrorPatterns, Severity, analyze_error_patterns


def _patterns(*pairs: tuple[str, str], skipped: int = 0) -> ErrorPatterns:
    misread = tuple(
        MisreadWord(index=index, expected=expected, spoken=spoken)
        for index, (expected, spoken) in enumerate(pairs)
    )
    errors = AlignmentErrors(skipped_words=tuple(range(skipped)), misread_words=misread)
    return analyze_error_patterns(AlignmentResult(errors=errors))


GUESSING_READING: tuple[tuple[str, str], ...] = (("elephant", "egg"), ("morning", "mat"))


@pytest.mark.unit
class TestAggregateErrorPatterns:
    """Test cases for aggregate_error_patterns."""

    def test_sums_buckets(self: "TestAggregateErrorPatterns") -> None:
        """Test that bucket sizes and summaries are summed over assessments."""
        aggregate = aggregate_error_patterns(
            [_patterns(*GUESSING_READING), _patterns(*GUESSING_READING), None]
        )

        assert aggregate.total_assessments == 3
        assert aggregate.assessments_with_patterns == 2
        assert aggregate.first_letter_guessing == 4
        assert aggregate.final_sound_errors == 4
        assert aggregate.digraphs == 2
        assert aggregate.phonics_total == 6
        assert aggregate.speech_total == 0
        assert aggregate.primary_issues == {"Guessing based on first letter": 2}
        assert aggregate.severity_counts[Severity.MILD] == 2
        assert aggregate.severity_counts[Severity.EXCELLENT] == 0

    def test_json_shape(self: "TestAggregateErrorPatterns") -> None:
        """Test the serialized aggregate."""
        payload = aggregate_error_patterns([_patterns(("stop", "top"))]).to_json()

        assert payload["phonicsPatterns"] == {
            "initialSoundErrors": 1,
            "finalSoundErrors": 0,
            "consonantBlends": 1,
            "digraphs": 0,
        }
        assert payload["severityCounts"] == {
            "excellent": 0,
            "mild": 1,
            "moderate": 0,
            "significant": 0,
        }

    def test_empty(self: "TestAggregateErrorPatterns") -> None:
        """Test the aggregate of no assessments."""
        aggregate = aggregate_error_patterns([])

        assert aggregate.total_assessments == 0
        assert aggregate.assessments_with_patterns == 0


@pytest.mark.unit
class TestGenerateMacroInsights:
    """Test cases for generate_macro_insights."""

    @pytest.mark.parametrize("patterns", [[], [None, None]])
    def test_no_pattern_data(
        self: "TestGenerateMacroInsights", patterns: list[ErrorPatterns | None]
    ) -> None:
        """Test the placeholder when no assessment carries patterns."""
        insights = generate_macro_insights(aggregate_error_patterns(patterns))

        assert insights == [NO_PATTERN_DATA_INSIGHT]

    def test_guessing_reader(self: "TestGenerateMacroInsights") -> None:
        """Test the insights for a reader who guesses from the first letter."""
        aggregate = aggregate_error_patterns(
            [_patterns(*GUESSING_READING), _patterns(*GUESSING_READING)]
        )

        assert generate_macro_insights(aggregate) == [
            "Common phonics challenges: Final sounds (avg 3.0/assessment)",
            "Student relies on guessing strategies - focus on systematic phonics",
            'Persistent: "Guessing based on first letter" in 2 of 2 assessments',
        ]

    def test_strong_reader(self: "TestGenerateMacroInsights") -> None:
        """Test the excellent share, rounded half up."""
        aggregate = aggregate_error_patterns([ErrorPatterns(), ErrorPatterns(), None])

        assert generate_macro_insights(aggregate) == [
            "Strong performance - 67% excellent accuracy"
        ]

    def test_struggling_reader(self: "TestGenerateMacroInsights") -> None:
        """Test that both severity shares are reported."""
        aggregate = aggregate_error_patterns(
            [_patterns(skipped=10), _patterns(skipped=12), ErrorPatterns()]
        )

        assert generate_macro_insights(aggregate) == [
            "Strong performance - 33% excellent accuracy",
            "67% significant challenges - intensive support recommended",
        ]

    def test_speech_issues(self: "TestGenerateMacroInsights") -> None:
        """Test the speech alert at two hits per assessment."""
        aggregate = aggregate_error_patterns([_patterns(("three", "free"), ("this", "dis"))])

        insights = generate_macro_insights(aggregate)

        assert "Speech pattern issues detected - consider speech-language evaluation" in insights
        assert (
            'Persistent: "Speech sound difficulties detected" in 1 of 1 assessments' in insights
        )

    def test_default_insight(self: "TestGenerateMacroInsights") -> None:
        """Test the fallback when nothing stands out."""
        aggregate = aggregate_error_patterns([_patterns(skipped=1)])

        assert generate_macro_insights(aggregate) == [DEFAULT_INSIGHT]
