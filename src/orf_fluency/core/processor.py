"""
Core processing logic for the ORF fluency engine.

This module runs one reading end to end: locate the spoken span in the OCR
words, align the speech against it, then derive error patterns and prosody
metrics from the alignment. Each call is independent and holds no state.
"""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from orf_fluency.alignment.range_locator import locate_range, select_expected_words
from orf_fluency.alignment.sequence_aligner import align
from orf_fluency.config import FluencyConfig, get_fluency_config
from orf_fluency.models import AlignmentResult, OcrWord, RangeMatch, SpokenWord
from orf_fluency.rules.error_patterns import ErrorPatterns, analyze_error_patterns
from orf_fluency.rules.prosody import ProsodyMetrics, score_prosody
from orf_fluency.utils.records import AssessmentRecord
from orf_pyutils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReadingAnalysis:
    """Outcome of one reading.

    Attributes:
        range_match: Located or caller-selected OCR range.
        expected_words: Raw texts of the OCR words inside the range.
        spoken_words: Speech the analysis ran on.
        recording_duration_seconds: Length of the recording.
        alignment: Word-by-word alignment, empty for word-count-only results.
        error_patterns: Pattern analysis, ``None`` for word-count-only results.
        prosody: Fluency metrics, ``None`` for word-count-only results.
        word_count_only: Nothing could be aligned; callers should report the
            number of selected words only.
    """

    range_match: RangeMatch
    expected_words: tuple[str, ...]
    spoken_words: tuple[SpokenWord, ...] = ()
    recording_duration_seconds: float = 0.0
    alignment: AlignmentResult = field(default_factory=AlignmentResult)
    error_patterns: ErrorPatterns | None = None
    prosody: ProsodyMetrics | None = None
    word_count_only: bool = False

    def to_record(self, *, assessment_id: str | None = None) -> AssessmentRecord:
        return AssessmentRecord(
            expected_words=self.expected_words,
            alignment=self.alignment,
            spoken_words=self.spoken_words,
            range_match=self.range_match,
            error_patterns=self.error_patterns,
            prosody=self.prosody,
            recording_duration_seconds=self.recording_duration_seconds,
            assessment_id=assessment_id,
            word_count_only=self.word_count_only,
        )

    def to_json(self) -> dict[str, Any]:
        return self.to_record().to_json()


def _derive_analytics(
    expected_words: Sequence[str],
    alignment: AlignmentResult,
    spoken_words: Sequence[SpokenWord],
    *,
    recording_duration_seconds: float,
    max_workers: int,
) -> tuple[ErrorPatterns, ProsodyMetrics]:
    """Run pattern analysis and prosody scoring, side by side when allowed."""

    def _prosody() -> ProsodyMetrics:
        return score_prosody(
            expected_words,
            alignment,
            recording_duration_seconds,
            spoken_words=spoken_words,
        )

    if max_workers <= 1:
        return analyze_error_patterns(alignment), _prosody()

    with ThreadPoolExecutor(max_workers=min(max_workers, 2)) as executor:
        patterns_future = executor.submit(
            logger.create_propagating_wrapper(func=analyze_error_patterns), alignment
        )
        prosody_future = executor.submit(logger.create_propagating_wrapper(func=_prosody))
        return patterns_future.result(), prosody_future.result()


def analyze_reading(
    ocr_words: Sequence[OcrWord],
    spoken_words: Sequence[SpokenWord],
    *,
    recording_duration_seconds: float,
    selected_range: RangeMatch | None = None,
    config: FluencyConfig | None = None,
    assessment_id: str | None = None,
) -> ReadingAnalysis:
    """
    Analyze one reading of a passage.

    Args:
        ocr_words: Passage words in document order.
        spoken_words: Recognized words in utterance order.
        recording_duration_seconds: Length of the recording, used when the
            speech carries no timing.
        selected_range: Caller-selected OCR range; located from the speech
            when omitted.
        config: Engine configuration; defaults to the environment.
        assessment_id: Identifier attached to every log line of this analysis.

    Returns:
        The analysis; ``word_count_only`` is set when no range is available
        or there is no speech to align.
    """
    config = config or get_fluency_config()

    with logger.correlation_context(description="analyze reading", assessment_id=assessment_id):
        if selected_range is None:
            range_match = locate_range(spoken_words, ocr_words, max_workers=config.range_workers)
        else:
            range_match = selected_range
        expected_words = tuple(select_expected_words(ocr_words, range_match))

        if not range_match.is_match or not spoken_words:
            logger.info(
                f"Word count only: range={range_match.to_json()} spoken={len(spoken_words)}"
            )
            return ReadingAnalysis(
                range_match=range_match,
                expected_words=expected_words,
                spoken_words=tuple(spoken_words),
                recording_duration_seconds=recording_duration_seconds,
                word_count_only=True,
            )

        alignment = align(
            expected_words, spoken_words, pause_gap_seconds=config.pause_gap_seconds
        )
        error_patterns, prosody = _derive_analytics(
            expected_words,
            alignment,
            spoken_words,
            recording_duration_seconds=recording_duration_seconds,
            max_workers=config.analysis_workers,
        )

        logger.info(
            f"Analyzed {len(expected_words)} words: accuracy={prosody.accuracy:.1f}% "
            f"wpm={prosody.wpm} score={prosody.prosody_score} ({prosody.prosody_grade})"
        )
        return ReadingAnalysis(
            range_match=range_match,
            expected_words=expected_words,
            spoken_words=tuple(spoken_words),
            recording_duration_seconds=recording_duration_seconds,
            alignment=alignment,
            error_patterns=error_patterns,
            prosody=prosody,
        )
