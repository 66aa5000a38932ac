"""Accuracy, reading rate and composite fluency score for one reading."""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from orf_fluency.constants import (
    ACCURACY_BANDS,
    ACCURACY_FLOOR_POINTS,
    ACCURACY_WEIGHT,
    DEVELOPING_GRADE_MIN,
    ERROR_RATE_BANDS,
    ERROR_RATE_FLOOR_POINTS,
    EXCELLENT_GRADE_MIN,
    FLUENCY_WEIGHT,
    PROFICIENT_GRADE_MIN,
    RATE_BANDS,
    RATE_FLOOR_POINTS,
    RATE_WEIGHT,
)
from orf_fluency.models import AlignmentResult, SpokenWord
from orf_pyutils.jsonable import Jsonable
from orf_pyutils.logging import get_logger

logger = get_logger(__name__)


class Grade(StrEnum):
    EXCELLENT = "Excellent"
    PROFICIENT = "Proficient"
    DEVELOPING = "Developing"
    NEEDS_SUPPORT = "Needs Support"


@dataclass(frozen=True)
class ProsodyMetrics(Jsonable):
    """Fluency metrics for one reading.

    Attributes:
        total_words: Number of expected words.
        words_read: Correct plus misread words.
        accuracy: Percentage of expected words read correctly.
        wpm: Words read per minute.
        prosody_score: Composite score in ``[1.5, 4.0]``, one decimal.
        prosody_grade: Grade band of ``prosody_score``.
        reading_time_seconds: Elapsed speaking time used for ``wpm``.
    """

    total_words: int
    words_read: int
    accuracy: float
    wpm: int
    prosody_score: float
    prosody_grade: Grade
    reading_time_seconds: float

    def to_json(self) -> dict[str, Any]:
        return {
            "totalWords": self.total_words,
            "wordsRead": self.words_read,
            "accuracy": self.accuracy,
            "wpm": self.wpm,
            "prosodyScore": self.prosody_score,
            "prosodyGrade": self.prosody_grade.value,
            "readingTimeSeconds": self.reading_time_seconds,
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "ProsodyMetrics":
        return cls(
            total_words=int(json.get("totalWords", 0)),
            words_read=int(json.get("wordsRead", 0)),
            accuracy=float(json.get("accuracy", 0.0)),
            wpm=int(json.get("wpm", 0)),
            prosody_score=float(json.get("prosodyScore", 0.0)),
            prosody_grade=Grade(json.get("prosodyGrade") or Grade.NEEDS_SUPPORT),
            # Older records call it readingTime
            reading_time_seconds=float(
                json.get("readingTimeSeconds", json.get("readingTime", 0.0))
            ),
        )


def round_half_up(value: float, *, decimals: int = 0) -> float:
    """Round with halves going up, unlike Python's banker's ``round``."""
    scale = 10**decimals
    return math.floor(value * scale + 0.5) / scale


def accuracy_points(accuracy: float) -> float:
    for minimum, points in ACCURACY_BANDS:
        if accuracy >= minimum:
            return points
    return ACCURACY_FLOOR_POINTS


def rate_points(wpm: int) -> float:
    for low, high, points in RATE_BANDS:
        if low <= wpm <= high:
            return points
    return RATE_FLOOR_POINTS


def error_rate_points(error_rate: float) -> float:
    for maximum, points in ERROR_RATE_BANDS:
        if error_rate <= maximum:
            return points
    return ERROR_RATE_FLOOR_POINTS


def grade_for(score: float) -> Grade:
    if score >= EXCELLENT_GRADE_MIN:
        return Grade.EXCELLENT
    if score >= PROFICIENT_GRADE_MIN:
        return Grade.PROFICIENT
    if score >= DEVELOPING_GRADE_MIN:
        return Grade.DEVELOPING
    return Grade.NEEDS_SUPPORT


def _timed_span(starts_and_ends: Sequence[tuple[float | None, float | None]]) -> float | None:
    if not starts_and_ends:
        return None
    first_start = starts_and_ends[0][0]
    last_end = starts_and_ends[-1][1]
    if first_start is None or last_end is None:
        return None
    return last_end - first_start


def reading_time_seconds(
    alignment: AlignmentResult,
    recording_duration_seconds: float,
    *,
    spoken_words: Sequence[SpokenWord] | None = None,
) -> float:
    """Elapsed speaking time, falling back to the recording duration.

    Uses the first start and last end of ``spoken_words`` when supplied,
    otherwise of the aligned entries that carry a spoken word.
    """
    if spoken_words is not None:
        span = _timed_span([(w.start_time, w.end_time) for w in spoken_words])
    else:
        span = _timed_span(
            [(e.start_time, e.end_time) for e in alignment.aligned if e.spoken_word is not None]
        )
    if span is None:
        return max(recording_duration_seconds or 0.0, 0.0)
    return span


def score_prosody(
    expected_words: Sequence[str],
    alignment: AlignmentResult,
    recording_duration_seconds: float,
    *,
    spoken_words: Sequence[SpokenWord] | None = None,
) -> ProsodyMetrics:
    """Compute accuracy, words per minute and the composite fluency score.

    The composite blends three banded sub-scores: accuracy (0.4), reading
    rate (0.3) and the rate of skipped, misread and hesitation errors per
    expected word (0.3).

    Args:
        expected_words: The expected passage span.
        alignment: Alignment of ``expected_words`` against the speech.
        recording_duration_seconds: Fallback reading time.
        spoken_words: Raw speech, used for reading time when supplied.

    Returns:
        The metrics; all-zero rates for an empty span or zero reading time.
    """
    total_words = len(expected_words)
    words_read = alignment.correct_count + alignment.misread_count

    reading_time = reading_time_seconds(
        alignment, recording_duration_seconds, spoken_words=spoken_words
    )
    wpm = int(round_half_up(words_read / (reading_time / 60))) if reading_time > 0 else 0
    accuracy = 100 * alignment.correct_count / total_words if total_words else 0.0

    errors = alignment.errors
    error_count = len(errors.skipped_words) + len(errors.misread_words) + len(errors.hesitations)
    error_rate = error_count / total_words if total_words else 0.0

    composite = (
        accuracy_points(accuracy) * ACCURACY_WEIGHT
        + rate_points(wpm) * RATE_WEIGHT
        + error_rate_points(error_rate) * FLUENCY_WEIGHT
    )
    prosody_score = round_half_up(composite, decimals=1)

    if reading_time <= 0:
        logger.info("No reading time available, words per minute reported as 0")

    return ProsodyMetrics(
        total_words=total_words,
        words_read=words_read,
        accuracy=accuracy,
        wpm=wpm,
        prosody_score=prosody_score,
        prosody_grade=grade_for(prosody_score),
        reading_time_seconds=reading_time,
    )
