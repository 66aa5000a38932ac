"""
Error pattern analysis over the misread words of one alignment.

Each misread pair is tested independently against phonics, reading-strategy,
speech-articulation and visual-similarity rules, so one word may land in
several buckets. The summary turns bucket sizes into educator-facing issues
and recommendations plus an overall severity.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final

from orf_fluency.constants import (
    BLEND_ISSUE_THRESHOLD,
    CONSONANT_BLENDS,
    DIGRAPHS,
    GUESSING_ISSUE_THRESHOLD,
    GUESSING_MIN_LENGTH,
    GUESSING_SIMILARITY_CEILING,
    INITIAL_SOUND_ISSUE_THRESHOLD,
    MILD_ERROR_LIMIT,
    MODERATE_ERROR_LIMIT,
    R_SOUND_ISSUE_THRESHOLD,
    TH_SOUND_ISSUE_THRESHOLD,
    TH_SUBSTITUTES,
    VISUAL_CONFUSION_PAIRS,
)
from orf_fluency.matching.normalizer import normalize
from orf_fluency.models import AlignmentResult
from orf_pyutils.jsonable import Jsonable
from orf_pyutils.logging import get_logger
from orf_pyutils.word_distance import levenshtein_ratio

logger = get_logger(__name__)

INITIAL_SOUND_PATTERN: Final[str] = "Initial consonant substitution"
FINAL_SOUND_PATTERN: Final[str] = "Final sound error"
BLEND_PATTERN: Final[str] = "Consonant blend reduction"
DIGRAPH_PATTERN: Final[str] = "Digraph error"
GUESSING_PATTERN: Final[str] = "First letter guessing"
R_SOUND_PATTERN: Final[str] = "R to W substitution"
TH_SOUND_PATTERN: Final[str] = "TH substitution"
VISUAL_PATTERN: Final[str] = "Visual similarity confusion"


class Severity(StrEnum):
    EXCELLENT = "excellent"
    MILD = "mild"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


@dataclass(frozen=True)
class PatternHit:
    """One misread pair matched by a pattern rule.

    Attributes:
        expected: Normalized expected word.
        actual: Normalized spoken word.
        pattern: Human readable rule name.
        feature: Blend or digraph involved, for rules that name one.
    """

    expected: str
    actual: str
    pattern: str
    feature: str | None = None

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "expected": self.expected,
            "actual": self.actual,
            "pattern": self.pattern,
        }
        if self.feature is not None:
            payload["feature"] = self.feature
        return payload

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "PatternHit":
        # Older records name the feature after the rule
        feature = json.get("feature") or json.get("blend") or json.get("digraph")
        return cls(
            expected=str(json.get("expected") or ""),
            actual=str(json.get("actual") or ""),
            pattern=str(json.get("pattern") or ""),
            feature=feature,
        )


def _hits_to_json(hits: tuple[PatternHit, ...]) -> list[dict[str, Any]]:
    return [hit.to_json() for hit in hits]


def _hits_from_json(json: dict[str, Any], key: str) -> tuple[PatternHit, ...]:
    return tuple(PatternHit.from_json(hit) for hit in json.get(key) or [])


@dataclass(frozen=True)
class PhonicsPatterns:
    initial_sound_errors: tuple[PatternHit, ...] = ()
    final_sound_errors: tuple[PatternHit, ...] = ()
    consonant_blends: tuple[PatternHit, ...] = ()
    digraphs: tuple[PatternHit, ...] = ()

    @property
    def total(self) -> int:
        return (
            len(self.initial_sound_errors)
            + len(self.final_sound_errors)
            + len(self.consonant_blends)
            + len(self.digraphs)
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "initialSoundErrors": _hits_to_json(self.initial_sound_errors),
            "finalSoundErrors": _hits_to_json(self.final_sound_errors),
            "consonantBlends": _hits_to_json(self.consonant_blends),
            "digraphs": _hits_to_json(self.digraphs),
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "PhonicsPatterns":
        return cls(
            initial_sound_errors=_hits_from_json(json, "initialSoundErrors"),
            final_sound_errors=_hits_from_json(json, "finalSoundErrors"),
            consonant_blends=_hits_from_json(json, "consonantBlends"),
            digraphs=_hits_from_json(json, "digraphs"),
        )


@dataclass(frozen=True)
class ReadingStrategies:
    first_letter_guessing: tuple[PatternHit, ...] = ()

    def to_json(self) -> dict[str, Any]:
        return {"firstLetterGuessing": _hits_to_json(self.first_letter_guessing)}

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "ReadingStrategies":
        return cls(first_letter_guessing=_hits_from_json(json, "firstLetterGuessing"))


@dataclass(frozen=True)
class SpeechPatterns:
    r_sound_issues: tuple[PatternHit, ...] = ()
    th_sound_issues: tuple[PatternHit, ...] = ()

    @property
    def total(self) -> int:
        return len(self.r_sound_issues) + len(self.th_sound_issues)

    def to_json(self) -> dict[str, Any]:
        return {
            "rSoundIssues": _hits_to_json(self.r_sound_issues),
            "thSoundIssues": _hits_to_json(self.th_sound_issues),
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "SpeechPatterns":
        return cls(
            r_sound_issues=_hits_from_json(json, "rSoundIssues"),
            th_sound_issues=_hits_from_json(json, "thSoundIssues"),
        )


@dataclass(frozen=True)
class PatternSummary:
    primary_issues: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    severity: Severity = Severity.EXCELLENT

    def to_json(self) -> dict[str, Any]:
        return {
            "primaryIssues": list(self.primary_issues),
            "recommendations": list(self.recommendations),
            "severity": self.severity.value,
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "PatternSummary":
        return cls(
            primary_issues=tuple(json.get("primaryIssues") or []),
            recommendations=tuple(json.get("recommendations") or []),
            severity=Severity(json.get("severity") or Severity.MILD),
        )


@dataclass(frozen=True)
class ErrorPatterns(Jsonable):
    """Pattern buckets and summary for one assessment.

    Attributes:
        phonics: Initial / final sound, blend and digraph errors.
        reading_strategies: First-letter guessing.
        speech: R and TH articulation issues.
        visual_similarity: Confusions between visually similar letters.
        summary: Primary issues, recommendations and severity.
    """

    phonics: PhonicsPatterns = field(default_factory=PhonicsPatterns)
    reading_strategies: ReadingStrategies = field(default_factory=ReadingStrategies)
    speech: SpeechPatterns = field(default_factory=SpeechPatterns)
    visual_similarity: tuple[PatternHit, ...] = ()
    summary: PatternSummary = field(default_factory=PatternSummary)

    def to_json(self) -> dict[str, Any]:
        return {
            "phonicsPatterns": self.phonics.to_json(),
            "readingStrategies": self.reading_strategies.to_json(),
            "speechPatterns": self.speech.to_json(),
            "visualSimilarityErrors": _hits_to_json(self.visual_similarity),
            "summary": self.summary.to_json(),
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "ErrorPatterns":
        return cls(
            phonics=PhonicsPatterns.from_json(json.get("phonicsPatterns") or {}),
            reading_strategies=ReadingStrategies.from_json(json.get("readingStrategies") or {}),
            speech=SpeechPatterns.from_json(json.get("speechPatterns") or {}),
            visual_similarity=_hits_from_json(json, "visualSimilarityErrors"),
            summary=PatternSummary.from_json(json.get("summary") or {}),
        )


@dataclass
class _PatternCollector:
    initial_sound: list[PatternHit] = field(default_factory=list)
    final_sound: list[PatternHit] = field(default_factory=list)
    blends: list[PatternHit] = field(default_factory=list)
    digraphs: list[PatternHit] = field(default_factory=list)
    guessing: list[PatternHit] = field(default_factory=list)
    r_sound: list[PatternHit] = field(default_factory=list)
    th_sound: list[PatternHit] = field(default_factory=list)
    visual: list[PatternHit] = field(default_factory=list)


def _phonics_rule(expected: str, actual: str, collector: _PatternCollector) -> None:
    if expected[0] != actual[0]:
        collector.initial_sound.append(PatternHit(expected, actual, INITIAL_SOUND_PATTERN))
    if expected[-1] != actual[-1]:
        collector.final_sound.append(PatternHit(expected, actual, FINAL_SOUND_PATTERN))
    for blend in CONSONANT_BLENDS:
        if blend in expected and blend not in actual:
            collector.blends.append(PatternHit(expected, actual, BLEND_PATTERN, blend))
    for digraph in DIGRAPHS:
        if digraph in expected and digraph not in actual:
            collector.digraphs.append(PatternHit(expected, actual, DIGRAPH_PATTERN, digraph))


def _reading_strategy_rule(expected: str, actual: str, collector: _PatternCollector) -> None:
    if (
        expected[0] == actual[0]
        and len(expected) > GUESSING_MIN_LENGTH
        and len(actual) > GUESSING_MIN_LENGTH
        and levenshtein_ratio(expected, s2=actual) < GUESSING_SIMILARITY_CEILING
    ):
        collector.guessing.append(PatternHit(expected, actual, GUESSING_PATTERN))


def _speech_rule(expected: str, actual: str, collector: _PatternCollector) -> None:
    if "r" in expected and "w" in actual:
        collector.r_sound.append(PatternHit(expected, actual, R_SOUND_PATTERN))
    if "th" in expected and any(sound in actual for sound in TH_SUBSTITUTES):
        collector.th_sound.append(PatternHit(expected, actual, TH_SOUND_PATTERN))


def _visual_rule(expected: str, actual: str, collector: _PatternCollector) -> None:
    if any(
        (first in expected and second in actual) or (second in expected and first in actual)
        for first, second in VISUAL_CONFUSION_PAIRS
    ):
        collector.visual.append(PatternHit(expected, actual, VISUAL_PATTERN))


PATTERN_RULES: Final[tuple[Callable[[str, str, _PatternCollector], None], ...]] = (
    _phonics_rule,
    _reading_strategy_rule,
    _speech_rule,
    _visual_rule,
)


def severity_for(total_errors: int) -> Severity:
    if total_errors == 0:
        return Severity.EXCELLENT
    if total_errors < MILD_ERROR_LIMIT:
        return Severity.MILD
    if total_errors < MODERATE_ERROR_LIMIT:
        return Severity.MODERATE
    return Severity.SIGNIFICANT


def summarize_patterns(collector: _PatternCollector, *, total_errors: int) -> PatternSummary:
    """Derive issues and recommendations from bucket sizes.

    Args:
        collector: Hits gathered for one assessment.
        total_errors: Skipped, misread and substituted word count.

    Returns:
        The summary, with one recommendation per issue.
    """
    issues: list[str] = []
    recommendations: list[str] = []

    if len(collector.initial_sound) >= INITIAL_SOUND_ISSUE_THRESHOLD:
        issues.append("Consistent initial sound errors")
        recommendations.append("Focus on initial consonant sounds")
    if len(collector.blends) >= BLEND_ISSUE_THRESHOLD:
        issues.append("Difficulty with consonant blends")
        recommendations.append("Practice blending sounds together")
    if len(collector.guessing) >= GUESSING_ISSUE_THRESHOLD:
        issues.append("Guessing based on first letter")
        recommendations.append("Encourage sounding out entire word")
    if (
        len(collector.r_sound) >= R_SOUND_ISSUE_THRESHOLD
        or len(collector.th_sound) >= TH_SOUND_ISSUE_THRESHOLD
    ):
        issues.append("Speech sound difficulties detected")
        recommendations.append("Consider speech-language evaluation")

    return PatternSummary(
        primary_issues=tuple(issues),
        recommendations=tuple(recommendations),
        severity=severity_for(total_errors),
    )


def analyze_error_patterns(alignment: AlignmentResult) -> ErrorPatterns:
    """Classify the misread words of ``alignment`` into pattern buckets.

    Expected and spoken forms are normalized before the rules run; pairs with
    an empty form are ignored.
    """
    collector = _PatternCollector()
    for misread in alignment.errors.misread_words:
        expected = normalize(misread.expected)
        actual = normalize(misread.spoken)
        if not expected or not actual:
            continue
        for rule in PATTERN_RULES:
            rule(expected, actual, collector)

    summary = summarize_patterns(collector, total_errors=alignment.errors.total_errors)
    logger.debug(
        f"Error patterns: severity={summary.severity} issues={list(summary.primary_issues)}"
    )
    return ErrorPatterns(
        phonics=PhonicsPatterns(
            initial_sound_errors=tuple(collector.initial_sound),
            final_sound_errors=tuple(collector.final_sound),
            consonant_blends=tuple(collector.blends),
            digraphs=tuple(collector.digraphs),
        ),
        reading_strategies=ReadingStrategies(first_letter_guessing=tuple(collector.guessing)),
        speech=SpeechPatterns(
            r_sound_issues=tuple(collector.r_sound), th_sound_issues=tuple(collector.th_sound)
        ),
        visual_similarity=tuple(collector.visual),
        summary=summary,
    )
