"""Cross-assessment roll-up of error patterns and the insights derived from it."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from orf_fluency.rules.error_patterns import ErrorPatterns, Severity
from orf_fluency.rules.prosody import round_half_up

NO_PATTERN_DATA_INSIGHT: Final[str] = (
    "No detailed pattern data yet. Complete new assessments to see insights."
)
DEFAULT_INSIGHT: Final[str] = "Continue regular assessments to identify patterns."

MAX_PHONICS_CHALLENGES: Final[int] = 2
HITS_PER_ASSESSMENT_ALERT: Final[int] = 2
SEVERITY_SHARE_ALERT: Final[float] = 0.3
PERSISTENT_ISSUE_SHARE: Final[float] = 0.5


@dataclass(frozen=True)
class PatternAggregate:
    """Pattern totals over a reader's assessments.

    Attributes:
        total_assessments: All assessments, with or without pattern data.
        assessments_with_patterns: Assessments that carried error patterns.
        initial_sound_errors: Summed bucket sizes, likewise for the other counters.
        primary_issues: How many assessments reported each issue, in first-seen order.
        severity_counts: How many assessments fell in each severity.
    """

    total_assessments: int = 0
    assessments_with_patterns: int = 0
    initial_sound_errors: int = 0
    final_sound_errors: int = 0
    consonant_blends: int = 0
    digraphs: int = 0
    first_letter_guessing: int = 0
    r_sound_issues: int = 0
    th_sound_issues: int = 0
    primary_issues: dict[str, int] = field(default_factory=dict)
    severity_counts: dict[Severity, int] = field(
        default_factory=lambda: dict.fromkeys(Severity, 0)
    )

    @property
    def phonics_total(self) -> int:
        return (
            self.initial_sound_errors
            + self.final_sound_errors
            + self.consonant_blends
            + self.digraphs
        )

    @property
    def speech_total(self) -> int:
        return self.r_sound_issues + self.th_sound_issues

    def to_json(self) -> dict[str, Any]:
        return {
            "totalAssessments": self.total_assessments,
            "assessmentsWithPatterns": self.assessments_with_patterns,
            "phonicsPatterns": {
                "initialSoundErrors": self.initial_sound_errors,
                "finalSoundErrors": self.final_sound_errors,
                "consonantBlends": self.consonant_blends,
                "digraphs": self.digraphs,
            },
            "readingStrategies": {"firstLetterGuessing": self.first_letter_guessing},
            "speechPatterns": {
                "rSoundIssues": self.r_sound_issues,
                "thSoundIssues": self.th_sound_issues,
            },
            "primaryIssues": dict(self.primary_issues),
            "severityCounts": {severity.value: n for severity, n in self.severity_counts.items()},
        }


def aggregate_error_patterns(patterns: Sequence[ErrorPatterns | None]) -> PatternAggregate:
    """Sum pattern buckets over assessments; ``None`` marks one without pattern data."""
    carrying = [p for p in patterns if p is not None]
    issues: Counter[str] = Counter()
    severities: Counter[Severity] = Counter()
    for p in carrying:
        issues.update(p.summary.primary_issues)
        severities[p.summary.severity] += 1

    return PatternAggregate(
        total_assessments=len(patterns),
        assessments_with_patterns=len(carrying),
        initial_sound_errors=sum(len(p.phonics.initial_sound_errors) for p in carrying),
        final_sound_errors=sum(len(p.phonics.final_sound_errors) for p in carrying),
        consonant_blends=sum(len(p.phonics.consonant_blends) for p in carrying),
        digraphs=sum(len(p.phonics.digraphs) for p in carrying),
        first_letter_guessing=sum(
            len(p.reading_strategies.first_letter_guessing) for p in carrying
        ),
        r_sound_issues=sum(len(p.speech.r_sound_issues) for p in carrying),
        th_sound_issues=sum(len(p.speech.th_sound_issues) for p in carrying),
        primary_issues=dict(issues),
        severity_counts={severity: severities[severity] for severity in Severity},
    )


def _percent_of(count: int, total: int) -> int:
    return int(round_half_up(count / total * 100))


def generate_macro_insights(aggregate: PatternAggregate) -> list[str]:
    """Educator-facing observations about a reader's recurring patterns.

    Args:
        aggregate: Output of ``aggregate_error_patterns``.

    Returns:
        Insight strings; a single placeholder when nothing stands out.
    """
    with_patterns = aggregate.assessments_with_patterns
    if with_patterns == 0:
        return [NO_PATTERN_DATA_INSIGHT]

    insights: list[str] = []

    if aggregate.phonics_total > 0:
        average = aggregate.phonics_total / with_patterns
        challenges = sorted(
            (
                (name, count)
                for name, count in (
                    ("Initial sounds", aggregate.initial_sound_errors),
                    ("Final sounds", aggregate.final_sound_errors),
                    ("Consonant blends", aggregate.consonant_blends),
                )
                if count > 0
            ),
            key=lambda item: item[1],
            reverse=True,
        )[:MAX_PHONICS_CHALLENGES]
        if challenges:
            names = ", ".join(name for name, _ in challenges)
            insights.append(f"Common phonics challenges: {names} (avg {average:.1f}/assessment)")

    if aggregate.first_letter_guessing >= with_patterns * HITS_PER_ASSESSMENT_ALERT:
        insights.append("Student relies on guessing strategies - focus on systematic phonics")

    if aggregate.speech_total >= with_patterns * HITS_PER_ASSESSMENT_ALERT:
        insights.append("Speech pattern issues detected - consider speech-language evaluation")

    total = aggregate.total_assessments
    excellent = aggregate.severity_counts.get(Severity.EXCELLENT, 0)
    if excellent > total * SEVERITY_SHARE_ALERT:
        insights.append(
            f"Strong performance - {_percent_of(excellent, total)}% excellent accuracy"
        )

    significant = aggregate.severity_counts.get(Severity.SIGNIFICANT, 0)
    if significant > total * SEVERITY_SHARE_ALERT:
        insights.append(
            f"{_percent_of(significant, total)}% significant challenges"
            " - intensive support recommended"
        )

    if aggregate.primary_issues:
        top_issue, top_count = Counter(aggregate.primary_issues).most_common(1)[0]
        if top_count >= with_patterns * PERSISTENT_ISSUE_SHARE:
            insights.append(
                f'Persistent: "{top_issue}" in {top_count} of {with_patterns} assessments'
            )

    return insights or [DEFAULT_INSIGHT]
