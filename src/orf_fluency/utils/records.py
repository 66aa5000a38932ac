"""
Versioned assessment records.

An assessment record bundles everything needed to re-render one reading
without re-running the engine. Records are written with
``schemaVersion = 2``: hesitations and repetitions are detailed lists and
skipped words are expected indices.

Version 1 records (no ``schemaVersion``) persisted hesitation and repetition
*counts*, skipped words as *texts*, aligned entries with ``index`` /
``expected`` / ``spoken`` keys and ``"1.5s"`` time strings. ``load_record``
normalizes them into the version 2 shape before anything else sees them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

import orjson

from orf_fluency.constants import LEGACY_RECORD_SCHEMA_VERSION, RECORD_SCHEMA_VERSION
from orf_fluency.models import (
    AlignmentResult,
    HesitationType,
    RangeMatch,
    SpokenWord,
    WordStatus,
)
from orf_fluency.rules.error_patterns import ErrorPatterns
from orf_fluency.rules.prosody import ProsodyMetrics, grade_for
from orf_fluency.utils.payloads import parse_duration_seconds
from orf_pyutils.errors import PayloadValidationError, UnsupportedSchemaVersionError
from orf_pyutils.jsonable import Jsonable, dump_json, load_json
from orf_pyutils.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_SCHEMA_VERSIONS: Final[tuple[int, ...]] = (
    LEGACY_RECORD_SCHEMA_VERSION,
    RECORD_SCHEMA_VERSION,
)


@dataclass(frozen=True)
class AssessmentRecord(Jsonable):
    """Persisted outcome of one reading assessment.

    Attributes:
        expected_words: The passage span the reading was scored against.
        alignment: Word-by-word alignment.
        spoken_words: Raw speech, kept for transcript playback.
        range_match: Located range, ``None`` when the span was chosen by hand
            or the record predates range location.
        error_patterns: Pattern analysis, ``None`` for word-count-only results.
        prosody: Fluency metrics, ``None`` for word-count-only results.
        recording_duration_seconds: Length of the recording.
        assessment_id: Caller-supplied identifier.
        word_count_only: No speech could be matched; only the word count is meaningful.
    """

    expected_words: tuple[str, ...]
    alignment: AlignmentResult = field(default_factory=AlignmentResult)
    spoken_words: tuple[SpokenWord, ...] = ()
    range_match: RangeMatch | None = None
    error_patterns: ErrorPatterns | None = None
    prosody: ProsodyMetrics | None = None
    recording_duration_seconds: float = 0.0
    assessment_id: str | None = None
    word_count_only: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "schemaVersion": RECORD_SCHEMA_VERSION,
            "assessmentId": self.assessment_id,
            "expectedWords": list(self.expected_words),
            "range": self.range_match.to_json() if self.range_match else None,
            "spokenWords": [word.to_json() for word in self.spoken_words],
            "recordingDurationSeconds": self.recording_duration_seconds,
            "wordCountOnly": self.word_count_only,
            "alignment": self.alignment.to_json(),
            "errorPatterns": self.error_patterns.to_json() if self.error_patterns else None,
            "prosodyMetrics": self.prosody.to_json() if self.prosody else None,
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "AssessmentRecord":
        range_json = json.get("range")
        patterns_json = json.get("errorPatterns")
        prosody_json = json.get("prosodyMetrics")
        return cls(
            expected_words=tuple(str(word) for word in json.get("expectedWords") or []),
            alignment=AlignmentResult.from_json(json.get("alignment") or {}),
            spoken_words=tuple(SpokenWord.from_json(w) for w in json.get("spokenWords") or []),
            range_match=RangeMatch.from_json(range_json) if range_json else None,
            error_patterns=ErrorPatterns.from_json(patterns_json) if patterns_json else None,
            prosody=ProsodyMetrics.from_json(prosody_json) if prosody_json else None,
            recording_duration_seconds=float(json.get("recordingDurationSeconds") or 0.0),
            assessment_id=json.get("assessmentId"),
            word_count_only=bool(json.get("wordCountOnly", False)),
        )


def _legacy_aligned_entry(entry: dict[str, Any], position: int) -> dict[str, Any]:
    return {
        "expectedIndex": int(entry.get("index", position)),
        "expectedWord": entry.get("expected") or "",
        "spokenWord": entry.get("spoken"),
        "status": entry.get("status") or WordStatus.SKIPPED.value,
        "confidence": entry.get("confidence"),
        "startTime": parse_duration_seconds(entry.get("startTime")),
        "endTime": parse_duration_seconds(entry.get("endTime")),
    }


def _legacy_skipped_indices(texts: list[Any], expected_words: list[str]) -> list[int]:
    """Map skipped texts back to expected indices, consuming each index once."""
    used: set[int] = set()
    indices: list[int] = []
    for text in texts:
        if isinstance(text, int):
            indices.append(text)
            continue
        for index, word in enumerate(expected_words):
            if index not in used and word == text:
                used.add(index)
                indices.append(index)
                break
    return sorted(indices)


def _legacy_list_or_count(value: Any) -> tuple[list[dict[str, Any]], int]:
    """Split a field that held either detailed entries or a bare count."""
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)], 0
    if isinstance(value, int | float) and not isinstance(value, bool):
        return [], int(value)
    return [], 0


def _legacy_errors(
    errors: dict[str, Any], aligned: list[dict[str, Any]] | None, expected_words: list[str]
) -> dict[str, Any]:
    if aligned is not None:
        skipped = [e["expectedIndex"] for e in aligned if e["status"] == WordStatus.SKIPPED]
        misread = [
            {
                "index": e["expectedIndex"],
                "expected": e["expectedWord"],
                "spoken": e["spokenWord"] or "",
            }
            for e in aligned
            if e["status"] == WordStatus.MISREAD
        ]
    else:
        skipped = _legacy_skipped_indices(list(errors.get("skippedWords") or []), expected_words)
        misread = list(errors.get("misreadWords") or [])

    hesitations, hesitation_count = _legacy_list_or_count(errors.get("hesitations"))
    repetitions, repetition_count = _legacy_list_or_count(errors.get("repeatedWords"))
    hesitations += [
        {"spokenIndex": None, "type": HesitationType.UNSPECIFIED.value, "word": ""}
    ] * hesitation_count
    repetitions += [{"spokenIndex": None, "word": ""}] * repetition_count

    return {
        "skippedWords": skipped,
        "misreadWords": misread,
        "substitutedWords": list(errors.get("substitutedWords") or []),
        "hesitations": hesitations,
        "repeatedWords": repetitions,
    }


def _legacy_prosody(
    record: dict[str, Any], total_words: int, words_read: int
) -> dict[str, Any] | None:
    if record.get("prosodyMetrics"):
        return dict(record["prosodyMetrics"])
    if "prosodyScore" not in record and "wpm" not in record:
        return None
    score = float(record.get("prosodyScore") or 0.0)
    return {
        "totalWords": total_words,
        "wordsRead": words_read,
        "accuracy": float(record.get("accuracy") or 0.0),
        "wpm": int(record.get("wpm") or 0),
        "prosodyScore": score,
        "prosodyGrade": grade_for(score).value,
        "readingTimeSeconds": 0.0,
    }


def normalize_legacy_record(record: dict[str, Any]) -> dict[str, Any]:
    """Rewrite a version 1 record into the version 2 JSON shape.

    Hesitation and repetition counts become ``unspecified`` entries without a
    spoken index; skipped and misread lists are rebuilt from ``aligned`` when
    the record carries it.

    Args:
        record: Decoded version 1 record.

    Returns:
        Decoded version 2 record.
    """
    expected_words = [str(w) for w in record.get("expectedWords") or record.get("wordList") or []]
    raw_aligned = record.get("aligned")
    aligned = (
        [_legacy_aligned_entry(entry, position) for position, entry in enumerate(raw_aligned)]
        if isinstance(raw_aligned, list)
        else None
    )
    errors = _legacy_errors(record.get("errors") or {}, aligned, expected_words)

    if aligned is not None:
        correct_count = sum(1 for e in aligned if e["status"] == WordStatus.CORRECT)
    else:
        correct_count = int(record.get("correctCount") or 0)

    spoken_words = [
        {
            "word": word.get("word") or "",
            "startTime": parse_duration_seconds(word.get("startTime")),
            "endTime": parse_duration_seconds(word.get("endTime")),
            "confidence": word.get("confidence", 1.0),
        }
        for word in record.get("spokenWords") or []
    ]

    words_read = correct_count + len(errors["misreadWords"])
    return {
        "schemaVersion": RECORD_SCHEMA_VERSION,
        "assessmentId": record.get("assessmentId") or record.get("id"),
        "expectedWords": expected_words,
        "range": None,
        "spokenWords": spoken_words,
        "recordingDurationSeconds": 0.0,
        "wordCountOnly": aligned is None and not record.get("errorPatterns"),
        "alignment": {
            "aligned": aligned or [],
            "correctCount": correct_count,
            "errors": errors,
        },
        "errorPatterns": record.get("errorPatterns"),
        "prosodyMetrics": _legacy_prosody(record, len(expected_words), words_read),
    }


def record_from_json(json: dict[str, Any]) -> AssessmentRecord:
    """Build a record from decoded JSON of any supported schema version.

    Raises:
        UnsupportedSchemaVersionError: If the record's version is unknown.
        PayloadValidationError: If the record is malformed.
    """
    version = json.get("schemaVersion", LEGACY_RECORD_SCHEMA_VERSION)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaVersionError(
            version=version, supported_versions=SUPPORTED_SCHEMA_VERSIONS
        )

    try:
        if version == LEGACY_RECORD_SCHEMA_VERSION:
            logger.debug("Normalizing legacy assessment record")
            json = normalize_legacy_record(json)
        return AssessmentRecord.from_json(json)
    except (KeyError, TypeError, ValueError) as e:
        raise PayloadValidationError(exception=e, source="record") from e


def load_record(data: bytes | str) -> AssessmentRecord:
    """Decode an assessment record written by ``dump_record`` or a version 1 writer.

    Raises:
        PayloadValidationError: If the document is not a JSON object or is malformed.
        UnsupportedSchemaVersionError: If the record's version is unknown.
    """
    try:
        json = load_json(data)
    except orjson.JSONDecodeError as e:
        raise PayloadValidationError(exception=e, source="record") from e
    if not isinstance(json, dict):
        raise PayloadValidationError(
            exception=TypeError(f"expected a JSON object, got {type(json).__name__}"),
            source="record",
        )
    return record_from_json(json)


def dump_record(record: AssessmentRecord, *, indent: bool = False) -> bytes:
    return dump_json(record, indent=indent)


def read_record(path: str | Path) -> AssessmentRecord:
    return load_record(Path(path).read_bytes())


def write_record(path: str | Path, record: AssessmentRecord) -> None:
    Path(path).write_bytes(dump_record(record, indent=True))
