"""Models for the ORF fluency engine.

This module contains the records that flow through the engine: the tokens
supplied by the OCR and speech collaborators, the located range, and the
word-by-word alignment. All records are immutable and created fresh for each
analysis; output records serialize to plain JSON objects with stable
camelCase field names so callers can persist and re-render them.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from orf_fluency.constants import NO_MATCH_INDEX
from orf_fluency.matching.normalizer import normalize
from orf_pyutils.jsonable import Jsonable


@dataclass(frozen=True)
class Token:
    """A raw token paired with its normalized form.

    Attributes:
        raw_text: Text exactly as supplied by the collaborator.
        normalized_text: Canonical form used for comparison.
    """

    raw_text: str
    normalized_text: str

    @classmethod
    def from_raw(cls, text: str | None) -> "Token":
        """Create a token by normalizing ``text``."""
        raw_text = text or ""
        return cls(raw_text=raw_text, normalized_text=normalize(raw_text))


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    """Four corner points of an OCR word, in the collaborator's pixel space."""

    points: tuple[Point, Point, Point, Point]

    @classmethod
    def empty(cls) -> "BoundingBox":
        origin = Point(0.0, 0.0)
        return cls(points=(origin, origin, origin, origin))


@dataclass(frozen=True)
class OcrWord:
    """Word extracted from the passage image.

    Attributes:
        token: Raw and normalized text.
        bounding_box: Bounding polygon of the word.
        index: Position in document order.
    """

    token: Token
    bounding_box: BoundingBox
    index: int

    @property
    def text(self) -> str:
        return self.token.raw_text

    @classmethod
    def from_text(
        cls, text: str, *, index: int, bounding_box: BoundingBox | None = None
    ) -> "OcrWord":
        return cls(
            token=Token.from_raw(text),
            bounding_box=bounding_box or BoundingBox.empty(),
            index=index,
        )


@dataclass(frozen=True)
class SpokenWord(Jsonable):
    """Word produced by speech recognition.

    Attributes:
        token: Raw and normalized text.
        start_time: Start of the utterance in seconds, if known.
        end_time: End of the utterance in seconds, if known.
        confidence: Recognizer confidence in ``[0, 1]``.
    """

    token: Token
    start_time: float | None = None
    end_time: float | None = None
    confidence: float = 1.0

    @property
    def text(self) -> str:
        return self.token.raw_text

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        start_time: float | None = None,
        end_time: float | None = None,
        confidence: float = 1.0,
    ) -> "SpokenWord":
        return cls(
            token=Token.from_raw(text),
            start_time=start_time,
            end_time=end_time,
            confidence=confidence,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "word": self.token.raw_text,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "confidence": self.confidence,
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "SpokenWord":
        return cls.from_text(
            str(json.get("word") or ""),
            start_time=json.get("startTime"),
            end_time=json.get("endTime"),
            confidence=float(json.get("confidence", 1.0)),
        )


@dataclass(frozen=True)
class RangeMatch(Jsonable):
    """Contiguous OCR index range covered by the speech.

    ``first_index == last_index == -1`` is the explicit "no match" sentinel.
    """

    first_index: int
    last_index: int
    matched_count: int

    @classmethod
    def no_match(cls) -> "RangeMatch":
        return cls(first_index=NO_MATCH_INDEX, last_index=NO_MATCH_INDEX, matched_count=0)

    @property
    def is_match(self) -> bool:
        return self.first_index != NO_MATCH_INDEX and self.last_index != NO_MATCH_INDEX

    def to_json(self) -> dict[str, Any]:
        return {
            "firstIndex": self.first_index,
            "lastIndex": self.last_index,
            "matchedCount": self.matched_count,
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "RangeMatch":
        return cls(
            first_index=int(json["firstIndex"]),
            last_index=int(json["lastIndex"]),
            matched_count=int(json.get("matchedCount", 0)),
        )


class WordStatus(StrEnum):
    """Per-word reading outcome."""

    CORRECT = "correct"
    MISREAD = "misread"
    SKIPPED = "skipped"


class HesitationType(StrEnum):
    """Kind of hesitation detected in the speech.

    ``UNSPECIFIED`` only appears in records converted from the legacy shape
    that persisted hesitation counts instead of detailed entries.
    """

    FILLER = "filler"
    PAUSE = "pause"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class AlignedEntry(Jsonable):
    """Alignment outcome for one expected word.

    Attributes:
        expected_index: Position in the expected word list.
        expected_word: Expected word as supplied.
        spoken_word: Spoken word aligned to it, ``None`` when skipped.
        status: Correct, misread or skipped.
        confidence: Recognizer confidence of the spoken word.
        start_time: Start time of the spoken word in seconds.
        end_time: End time of the spoken word in seconds.
    """

    expected_index: int
    expected_word: str
    spoken_word: str | None
    status: WordStatus
    confidence: float | None = None
    start_time: float | None = None
    end_time: float | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "expectedIndex": self.expected_index,
            "expectedWord": self.expected_word,
            "spokenWord": self.spoken_word,
            "status": self.status.value,
            "confidence": self.confidence,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "AlignedEntry":
        return cls(
            expected_index=int(json["expectedIndex"]),
            expected_word=str(json["expectedWord"]),
            spoken_word=json.get("spokenWord"),
            status=WordStatus(json["status"]),
            confidence=json.get("confidence"),
            start_time=json.get("startTime"),
            end_time=json.get("endTime"),
        )


@dataclass(frozen=True)
class Hesitation:
    spoken_index: int | None
    type: HesitationType
    word: str

    def to_json(self) -> dict[str, Any]:
        return {"spokenIndex": self.spoken_index, "type": self.type.value, "word": self.word}

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "Hesitation":
        return cls(
            spoken_index=json.get("spokenIndex"),
            type=HesitationType(json.get("type", HesitationType.UNSPECIFIED)),
            word=str(json.get("word") or ""),
        )


@dataclass(frozen=True)
class Repetition:
    spoken_index: int | None
    word: str

    def to_json(self) -> dict[str, Any]:
        return {"spokenIndex": self.spoken_index, "word": self.word}

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "Repetition":
        return cls(spoken_index=json.get("spokenIndex"), word=str(json.get("word") or ""))


@dataclass(frozen=True)
class MisreadWord:
    index: int
    expected: str
    spoken: str

    def to_json(self) -> dict[str, Any]:
        return {"index": self.index, "expected": self.expected, "spoken": self.spoken}

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "MisreadWord":
        return cls(
            index=int(json["index"]), expected=str(json["expected"]), spoken=str(json["spoken"])
        )


@dataclass(frozen=True)
class AlignmentErrors:
    """Error lists derived from one alignment.

    Attributes:
        skipped_words: Expected indices that were not read.
        misread_words: Expected words read as a different (similar) word.
        substituted_words: Substitutions carried by persisted records; the
            aligner reports every mismatch as a skip or a misread instead.
        hesitations: Filler words and long pauses, by spoken index.
        repeated_words: Immediate repetitions, by spoken index.
    """

    skipped_words: tuple[int, ...] = ()
    misread_words: tuple[MisreadWord, ...] = ()
    substituted_words: tuple[MisreadWord, ...] = ()
    hesitations: tuple[Hesitation, ...] = ()
    repeated_words: tuple[Repetition, ...] = ()

    @property
    def total_errors(self) -> int:
        """Skipped, misread and substituted word count."""
        return len(self.skipped_words) + len(self.misread_words) + len(self.substituted_words)

    def to_json(self) -> dict[str, Any]:
        return {
            "skippedWords": list(self.skipped_words),
            "misreadWords": [m.to_json() for m in self.misread_words],
            "substitutedWords": [s.to_json() for s in self.substituted_words],
            "hesitations": [h.to_json() for h in self.hesitations],
            "repeatedWords": [r.to_json() for r in self.repeated_words],
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "AlignmentErrors":
        return cls(
            skipped_words=tuple(int(i) for i in json.get("skippedWords", [])),
            misread_words=tuple(MisreadWord.from_json(m) for m in json.get("misreadWords", [])),
            substituted_words=tuple(
                MisreadWord.from_json(s) for s in json.get("substitutedWords", [])
            ),
            hesitations=tuple(Hesitation.from_json(h) for h in json.get("hesitations", [])),
            repeated_words=tuple(Repetition.from_json(r) for r in json.get("repeatedWords", [])),
        )


@dataclass(frozen=True)
class AlignmentResult(Jsonable):
    """Word-by-word alignment of the expected words against the speech.

    ``aligned`` holds exactly one entry per expected word, in expected order.

    Attributes:
        aligned: One entry per expected word.
        correct_count: Number of entries with status ``correct``.
        errors: Skipped / misread lists plus hesitations and repetitions.
    """

    aligned: tuple[AlignedEntry, ...] = ()
    correct_count: int = 0
    errors: AlignmentErrors = field(default_factory=AlignmentErrors)

    @classmethod
    def empty(cls) -> "AlignmentResult":
        return cls()

    @property
    def misread_count(self) -> int:
        return sum(1 for entry in self.aligned if entry.status == WordStatus.MISREAD)

    @property
    def skipped_count(self) -> int:
        return sum(1 for entry in self.aligned if entry.status == WordStatus.SKIPPED)

    def to_json(self) -> dict[str, Any]:
        return {
            "aligned": [entry.to_json() for entry in self.aligned],
            "correctCount": self.correct_count,
            "errors": self.errors.to_json(),
        }

    @classmethod
    def from_json(cls, json: dict[str, Any]) -> "AlignmentResult":
        return cls(
            aligned=tuple(AlignedEntry.from_json(e) for e in json.get("aligned", [])),
            correct_count=int(json.get("correctCount", 0)),
            errors=AlignmentErrors.from_json(json.get("errors", {})),
        )
