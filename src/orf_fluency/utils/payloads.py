"""
Input boundary: OCR and speech-to-text payloads.

Collaborators deliver JSON in the shapes of common cloud APIs. The models
below validate and coerce those documents into the engine's ``OcrWord`` and
``SpokenWord`` records; everything past this module can trust its inputs.

Accepted OCR shapes:
- a list of word annotations with ``text`` (or ``description``, or
  ``symbols``) and ``boundingBox`` / ``boundingPoly`` vertices
- a document text detection response
  (``responses[0].fullTextAnnotation.pages[].blocks[].paragraphs[].words[]``)

Accepted speech shapes:
- a list of word infos with ``word``, ``startTime``, ``endTime`` and
  ``confidence``; times are seconds or duration strings such as ``"1.500s"``
- a recognition response (``results[].alternatives[0]``), falling back to
  the transcript when an alternative carries no word timings
"""

import re
from typing import Any, Final

from pydantic import BaseModel, Field, ValidationError, field_validator

from orf_fluency.models import BoundingBox, OcrWord, Point, SpokenWord
from orf_pyutils.errors import PayloadValidationError
from orf_pyutils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SPEECH_CONFIDENCE: Final[float] = 0.9
_ALPHANUMERIC: Final[re.Pattern[str]] = re.compile(r"[^\W_]")
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")


def parse_duration_seconds(value: Any) -> float | None:
    """Seconds from a number, a ``"1.5s"`` string or a ``{seconds, nanos}`` mapping."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("s"):
            text = text[:-1]
        return float(text)
    if isinstance(value, dict):
        return float(value.get("seconds", 0) or 0) + float(value.get("nanos", 0) or 0) / 1e9
    raise ValueError(f"Invalid duration: {value!r}")


class Vertex(BaseModel):
    """Polygon vertex; the OCR service omits zero coordinates."""

    x: float = 0.0
    y: float = 0.0


class BoundingPoly(BaseModel):
    vertices: list[Vertex] = Field(default_factory=list)

    def to_bounding_box(self) -> BoundingBox:
        if not self.vertices:
            return BoundingBox.empty()
        points = [Point(v.x, v.y) for v in self.vertices[:4]]
        while len(points) < 4:
            points.append(points[-1])
        return BoundingBox(points=(points[0], points[1], points[2], points[3]))


class OcrSymbol(BaseModel):
    text: str = ""


class OcrWordAnnotation(BaseModel):
    """One recognized word of the passage image.

    Attributes:
        text: Word text (``description`` in the flat annotation shape)
        description: Alternative name for ``text``
        symbols: Per-character symbols of the document detection shape
        boundingBox: Word polygon of the document detection shape
        boundingPoly: Word polygon of the flat annotation shape
    """

    text: str | None = None
    description: str | None = None
    symbols: list[OcrSymbol] = Field(default_factory=list)
    boundingBox: BoundingPoly | None = None
    boundingPoly: BoundingPoly | None = None

    @property
    def word_text(self) -> str:
        if self.text is not None:
            return self.text
        if self.description is not None:
            return self.description
        return "".join(symbol.text for symbol in self.symbols)

    @property
    def polygon(self) -> BoundingPoly:
        return self.boundingBox or self.boundingPoly or BoundingPoly()


class OcrParagraph(BaseModel):
    words: list[OcrWordAnnotation] = Field(default_factory=list)


class OcrBlock(BaseModel):
    paragraphs: list[OcrParagraph] = Field(default_factory=list)


class OcrPage(BaseModel):
    blocks: list[OcrBlock] = Field(default_factory=list)


class FullTextAnnotation(BaseModel):
    pages: list[OcrPage] = Field(default_factory=list)


class OcrResponse(BaseModel):
    fullTextAnnotation: FullTextAnnotation | None = None


class OcrDocument(BaseModel):
    responses: list[OcrResponse] = Field(default_factory=list)

    def annotations(self) -> list[OcrWordAnnotation]:
        if not self.responses or self.responses[0].fullTextAnnotation is None:
            return []
        return [
            word
            for page in self.responses[0].fullTextAnnotation.pages
            for block in page.blocks
            for paragraph in block.paragraphs
            for word in paragraph.words
        ]


class SpeechWordInfo(BaseModel):
    """One recognized word with optional timing.

    Attributes:
        word: Recognized text
        startTime: Start offset in seconds
        endTime: End offset in seconds
        confidence: Recognizer confidence, if reported
    """

    word: str = ""
    startTime: float | None = None
    endTime: float | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def parse_time(cls, v: Any) -> float | None:
        return parse_duration_seconds(v)

    def to_spoken_word(self, *, default_confidence: float) -> SpokenWord:
        # A reported confidence of 0 means "not reported"
        return SpokenWord.from_text(
            self.word,
            start_time=self.startTime,
            end_time=self.endTime,
            confidence=self.confidence or default_confidence,
        )


class SpeechAlternative(BaseModel):
    transcript: str = ""
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    words: list[SpeechWordInfo] = Field(default_factory=list)


class SpeechResult(BaseModel):
    alternatives: list[SpeechAlternative] = Field(default_factory=list)


class SpeechResponse(BaseModel):
    results: list[SpeechResult] = Field(default_factory=list)

    def spoken_words(self) -> list[SpokenWord]:
        spoken: list[SpokenWord] = []
        for result in self.results:
            if not result.alternatives:
                continue
            best = result.alternatives[0]
            default_confidence = best.confidence or DEFAULT_SPEECH_CONFIDENCE
            if best.words:
                spoken.extend(
                    info.to_spoken_word(default_confidence=default_confidence)
                    for info in best.words
                )
            elif best.transcript:
                spoken.extend(
                    SpokenWord.from_text(text, confidence=default_confidence)
                    for text in _WHITESPACE.split(best.transcript.strip())
                    if text
                )
        return spoken


class AnalysisRequest(BaseModel):
    """Input document of the ``analyze`` command.

    Attributes:
        ocr: OCR payload in any accepted shape
        speech: Speech payload in any accepted shape
        recordingDurationSeconds: Length of the recording, the reading-time fallback
        assessmentId: Optional identifier carried into logs and the record
    """

    ocr: Any
    speech: Any
    recordingDurationSeconds: float = Field(default=0.0, ge=0.0)
    assessmentId: str | None = None


def _ocr_annotations(payload: Any) -> list[OcrWordAnnotation]:
    if isinstance(payload, dict):
        return OcrDocument.model_validate(payload).annotations()
    return [OcrWordAnnotation.model_validate(item) for item in payload or []]


def parse_ocr_words(payload: Any) -> list[OcrWord]:
    """Validate an OCR payload and keep the words carrying a letter or digit.

    Args:
        payload: Decoded JSON in one of the accepted OCR shapes.

    Returns:
        OCR words indexed in document order.

    Raises:
        PayloadValidationError: If the payload does not match any accepted shape.
    """
    try:
        annotations = _ocr_annotations(payload)
    except (ValidationError, TypeError) as e:
        raise PayloadValidationError(exception=e, source="ocr") from e

    texts_and_boxes = [
        (annotation.word_text, annotation.polygon.to_bounding_box())
        for annotation in annotations
        if _ALPHANUMERIC.search(annotation.word_text)
    ]
    dropped = len(annotations) - len(texts_and_boxes)
    if dropped:
        logger.debug(f"Dropped {dropped} OCR annotations without letters or digits")

    return [
        OcrWord.from_text(text, index=index, bounding_box=box)
        for index, (text, box) in enumerate(texts_and_boxes)
    ]


def parse_spoken_words(payload: Any) -> list[SpokenWord]:
    """Validate a speech payload into spoken words in utterance order.

    Args:
        payload: Decoded JSON in one of the accepted speech shapes.

    Returns:
        Spoken words; words without text are dropped.

    Raises:
        PayloadValidationError: If the payload does not match any accepted shape.
    """
    try:
        if isinstance(payload, dict):
            spoken = SpeechResponse.model_validate(payload).spoken_words()
        else:
            spoken = [
                SpeechWordInfo.model_validate(item).to_spoken_word(
                    default_confidence=DEFAULT_SPEECH_CONFIDENCE
                )
                for item in payload or []
            ]
    except (ValidationError, TypeError) as e:
        raise PayloadValidationError(exception=e, source="speech") from e

    return [word for word in spoken if word.text]


def parse_analysis_request(
    payload: Any,
) -> tuple[list[OcrWord], list[SpokenWord], AnalysisRequest]:
    """Validate the combined input document of one analysis.

    Raises:
        PayloadValidationError: If the document or either payload is invalid.
    """
    try:
        request = AnalysisRequest.model_validate(payload)
    except ValidationError as e:
        raise PayloadValidationError(exception=e, source="request") from e
    return parse_ocr_words(request.ocr), parse_spoken_words(request.speech), request
