"""Pytest configuration and fixtures for the ORF fluency engine tests."""

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from orf_fluency.config import FluencyConfig, get_fluency_config
from orf_fluency.models import OcrWord, SpokenWord

SpokenFactory = Callable[[list[tuple[str, float | None, float | None]]], list[SpokenWord]]
OcrFactory = Callable[[str], list[OcrWord]]

PASSAGE: str = "Once upon a time a cat sat on the mat and slept"


@pytest.fixture
def make_spoken() -> SpokenFactory:
    """Build spoken words from ``(text, start, end)`` triples."""

    def _make(items: list[tuple[str, float | None, float | None]]) -> list[SpokenWord]:
        return [
            SpokenWord.from_text(text, start_time=start, end_time=end, confidence=0.95)
            for text, start, end in items
        ]

    return _make


@pytest.fixture
def make_ocr() -> OcrFactory:
    """Build OCR words from a whitespace separated passage."""

    def _make(passage: str) -> list[OcrWord]:
        return [OcrWord.from_text(text, index=i) for i, text in enumerate(passage.split())]

    return _make


@pytest.fixture
def passage_ocr_words(make_ocr: OcrFactory) -> list[OcrWord]:
    """OCR words of a short passage; 'cat sat on the mat' sits at indices 5-9."""
    return make_ocr(PASSAGE)


@pytest.fixture
def cat_sat_spoken(make_spoken: SpokenFactory) -> list[SpokenWord]:
    """A reading of 'cat sat on the mat' that omits 'the'."""
    return make_spoken(
        [("cat", 0.0, 0.4), ("sat", 0.4, 0.8), ("on", 0.8, 1.0), ("mat", 1.0, 1.4)]
    )


@pytest.fixture
def sequential_config() -> FluencyConfig:
    """Configuration that runs every stage inline."""
    return FluencyConfig(range_workers=1, analysis_workers=1)


@pytest.fixture
def analysis_request(cat_sat_spoken: list[SpokenWord]) -> dict[str, Any]:
    """Input document of the analyze command for the 'cat sat' reading."""
    return {
        "assessmentId": "assessment-1",
        "recordingDurationSeconds": 2.0,
        "ocr": [{"description": text} for text in PASSAGE.split()],
        "speech": [
            {
                "word": word.text,
                "startTime": f"{word.start_time}s",
                "endTime": f"{word.end_time}s",
                "confidence": word.confidence,
            }
            for word in cat_sat_spoken
        ],
    }


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove ORF_* variables and reset the cached configuration."""
    for name in FluencyConfig.model_fields:
        monkeypatch.delenv(f"ORF_{name.upper()}", raising=False)
    get_fluency_config.cache_clear()
    yield monkeypatch
    get_fluency_config.cache_clear()
