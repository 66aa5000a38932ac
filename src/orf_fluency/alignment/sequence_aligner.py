"""Word-by-word alignment of the expected passage span against the speech."""

from collections.abc import Sequence
from typing import Final

import numpy as np

from orf_fluency.constants import (
    ALIGN_EXACT_SCORE,
    ALIGN_FUZZY_SCORE,
    ALIGN_INSERT_COST,
    ALIGN_MISMATCH_SCORE,
    ALIGN_SKIP_COST,
    DEFAULT_PAUSE_GAP_SECONDS,
    FUZZY_MATCH_THRESHOLD,
)
from orf_fluency.matching.normalizer import is_filler_word, normalize
from orf_fluency.matching.phonetics import are_phonetic_equivalents
from orf_fluency.models import (
    AlignedEntry,
    AlignmentErrors,
    AlignmentResult,
    Hesitation,
    HesitationType,
    MisreadWord,
    Repetition,
    SpokenWord,
    WordStatus,
)
from orf_pyutils.logging import get_logger
from orf_pyutils.word_distance import levenshtein_ratio

logger = get_logger(__name__)

MATCH_ACTION: Final[int] = 0
SKIP_ACTION: Final[int] = 1
INSERT_ACTION: Final[int] = 2


def _paused_before(
    spoken_words: Sequence[SpokenWord], index: int, *, gap_seconds: float
) -> bool:
    if index == 0:
        return False
    start = spoken_words[index].start_time
    previous_end = spoken_words[index - 1].end_time
    if start is None or previous_end is None:
        return False
    return start - previous_end > gap_seconds


def detect_disfluencies(
    spoken_words: Sequence[SpokenWord], *, pause_gap_seconds: float = DEFAULT_PAUSE_GAP_SECONDS
) -> tuple[list[Hesitation], list[Repetition]]:
    """Find hesitations and immediate repetitions in the raw speech.

    A filler word is a ``filler`` hesitation; otherwise a word starting more
    than ``pause_gap_seconds`` after the previous word ended is a ``pause``.
    A word whose normalized text equals the previous word's is a repetition.

    Args:
        spoken_words: Recognized words in utterance order.
        pause_gap_seconds: Silence that counts as a pause.

    Returns:
        Hesitations and repetitions, each tagged with its spoken index.
    """
    hesitations: list[Hesitation] = []
    repetitions: list[Repetition] = []

    for index, word in enumerate(spoken_words):
        if not word.text:
            continue
        if is_filler_word(word.text):
            hesitations.append(
                Hesitation(spoken_index=index, type=HesitationType.FILLER, word=word.text)
            )
        elif _paused_before(spoken_words, index, gap_seconds=pause_gap_seconds):
            hesitations.append(
                Hesitation(spoken_index=index, type=HesitationType.PAUSE, word=word.text)
            )

        if index > 0:
            previous = spoken_words[index - 1]
            normalized = word.token.normalized_text
            if previous.text and normalized and normalized == previous.token.normalized_text:
                repetitions.append(Repetition(spoken_index=index, word=word.text))

    return hesitations, repetitions


def clean_spoken(spoken_words: Sequence[SpokenWord]) -> list[SpokenWord]:
    """Drop fillers, unmatchable tokens and adjacent duplicate words."""
    cleaned: list[SpokenWord] = []
    for word in spoken_words:
        normalized = word.token.normalized_text
        if not word.text or not normalized or is_filler_word(word.text):
            continue
        if cleaned and cleaned[-1].token.normalized_text == normalized:
            continue
        cleaned.append(word)
    return cleaned


def _is_exact(expected: str, spoken: str) -> bool:
    return expected == spoken or are_phonetic_equivalents(expected, spoken)


def _match_score(expected: str, spoken: str) -> float:
    if _is_exact(expected, spoken):
        return ALIGN_EXACT_SCORE
    if levenshtein_ratio(expected, s2=spoken) >= FUZZY_MATCH_THRESHOLD:
        return ALIGN_FUZZY_SCORE
    return ALIGN_MISMATCH_SCORE


def _fill_tables(expected: Sequence[str], spoken: Sequence[str]) -> np.ndarray:
    """Score the edit DP and return the chosen action for every cell."""
    rows, cols = len(expected), len(spoken)
    scores = np.zeros((rows + 1, cols + 1), dtype=np.float64)
    actions = np.full((rows + 1, cols + 1), MATCH_ACTION, dtype=np.int8)

    scores[1:, 0] = -ALIGN_SKIP_COST * np.arange(1, rows + 1)
    actions[1:, 0] = SKIP_ACTION
    scores[0, 1:] = -ALIGN_INSERT_COST * np.arange(1, cols + 1)
    actions[0, 1:] = INSERT_ACTION

    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            match_option = scores[i - 1, j - 1] + _match_score(expected[i - 1], spoken[j - 1])
            skip_option = scores[i - 1, j] - ALIGN_SKIP_COST
            insert_option = scores[i, j - 1] - ALIGN_INSERT_COST
            if match_option >= skip_option and match_option >= insert_option:
                scores[i, j], actions[i, j] = match_option, MATCH_ACTION
            elif skip_option >= insert_option:
                scores[i, j], actions[i, j] = skip_option, SKIP_ACTION
            else:
                scores[i, j], actions[i, j] = insert_option, INSERT_ACTION

    return actions


def align(
    expected_words: Sequence[str],
    spoken_words: Sequence[SpokenWord],
    *,
    pause_gap_seconds: float = DEFAULT_PAUSE_GAP_SECONDS,
) -> AlignmentResult:
    """Classify every expected word as correct, misread or skipped.

    Hesitations and repetitions are recorded from the raw speech first; the
    edit DP then runs over the cleaned speech. Ties prefer a match, then a
    skip, then an insertion. Extra spoken words produce no entry.

    Args:
        expected_words: The located passage span, raw texts.
        spoken_words: Recognized words in utterance order.
        pause_gap_seconds: Silence that counts as a pause hesitation.

    Returns:
        One aligned entry per expected word, in expected order.
    """
    hesitations, repetitions = detect_disfluencies(
        spoken_words, pause_gap_seconds=pause_gap_seconds
    )
    cleaned = clean_spoken(spoken_words)

    expected_norm = [normalize(word) for word in expected_words]
    spoken_norm = [word.token.normalized_text for word in cleaned]
    actions = _fill_tables(expected_norm, spoken_norm)

    entries: list[AlignedEntry | None] = [None] * len(expected_words)
    i, j = len(expected_words), len(cleaned)
    while i > 0 or j > 0:
        action = actions[i, j]
        if action == MATCH_ACTION:
            spoken = cleaned[j - 1]
            status = (
                WordStatus.CORRECT
                if _is_exact(expected_norm[i - 1], spoken_norm[j - 1])
                else WordStatus.MISREAD
            )
            entries[i - 1] = AlignedEntry(
                expected_index=i - 1,
                expected_word=expected_words[i - 1],
                spoken_word=spoken.text,
                status=status,
                confidence=spoken.confidence,
                start_time=spoken.start_time,
                end_time=spoken.end_time,
            )
            i, j = i - 1, j - 1
        elif action == SKIP_ACTION:
            entries[i - 1] = AlignedEntry(
                expected_index=i - 1,
                expected_word=expected_words[i - 1],
                spoken_word=None,
                status=WordStatus.SKIPPED,
            )
            i -= 1
        else:
            j -= 1

    aligned = tuple(entry for entry in entries if entry is not None)
    errors = AlignmentErrors(
        skipped_words=tuple(e.expected_index for e in aligned if e.status == WordStatus.SKIPPED),
        misread_words=tuple(
            MisreadWord(
                index=e.expected_index, expected=e.expected_word, spoken=e.spoken_word or ""
            )
            for e in aligned
            if e.status == WordStatus.MISREAD
        ),
        hesitations=tuple(hesitations),
        repeated_words=tuple(repetitions),
    )
    correct_count = sum(1 for e in aligned if e.status == WordStatus.CORRECT)

    logger.debug(
        f"Aligned {len(aligned)} expected words against {len(cleaned)} spoken words: "
        f"{correct_count} correct, {len(errors.misread_words)} misread, "
        f"{len(errors.skipped_words)} skipped, {len(hesitations)} hesitations"
    )
    return AlignmentResult(aligned=aligned, correct_count=correct_count, errors=errors)
