"""Word similarity scoring tolerant of OCR and speech-recognition noise.

Scoring is an ordered cascade of strategies. Each strategy either returns a
score from its fixed band or ``None`` to defer to the next one, so stronger
evidence (identity, sound, known confusions) always outranks weaker evidence
(shared prefix, edit distance).
"""

from collections.abc import Callable
from typing import Final

from orf_fluency.constants import (
    CONFUSION_MATCH_SCORE,
    EXACT_MATCH_SCORE,
    LENGTH_BONUS_CAP,
    LENGTH_BONUS_PER_CHAR,
    PHONETIC_MATCH_SCORE,
    PREFIX_CONTAINS_BASE,
    PREFIX_CONTAINS_WEIGHT,
    PREFIX_MIN_LENGTH,
    PREFIX_SHARED_BASE,
    PREFIX_SHARED_LENGTH,
    PREFIX_SHARED_WEIGHT,
)
from orf_fluency.matching.phonetics import are_common_confusions, phonetic_code
from orf_pyutils.word_distance import l_dist

SimilarityStrategy = Callable[[str, str], float | None]


def exact_match(first: str, second: str) -> float | None:
    """1.0 for identical words (two empty words included), 0.0 if either is empty."""
    if first == second:
        return EXACT_MATCH_SCORE
    if not first or not second:
        return 0.0
    return None


def phonetic_match(first: str, second: str) -> float | None:
    first_code = phonetic_code(first)
    if first_code is not None and first_code == phonetic_code(second):
        return PHONETIC_MATCH_SCORE
    return None


def confusion_match(first: str, second: str) -> float | None:
    if are_common_confusions(first, second):
        return CONFUSION_MATCH_SCORE
    return None


def prefix_match(first: str, second: str) -> float | None:
    """Score words sharing a beginning, scaled by their length ratio.

    Only applies when both words have at least three characters.
    """
    min_len = min(len(first), len(second))
    max_len = max(len(first), len(second))
    if min_len < PREFIX_MIN_LENGTH:
        return None

    length_ratio = min_len / max_len
    if first.startswith(second) or second.startswith(first):
        return PREFIX_CONTAINS_BASE + PREFIX_CONTAINS_WEIGHT * length_ratio

    prefix_len = min(PREFIX_SHARED_LENGTH, min_len)
    if first[:prefix_len] == second[:prefix_len]:
        return PREFIX_SHARED_BASE + PREFIX_SHARED_WEIGHT * length_ratio
    return None


def edit_distance_match(first: str, second: str) -> float:
    """Normalized Levenshtein similarity plus a small bonus for longer words, capped at 1.0."""
    max_len = max(len(first), len(second))
    base = 1.0 - l_dist(first, s2=second) / max_len
    length_bonus = min(LENGTH_BONUS_CAP, max_len * LENGTH_BONUS_PER_CHAR)
    return min(1.0, base + length_bonus)


SIMILARITY_STRATEGIES: Final[tuple[SimilarityStrategy, ...]] = (
    exact_match,
    phonetic_match,
    confusion_match,
    prefix_match,
)


def similarity(first: str, second: str) -> float:
    """Similarity in ``[0, 1]`` between two normalized words.

    Symmetric, and ``similarity(a, a) == 1.0``.

    Args:
        first: Normalized word.
        second: Normalized word.

    Returns:
        Score of the first strategy that applies, else the edit-distance score.
    """
    for strategy in SIMILARITY_STRATEGIES:
        score = strategy(first, second)
        if score is not None:
            return score
    return edit_distance_match(first, second)
