"""Locate the span of the passage that the reader actually spoke.

The primary strategy sweeps every OCR start offset with a forward dynamic
program over the spoken words; a greedy anchor-based estimate is used when no
start offset yields a qualifying range.
"""

from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from functools import partial

import numpy as np
import numpy.typing as npt

from orf_fluency.constants import (
    ANCHOR_MAX_OCCURRENCES,
    ANCHOR_MIN_WORD_LENGTH,
    ANCHOR_SIMILARITY_THRESHOLD,
    GAP_PENALTY,
    MATCH_THRESHOLD,
    MIN_RANGE_MATCHES,
    NO_MATCH_INDEX,
    SKIP_PENALTY,
)
from orf_fluency.matching.normalizer import is_filler_word
from orf_fluency.matching.similarity import similarity
from orf_fluency.models import OcrWord, RangeMatch, SpokenWord
from orf_pyutils.logging import get_logger, thread_ident_string

logger = get_logger(__name__)

SimilarityMatrix = npt.NDArray[np.float64]


@dataclass(frozen=True)
class SweepState:
    """Forward DP state for one OCR start offset.

    Attributes:
        score: Accumulated similarity minus skip and gap penalties.
        match_count: Spoken words matched to an OCR word so far.
        last_ocr_index: OCR index of the latest match (``start - 1`` initially).
        first_ocr_index: OCR index of the first match, ``-1`` until one exists.
    """

    score: float
    match_count: int
    last_ocr_index: int
    first_ocr_index: int = NO_MATCH_INDEX


def build_similarity_matrix(spoken: Sequence[str], ocr: Sequence[str]) -> SimilarityMatrix:
    """Pairwise similarity of normalized spoken words (rows) and OCR words (columns)."""
    matrix = np.zeros((len(spoken), len(ocr)), dtype=np.float64)
    cache: dict[tuple[str, str], float] = {}
    for row, spoken_word in enumerate(spoken):
        for col, ocr_word in enumerate(ocr):
            key = (spoken_word, ocr_word)
            if key not in cache:
                cache[key] = similarity(spoken_word, ocr_word)
            matrix[row, col] = cache[key]
    return matrix


def sweep_from_offset(start: int, *, matrix: SimilarityMatrix) -> SweepState:
    """Run the forward DP for the OCR start offset ``start``.

    Each step starts from the zero-score start state and takes the best
    extension to a later OCR word whose similarity reaches the match
    threshold, paying ``SKIP_PENALTY`` per OCR word jumped over; only a
    strictly better score replaces the candidate, so the earliest OCR index
    wins ties. Dropping the spoken word costs ``GAP_PENALTY`` and must be
    strictly better than the extension.

    Args:
        start: First OCR index the sweep may match.
        matrix: Spoken x OCR similarity matrix.

    Returns:
        The state after the last spoken word.
    """
    spoken_count = matrix.shape[0]
    start_state = SweepState(score=0.0, match_count=0, last_ocr_index=start - 1)

    state = start_state
    for row in range(spoken_count):
        candidate = start_state
        lowest = state.last_ocr_index + 1
        window = matrix[row, lowest:]
        if window.size:
            skipped = np.arange(window.size, dtype=np.float64)
            scores = np.where(
                window >= MATCH_THRESHOLD,
                (state.score + window) - skipped * SKIP_PENALTY,
                -np.inf,
            )
            offset = int(np.argmax(scores))
            if scores[offset] > candidate.score:
                ocr_index = lowest + offset
                candidate = SweepState(
                    score=float(scores[offset]),
                    match_count=state.match_count + 1,
                    last_ocr_index=ocr_index,
                    first_ocr_index=(
                        ocr_index
                        if state.first_ocr_index == NO_MATCH_INDEX
                        else state.first_ocr_index
                    ),
                )

        dropped_score = state.score - GAP_PENALTY
        if dropped_score > candidate.score:
            candidate = replace(state, score=dropped_score)
        state = candidate

    return state


def _sweep_all_offsets(matrix: SimilarityMatrix, *, max_workers: int) -> list[SweepState]:
    ocr_count = matrix.shape[1]
    sweep = partial(sweep_from_offset, matrix=matrix)
    if max_workers <= 1 or ocr_count <= 1:
        return [sweep(start) for start in range(ocr_count)]

    logger.debug(
        f"Sweeping {ocr_count} start offsets on {max_workers} workers {thread_ident_string()}"
    )
    wrapped = logger.create_propagating_wrapper(func=sweep)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(wrapped, start) for start in range(ocr_count)]
        return [future.result() for future in futures]


def find_best_alignment(matrix: SimilarityMatrix, *, max_workers: int = 1) -> RangeMatch:
    """Best range over all start offsets, or the sentinel if none qualifies.

    A start offset qualifies with at least two matches and a score strictly
    above the best so far (initially zero). Offsets are reduced in order, so
    the outcome does not depend on ``max_workers``.
    """
    best = RangeMatch.no_match()
    best_score = 0.0
    for state in _sweep_all_offsets(matrix, max_workers=max_workers):
        if state.match_count >= MIN_RANGE_MATCHES and state.score > best_score:
            best_score = state.score
            best = RangeMatch(
                first_index=state.first_ocr_index,
                last_index=state.last_ocr_index,
                matched_count=state.match_count,
            )

    logger.debug(f"DP alignment: {best} score={best_score:.3f}")
    return best


def find_range_by_anchors(
    spoken: Sequence[str], ocr: Sequence[str], matrix: SimilarityMatrix
) -> RangeMatch:
    """Estimate the range from distinctive high-similarity word pairs.

    Anchors pair a spoken word of at least four characters with an OCR word
    occurring at most twice in the passage. Walking the anchors in spoken
    order, a later OCR index extends the current run, an index before the
    run's start begins a new run and anything else is ignored. The longest
    run wins; the earliest one on ties.

    Args:
        spoken: Normalized spoken words without fillers.
        ocr: Normalized OCR words.
        matrix: Spoken x OCR similarity matrix.

    Returns:
        Bounds of the longest run, or the sentinel when there are no anchors.
    """
    occurrences = Counter(ocr)
    anchors = [
        ocr_index
        for spoken_index, spoken_word in enumerate(spoken)
        if len(spoken_word) >= ANCHOR_MIN_WORD_LENGTH
        for ocr_index, ocr_word in enumerate(ocr)
        if occurrences[ocr_word] <= ANCHOR_MAX_OCCURRENCES
        and matrix[spoken_index, ocr_index] >= ANCHOR_SIMILARITY_THRESHOLD
    ]

    if not anchors:
        logger.debug("No anchors found")
        return RangeMatch.no_match()

    best_start = best_end = current_start = current_end = anchors[0]
    run_length = best_length = 1
    for ocr_index in anchors[1:]:
        if ocr_index > current_end:
            current_end = ocr_index
            run_length += 1
            if run_length > best_length:
                best_length = run_length
                best_start, best_end = current_start, current_end
        elif ocr_index < current_start:
            current_start = current_end = ocr_index
            run_length = 1

    logger.debug(f"Anchor result: first={best_start} last={best_end} anchors={best_length}")
    return RangeMatch(first_index=best_start, last_index=best_end, matched_count=best_length)


def locate_range(
    spoken_words: Sequence[SpokenWord],
    ocr_words: Sequence[OcrWord],
    *,
    max_workers: int = 1,
) -> RangeMatch:
    """Find the contiguous OCR index range covered by the speech.

    Args:
        spoken_words: Recognized words in utterance order.
        ocr_words: Passage words in document order.
        max_workers: Threads used to sweep start offsets; ``1`` sweeps inline.

    Returns:
        The located range, or ``RangeMatch.no_match()``.
    """
    spoken = [
        word.token.normalized_text
        for word in spoken_words
        if word.text and not is_filler_word(word.text) and word.token.normalized_text
    ]
    ocr = [word.token.normalized_text for word in ocr_words]

    if not spoken or not ocr:
        logger.info(
            f"Nothing to locate: {len(spoken)} usable spoken words, {len(ocr)} OCR words"
        )
        return RangeMatch.no_match()

    matrix = build_similarity_matrix(spoken, ocr)
    range_match = find_best_alignment(matrix, max_workers=max_workers)
    if range_match.is_match:
        return range_match

    logger.debug("No qualifying DP range, using anchor-based fallback")
    return find_range_by_anchors(spoken, ocr, matrix)


def select_expected_words(ocr_words: Sequence[OcrWord], range_match: RangeMatch) -> list[str]:
    """Raw texts of the OCR words inside ``range_match`` (empty for the sentinel)."""
    if not range_match.is_match:
        return []
    return [word.text for word in ocr_words[range_match.first_index : range_match.last_index + 1]]
