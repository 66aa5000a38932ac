"""Word canonicalization shared by range location and sequence alignment."""

import re
from typing import Final

from orf_fluency.constants import CONTRACTION_SUFFIXES, FILLER_WORDS, NUMBER_WORDS
from orf_pyutils.text import clean, strip_non_alphanumeric

_FILLER_PUNCTUATION: Final[re.Pattern[str]] = re.compile(r"[^\w\s]")


def expand_contraction(*, word: str) -> str:
    """Expand a trailing contraction suffix (``n't`` -> ``not``, drop ``'s``).

    Only the first matching suffix is rewritten. Suffixes carry their
    apostrophe, so a word that has already been stripped is left unchanged.

    Args:
        word: Lower-cased word.

    Returns:
        The word with its suffix expanded, or unchanged.
    """
    for suffix, replacement in CONTRACTION_SUFFIXES:
        if word.endswith(suffix):
            return word[: -len(suffix)] + replacement
    return word


def normalize(raw: str | None) -> str:
    """Canonicalize a raw OCR or speech token for comparison.

    Lower-cases, strips everything that is not a letter or digit, expands
    contractions and maps the digits ``0``-``12`` to their number words so
    that ``"10"`` and ``"ten"`` compare equal. Stripping runs first, so
    contracted forms keep their run-together spelling (``"they're"`` ->
    ``"theyre"``, ``"it's"`` -> ``"its"``), which is how the confusion and
    homophone tables spell them. Never fails; ``None`` and punctuation-only
    tokens normalize to ``""``.

    Args:
        raw: Token as supplied by the OCR or speech collaborator.

    Returns:
        The normalized token.
    """
    cleaned = clean(text=raw)
    if not cleaned:
        return ""
    alphanumeric = strip_non_alphanumeric(text=cleaned)
    expanded = expand_contraction(word=alphanumeric)
    return NUMBER_WORDS.get(expanded, expanded)


def is_filler_word(raw: str | None) -> bool:
    """Whether a spoken token is a filler such as ``um`` or ``you know``."""
    cleaned = _FILLER_PUNCTUATION.sub("", clean(text=raw)).strip()
    return cleaned in FILLER_WORDS
