import re
import unicodedata
from typing import Final

APOSTROPHE_VARIANTS: Final[str] = "’‘ʼ`´"
WHITESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s+")


def clean(*, text: str | None) -> str:
    """Canonicalize a raw token before word-level normalization.

    Applies NFKC, folds typographic apostrophes to ``'``, lower-cases and
    collapses internal whitespace.

    Args:
        text: Input text, possibly ``None``

    Returns:
        Cleaned text; empty string for ``None``
    """
    if not text:
        return ""
    normalized_text = unicodedata.normalize("NFKC", str(text))
    for variant in APOSTROPHE_VARIANTS:
        normalized_text = normalized_text.replace(variant, "'")
    return WHITESPACE_PATTERN.sub(" ", normalized_text.lower()).strip()


def strip_non_alphanumeric(*, text: str) -> str:
    """Drop every character that is not a letter or digit (any script)."""
    return "".join(ch for ch in text if ch.isalnum())
