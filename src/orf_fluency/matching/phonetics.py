"""Phonetic fingerprints and static confusion tables."""

from orf_fluency.constants import (
    HEARING_CONFUSION_GROUPS,
    OCR_GLYPH_CONFUSIONS,
    PHONETIC_CLASSES,
    PHONETIC_CODE_LENGTH,
    PHONETIC_EQUIVALENCE_GROUPS,
    PHONETIC_MIN_WORD_LENGTH,
)


def phonetic_code(word: str) -> str | None:
    """Encode a word as a four character Soundex-style consonant fingerprint.

    The first letter is kept (upper-cased); each following letter contributes
    its consonant-class digit unless it repeats the previous class. Letters
    outside the classes (vowels, ``h``, ``w``, ``y``) reset the tracker so the
    same class may appear again after them. The code is padded with ``0``.

    Args:
        word: Normalized word.

    Returns:
        The code, or ``None`` for words shorter than two characters.
    """
    if len(word) < PHONETIC_MIN_WORD_LENGTH:
        return None

    code = word[0].upper()
    last_class = ""
    for char in word[1:]:
        if len(code) >= PHONETIC_CODE_LENGTH:
            break
        char_class = PHONETIC_CLASSES.get(char.lower())
        if char_class is None:
            last_class = ""
        elif char_class != last_class:
            code += char_class
            last_class = char_class

    return code.ljust(PHONETIC_CODE_LENGTH, "0")


def _glyph_variants(word: str) -> set[str]:
    variants: set[str] = set()
    for glyph, confused_with in OCR_GLYPH_CONFUSIONS:
        variants.add(word.replace(glyph, confused_with))
        variants.add(word.replace(confused_with, glyph))
    return variants


def are_common_confusions(first: str, second: str) -> bool:
    """Whether two words differ only by a known OCR glyph swap or mis-hearing.

    Args:
        first: Normalized word.
        second: Normalized word.

    Returns:
        True when a glyph substitution applied to either word yields the other,
        or both words belong to the same mis-hearing group.
    """
    first, second = first.lower(), second.lower()

    if second in _glyph_variants(first) or first in _glyph_variants(second):
        return True

    return any(first in group and second in group for group in HEARING_CONFUSION_GROUPS)


def are_phonetic_equivalents(first: str, second: str) -> bool:
    """Whether two words are equal or listed as homophones / alternate spellings."""
    first, second = first.lower(), second.lower()
    if first == second:
        return True
    return any(first in group and second in group for group in PHONETIC_EQUIVALENCE_GROUPS)
