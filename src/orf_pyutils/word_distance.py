from jellyfish import levenshtein_distance

from orf_pyutils.logging import get_logger

logger = get_logger(__name__)


def l_dist(s1: str, *, s2: str) -> int:
    """Calculate Levenshtein distance between two strings.

    Unit cost insertion, deletion and substitution over the strings as given;
    callers normalize case beforehand.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Levenshtein distance between the two strings
    """
    try:
        return int(levenshtein_distance(s1, s2))
    except (TypeError, AttributeError) as e:
        logger.warning(f"Distance calculation error on inputs '{s1}' and '{s2}': {e}")
        return max(len(str(s1)), len(str(s2)))


def levenshtein_ratio(s1: str, *, s2: str) -> float:
    """Levenshtein similarity normalized by the longer string.

    Args:
        s1: First string
        s2: Second string

    Returns:
        ``1 - distance / max_len``; two empty strings are identical (1.0)
    """
    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0
    return 1.0 - l_dist(s1, s2=s2) / max_len
