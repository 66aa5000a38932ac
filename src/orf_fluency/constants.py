"""Tuning constants and static lookup tables for the ORF fluency engine.

All tables are read-only (tuples, frozensets, ``MappingProxyType``) and built
once at import time.
"""

from types import MappingProxyType
from typing import Final

# Word normalization
FILLER_WORDS: Final[frozenset[str]] = frozenset(
    {"um", "uh", "er", "ah", "like", "you know", "i mean"}
)

CONTRACTION_SUFFIXES: Final[tuple[tuple[str, str], ...]] = (
    ("n't", "not"),
    ("'re", "are"),
    ("'ve", "have"),
    ("'ll", "will"),
    ("'d", "would"),
    ("'s", ""),
)

NUMBER_WORDS: Final[MappingProxyType[str, str]] = MappingProxyType(
    {
        "0": "zero",
        "1": "one",
        "2": "two",
        "3": "three",
        "4": "four",
        "5": "five",
        "6": "six",
        "7": "seven",
        "8": "eight",
        "9": "nine",
        "10": "ten",
        "11": "eleven",
        "12": "twelve",
    }
)

# Similarity bands
EXACT_MATCH_SCORE: Final[float] = 1.0
PHONETIC_MATCH_SCORE: Final[float] = 0.95
CONFUSION_MATCH_SCORE: Final[float] = 0.9
PREFIX_MIN_LENGTH: Final[int] = 3
PREFIX_CONTAINS_BASE: Final[float] = 0.70
PREFIX_CONTAINS_WEIGHT: Final[float] = 0.25
PREFIX_SHARED_BASE: Final[float] = 0.60
PREFIX_SHARED_WEIGHT: Final[float] = 0.30
PREFIX_SHARED_LENGTH: Final[int] = 4
LENGTH_BONUS_PER_CHAR: Final[float] = 0.01
LENGTH_BONUS_CAP: Final[float] = 0.1

PHONETIC_CODE_LENGTH: Final[int] = 4
PHONETIC_MIN_WORD_LENGTH: Final[int] = 2
PHONETIC_CLASSES: Final[MappingProxyType[str, str]] = MappingProxyType(
    {
        **dict.fromkeys("bfpv", "1"),
        **dict.fromkeys("cgjkqsxz", "2"),
        **dict.fromkeys("dt", "3"),
        "l": "4",
        **dict.fromkeys("mn", "5"),
        "r": "6",
    }
)

OCR_GLYPH_CONFUSIONS: Final[tuple[tuple[str, str], ...]] = (
    ("0", "o"),
    ("1", "l"),
    ("1", "i"),
    ("5", "s"),
    ("8", "b"),
    ("rn", "m"),
    ("cl", "d"),
    ("vv", "w"),
)

HEARING_CONFUSION_GROUPS: Final[tuple[frozenset[str], ...]] = (
    frozenset({"the", "a", "uh"}),
    frozenset({"and", "an"}),
    frozenset({"to", "too", "two"}),
    frozenset({"there", "their", "theyre"}),
    frozenset({"your", "youre"}),
    frozenset({"were", "where"}),
    frozenset({"then", "than"}),
)

# Homophones and irregular spellings credited as correct readings
PHONETIC_EQUIVALENCE_GROUPS: Final[tuple[frozenset[str], ...]] = (
    frozenset({"graham", "gram", "grahm"}),
    frozenset({"michael", "mike", "micheal"}),
    frozenset({"stephen", "steven", "stefan"}),
    frozenset({"catherine", "katherine", "kathryn"}),
    frozenset({"anne", "ann"}),
    frozenset({"sara", "sarah"}),
    frozenset({"jon", "john"}),
    frozenset({"knight", "night"}),
    frozenset({"know", "no"}),
    frozenset({"knew", "new"}),
    frozenset({"write", "right", "rite"}),
    frozenset({"whole", "hole"}),
    frozenset({"hour", "our"}),
    frozenset({"their", "there", "theyre"}),
    frozenset({"your", "youre"}),
    frozenset({"to", "too", "two"}),
    frozenset({"by", "bye", "buy"}),
    frozenset({"for", "four", "fore"}),
)

# Range location
MATCH_THRESHOLD: Final[float] = 0.55
SKIP_PENALTY: Final[float] = 0.3
GAP_PENALTY: Final[float] = 0.4
MIN_RANGE_MATCHES: Final[int] = 2
ANCHOR_MIN_WORD_LENGTH: Final[int] = 4
ANCHOR_MAX_OCCURRENCES: Final[int] = 2
ANCHOR_SIMILARITY_THRESHOLD: Final[float] = 0.6
NO_MATCH_INDEX: Final[int] = -1

# Sequence alignment
ALIGN_EXACT_SCORE: Final[float] = 1.0
ALIGN_FUZZY_SCORE: Final[float] = 0.3
ALIGN_MISMATCH_SCORE: Final[float] = -1.0
ALIGN_SKIP_COST: Final[float] = 1.0
ALIGN_INSERT_COST: Final[float] = 0.5
FUZZY_MATCH_THRESHOLD: Final[float] = 0.6
DEFAULT_PAUSE_GAP_SECONDS: Final[float] = 1.0

# Error patterns
CONSONANT_BLENDS: Final[tuple[str, ...]] = (
    "bl", "cl", "fl", "gl", "pl", "br", "cr", "dr", "fr", "gr", "tr", "sc", "sk", "sp", "st",
)  # fmt: skip
DIGRAPHS: Final[tuple[str, ...]] = ("ch", "sh", "th", "ph", "wh")
TH_SUBSTITUTES: Final[tuple[str, ...]] = ("d", "t", "f")
VISUAL_CONFUSION_PAIRS: Final[tuple[tuple[str, str], ...]] = (
    ("b", "d"),
    ("p", "q"),
    ("m", "n"),
    ("u", "n"),
)
GUESSING_SIMILARITY_CEILING: Final[float] = 0.5
GUESSING_MIN_LENGTH: Final[int] = 2

INITIAL_SOUND_ISSUE_THRESHOLD: Final[int] = 3
BLEND_ISSUE_THRESHOLD: Final[int] = 2
GUESSING_ISSUE_THRESHOLD: Final[int] = 2
R_SOUND_ISSUE_THRESHOLD: Final[int] = 3
TH_SOUND_ISSUE_THRESHOLD: Final[int] = 2

MILD_ERROR_LIMIT: Final[int] = 5
MODERATE_ERROR_LIMIT: Final[int] = 10

# Prosody
ACCURACY_BANDS: Final[tuple[tuple[float, float], ...]] = (
    (98.0, 4.0),
    (95.0, 3.5),
    (90.0, 3.0),
    (85.0, 2.5),
    (75.0, 2.0),
)
ACCURACY_FLOOR_POINTS: Final[float] = 1.5
RATE_BANDS: Final[tuple[tuple[int, int, float], ...]] = (
    (100, 180, 4.0),
    (80, 200, 3.5),
    (60, 220, 3.0),
)
RATE_FLOOR_POINTS: Final[float] = 2.0
ERROR_RATE_BANDS: Final[tuple[tuple[float, float], ...]] = (
    (0.02, 4.0),
    (0.05, 3.5),
    (0.10, 3.0),
    (0.20, 2.5),
)
ERROR_RATE_FLOOR_POINTS: Final[float] = 2.0
ACCURACY_WEIGHT: Final[float] = 0.4
RATE_WEIGHT: Final[float] = 0.3
FLUENCY_WEIGHT: Final[float] = 0.3
EXCELLENT_GRADE_MIN: Final[float] = 3.8
PROFICIENT_GRADE_MIN: Final[float] = 3.0
DEVELOPING_GRADE_MIN: Final[float] = 2.0

# Persisted records
RECORD_SCHEMA_VERSION: Final[int] = 2
LEGACY_RECORD_SCHEMA_VERSION: Final[int] = 1
