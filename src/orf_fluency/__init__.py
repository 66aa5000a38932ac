"""ORF fluency engine: locate, align and score oral readings of OCR passages."""

from orf_fluency.matching.normalizer import normalize
from orf_fluency.matching.phonetics import phonetic_code
from orf_fluency.matching.similarity import similarity
from orf_fluency.alignment.range_locator import locate_range, select_expected_words
from orf_fluency.alignment.sequence_aligner import align
from orf_fluency.rules.error_patterns import analyze_error_patterns
from orf_fluency.rules.prosody import score_prosody
from orf_fluency.rules.aggregation import aggregate_error_patterns, generate_macro_insights
from orf_fluency.core.processor import ReadingAnalysis, analyze_reading

__all__ = [
    "ReadingAnalysis",
    "aggregate_error_patterns",
    "align",
    "analyze_error_patterns",
    "analyze_reading",
    "generate_macro_insights",
    "locate_range",
    "normalize",
    "phonetic_code",
    "score_prosody",
    "select_expected_words",
    "similarity",
]
