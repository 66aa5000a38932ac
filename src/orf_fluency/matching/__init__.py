"""
Word matching for the ORF fluency engine.

- normalizer.py: token canonicalization and filler detection
- phonetics.py: phonetic fingerprints, OCR / mis-hearing confusions, homophones
- similarity.py: ordered similarity cascade used by range location
"""
