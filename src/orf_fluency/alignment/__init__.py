"""
Alignment stages of the ORF fluency engine.

- range_locator.py: finds the OCR span covered by the speech
- sequence_aligner.py: classifies each expected word as correct, misread or skipped
"""
