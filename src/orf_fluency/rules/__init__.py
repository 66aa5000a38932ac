"""
Analytics derived from an alignment.

This package contains the rules that turn an alignment into educator-facing analytics:
- error_patterns.py: phonics, strategy, speech and visual pattern buckets with a severity summary
- prosody.py: accuracy, words per minute and the composite fluency score
- aggregation.py: pattern totals and insights across a reader's assessments
"""
