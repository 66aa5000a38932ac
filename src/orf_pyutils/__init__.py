"""Shared utilities for the ORF fluency engine: logging, errors, text and distance helpers."""
