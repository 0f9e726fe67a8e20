"""Confidence scoring for generated artifacts."""

from .scorer import (
    ConfidenceScorer,
    calculate_input_completeness,
    calculate_pattern_match,
    missing_fields,
)

__all__ = [
    'ConfidenceScorer',
    'calculate_input_completeness',
    'calculate_pattern_match',
    'missing_fields',
]
