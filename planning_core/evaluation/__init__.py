"""Evaluation and simulation modules."""

from .evaluator import CalibrationEvaluator, EvaluationResult
from .generator import WorkItemGenerator

__all__ = ['WorkItemGenerator', 'CalibrationEvaluator', 'EvaluationResult']
