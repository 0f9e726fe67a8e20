"""Effort estimation and historical calibration."""

from .calibrator import (
    EstimationCalibrator,
    complexity_band,
    complexity_to_points,
    fibonacci_range,
)
from .store import EstimationStore, InMemoryEstimationStore, JsonFileEstimationStore

__all__ = [
    'EstimationCalibrator',
    'EstimationStore',
    'InMemoryEstimationStore',
    'JsonFileEstimationStore',
    'complexity_band',
    'complexity_to_points',
    'fibonacci_range',
]
