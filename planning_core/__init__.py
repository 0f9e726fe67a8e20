"""Planning core: dependency analysis, estimate calibration and confidence scoring."""

from .analysis.dependency_graph import DependencyGraph
from .analysis.keywords import KeywordExtractor
from .confidence.scorer import ConfidenceScorer
from .estimation.calibrator import EstimationCalibrator

__all__ = ['DependencyGraph', 'KeywordExtractor', 'ConfidenceScorer', 'EstimationCalibrator']
