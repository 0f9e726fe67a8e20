"""Data models for work items, graph analysis, estimates and confidence."""

from .analysis import GraphAnalysisResult
from .confidence import (
    AggregateConfidence,
    ConfidenceAssessment,
    ConfidenceFactors,
    ConfidenceTier,
    SectionInput,
)
from .estimation import ComplexityBand, EffortEstimate, EstimateRange, EstimationRecord
from .work_item import (
    DependencyDeclaration,
    DependencyEdge,
    EdgeSource,
    RelationshipKind,
    WorkItem,
)

__all__ = [
    'AggregateConfidence',
    'ComplexityBand',
    'ConfidenceAssessment',
    'ConfidenceFactors',
    'ConfidenceTier',
    'DependencyDeclaration',
    'DependencyEdge',
    'EdgeSource',
    'EffortEstimate',
    'EstimateRange',
    'EstimationRecord',
    'GraphAnalysisResult',
    'RelationshipKind',
    'SectionInput',
    'WorkItem',
]
