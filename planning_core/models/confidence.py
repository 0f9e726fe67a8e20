"""Confidence assessment models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ConfidenceTier(str, Enum):
    """Coarse classification of a confidence score."""
    
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class SectionInput:
    """Everything known about one generated artifact before scoring it.
    
    ``ai_self_assessment`` and ``pattern_match`` are optional; the scorer
    substitutes a neutral value or a heuristic when they are missing.
    """
    
    section_id: str
    section_name: str
    description: Optional[str] = None
    examples: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)
    context: Optional[str] = None
    requirements: List[str] = field(default_factory=list)
    ai_self_assessment: Optional[float] = None
    pattern_match: Optional[float] = None
    reasoning: str = ""
    uncertain_areas: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConfidenceFactors:
    """The three raw signals behind a confidence score, each in [0, 1]."""
    
    input_completeness: float
    ai_self_assessment: float
    pattern_match: float
    
    def to_dict(self) -> Dict[str, float]:
        return {
            'input_completeness': self.input_completeness,
            'ai_self_assessment': self.ai_self_assessment,
            'pattern_match': self.pattern_match,
        }


@dataclass(frozen=True)
class ConfidenceAssessment:
    """Immutable result of scoring one artifact."""
    
    section_id: str
    section_name: str
    score: int
    tier: ConfidenceTier
    factors: ConfidenceFactors
    reasoning: str
    needs_review: bool
    clarifying_questions: Optional[List[str]] = None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'section_id': self.section_id,
            'section_name': self.section_name,
            'score': self.score,
            'tier': self.tier.value,
            'factors': self.factors.to_dict(),
            'reasoning': self.reasoning,
            'needs_review': self.needs_review,
            'clarifying_questions': self.clarifying_questions,
        }


@dataclass(frozen=True)
class AggregateConfidence:
    """Headline confidence across several section assessments."""
    
    overall_score: int
    overall_tier: ConfidenceTier
    total_sections: int
    sections_needing_review: int
    low_confidence_sections: List[ConfidenceAssessment] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'overall_score': self.overall_score,
            'overall_tier': self.overall_tier.value,
            'total_sections': self.total_sections,
            'sections_needing_review': self.sections_needing_review,
            'low_confidence_sections': [s.section_id for s in self.low_confidence_sections],
        }
