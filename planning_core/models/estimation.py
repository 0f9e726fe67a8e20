"""Estimation record and estimate models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ComplexityBand(str, Enum):
    """Granularity at which calibration factors are tracked."""
    
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class EstimationRecord:
    """One estimate lifecycle: estimated points, then the actual once done.
    
    The ``to_dict``/``from_dict`` pair is the contract a durable history
    store must round-trip.
    """
    
    item_id: str
    band: ComplexityBand
    estimated_points: int
    actual_points: Optional[float] = None
    completed_at: Optional[datetime] = None
    title: str = ""
    estimated_at: datetime = field(default_factory=datetime.now)
    
    @property
    def is_completed(self) -> bool:
        return self.actual_points is not None
    
    def get_ratio(self) -> float:
        """Actual over estimated effort (1.0 when not computable)."""
        if self.actual_points is None or self.estimated_points <= 0:
            return 1.0
        return self.actual_points / self.estimated_points
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'item_id': self.item_id,
            'band': self.band.value,
            'estimated_points': self.estimated_points,
            'actual_points': self.actual_points,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'title': self.title,
            'estimated_at': self.estimated_at.isoformat(),
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EstimationRecord":
        """Create from dictionary representation."""
        completed_at = data.get('completed_at')
        estimated_at = data.get('estimated_at')
        return cls(
            item_id=data['item_id'],
            band=ComplexityBand(data['band']),
            estimated_points=data['estimated_points'],
            actual_points=data.get('actual_points'),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
            title=data.get('title', ''),
            estimated_at=datetime.fromisoformat(estimated_at) if estimated_at else datetime.now(),
        )


@dataclass(frozen=True)
class EstimateRange:
    """Optimistic and pessimistic bounds around an estimate."""
    
    low: int
    high: int


@dataclass(frozen=True)
class EffortEstimate:
    """Calibrated point estimate for a complexity score."""
    
    points: int
    range: EstimateRange
    confidence: float
    calibrated: bool
    band: ComplexityBand
    baseline_points: int
    calibration_factor: float = 1.0
    sample_size: int = 0
    reasoning: str = ""
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'points': self.points,
            'range': {'low': self.range.low, 'high': self.range.high},
            'confidence': self.confidence,
            'calibrated': self.calibrated,
            'band': self.band.value,
            'baseline_points': self.baseline_points,
            'calibration_factor': self.calibration_factor,
            'sample_size': self.sample_size,
            'reasoning': self.reasoning,
        }
