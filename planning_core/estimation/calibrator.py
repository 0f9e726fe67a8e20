"""Complexity-to-points estimation with historical calibration."""

import statistics
from datetime import datetime
from typing import Dict, List, Optional, Union

import structlog

from ..errors import InvalidEstimateError
from ..models.estimation import ComplexityBand, EffortEstimate, EstimateRange, EstimationRecord
from ..utils.math_utils import round_half_up
from .store import EstimationStore, InMemoryEstimationStore

log = structlog.get_logger()

MIN_COMPLEXITY = 1
MAX_COMPLEXITY = 10

# Step function from complexity onto the Fibonacci sequence
COMPLEXITY_POINTS = {
    1: 1, 2: 1,
    3: 2,
    4: 3,
    5: 5, 6: 5,
    7: 8, 8: 8,
    9: 13, 10: 13,
}

DEFAULT_BAND_THRESHOLDS = {'low': 3, 'medium': 6}


def clamp_complexity(complexity: Union[int, float]) -> int:
    """Clamp a complexity score into 1-10."""
    clamped = max(MIN_COMPLEXITY, min(MAX_COMPLEXITY, round_half_up(complexity)))
    if clamped != complexity:
        log.warning("Complexity normalized to 1-10 integer", complexity=complexity, clamped=clamped)
    return clamped


def complexity_to_points(complexity: Union[int, float]) -> int:
    """Map complexity to baseline story points."""
    return COMPLEXITY_POINTS[clamp_complexity(complexity)]


def complexity_band(
    complexity: Union[int, float],
    thresholds: Optional[Dict[str, int]] = None,
) -> ComplexityBand:
    """Derive the calibration band for a complexity score."""
    thresholds = thresholds or DEFAULT_BAND_THRESHOLDS
    if complexity <= thresholds.get('low', 3):
        return ComplexityBand.LOW
    if complexity <= thresholds.get('medium', 6):
        return ComplexityBand.MEDIUM
    return ComplexityBand.HIGH


def fibonacci_range(points: int) -> EstimateRange:
    """Range one Fibonacci step either side of ``points``.

    ``low`` is the largest Fibonacci number below ``points`` (never under
    1), ``high`` the smallest one above it.
    """
    sequence = [1, 2]
    while sequence[-1] <= points:
        sequence.append(sequence[-1] + sequence[-2])

    below = [n for n in sequence if n < points]
    above = [n for n in sequence if n > points]

    return EstimateRange(low=below[-1] if below else 1, high=above[0])


class EstimationCalibrator:
    """Point estimates that adjust to the recorded actual-to-estimated ratio.

    History lives in an injected ``EstimationStore``; each calibrator gets
    its own in-memory store when none is given.
    """

    def __init__(self, store: Optional[EstimationStore] = None, config: Optional[dict] = None):
        """Initialize calibrator with history store and configuration."""
        self.config = config or {}
        self.estimation_config = self.config.get('estimation', {})
        self.min_samples = max(1, self.estimation_config.get('min_samples', 3))
        self.saturation_samples = self.estimation_config.get('saturation_samples', 10)
        self.band_thresholds = self.estimation_config.get('band_thresholds', DEFAULT_BAND_THRESHOLDS)
        self.store = store if store is not None else InMemoryEstimationStore()

    def band_for(self, complexity: Union[int, float]) -> ComplexityBand:
        """Band for a complexity score using the configured thresholds."""
        return complexity_band(complexity, self.band_thresholds)

    def record_estimate(
        self,
        item_id: str,
        points: int,
        band: Union[ComplexityBand, str],
        title: str = "",
    ) -> EstimationRecord:
        """Append a pending estimate for a work item."""
        if points <= 0:
            raise InvalidEstimateError(
                f"Estimated points must be positive, got {points}",
                details={"item_id": item_id, "points": points},
            )

        record = EstimationRecord(
            item_id=item_id,
            band=ComplexityBand(band),
            estimated_points=points,
            title=title,
        )
        self.store.append(record)
        log.debug("Estimate recorded", item_id=item_id, points=points, band=record.band.value)
        return record

    def record_actual(self, item_id: str, actual_points: float) -> Optional[EstimationRecord]:
        """Fill in the actual effort on the item's pending estimate.

        Returns the completed record, or None when the item has no pending
        estimate (logged, not raised).
        """
        if actual_points < 0:
            raise InvalidEstimateError(
                f"Actual points cannot be negative, got {actual_points}",
                details={"item_id": item_id, "actual_points": actual_points},
            )

        record = self.store.complete(item_id, actual_points, datetime.now())
        if record is None:
            log.warning("No pending estimate for actual", item_id=item_id, actual_points=actual_points)
            return None

        log.debug(
            "Actual recorded",
            item_id=item_id,
            band=record.band.value,
            estimated=record.estimated_points,
            actual=actual_points,
        )
        return record

    def calibration_factor(self, band: Union[ComplexityBand, str]) -> float:
        """Median actual/estimated ratio for the band, or 1.0 without enough data."""
        factor, _ = self._band_factor(self.store.records(), ComplexityBand(band))
        return factor

    def estimate(self, complexity: Union[int, float]) -> EffortEstimate:
        """Generate calibrated effort estimate."""
        complexity = clamp_complexity(complexity)
        baseline = COMPLEXITY_POINTS[complexity]
        band = self.band_for(complexity)

        factor, sample_size = self._band_factor(self.store.records(), band)
        calibrated = sample_size >= self.min_samples

        points = max(1, round_half_up(baseline * factor))

        return EffortEstimate(
            points=points,
            range=fibonacci_range(points),
            confidence=self._confidence(sample_size),
            calibrated=calibrated,
            band=band,
            baseline_points=baseline,
            calibration_factor=factor,
            sample_size=sample_size,
            reasoning=self._reasoning(complexity, calibrated, factor, sample_size),
        )

    def accuracy_stats(self) -> Dict[str, object]:
        """Get estimation accuracy statistics per band."""
        records = self.store.records()
        by_band = {}

        for band in ComplexityBand:
            completed = self._completed(records, band)
            factor, sample_size = self._band_factor(records, band)

            if completed:
                errors = [
                    abs(r.actual_points - r.estimated_points) / r.estimated_points
                    for r in completed
                ]
                avg_error = round(sum(errors) / len(errors), 2)
            else:
                avg_error = 0.0

            by_band[band.value] = {
                'count': len(completed),
                'avg_error': avg_error,
                'calibration_factor': factor if sample_size >= self.min_samples else None,
            }

        return {
            'total_records': len(records),
            'completed_records': sum(1 for r in records if r.is_completed),
            'accuracy_by_band': by_band,
        }

    def export_records(self) -> List[EstimationRecord]:
        """Export records for persistence."""
        return self.store.records()

    def import_records(self, records: List[EstimationRecord]) -> None:
        """Replace the history with previously exported records."""
        self.store.replace_all(records)
        log.info("Estimation history imported", records=len(records))

    def _completed(self, records: List[EstimationRecord], band: ComplexityBand) -> List[EstimationRecord]:
        return [
            r for r in records
            if r.band == band and r.is_completed and r.estimated_points > 0
        ]

    def _band_factor(self, records: List[EstimationRecord], band: ComplexityBand) -> tuple[float, int]:
        """Calibration factor and number of completed records behind it."""
        completed = self._completed(records, band)
        if not completed or len(completed) < self.min_samples:
            return 1.0, len(completed)

        # Median resists a single runaway item
        return statistics.median([r.get_ratio() for r in completed]), len(completed)

    def _confidence(self, sample_size: int) -> float:
        """Confidence grows with completed records, saturating at ``saturation_samples``."""
        saturation = max(1, self.saturation_samples)
        return round(0.5 + 0.45 * min(sample_size, saturation) / saturation, 3)

    def _reasoning(self, complexity: int, calibrated: bool, factor: float, sample_size: int) -> str:
        """Generate reasoning for the estimate."""
        if not calibrated:
            return (
                f"Base estimate for complexity {complexity}/10. "
                f"Calibration needs {self.min_samples} completed items in this band, "
                f"{sample_size} available."
            )

        direction = 'increase' if factor > 1 else 'decrease'
        percent = round_half_up(abs(factor - 1) * 100)

        return (
            f"Calibrated estimate for complexity {complexity}/10. "
            f"Historical data ({sample_size} items) suggests {percent}% {direction} from base."
        )
