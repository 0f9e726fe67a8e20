"""Offline evaluation of estimate calibration."""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..estimation.calibrator import EstimationCalibrator
from ..models.estimation import ComplexityBand, EstimationRecord
from ..utils.math_utils import round_half_up
from .generator import WorkItemGenerator


class EvaluationResult:
    """Errors of uncalibrated and calibrated estimates over a replayed history."""
    
    def __init__(self):
        self.records_evaluated = 0
        self.calibrated_predictions = 0
        self.baseline_abs_error = 0.0
        self.calibrated_abs_error = 0.0
        self.by_band: Dict[str, Dict[str, float]] = {
            band.value: {'count': 0, 'baseline_abs_error': 0.0, 'calibrated_abs_error': 0.0}
            for band in ComplexityBand
        }
    
    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON export."""
        n = self.records_evaluated
        baseline_mae = self.baseline_abs_error / n if n else 0.0
        calibrated_mae = self.calibrated_abs_error / n if n else 0.0
        
        return {
            'records_evaluated': n,
            'calibrated_predictions': self.calibrated_predictions,
            'baseline_mae': baseline_mae,
            'calibrated_mae': calibrated_mae,
            'mae_reduction': baseline_mae - calibrated_mae,
            'by_band': {
                band: {
                    'count': stats['count'],
                    'baseline_mae': stats['baseline_abs_error'] / stats['count'] if stats['count'] else 0.0,
                    'calibrated_mae': stats['calibrated_abs_error'] / stats['count'] if stats['count'] else 0.0,
                }
                for band, stats in self.by_band.items()
            },
        }


class CalibrationEvaluator:
    """Replays a completed history to measure what calibration buys."""
    
    def __init__(self, config: Optional[dict] = None):
        """Initialize evaluator with configuration."""
        self.config = config or {}
        self.generator = WorkItemGenerator(seed=42, config=self.config)
    
    def evaluate(self, history: List[EstimationRecord]) -> EvaluationResult:
        """Predict each record from the records completed before it."""
        result = EvaluationResult()
        calibrator = EstimationCalibrator(config=self.config)
        
        ordered = sorted(
            (r for r in history if r.is_completed and r.estimated_points > 0),
            key=lambda r: r.completed_at or r.estimated_at,
        )
        
        for record in ordered:
            factor = calibrator.calibration_factor(record.band)
            calibrated_points = max(1, round_half_up(record.estimated_points * factor))
            if factor != 1.0:
                result.calibrated_predictions += 1
            
            baseline_error = abs(record.actual_points - record.estimated_points)
            calibrated_error = abs(record.actual_points - calibrated_points)
            
            result.records_evaluated += 1
            result.baseline_abs_error += baseline_error
            result.calibrated_abs_error += calibrated_error
            
            band_stats = result.by_band[record.band.value]
            band_stats['count'] += 1
            band_stats['baseline_abs_error'] += baseline_error
            band_stats['calibrated_abs_error'] += calibrated_error
            
            calibrator.record_estimate(record.item_id, record.estimated_points, record.band, record.title)
            calibrator.record_actual(record.item_id, record.actual_points)
        
        return result
    
    def run_evaluation(
        self,
        output_dir: str = "results",
        today: Optional[datetime] = None,
    ) -> EvaluationResult:
        """Run full evaluation on a generated history and export the report."""
        if today is None:
            today = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0)
        
        _, history = self.generator.generate_stream(today)
        result = self.evaluate(history)
        
        output_path = Path(output_dir)
        output_path.mkdir(exist_ok=True)
        
        with open(output_path / 'calibration_evaluation.json', 'w') as f:
            json.dump(result.to_dict(), f, indent=2, default=str)
        
        self._print_comparison(result)
        
        return result
    
    def _print_comparison(self, result: EvaluationResult):
        """Print comparison report."""
        report = result.to_dict()
        
        print("\n" + "=" * 70)
        print("CALIBRATION EVALUATION")
        print("=" * 70)
        print(f"\n{'Band':<20} {'Count':<10} {'Baseline MAE':<20} {'Calibrated MAE':<20}")
        print("-" * 70)
        
        for band, stats in report['by_band'].items():
            print(f"{band:<20} {stats['count']:<10} {stats['baseline_mae']:<20.2f} {stats['calibrated_mae']:<20.2f}")
        
        print("-" * 70)
        print(f"{'overall':<20} {report['records_evaluated']:<10} {report['baseline_mae']:<20.2f} {report['calibrated_mae']:<20.2f}")
        print("\n" + "=" * 70)
