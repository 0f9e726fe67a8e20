"""Tests for effort estimation and calibration."""

import pytest

from planning_core.errors import InvalidEstimateError
from planning_core.estimation.calibrator import (
    EstimationCalibrator,
    complexity_band,
    complexity_to_points,
    fibonacci_range,
)
from planning_core.models.estimation import ComplexityBand


def complete(calibrator, item_id, estimated, actual, band):
    calibrator.record_estimate(item_id, estimated, band)
    return calibrator.record_actual(item_id, actual)


class TestHelpers:
    """Test cases for the pure mapping helpers."""

    def test_complexity_to_points_step_function(self):
        """Each complexity maps onto its Fibonacci step."""
        expected = {1: 1, 2: 1, 3: 2, 4: 3, 5: 5, 6: 5, 7: 8, 8: 8, 9: 13, 10: 13}
        assert {c: complexity_to_points(c) for c in range(1, 11)} == expected

    def test_complexity_out_of_range_is_clamped(self):
        """Scores outside 1-10 are clamped instead of raising."""
        assert complexity_to_points(0) == 1
        assert complexity_to_points(15) == 13

    def test_complexity_band(self):
        """Bands split at 3 and 6."""
        assert [complexity_band(c).value for c in (1, 3, 4, 6, 7, 10)] == [
            'low', 'low', 'medium', 'medium', 'high', 'high',
        ]

    def test_custom_band_thresholds(self):
        """Band thresholds can be overridden."""
        assert complexity_band(4, {'low': 4, 'medium': 8}) == ComplexityBand.LOW

    def test_fibonacci_range(self):
        """Range spans one Fibonacci step either side."""
        assert (fibonacci_range(5).low, fibonacci_range(5).high) == (3, 8)
        assert (fibonacci_range(7).low, fibonacci_range(7).high) == (5, 8)
        assert (fibonacci_range(13).low, fibonacci_range(13).high) == (8, 21)

    def test_fibonacci_range_floor(self):
        """The low end never drops under 1."""
        assert (fibonacci_range(1).low, fibonacci_range(1).high) == (1, 2)


class TestCalibrationDefault:
    """Behaviour with too little history."""

    @pytest.mark.parametrize("completed", [0, 1, 2])
    def test_uncalibrated_below_three_records(self, calibrator, completed):
        """0-2 completed records leave the baseline untouched."""
        for i in range(completed):
            complete(calibrator, f"item-{i}", 5, 10, ComplexityBand.MEDIUM)

        estimate = calibrator.estimate(5)

        assert estimate.calibrated is False
        assert estimate.points == 5
        assert estimate.calibration_factor == 1.0
        assert estimate.sample_size == completed

    def test_pending_records_do_not_count(self, calibrator):
        """Records without an actual contribute nothing."""
        for i in range(3):
            calibrator.record_estimate(f"item-{i}", 5, ComplexityBand.MEDIUM)
        calibrator.record_actual("item-0", 10)
        calibrator.record_actual("item-1", 10)

        assert calibrator.calibration_factor(ComplexityBand.MEDIUM) == 1.0
        assert calibrator.estimate(5).calibrated is False

    def test_empty_history_confidence(self, calibrator):
        """No history gives the lowest confidence."""
        assert calibrator.estimate(3).confidence == pytest.approx(0.5)


class TestCalibrationConvergence:
    """Behaviour once a band has enough completed records."""

    @pytest.fixture
    def calibrated(self, calibrator):
        for i in range(3):
            complete(calibrator, f"item-{i}", 5, 7.5, ComplexityBand.MEDIUM)
        return calibrator

    def test_factor_matches_overrun(self, calibrated):
        """A steady 1.5x overrun gives a 1.5 factor."""
        assert calibrated.calibration_factor(ComplexityBand.MEDIUM) == pytest.approx(1.5)

    def test_estimate_applies_factor(self, calibrated):
        """Calibrated points are the rounded baseline times the factor."""
        estimate = calibrated.estimate(5)

        assert estimate.calibrated is True
        assert estimate.baseline_points == 5
        assert estimate.points == 8
        assert (estimate.range.low, estimate.range.high) == (5, 13)
        assert "50% increase" in estimate.reasoning

    def test_halves_round_up(self, calibrated):
        """3 points times 1.5 rounds to 5."""
        assert calibrated.estimate(4).points == 5

    def test_other_bands_unaffected(self, calibrated):
        """Calibration is tracked per band."""
        low = calibrated.estimate(2)
        assert low.calibrated is False
        assert low.points == 1

    def test_median_resists_outliers(self, calibrator):
        """One runaway item barely moves the factor."""
        for i, actual in enumerate([2, 2, 2.4, 20]):
            complete(calibrator, f"item-{i}", 2, actual, ComplexityBand.LOW)

        assert calibrator.calibration_factor(ComplexityBand.LOW) == pytest.approx(1.1)

    def test_confidence_grows_and_saturates(self, calibrator):
        """More completed records raise confidence up to a ceiling."""
        seen = []
        for i in range(15):
            complete(calibrator, f"item-{i}", 8, 8, ComplexityBand.HIGH)
            seen.append(calibrator.estimate(8).confidence)

        assert seen == sorted(seen)
        assert seen[9] == pytest.approx(0.95)
        assert seen[-1] == pytest.approx(0.95)

    def test_min_samples_from_config(self, store, config):
        """The sample threshold is configurable."""
        config['estimation']['min_samples'] = 1
        calibrator = EstimationCalibrator(store=store, config=config)
        complete(calibrator, "only", 5, 10, ComplexityBand.MEDIUM)

        estimate = calibrator.estimate(6)
        assert estimate.calibrated is True
        assert estimate.points == 10

    def test_zero_min_samples_on_empty_band(self, store, config):
        """A zero sample threshold still falls back to the baseline."""
        config['estimation']['min_samples'] = 0
        calibrator = EstimationCalibrator(store=store, config=config)

        estimate = calibrator.estimate(5)

        assert estimate.points == 5
        assert estimate.calibrated is False
        assert calibrator.calibration_factor(ComplexityBand.MEDIUM) == 1.0

        complete(calibrator, "first", 5, 10, ComplexityBand.MEDIUM)
        assert calibrator.estimate(5).calibrated is True


class TestRecording:
    """record_estimate / record_actual semantics."""

    def test_actual_for_unknown_item_is_noop(self, calibrator):
        """An actual without a pending estimate returns None."""
        assert calibrator.record_actual("nobody", 3) is None
        assert calibrator.export_records() == []

    def test_actual_fills_oldest_pending(self, calibrator):
        """Repeated estimates for one item are completed in order."""
        calibrator.record_estimate("item", 3, ComplexityBand.LOW)
        calibrator.record_estimate("item", 5, ComplexityBand.MEDIUM)

        first = calibrator.record_actual("item", 4)
        second = calibrator.record_actual("item", 6)

        assert first.estimated_points == 3
        assert second.estimated_points == 5
        assert first.completed_at is not None
        assert calibrator.record_actual("item", 7) is None

    def test_non_positive_estimate_rejected(self, calibrator):
        """Zero-point estimates would break ratios, so they are refused."""
        with pytest.raises(InvalidEstimateError):
            calibrator.record_estimate("item", 0, ComplexityBand.LOW)

    def test_band_accepts_string(self, calibrator):
        """Bands may be given by value."""
        record = calibrator.record_estimate("item", 2, "low")
        assert record.band == ComplexityBand.LOW

    def test_injected_store_is_shared(self, store):
        """Calibrators over one store see the same history."""
        writer = EstimationCalibrator(store=store)
        reader = EstimationCalibrator(store=store)
        for i in range(3):
            complete(writer, f"item-{i}", 8, 16, ComplexityBand.HIGH)

        assert reader.calibration_factor(ComplexityBand.HIGH) == pytest.approx(2.0)

    def test_default_stores_are_isolated(self):
        """Calibrators without a store never share history."""
        first = EstimationCalibrator()
        second = EstimationCalibrator()
        for i in range(3):
            complete(first, f"item-{i}", 8, 16, ComplexityBand.HIGH)

        assert second.calibration_factor(ComplexityBand.HIGH) == 1.0


class TestAccuracyStats:
    """Accuracy statistics and import/export."""

    def test_accuracy_by_band(self, calibrator):
        """Stats report count, mean relative error and factor per band."""
        for i in range(3):
            complete(calibrator, f"item-{i}", 5, 7.5, ComplexityBand.MEDIUM)
        calibrator.record_estimate("pending", 2, ComplexityBand.LOW)

        stats = calibrator.accuracy_stats()

        assert stats['total_records'] == 4
        assert stats['completed_records'] == 3
        assert stats['accuracy_by_band']['medium'] == {
            'count': 3,
            'avg_error': 0.5,
            'calibration_factor': 1.5,
        }
        assert stats['accuracy_by_band']['low']['calibration_factor'] is None

    def test_import_replaces_history(self, calibrator):
        """Imported records drive calibration immediately."""
        source = EstimationCalibrator()
        for i in range(3):
            complete(source, f"item-{i}", 2, 4, ComplexityBand.LOW)

        calibrator.import_records(source.export_records())

        assert calibrator.estimate(3).calibrated is True
        assert calibrator.estimate(3).points == 4
