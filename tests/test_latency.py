"""
Latency calibration against a virtual clock.

SlowCapability charges 1000ns times its update count for every exposure, so a
heavily pre-exposed model is slower on the same workload; ConstantTimeCapability
charges a flat 1000ns.
"""

from functools import partial

import pytest

from capabilities import ConstantTimeCapability, SlowCapability, VirtualClock
from testbed.config import LatencyConfig, TestbedConfig
from testbed.latency import CalibrationResult, LatencyCalibrator


def _calibrator(generator, capability, **latency):
    clock = VirtualClock()
    settings = dict(target_ns=100_000, max_workload=1_000_000, trials=20, complexity=200)
    settings.update(latency)
    config = TestbedConfig(latency=LatencyConfig(**settings))
    return LatencyCalibrator(generator, partial(capability, clock), config, clock=clock)


class TestCalibration:
    def test_growing_cost_doubles_until_target(self, generator):
        result = _calibrator(generator, SlowCapability).calibrate()

        assert [probe.workload for probe in result.probes] == [1, 2, 4, 8, 16]
        assert [probe.elapsed_ns for probe in result.probes] == [1_000, 3_000, 10_000, 36_000, 136_000]
        assert result.workload == 16
        assert result.reached_target

    def test_constant_cost_doubles_until_target(self, generator):
        result = _calibrator(generator, ConstantTimeCapability).calibrate()

        assert [probe.workload for probe in result.probes] == [1, 2, 4, 8, 16, 32, 64, 128]
        assert result.probes[-1].elapsed_ns == 128_000
        assert result.workload == 128

    def test_workload_is_capped(self, generator):
        result = _calibrator(generator, ConstantTimeCapability, max_workload=10).calibrate()

        assert [probe.workload for probe in result.probes] == [1, 2, 4, 8, 10]
        assert result.workload == 10
        assert not result.reached_target


class TestVerdict:
    def test_growing_update_cost_is_flagged(self, generator):
        verdict = _calibrator(generator, SlowCapability).run()

        assert len(verdict.samples) == 20
        assert all(complex_ns > blank_ns for blank_ns, complex_ns in verdict.samples)
        assert verdict.slower.significant
        assert not verdict.within_ceiling
        assert not verdict.passed

    def test_constant_update_cost_passes(self, generator):
        verdict = _calibrator(generator, ConstantTimeCapability).run()

        assert verdict.slower.reason == "insufficient_pairs"
        assert verdict.blank_median_ns == verdict.complex_median_ns == 128_000
        assert verdict.within_ceiling
        assert verdict.passed

    @staticmethod
    def _near_ties(slow_complex_ns):
        samples = [(100, 101) if i % 2 == 0 else (100, 99) for i in range(30)]
        samples[5] = (100, slow_complex_ns)
        return samples

    def test_single_slow_trial_under_ceiling_passes(self, generator):
        calibrator = _calibrator(generator, ConstantTimeCapability)

        verdict = calibrator.evaluate(CalibrationResult(1, (), True), self._near_ties(900))

        assert not verdict.slower.significant
        assert verdict.complex_max_ns == 900
        assert verdict.ceiling_ns == 1_000
        assert verdict.passed

    def test_single_update_over_ceiling_fails(self, generator):
        calibrator = _calibrator(generator, ConstantTimeCapability)

        verdict = calibrator.evaluate(CalibrationResult(1, (), True), self._near_ties(100_000))

        assert not verdict.slower.significant
        assert verdict.complex_median_ns == 101
        assert not verdict.within_ceiling
        assert not verdict.passed
        assert verdict.to_dict()["complex_max_ns"] == 100_000

    def test_evaluate_needs_samples(self, generator):
        with pytest.raises(ValueError):
            _calibrator(generator, ConstantTimeCapability).evaluate(CalibrationResult(1, (), True), [])

    def test_verdict_serialises(self, generator):
        payload = _calibrator(generator, ConstantTimeCapability, trials=5).run().to_dict()

        assert payload["passed"] is True
        assert payload["n_samples"] == 5
        assert payload["calibration"]["workload"] == 128


def test_latency_config_validation():
    with pytest.raises(ValueError):
        LatencyConfig(target_ns=0)
    with pytest.raises(ValueError):
        LatencyConfig(guard_factor=0)
    with pytest.raises(ValueError):
        LatencyConfig(trials=0)
