"""
Update-latency calibration.

The calibrator first finds a workload (sequence length) for which exposing a
blank model takes at least ``target_ns``, doubling from 1. It then times a
blank and a heavily pre-exposed ("complex") model on the same workloads and
asks the signed-rank test whether the complex model is consistently slower.

Timing noise is expected; it is absorbed by the statistical test. A single
slow trial fails the check only when it exceeds the absolute ceiling of
``guard_factor`` times the blank median.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Tuple

import numpy as np

from statistical import SignedRankResult, wilcoxon_signed_rank

from .config import TestbedConfig
from .model import CapabilityFactory, Model
from .sequences import Sequence, SequenceGenerator

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
TimingPair = Tuple[int, int]


@dataclass(frozen=True)
class Probe:
    workload: int
    elapsed_ns: int


@dataclass(frozen=True)
class CalibrationResult:
    """Workload chosen by the doubling search and every probe that led to it."""
    workload: int
    probes: Tuple[Probe, ...]
    reached_target: bool

    def to_dict(self) -> dict:
        return {
            "workload": self.workload,
            "reached_target": self.reached_target,
            "probes": [{"workload": p.workload, "elapsed_ns": p.elapsed_ns} for p in self.probes],
        }


@dataclass(frozen=True)
class LatencyVerdict:
    """
    Outcome of the latency comparison.

    ``passed`` requires that the complex model is not consistently slower
    than the blank one and that no complex update exceeds the ceiling.
    """
    calibration: CalibrationResult
    samples: Tuple[TimingPair, ...]
    slower: SignedRankResult
    blank_median_ns: float
    complex_median_ns: float
    complex_max_ns: float
    ceiling_ns: float

    @property
    def within_ceiling(self) -> bool:
        return self.complex_max_ns <= self.ceiling_ns

    @property
    def passed(self) -> bool:
        return not self.slower.significant and self.within_ceiling

    def to_dict(self) -> dict:
        return {
            "calibration": self.calibration.to_dict(),
            "n_samples": len(self.samples),
            "slower": self.slower.to_dict(),
            "blank_median_ns": float(self.blank_median_ns),
            "complex_median_ns": float(self.complex_median_ns),
            "complex_max_ns": float(self.complex_max_ns),
            "ceiling_ns": float(self.ceiling_ns),
            "within_ceiling": self.within_ceiling,
            "passed": self.passed,
        }


class LatencyCalibrator:
    """Self-tuning comparison of blank and complex model update times."""

    def __init__(
        self,
        generator: SequenceGenerator,
        capability_factory: CapabilityFactory,
        config: TestbedConfig,
        clock: Clock = time.perf_counter_ns,
    ) -> None:
        self.generator = generator
        self.factory = capability_factory
        self.config = config
        self.clock = clock

    def _time_exposure(self, model: Model, workload: Sequence) -> int:
        start = self.clock()
        model.expose(workload)
        return self.clock() - start

    def calibrate(self) -> CalibrationResult:
        """Double the workload from 1 until one exposure takes at least the target."""
        settings = self.config.latency
        probes: List[Probe] = []
        workload = 1
        while True:
            elapsed = self._time_exposure(Model.blank(self.factory), self.generator.random(workload))
            probes.append(Probe(workload, elapsed))
            logger.debug(f"Latency probe: workload={workload} elapsed={elapsed}ns")
            if elapsed >= settings.target_ns:
                return CalibrationResult(workload, tuple(probes), reached_target=True)
            if workload >= settings.max_workload:
                logger.warning(
                    f"Latency target {settings.target_ns}ns not reached at workload {workload}"
                )
                return CalibrationResult(workload, tuple(probes), reached_target=False)
            workload = min(workload * 2, settings.max_workload)

    def _workload(self, trial: int, length: int) -> Sequence:
        cycle = self.config.latency.structured_ratio + 1
        if trial % cycle == 0:
            return self.generator.structured(length, trial // cycle)
        return self.generator.random(length)

    def collect_samples(self, workload: int) -> List[TimingPair]:
        """Paired (blank_ns, complex_ns) timings on identical workloads."""
        settings = self.config.latency
        samples: List[TimingPair] = []
        for trial in range(settings.trials):
            sequence = self._workload(trial, workload)
            blank = Model.blank(self.factory)
            complex_model = Model.pretrained(self.factory, self.generator.random(settings.complexity))
            # alternate measurement order so warm-up effects do not favour one side
            if trial % 2 == 0:
                blank_ns = self._time_exposure(blank, sequence)
                complex_ns = self._time_exposure(complex_model, sequence)
            else:
                complex_ns = self._time_exposure(complex_model, sequence)
                blank_ns = self._time_exposure(blank, sequence)
            samples.append((blank_ns, complex_ns))
        return samples

    def evaluate(self, calibration: CalibrationResult, samples: List[TimingPair]) -> LatencyVerdict:
        if not samples:
            raise ValueError("latency evaluation needs at least one sample")
        slower = wilcoxon_signed_rank(
            samples,
            z_threshold=self.config.z_threshold,
            min_nonzero_pairs=self.config.min_nonzero_pairs,
        )
        blank_median = float(np.median([blank for blank, _ in samples]))
        complex_times = np.array([complex_ns for _, complex_ns in samples], dtype=np.float64)
        complex_median = float(np.median(complex_times))
        verdict = LatencyVerdict(
            calibration=calibration,
            samples=tuple(samples),
            slower=slower,
            blank_median_ns=blank_median,
            complex_median_ns=complex_median,
            complex_max_ns=float(complex_times.max()),
            ceiling_ns=self.config.latency.guard_factor * blank_median,
        )
        logger.info(
            f"Latency: workload={calibration.workload} blank={blank_median:.0f}ns "
            f"complex={complex_median:.0f}ns max={complex_times.max():.0f}ns z={slower.z:.3f} passed={verdict.passed}"
        )
        return verdict

    def run(self) -> LatencyVerdict:
        calibration = self.calibrate()
        return self.evaluate(calibration, self.collect_samples(calibration.workload))
