"""
Conformance run driver.

Runs the named checks for their configured number of repetitions, each
repetition with its own seed derived from the run seed, and stops at the
first violation. A violation can be replayed with :meth:`Testbed.run_check`
using the seed carried by the ``AxiomViolation``.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .checks import CHECKS, Check, TrialContext, get_check
from .config import TestbedConfig
from .errors import AxiomViolation
from .model import CapabilityFactory, Model
from .prng import DeterministicPRNG, int_to_hex_seed
from .sequences import SequenceGenerator

logger = logging.getLogger(__name__)


@dataclass
class CheckReport:
    """Result of all repetitions of one check."""

    name: str
    title: str
    repetitions: int
    elapsed_s: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "repetitions": self.repetitions,
            "elapsed_s": round(self.elapsed_s, 6),
            "status": "PASS",
        }


@dataclass
class RunReport:
    """Result of a complete conformance run; only built when every check passed."""

    seed: str
    difficulty: int
    checks: List[CheckReport] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "PASS",
            "seed": self.seed,
            "difficulty": self.difficulty,
            "checks": [check.to_dict() for check in self.checks],
        }


class Testbed:
    """Runs the axiom battery against one capability class."""

    __test__ = False

    def __init__(self, capability_factory: CapabilityFactory, config: Optional[TestbedConfig] = None):
        self.factory = capability_factory
        self.config = config or TestbedConfig()
        seed = self.config.seed
        if seed is None:
            seed = random.SystemRandom().getrandbits(32)
        self.seed = int_to_hex_seed(seed)
        self._root = DeterministicPRNG(self.seed)
        self.difficulty: Optional[int] = None

    def estimate_difficulty(self, prng: Optional[DeterministicPRNG] = None) -> int:
        """Length of temporal sequences the checks are run with.

        Returns ``sequence_length`` when configured, else one less than the
        first circular random length a blank model failed to learn, or
        ``simulated_infinity`` when every probed length was learned.
        """
        if self.config.sequence_length is not None:
            return self.config.sequence_length
        generator = SequenceGenerator(prng or self._root.for_path("difficulty"), self.config.width)
        infinity = self.config.simulated_infinity
        for difficulty in range(2, infinity):
            sequence = generator.circular_random(difficulty)
            if not Model.blank(self.factory).learn(sequence, infinity):
                logger.debug(f"First unlearned circular length: {difficulty}")
                return difficulty - 1
        return infinity

    def _run_repetition(self, check: Check, prng: DeterministicPRNG, difficulty: int, repetition: int) -> None:
        context = TrialContext(
            config=self.config,
            generator=SequenceGenerator(prng, self.config.width),
            factory=self.factory,
            difficulty=difficulty,
        )
        try:
            check.procedure(context)
        except AxiomViolation as exc:
            violation = exc.attach(check.name, prng.seed, repetition)
            logger.error(str(violation))
            raise violation from exc

    def _run(self, check: Check, difficulty: int) -> CheckReport:
        repetitions = check.repetitions or self.config.repetitions
        logger.info(check.title)
        start = time.perf_counter()
        for repetition in range(1, repetitions + 1):
            prng = self._root.for_path(check.name, str(repetition))
            self._run_repetition(check, prng, difficulty, repetition)
            logger.debug(f"{check.name}: {repetition}/{repetitions}")
        return CheckReport(check.name, check.title, repetitions, time.perf_counter() - start)

    def run(self, checks: Optional[Iterable[str]] = None) -> RunReport:
        """Run the selected checks (all by default); raises on the first violation."""
        selected = [get_check(name) for name in checks] if checks else list(CHECKS)
        difficulty = self.difficulty = self.estimate_difficulty()
        logger.info(f"Testing with seed {self.seed} and temporal sequences of {difficulty} patterns")
        report = RunReport(seed=self.seed, difficulty=difficulty)
        for check in selected:
            report.checks.append(self._run(check, difficulty))
        logger.info("PASS")
        return report

    def run_check(self, name: str, seed: str, difficulty: int) -> None:
        """Replay a single repetition of ``name`` from a recorded seed.

        ``difficulty`` must be the one the failing run reported; it is not
        re-estimated because the estimate depends on the run seed.
        """
        if difficulty < 1:
            raise ValueError(f"difficulty must be >= 1, got {difficulty}")
        check = get_check(name)
        prng = DeterministicPRNG(seed)
        logger.info(f"Replaying {check.title} with seed {seed}")
        self._run_repetition(check, prng, difficulty, repetition=0)
