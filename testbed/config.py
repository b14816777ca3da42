"""
Testbed configuration.

Defaults match the canonical ``config/testbed.yaml``. A different file can be
selected with the ``TESTBED_CONFIG`` environment variable or ``--config``.
"""

from __future__ import annotations

import math
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from statistical import DEFAULT_Z_THRESHOLD, MIN_NONZERO_PAIRS

from .pattern import DEFAULT_WIDTH

DEFAULT_CONFIG_PATH = "config/testbed.yaml"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class LatencyConfig:
    """Knobs of the update-latency calibration."""

    target_ns: int = 100_000
    max_workload: int = 1_000_000
    trials: int = 100
    structured_ratio: int = 4
    guard_factor: float = 10.0
    complexity: int = 500

    def __post_init__(self) -> None:
        if self.target_ns <= 0:
            raise ValueError("latency.target_ns must be positive")
        if self.max_workload < 1:
            raise ValueError("latency.max_workload must be >= 1")
        if self.trials < 1:
            raise ValueError("latency.trials must be >= 1")
        if self.structured_ratio < 0:
            raise ValueError("latency.structured_ratio must be non-negative")
        if not self.guard_factor > 0:
            raise ValueError("latency.guard_factor must be positive")
        if self.complexity < 0:
            raise ValueError("latency.complexity must be non-negative")


@dataclass(slots=True)
class TestbedConfig:
    """Configurable limits of a conformance run."""

    __test__ = False

    width: int = DEFAULT_WIDTH
    simulated_infinity: int = 500
    repetitions: int = 500
    sequence_length: Optional[int] = None
    random_strength: int = 50
    seed: Optional[int] = None
    z_threshold: float = DEFAULT_Z_THRESHOLD
    min_nonzero_pairs: int = MIN_NONZERO_PAIRS
    latency: LatencyConfig = field(default_factory=LatencyConfig)

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError("width must be positive")
        if self.simulated_infinity < 2:
            raise ValueError("simulated_infinity must be >= 2")
        if self.repetitions < 1:
            raise ValueError("repetitions must be >= 1")
        if self.sequence_length is not None and self.sequence_length < 1:
            raise ValueError("sequence_length must be >= 1 when set")
        if self.random_strength < 0:
            raise ValueError("random_strength must be non-negative")
        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be non-negative when set")
        if not math.isfinite(self.z_threshold):
            raise ValueError("z_threshold must be finite")
        if self.min_nonzero_pairs < 1:
            raise ValueError("min_nonzero_pairs must be >= 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestbedConfig":
        significance = data.get("significance", {})
        latency = data.get("latency", {})
        defaults = LatencyConfig()
        sequence_length = data.get("sequence_length")
        seed = data.get("seed")
        return cls(
            width=int(data.get("width", DEFAULT_WIDTH)),
            simulated_infinity=int(data.get("simulated_infinity", 500)),
            repetitions=int(data.get("repetitions", 500)),
            sequence_length=int(sequence_length) if sequence_length is not None else None,
            random_strength=int(data.get("random_strength", 50)),
            seed=int(seed) if seed is not None else None,
            z_threshold=float(significance.get("z_threshold", DEFAULT_Z_THRESHOLD)),
            min_nonzero_pairs=int(significance.get("min_nonzero_pairs", MIN_NONZERO_PAIRS)),
            latency=LatencyConfig(
                target_ns=int(latency.get("target_ns", defaults.target_ns)),
                max_workload=int(latency.get("max_workload", defaults.max_workload)),
                trials=int(latency.get("trials", defaults.trials)),
                structured_ratio=int(latency.get("structured_ratio", defaults.structured_ratio)),
                guard_factor=float(latency.get("guard_factor", defaults.guard_factor)),
                complexity=int(latency.get("complexity", defaults.complexity)),
            ),
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "TestbedConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config_from_env() -> Optional[TestbedConfig]:
    """Load config when the canonical YAML exists."""
    path = Path(os.getenv("TESTBED_CONFIG", DEFAULT_CONFIG_PATH))
    if not path.exists():
        return None
    return TestbedConfig.from_file(path)
