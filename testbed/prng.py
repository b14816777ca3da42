"""
Deterministic PRNG with hierarchical seeding.

Every generator, calibrator and check repetition owns one of these, so a
failing trial can be reproduced from the seed recorded in its report.
"""

import hashlib
import random


def int_to_hex_seed(seed: int) -> str:
    """Convert integer seed to hex string.

    Args:
        seed: Non-negative integer seed

    Returns:
        Hex string representation
    """
    if seed < 0:
        raise ValueError(f"seed must be non-negative, got {seed}")
    return f"{seed:016x}"


class DeterministicPRNG:
    """Deterministic pseudo-random number generator with hierarchical seeding.

    This PRNG ensures:
    - Identical seeds produce identical sequences
    - Hierarchical path-based seeding for independent streams
    - Full reproducibility across runs
    """

    def __init__(self, seed: str):
        """Initialize PRNG with hex seed string.

        Args:
            seed: Hex string seed (e.g., from int_to_hex_seed)
        """
        self.seed = seed
        self._rng = random.Random(seed)

    @classmethod
    def from_int(cls, seed: int) -> "DeterministicPRNG":
        return cls(int_to_hex_seed(seed))

    def for_path(self, *path_components: str) -> "DeterministicPRNG":
        """Create a child PRNG for a specific path.

        Each path gets an independent but deterministic random stream; the
        parent stream is not advanced.

        Args:
            *path_components: Path components (e.g., "Determinism", "17")

        Returns:
            New DeterministicPRNG instance for this path
        """
        path_str = "/".join(path_components)
        combined = f"{self.seed}::{path_str}"
        child_seed = hashlib.sha256(combined.encode("utf-8")).hexdigest()[:16]
        return DeterministicPRNG(child_seed)

    def randint(self, a: int, b: int) -> int:
        """Generate random integer in [a, b] (both inclusive)."""
        return self._rng.randint(a, b)

    def getrandbits(self, k: int) -> int:
        """Generate a non-negative integer with ``k`` uniformly random bits."""
        return self._rng.getrandbits(k)
