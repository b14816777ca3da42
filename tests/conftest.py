# tests/conftest.py
import pytest

from testbed.config import LatencyConfig, TestbedConfig
from testbed.prng import DeterministicPRNG
from testbed.sequences import SequenceGenerator

# ---- Deterministic randomness
# Every fixture below is seeded so that failures reproduce exactly.


@pytest.fixture
def prng():
    return DeterministicPRNG.from_int(1234)


@pytest.fixture
def generator(prng):
    return SequenceGenerator(prng, 10)


# ---- Small battery limits
# Keeps the full check procedures fast enough for unit tests.


@pytest.fixture
def small_config():
    return TestbedConfig(
        simulated_infinity=20,
        repetitions=3,
        sequence_length=3,
        random_strength=10,
        seed=7,
        latency=LatencyConfig(target_ns=1_000, max_workload=64, trials=12, complexity=20),
    )
