"""Conformance testbed for temporal predictive models."""

from .checks import CHECKS, Check, TrialContext, get_check, require
from .config import LatencyConfig, TestbedConfig, load_config_from_env
from .driver import CheckReport, RunReport, Testbed
from .errors import AxiomViolation, ConfigurationInfeasible, TestbedError
from .latency import CalibrationResult, LatencyCalibrator, LatencyVerdict, Probe
from .model import CapabilityFactory, Model, PredictiveCapability
from .pattern import DEFAULT_WIDTH, Pattern
from .prng import DeterministicPRNG, int_to_hex_seed
from .sequences import Sequence, SequenceGenerator, is_refractory, is_trivial, period

__all__: list[str] = [
    # Constants
    "CHECKS",
    "DEFAULT_WIDTH",

    # Core types
    "Pattern",
    "Sequence",
    "SequenceGenerator",
    "DeterministicPRNG",
    "PredictiveCapability",
    "CapabilityFactory",
    "Model",

    # Latency
    "LatencyCalibrator",
    "CalibrationResult",
    "LatencyVerdict",
    "Probe",

    # Driver
    "Check",
    "CheckReport",
    "RunReport",
    "Testbed",
    "TrialContext",
    "get_check",
    "require",

    # Configuration
    "LatencyConfig",
    "TestbedConfig",
    "load_config_from_env",

    # Errors
    "AxiomViolation",
    "ConfigurationInfeasible",
    "TestbedError",

    # Helpers
    "int_to_hex_seed",
    "is_refractory",
    "is_trivial",
    "period",
]
