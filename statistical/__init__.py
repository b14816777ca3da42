"""
Statistical Methods Package for the Testbed

This package provides the paired significance test used to reject null
hypotheses about timing and scoring differences between model configurations.
All methods are pure: same inputs → identical results.
"""

from statistical.signed_rank import (
    # Core test
    wilcoxon_signed_rank,
    consistently_greater_second_value,
    SignedRankResult,
    # Constants
    DEFAULT_Z_THRESHOLD,
    MIN_NONZERO_PAIRS,
)

__all__ = [
    # Core test
    "wilcoxon_signed_rank",
    "consistently_greater_second_value",
    "SignedRankResult",
    # Constants
    "DEFAULT_Z_THRESHOLD",
    "MIN_NONZERO_PAIRS",
]
