"""
One-Sided Wilcoxon Signed-Rank Test for Paired Observations

This module decides whether the second value of a paired observation tends to
exceed the first one. It is used by the testbed to reject null hypotheses
about timing and scoring differences between two model configurations.

FORMAL DEFINITION
=================

Function: wilcoxon_signed_rank
------------------------------

Inputs:
    pairs : iterable of (v1, v2)
        Paired scalar observations from the same trial.
        - NaN and infinite values are NOT permitted (will raise ValueError).
        - Pairs with v1 == v2 carry no direction and are discarded.

    z_threshold : float (keyword-only)
        One-sided z-score threshold.
        - 3.090  very conservative (0.1% significance), the default
        - 2.326  strong evidence   (1% significance)
        - 1.645  standard choice   (5% significance)

    min_nonzero_pairs : int (keyword-only)
        Minimum number of non-zero differences required before the normal
        approximation is trusted. Default 10.

Outputs:
    SignedRankResult containing W+, the null mean and deviation, the z-score,
    the one-sided p-value and the boolean verdict.

Algorithm:
    1. Discard zero differences; n' = remaining count.
    2. Rank |v2 - v1| ascending, tied values share their midrank.
    3. W+ = sum of ranks with v2 > v1.
    4. mu = n'(n'+1)/4
       sigma^2 = n'(n'+1)(2n'+1)/24 - sum(t^3 - t)/48 over tie groups.
    5. z = (W+ - mu - cc) / sigma with a continuity correction cc of 0.5
       toward the mean.
    6. significant iff z > z_threshold.

The function is pure: no randomness, no I/O, no state.

References:
    - Wilcoxon (1945) "Individual Comparisons by Ranking Methods"
    - Lehmann (1975) "Nonparametrics: Statistical Methods Based on Ranks"
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple, Union

import numpy as np
from scipy.stats import norm, rankdata


# =============================================================================
# Constants & Configuration
# =============================================================================

DEFAULT_Z_THRESHOLD = 3.090  # one-sided 0.1%
MIN_NONZERO_PAIRS = 10
CONTINUITY_CORRECTION = 0.5

Number = Union[int, float]
Pair = Tuple[Number, Number]


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class SignedRankResult:
    """
    Outcome of a one-sided signed-rank test for "second value is greater".

    Immutable so a verdict can be attached to a report without being altered.
    """
    n_pairs: int
    n_nonzero: int
    w_plus: float
    mu: float
    sigma: float
    z: float
    p_value: float
    z_threshold: float
    significant: bool
    reason: str

    @property
    def direction(self) -> str:
        """Direction suggested by W+: 'second_greater', 'first_greater' or 'null'."""
        if self.n_nonzero == 0 or self.w_plus == self.mu:
            return "null"
        return "second_greater" if self.w_plus > self.mu else "first_greater"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "n_pairs": self.n_pairs,
            "n_nonzero": self.n_nonzero,
            "w_plus": float(self.w_plus),
            "mu": float(self.mu),
            "sigma": float(self.sigma),
            "z": float(self.z),
            "p_value": float(self.p_value),
            "z_threshold": float(self.z_threshold),
            "significant": self.significant,
            "direction": self.direction,
            "reason": self.reason,
        }


# =============================================================================
# Core Implementation
# =============================================================================

def _as_pair_arrays(pairs: Iterable[Pair]) -> tuple[np.ndarray, np.ndarray]:
    """
    Split paired observations into two float64 arrays.

    Raises:
        ValueError: If a pair is malformed or contains non-finite values.
    """
    first: list[float] = []
    second: list[float] = []
    for index, pair in enumerate(pairs):
        if len(pair) != 2:
            raise ValueError(f"pair {index} must have exactly 2 values, got {len(pair)}")
        first.append(float(pair[0]))
        second.append(float(pair[1]))

    v1 = np.asarray(first, dtype=np.float64)
    v2 = np.asarray(second, dtype=np.float64)
    if not np.all(np.isfinite(v1)) or not np.all(np.isfinite(v2)):
        raise ValueError("pairs contain NaN or infinite values")
    return v1, v2


def _tie_correction(abs_diffs: np.ndarray) -> float:
    """Sum of t^3 - t over groups of tied absolute differences."""
    _, counts = np.unique(abs_diffs, return_counts=True)
    counts = counts.astype(np.float64)
    return float(np.sum(counts ** 3 - counts))


def _not_significant(
    n_pairs: int,
    n_nonzero: int,
    z_threshold: float,
    reason: str,
    w_plus: float = 0.0,
    mu: float = 0.0,
    sigma: float = 0.0,
) -> SignedRankResult:
    return SignedRankResult(
        n_pairs=n_pairs,
        n_nonzero=n_nonzero,
        w_plus=w_plus,
        mu=mu,
        sigma=sigma,
        z=0.0,
        p_value=1.0,
        z_threshold=z_threshold,
        significant=False,
        reason=reason,
    )


# =============================================================================
# Main Public API
# =============================================================================

def wilcoxon_signed_rank(
    pairs: Union[Sequence[Pair], Iterable[Pair]],
    *,
    z_threshold: float = DEFAULT_Z_THRESHOLD,
    min_nonzero_pairs: int = MIN_NONZERO_PAIRS,
) -> SignedRankResult:
    """
    Test whether the second value of each pair tends to exceed the first.

    Parameters
    ----------
    pairs : iterable of (v1, v2)
        Paired observations. Order of pairs does not matter.

    z_threshold : float (keyword-only)
        One-sided threshold applied to the normal approximation.

    min_nonzero_pairs : int (keyword-only)
        Fewer non-zero differences than this yield a "not significant" result
        with reason ``insufficient_pairs``.

    Returns
    -------
    SignedRankResult
        ``significant`` is True iff there is evidence that v2 > v1.

    Raises
    ------
    ValueError
        If inputs fail validation.

    Examples
    --------
    >>> pairs = [(i, i + 100) for i in range(50)]
    >>> wilcoxon_signed_rank(pairs).significant
    True
    >>> wilcoxon_signed_rank([(1, 2)] * 5).reason
    'insufficient_pairs'
    """
    if not math.isfinite(z_threshold):
        raise ValueError(f"z_threshold must be finite, got {z_threshold}")
    if min_nonzero_pairs < 1:
        raise ValueError(f"min_nonzero_pairs must be >= 1, got {min_nonzero_pairs}")

    v1, v2 = _as_pair_arrays(pairs)
    n_pairs = len(v1)

    diffs = v2 - v1
    diffs = diffs[diffs != 0.0]
    n = len(diffs)
    if n < min_nonzero_pairs:
        return _not_significant(n_pairs, n, z_threshold, "insufficient_pairs")

    abs_diffs = np.abs(diffs)
    ranks = rankdata(abs_diffs, method="average")
    w_plus = float(np.sum(ranks[diffs > 0]))

    mu = n * (n + 1.0) / 4.0
    variance = n * (n + 1.0) * (2.0 * n + 1.0) / 24.0 - _tie_correction(abs_diffs) / 48.0
    if variance <= 0.0:
        return _not_significant(n_pairs, n, z_threshold, "degenerate_variance", w_plus, mu)

    sigma = math.sqrt(variance)
    correction = math.copysign(CONTINUITY_CORRECTION, w_plus - mu) if w_plus != mu else 0.0
    z = (w_plus - mu - correction) / sigma
    significant = z > z_threshold

    return SignedRankResult(
        n_pairs=n_pairs,
        n_nonzero=n,
        w_plus=w_plus,
        mu=mu,
        sigma=sigma,
        z=z,
        p_value=float(norm.sf(z)),
        z_threshold=z_threshold,
        significant=significant,
        reason="rejected_null" if significant else "null_not_rejected",
    )


def consistently_greater_second_value(
    pairs: Union[Sequence[Pair], Iterable[Pair]],
    z_threshold: float = DEFAULT_Z_THRESHOLD,
    min_nonzero_pairs: int = MIN_NONZERO_PAIRS,
) -> bool:
    """
    Boolean form of :func:`wilcoxon_signed_rank`.

    Returns False when fewer than ``min_nonzero_pairs`` non-zero differences
    are available, True when v2 is consistently larger than v1, False otherwise.
    """
    return wilcoxon_signed_rank(
        pairs, z_threshold=z_threshold, min_nonzero_pairs=min_nonzero_pairs
    ).significant
