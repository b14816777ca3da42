"""
Constrained random sequence generation.

Sequences are tuples of patterns that respect the refractory rule: a position
that spikes at time t may not spike at time t+1. Circular sequences also
satisfy the rule across the wraparound (last → first), so they can be
replayed indefinitely.

All randomness comes from the generator's own ``DeterministicPRNG``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Tuple

from .errors import ConfigurationInfeasible
from .pattern import DEFAULT_WIDTH, Pattern
from .prng import DeterministicPRNG

if TYPE_CHECKING:  # pragma: no cover
    from .model import Model

logger = logging.getLogger(__name__)

Sequence = Tuple[Pattern, ...]
ModelFactory = Callable[[], "Model"]

MAX_PERIODIC_ATTEMPTS = 1000

STRUCTURED_FAMILIES: Tuple[str, ...] = (
    "constant",
    "alternating",
    "single_shift",
    "double_shift",
    "half_mask",
    "checkerboard",
)


# ---------------------------------------------------------------------------
# Sequence properties
# ---------------------------------------------------------------------------


def period(sequence: Iterable[Pattern]) -> int:
    """Smallest p <= n/2 with s[i] == s[i-p] for all valid i, else n."""
    items = tuple(sequence)
    n = len(items)
    for p in range(1, n // 2 + 1):
        if all(items[i] == items[i - p] for i in range(p, n)):
            return p
    return n


def is_refractory(sequence: Iterable[Pattern], circular: bool = False) -> bool:
    """True if every adjacent pair (and the wraparound pair when circular) is admissible."""
    items = tuple(sequence)
    for previous, current in zip(items, items[1:]):
        if not current.admissible_after(previous):
            return False
    if circular and items:
        return items[0].admissible_after(items[-1])
    return True


def is_trivial(sequence: Iterable[Pattern]) -> bool:
    """True if no pattern in the sequence contains a spike."""
    return all(pattern.is_zero for pattern in sequence)


def _check_length(length: int) -> None:
    if length < 0:
        raise ValueError(f"sequence length must be non-negative, got {length}")


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class SequenceGenerator:
    """Produces refractory-respecting pattern sequences from explicit PRNG state."""

    def __init__(self, prng: DeterministicPRNG, width: int = DEFAULT_WIDTH) -> None:
        if width < 1:
            raise ValueError(f"width must be positive, got {width}")
        self.prng = prng
        self.width = width

    # -- patterns -----------------------------------------------------------

    def random_pattern(self, *off: Pattern) -> Pattern:
        """Uniformly random pattern with no spike where any of ``off`` spikes."""
        mask = 0
        for pattern in off:
            mask |= pattern.bits
        return Pattern(self.prng.getrandbits(self.width) & ~mask, self.width)

    def random_spike(self) -> Pattern:
        return Pattern.spike(self.prng.randint(0, self.width - 1), self.width)

    # -- sequences ----------------------------------------------------------

    def random(self, length: int) -> Sequence:
        _check_length(length)
        if length == 0:
            return ()
        sequence = [self.random_pattern()]
        while len(sequence) < length:
            sequence.append(self.random_pattern(sequence[-1]))
        return tuple(sequence)

    def circular_random(self, length: int) -> Sequence:
        """Random sequence whose last pattern is also admissible before the first.

        Lengths below 2 yield all-zero patterns.
        """
        _check_length(length)
        if length < 2:
            return (Pattern.zeros(self.width),) * length
        sequence = list(self.random(length))
        sequence[-1] = self.random_pattern(sequence[-2], sequence[0])
        return tuple(sequence)

    def nontrivial_circular_random(self, length: int) -> Sequence:
        """Circular random sequence containing at least one spike."""
        if length < 2:
            raise ValueError(f"nontrivial circular sequences need length >= 2, got {length}")
        while True:
            sequence = self.circular_random(length)
            if not is_trivial(sequence):
                return sequence

    def periodic_random(self, length: int, period_: int) -> Sequence:
        """Circular random base of ``period_`` patterns tiled to ``length``.

        The computed period of the result is exactly ``period_``.
        """
        _check_length(length)
        if not 1 <= period_ <= length // 2:
            raise ValueError(f"period must be in [1, {length // 2}] for length {length}, got {period_}")
        for _ in range(MAX_PERIODIC_ATTEMPTS):
            base = self.circular_random(period_)
            candidate = tuple(base[i % period_] for i in range(length))
            if period(candidate) == period_:
                return candidate
        raise ConfigurationInfeasible(
            f"Unable to build a sequence of length {length} with period {period_} "
            f"in {MAX_PERIODIC_ATTEMPTS} attempts."
        )

    def trivial(self, length: int) -> Sequence:
        """All-zero patterns followed by a single all-ones pattern."""
        _check_length(length)
        if length == 0:
            return ()
        zeros = Pattern.zeros(self.width)
        return (zeros,) * (length - 1) + (Pattern.ones(self.width),)

    def structured(self, length: int, id: int) -> Sequence:
        """Deterministic low-entropy sequence selected by ``id``.

        Content patterns of the selected family occupy even positions, the
        all-zero filler occupies odd positions, so the refractory rule holds
        whatever the content.
        """
        _check_length(length)
        if id < 0:
            raise ValueError(f"structured sequence id must be non-negative, got {id}")
        family = STRUCTURED_FAMILIES[id % len(STRUCTURED_FAMILIES)]
        phase = id // len(STRUCTURED_FAMILIES)
        filler = Pattern.zeros(self.width)
        return tuple(
            self._structured_content(family, i // 2 + phase) if i % 2 == 0 else filler
            for i in range(length)
        )

    def _structured_content(self, family: str, k: int) -> Pattern:
        width = self.width
        full = (1 << width) - 1
        lower_half = (1 << (width // 2)) - 1
        if family == "constant":
            bits = full
        elif family == "alternating":
            bits = lower_half if k % 2 == 0 else full & ~lower_half
        elif family == "single_shift":
            bits = 1 << (k % width)
        elif family == "double_shift":
            bits = (0b11 << (k % max(1, width - 1))) & full
        elif family == "half_mask":
            bits = lower_half
        else:  # checkerboard
            even = sum(1 << i for i in range(0, width, 2))
            bits = even if k % 2 == 0 else full & ~even
        return Pattern(bits, width)

    def learnable_random(self, model_factory: ModelFactory, length: int, timeframe: int) -> Sequence:
        """Circular random sequence that a fresh model learns within ``timeframe`` steps.

        Raises:
            ConfigurationInfeasible: no learnable sequence in ``timeframe`` attempts.
        """
        for attempt in range(timeframe):
            candidate = self.circular_random(length)
            if model_factory().learn(candidate, timeframe):
                logger.debug(f"Learnable {length}-pattern sequence found after {attempt + 1} attempts")
                return candidate
        raise ConfigurationInfeasible(
            f"Unable to find a {length}-pattern sequence for adaptation "
            f"within {timeframe} attempts."
        )
