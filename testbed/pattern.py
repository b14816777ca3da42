"""
Fixed-width spike patterns.

A pattern is one instant of multi-channel spiking input or output: ``width``
boolean positions stored as an integer bit mask. Position ``i`` is bit ``i``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

DEFAULT_WIDTH = 10


@dataclass(frozen=True, slots=True)
class Pattern:
    """Immutable boolean vector of ``width`` spike positions."""

    bits: int = 0
    width: int = DEFAULT_WIDTH

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"width must be positive, got {self.width}")
        if self.bits < 0 or self.bits >> self.width:
            raise ValueError(f"bits {self.bits:#x} do not fit in width {self.width}")

    # -- constructors -------------------------------------------------------

    @classmethod
    def zeros(cls, width: int = DEFAULT_WIDTH) -> "Pattern":
        return cls(0, width)

    @classmethod
    def ones(cls, width: int = DEFAULT_WIDTH) -> "Pattern":
        return cls((1 << width) - 1, width)

    @classmethod
    def spike(cls, index: int, width: int = DEFAULT_WIDTH) -> "Pattern":
        """Pattern with a single spike at ``index``."""
        if not 0 <= index < width:
            raise IndexError(f"spike index {index} out of range for width {width}")
        return cls(1 << index, width)

    @classmethod
    def from_bits(cls, values: Iterable[bool]) -> "Pattern":
        """Build a pattern from per-position truth values (position 0 first)."""
        bits = 0
        width = 0
        for index, value in enumerate(values):
            if value:
                bits |= 1 << index
            width = index + 1
        return cls(bits, width)

    @classmethod
    def from_string(cls, text: str) -> "Pattern":
        """Inverse of ``str()``: ``"0110"`` has spikes at positions 1 and 2."""
        if set(text) - {"0", "1"}:
            raise ValueError(f"pattern string may only contain 0 and 1: {text!r}")
        return cls.from_bits(ch == "1" for ch in text)

    # -- element access -----------------------------------------------------

    def __len__(self) -> int:
        return self.width

    def __getitem__(self, index: int) -> bool:
        if index < 0:
            index += self.width
        if not 0 <= index < self.width:
            raise IndexError(f"position {index} out of range for width {self.width}")
        return bool(self.bits >> index & 1)

    def __iter__(self) -> Iterator[bool]:
        return (bool(self.bits >> i & 1) for i in range(self.width))

    def __str__(self) -> str:
        return "".join("1" if spike else "0" for spike in self)

    # -- bitwise algebra ----------------------------------------------------

    def _check(self, other: "Pattern") -> None:
        if not isinstance(other, Pattern):
            raise TypeError(f"expected Pattern, got {type(other).__name__}")
        if other.width != self.width:
            raise ValueError(f"width mismatch: {self.width} vs {other.width}")

    def __invert__(self) -> "Pattern":
        return Pattern(~self.bits & ((1 << self.width) - 1), self.width)

    def __and__(self, other: "Pattern") -> "Pattern":
        self._check(other)
        return Pattern(self.bits & other.bits, self.width)

    def __or__(self, other: "Pattern") -> "Pattern":
        self._check(other)
        return Pattern(self.bits | other.bits, self.width)

    def __xor__(self, other: "Pattern") -> "Pattern":
        self._check(other)
        return Pattern(self.bits ^ other.bits, self.width)

    # -- queries ------------------------------------------------------------

    @property
    def is_zero(self) -> bool:
        return self.bits == 0

    def count(self) -> int:
        """Number of spikes."""
        return bin(self.bits).count("1")

    def matches(self, other: "Pattern") -> int:
        """Number of positions at which both patterns agree."""
        return self.width - (self ^ other).count()

    def admissible_after(self, previous: "Pattern") -> bool:
        """True if no position spikes in both ``previous`` and this pattern."""
        self._check(previous)
        return self.bits & previous.bits == 0
