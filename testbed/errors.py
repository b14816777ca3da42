"""Exceptions raised by the testbed."""

from typing import Optional


class TestbedError(Exception):
    """Base class for testbed failures."""

    # not a pytest test class
    __test__ = False


class ConfigurationInfeasible(TestbedError):
    """Raised when no learnable example exists within the search budget.

    This is a setup error: the requested difficulty cannot be met by the
    model family, so no conformance claim can be made either way.
    """


class AxiomViolation(TestbedError):
    """Raised when a check's required condition does not hold."""

    def __init__(
        self,
        expression: str,
        check: Optional[str] = None,
        seed: Optional[str] = None,
        repetition: Optional[int] = None,
    ):
        self.expression = expression
        self.check = check
        self.seed = seed
        self.repetition = repetition
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" in {self.check}" if self.check else ""
        context = []
        if self.repetition is not None:
            context.append(f"repetition {self.repetition}")
        if self.seed is not None:
            context.append(f"seed {self.seed}")
        suffix = f" ({', '.join(context)})" if context else ""
        return f"Assertion failed{where}{suffix}: {self.expression}"

    def attach(self, check: str, seed: str, repetition: int) -> "AxiomViolation":
        """Return a copy carrying the check, seed and repetition that produced it."""
        return AxiomViolation(self.expression, check=check, seed=seed, repetition=repetition)

    def to_dict(self) -> dict:
        return {
            "check": self.check,
            "expression": self.expression,
            "seed": self.seed,
            "repetition": self.repetition,
        }
