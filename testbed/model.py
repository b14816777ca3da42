"""
Model adapter around an opaque predictive capability.

The testbed never inspects a model's internals. A capability only has to
accept one pattern at a time, report its current prediction, compare equal
to another capability with the same behaviour-relevant state, and be
copyable. ``Model`` holds such a capability by composition and adds the
uniform operations the checks are written against.
"""

from __future__ import annotations

import abc
import copy
from typing import Callable, Iterable, Union

from .pattern import Pattern
from .sequences import Sequence


class PredictiveCapability(abc.ABC):
    """Contract required of the model under test.

    Subclasses must be default-constructible: the class itself is used as
    the factory for blank instances.
    """

    @abc.abstractmethod
    def expose(self, pattern: Pattern) -> None:
        """Consume one input pattern and update the internal state."""

    @abc.abstractmethod
    def predict(self) -> Pattern:
        """Prediction of the next input given everything seen so far."""

    @abc.abstractmethod
    def __eq__(self, other: object) -> bool:
        """Equality over the complete behaviour-relevant state."""

    def copy(self) -> "PredictiveCapability":
        return copy.deepcopy(self)


CapabilityFactory = Callable[[], PredictiveCapability]


class Model:
    """Capability plus its cached last prediction."""

    __slots__ = ("_capability", "_prediction")

    def __init__(self, capability: PredictiveCapability):
        if not isinstance(capability, PredictiveCapability):
            raise TypeError(
                f"capability must implement PredictiveCapability, got {type(capability).__name__}"
            )
        self._capability = capability
        self._prediction = capability.predict()

    @classmethod
    def blank(cls, factory: CapabilityFactory) -> "Model":
        """Freshly constructed model in its default state."""
        return cls(factory())

    @classmethod
    def pretrained(cls, factory: CapabilityFactory, experience: Iterable[Pattern]) -> "Model":
        """Blank model exposed to ``experience``."""
        return cls.blank(factory).expose(experience)

    @property
    def capability(self) -> PredictiveCapability:
        return self._capability

    # -- exposure -----------------------------------------------------------

    def expose(self, inputs: Union[Pattern, Iterable[Pattern]]) -> "Model":
        """Feed one pattern, or every pattern of an iterable in order."""
        if isinstance(inputs, Pattern):
            self._capability.expose(inputs)
            self._prediction = self._capability.predict()
            return self
        for pattern in inputs:
            if not isinstance(pattern, Pattern):
                raise TypeError(f"expected Pattern, got {type(pattern).__name__}")
            self.expose(pattern)
        return self

    def current_prediction(self) -> Pattern:
        return self._prediction

    def process(self, inputs: Iterable[Pattern]) -> Sequence:
        """Expose ``inputs`` and return the prediction made before each one."""
        predictions = []
        for pattern in inputs:
            predictions.append(self._prediction)
            self.expose(pattern)
        return tuple(predictions)

    # -- adaptation ---------------------------------------------------------

    def time_to_learn(self, sequence: Iterable[Pattern], timeframe: int) -> int:
        """Steps of cumulative replay until predictions reproduce ``sequence``.

        Returns ``timeframe`` when the sequence was not learned in time.
        """
        target = tuple(sequence)
        if not target:
            raise ValueError("cannot learn an empty sequence")
        if timeframe < 0:
            raise ValueError(f"timeframe must be non-negative, got {timeframe}")
        for time in range(0, timeframe, len(target)):
            if self.process(target) == target:
                return time
        return timeframe

    def learn(self, sequence: Iterable[Pattern], timeframe: int) -> bool:
        return self.time_to_learn(sequence, timeframe) < timeframe

    def generate(self, length: int) -> Sequence:
        """Autoregressive rollout: each prediction becomes the next input."""
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        rollout = []
        for _ in range(length):
            prediction = self._prediction
            rollout.append(prediction)
            self.expose(prediction)
        return tuple(rollout)

    behaviour = generate

    @staticmethod
    def identical_behaviour(a: "Model", b: "Model", timeframe: int) -> bool:
        """Feed both models A's predictions; True if they never disagree."""
        for _ in range(timeframe):
            prediction = a.current_prediction()
            if prediction != b.current_prediction():
                return False
            a.expose(prediction)
            b.expose(prediction)
        return a.current_prediction() == b.current_prediction()

    # -- value semantics ----------------------------------------------------

    def copy(self) -> "Model":
        duplicate = Model.__new__(Model)
        duplicate._capability = self._capability.copy()
        duplicate._prediction = self._prediction
        return duplicate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self._capability == other._capability

    def __repr__(self) -> str:
        return f"Model({self._capability!r}, prediction={self._prediction})"
