"""
The named axiom checks.

Each check is a procedure over a ``TrialContext`` that raises
``AxiomViolation`` through :func:`require` when its condition fails. Checks
that reject a null hypothesis search for a counterexample for at most
``simulated_infinity`` attempts.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .config import TestbedConfig
from .errors import AxiomViolation, ConfigurationInfeasible
from .latency import Clock, LatencyCalibrator
from .model import CapabilityFactory, Model
from .pattern import Pattern
from .sequences import Sequence, SequenceGenerator


def require(condition: bool, expression: str) -> None:
    if not condition:
        raise AxiomViolation(expression)


@dataclass
class TrialContext:
    """Everything one repetition of a check may use."""

    config: TestbedConfig
    generator: SequenceGenerator
    factory: CapabilityFactory
    difficulty: int
    clock: Clock = time.perf_counter_ns

    @property
    def infinity(self) -> int:
        return self.config.simulated_infinity

    def blank_model(self) -> Model:
        return Model.blank(self.factory)

    def random_model(self) -> Model:
        return Model.pretrained(self.factory, self.generator.random(self.config.random_strength))

    def learnable_sequence(self, length: int) -> Sequence:
        return self.generator.learnable_random(self.blank_model, length, self.infinity)


@dataclass(frozen=True)
class Check:
    number: int
    name: str
    description: str
    procedure: Callable[[TrialContext], None]
    repetitions: Optional[int] = None

    @property
    def title(self) -> str:
        return f"#{self.number} {self.name} ({self.description})"


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def genesis(ctx: TrialContext) -> None:
    model = ctx.blank_model()

    require(model == ctx.blank_model(), "C == Model.blank()")


def bias(ctx: TrialContext) -> None:
    model = ctx.blank_model()
    model.expose(ctx.generator.random_pattern())

    require(model != ctx.blank_model(), "C != Model.blank()")


def determinism(ctx: TrialContext) -> None:
    experience = ctx.generator.random(ctx.infinity)

    c = ctx.blank_model().expose(experience)
    d = ctx.blank_model().expose(experience)

    require(c == d, "C == D")


def sensitivity(ctx: TrialContext) -> None:
    initial_condition = ctx.generator.random_pattern()
    life = ctx.generator.random(ctx.infinity)

    c = ctx.blank_model().expose(initial_condition).expose(life)
    d = ctx.blank_model().expose(~initial_condition).expose(life)

    require(c != d, "C != D")


def temporality(ctx: TrialContext) -> None:
    first, second = ctx.generator.random(2)

    c = ctx.blank_model().expose(first).expose(second)
    d = ctx.blank_model().expose(second).expose(first)

    require(c != d or first == second, "C != D or first == second")


def refractory_period(ctx: TrialContext) -> None:
    single_spike = ctx.generator.random_spike()
    no_spikes = Pattern.zeros(ctx.config.width)

    require(
        ctx.blank_model().learn((single_spike, no_spikes), ctx.infinity),
        "C.learn([spike, no_spikes])",
    )
    require(
        not ctx.blank_model().learn((single_spike, single_spike), ctx.infinity),
        "not D.learn([spike, spike])",
    )


def scalability(ctx: TrialContext) -> None:
    try:
        ctx.learnable_sequence(ctx.difficulty + 1)
    except ConfigurationInfeasible as exc:
        raise AxiomViolation(f"learnable_random(difficulty + 1): {exc}") from exc


def stagnation(ctx: TrialContext) -> None:
    dog = ctx.blank_model()

    def indefinitely_adaptable() -> bool:
        for _ in range(ctx.infinity):
            new_trick = ctx.learnable_sequence(ctx.difficulty)
            if not dog.learn(new_trick, ctx.infinity):
                return False
        return True

    require(not indefinitely_adaptable(), "not indefinitely_adaptable(C)")


def input_dependence(ctx: TrialContext) -> None:
    # Null hypothesis: adaptation time is independent of the input sequence.
    def adaptation_time_can_differ_across_sequences() -> bool:
        default_time = ctx.blank_model().time_to_learn(
            ctx.generator.circular_random(ctx.difficulty), ctx.infinity
        )
        for _ in range(ctx.infinity):
            sequence = ctx.generator.circular_random(ctx.difficulty)
            if ctx.blank_model().time_to_learn(sequence, ctx.infinity) != default_time:
                return True
        return False

    require(adaptation_time_can_differ_across_sequences(), "adaptation_time_can_differ_across_sequences()")


def experience(ctx: TrialContext) -> None:
    # Null hypothesis: adaptation time is independent of the state of the model.
    def adaptation_time_can_differ_across_models() -> bool:
        target = ctx.learnable_sequence(ctx.difficulty)
        default_time = ctx.blank_model().time_to_learn(target, ctx.infinity)
        for _ in range(ctx.infinity):
            if ctx.random_model().time_to_learn(target, ctx.infinity) != default_time:
                return True
        return False

    require(adaptation_time_can_differ_across_models(), "adaptation_time_can_differ_across_models()")


def unobservability(ctx: TrialContext) -> None:
    # Null hypothesis: different models cannot produce identical behaviour.
    nontrivial_problem_length = 2

    def behaviour_can_be_identical_across_models() -> bool:
        for _ in range(ctx.infinity):
            target = ctx.learnable_sequence(nontrivial_problem_length)
            c = ctx.blank_model()
            d = ctx.random_model()
            c.learn(target, ctx.infinity)
            d.learn(target, ctx.infinity)

            require(c != d, "C != D")
            if Model.identical_behaviour(c, d, ctx.infinity):
                return True
        return False

    require(behaviour_can_be_identical_across_models(), "behaviour_can_be_identical_across_models()")


def advantage(ctx: TrialContext) -> None:
    random_guess = ctx.infinity * ctx.config.width / 2
    adapted_score = unadapted_score = 0
    for _ in range(ctx.infinity):
        facts = ctx.learnable_sequence(ctx.difficulty)
        disruption = ctx.generator.random_pattern()
        expectation = facts[0]

        adapted = ctx.blank_model()
        adapted.learn(facts, ctx.infinity)
        adapted.expose(disruption).expose(facts)
        adapted_score += adapted.current_prediction().matches(expectation)

        unadapted = ctx.blank_model().expose(disruption).expose(facts)
        unadapted_score += unadapted.current_prediction().matches(expectation)

    require(adapted_score > unadapted_score, "adapted_score > unadapted_score")
    require(adapted_score > random_guess, "adapted_score > random_guess")


def latency(ctx: TrialContext) -> None:
    verdict = LatencyCalibrator(ctx.generator, ctx.factory, ctx.config, clock=ctx.clock).run()

    require(not verdict.slower.significant, "not consistently_greater_second_value(blank, complex)")
    require(verdict.within_ceiling, "max(complex) <= guard_factor * median(blank)")


CHECKS: Tuple[Check, ...] = (
    Check(1, "Genesis", "All models begin in a completely blank, bias-free state.", genesis),
    Check(2, "Bias", "A change in state indicates bias.", bias),
    Check(3, "Determinism", "Identical experiences produce an identical state.", determinism),
    Check(4, "Sensitivity", "The model exhibits chaos-like sensitivity to initial conditions.", sensitivity),
    Check(5, "Time", "The input order is inherently temporal and crucial to the process.", temporality),
    Check(6, "RefractoryPeriod", "Each spike (1) must be followed by a no-spike (0).", refractory_period),
    Check(7, "Scalability", "The model can adapt to predict also longer sequences.", scalability),
    Check(8, "Stagnation", "You can't teach an old dog new tricks.", stagnation),
    Check(9, "Input", "Adaptation time depends on the input sequence content.", input_dependence),
    Check(10, "Experience", "Adaptation time depends on the state of the model.", experience),
    Check(11, "Unobservability", "Different internal states can produce identical behaviour.", unobservability),
    Check(12, "Advantage", "Adapted models predict more accurately.", advantage),
    Check(13, "Latency", "Update time does not grow with experience.", latency, repetitions=1),
)

CHECKS_BY_NAME: Dict[str, Check] = {check.name: check for check in CHECKS}


def get_check(name: str) -> Check:
    try:
        return CHECKS_BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown check {name!r}; choose from {', '.join(CHECKS_BY_NAME)}") from None
