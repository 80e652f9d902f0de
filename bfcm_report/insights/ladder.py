"""
Threshold ladders: ordered ``(predicate, outcome)`` rungs, first match wins.

Every score bucket, grade, insight and narrative choice in the report is a
ladder over one number.  A ladder always ends in a catch-all outcome, so
evaluation is total: whatever value arrives (including the zeros a failed
source leaves behind) maps to exactly one outcome.

    ladder = ThresholdLadder("grade", [(at_least(90), "A"), (at_least(80), "B")],
                             otherwise="F")
    ladder.evaluate(85)   # "B"

Rungs are read top-down, so thresholds must be listed from the most to the
least demanding.  ``ThresholdLadder`` checks that for the built-in
predicates and rejects out-of-order rungs at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")

_MISSING: Any = object()


@dataclass(frozen=True)
class Threshold:
    """A comparison against a fixed bound, usable as a rung predicate.

    Attributes:
        bound:     Numeric bound.
        inclusive: ``True`` for ``>=``, ``False`` for ``>``.
    """

    bound:     float
    inclusive: bool

    def __call__(self, value: float) -> bool:
        return value >= self.bound if self.inclusive else value > self.bound

    def __str__(self) -> str:
        return f"{'>=' if self.inclusive else '>'} {self.bound:g}"


def above(bound: float) -> Threshold:
    """Strict lower bound: matches ``value > bound``."""
    return Threshold(bound, inclusive=False)


def at_least(bound: float) -> Threshold:
    """Inclusive lower bound: matches ``value >= bound``."""
    return Threshold(bound, inclusive=True)


class ThresholdLadder(Generic[T]):
    """Ordered rungs over a single number with a mandatory catch-all.

    Args:
        name:      Identifier used in error messages.
        rungs:     ``(predicate, outcome)`` pairs, most demanding first.
        otherwise: Outcome when no rung matches.  Required.

    Raises:
        ValueError: If ``otherwise`` is missing, or built-in ``Threshold``
            rungs are not in descending bound order.
    """

    def __init__(
        self,
        name: str,
        rungs: Sequence[tuple[Callable[[float], bool], T]],
        otherwise: T = _MISSING,
    ) -> None:
        if otherwise is _MISSING:
            raise ValueError(f"Ladder '{name}' has no catch-all outcome.")
        self.name = name
        self.rungs: list[tuple[Callable[[float], bool], T]] = list(rungs)
        self.otherwise: T = otherwise
        self._check_order()

    def _check_order(self) -> None:
        previous: Optional[Threshold] = None
        for predicate, _ in self.rungs:
            if not isinstance(predicate, Threshold):
                previous = None
                continue
            if previous is not None and predicate.bound > previous.bound:
                raise ValueError(
                    f"Ladder '{self.name}': rung '{predicate}' follows "
                    f"'{previous}' and can never match first."
                )
            previous = predicate

    def evaluate(self, value: float) -> T:
        """Return the outcome of the first rung whose predicate matches."""
        for predicate, outcome in self.rungs:
            if predicate(value):
                return outcome
        return self.otherwise

    def rung_index(self, value: float) -> int:
        """Index of the matching rung; ``len(rungs)`` for the catch-all."""
        for i, (predicate, _) in enumerate(self.rungs):
            if predicate(value):
                return i
        return len(self.rungs)

    def __repr__(self) -> str:
        return f"ThresholdLadder({self.name!r}, rungs={len(self.rungs)})"
