from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from evoengine.exceptions import InvalidInputError

if TYPE_CHECKING:
    from evoengine.simulation.state import SimState

__all__ = ["StopFlag", "Termination", "Or", "And", "or_", "and_"]


class StopFlag(BaseModel):
    """Verdict of a termination check."""

    should_stop: bool
    reason: str | None = None
    model_config = ConfigDict(frozen=True)

    @classmethod
    def continue_(cls) -> "StopFlag":
        return cls(should_stop=False)

    @classmethod
    def stop(cls, reason: str) -> "StopFlag":
        return cls(should_stop=True, reason=reason)


class Termination(ABC):
    """A predicate over the simulation state deciding when to stop.

    Terminations compose with ``|`` and ``&`` (or :func:`or_` / :func:`and_`).
    """

    @abstractmethod
    def evaluate(self, state: "SimState") -> StopFlag:
        """Check ``state`` at the end of a generation."""

    def should_stop(self, state: "SimState") -> str | None:
        """The stop reason, or ``None`` to continue."""
        flag = self.evaluate(state)
        return flag.reason if flag.should_stop else None

    def __or__(self, other: "Termination") -> "Or":
        return Or(self, other)

    def __and__(self, other: "Termination") -> "And":
        return And(self, other)


class _Combinator(Termination):
    def __init__(self, *conditions: Termination):
        if len(conditions) < 2:
            raise InvalidInputError(
                f"{type(self).__name__} needs at least two conditions, got {len(conditions)}"
            )
        self.conditions = conditions

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(map(repr, self.conditions))})"


class Or(_Combinator):
    """Stops as soon as one condition stops; reports that condition's reason."""

    def evaluate(self, state: "SimState") -> StopFlag:
        for condition in self.conditions:
            flag = condition.evaluate(state)
            if flag.should_stop:
                return flag
        return StopFlag.continue_()


class And(_Combinator):
    """Stops only when every condition stops; reasons are joined."""

    def evaluate(self, state: "SimState") -> StopFlag:
        reasons = []
        for condition in self.conditions:
            flag = condition.evaluate(state)
            if not flag.should_stop:
                return StopFlag.continue_()
            reasons.append(flag.reason)
        return StopFlag.stop(" and ".join(r for r in reasons if r))


def or_(*conditions: Termination) -> Or:
    return Or(*conditions)


def and_(*conditions: Termination) -> And:
    return And(*conditions)
