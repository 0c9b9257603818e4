from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from evoengine.exceptions import InvalidInputError
from evoengine.termination.base import StopFlag, Termination
from evoengine.utils.timing import format_duration

if TYPE_CHECKING:
    from evoengine.simulation.state import SimState

__all__ = ["FitnessLimit", "GenerationLimit", "TimeLimit", "StagnationLimit"]


class FitnessLimit(Termination):
    """Stops once the best fitness found so far reaches ``fitness_target``."""

    def __init__(self, fitness_target: Any):
        self.fitness_target = fitness_target

    def evaluate(self, state: "SimState") -> StopFlag:
        best = state.best_solution
        if best is not None and best.solution.fitness >= self.fitness_target:
            return StopFlag.stop(
                f"Simulation stopped after the fitness limit of {self.fitness_target} "
                f"has been reached"
            )
        return StopFlag.continue_()

    def __repr__(self) -> str:
        return f"FitnessLimit({self.fitness_target!r})"


class GenerationLimit(Termination):
    """Stops once ``max_generations`` generations have been processed."""

    def __init__(self, max_generations: int):
        if max_generations < 1:
            raise InvalidInputError(
                f"max_generations must be at least 1, got {max_generations}"
            )
        self.max_generations = max_generations

    def evaluate(self, state: "SimState") -> StopFlag:
        if state.generation >= self.max_generations:
            return StopFlag.stop(
                f"Simulation stopped after the limit of {self.max_generations} "
                f"generations have been processed"
            )
        return StopFlag.continue_()

    def __repr__(self) -> str:
        return f"GenerationLimit({self.max_generations})"


class TimeLimit(Termination):
    """Stops once the cumulative processing time reaches ``max_time``."""

    def __init__(self, max_time: timedelta | float):
        if not isinstance(max_time, timedelta):
            max_time = timedelta(seconds=max_time)
        if max_time <= timedelta(0):
            raise InvalidInputError(f"max_time must be positive, got {max_time}")
        self.max_time = max_time

    def evaluate(self, state: "SimState") -> StopFlag:
        if state.processing_time >= self.max_time:
            return StopFlag.stop(
                f"Simulation stopped after the time limit of "
                f"{format_duration(self.max_time)} has been reached"
            )
        return StopFlag.continue_()

    def __repr__(self) -> str:
        return f"TimeLimit({format_duration(self.max_time)})"


class StagnationLimit(Termination):
    """Stops when the best solution has not improved for ``max_stagnant_generations``."""

    def __init__(self, max_stagnant_generations: int):
        if max_stagnant_generations < 1:
            raise InvalidInputError(
                "max_stagnant_generations must be at least 1, "
                f"got {max_stagnant_generations}"
            )
        self.max_stagnant_generations = max_stagnant_generations

    def evaluate(self, state: "SimState") -> StopFlag:
        best = state.best_solution
        if best is None:
            return StopFlag.continue_()
        stagnant = state.generation - best.generation
        if stagnant >= self.max_stagnant_generations:
            return StopFlag.stop(
                f"Simulation stopped after the best solution did not improve for "
                f"{stagnant} generations"
            )
        return StopFlag.continue_()

    def __repr__(self) -> str:
        return f"StagnationLimit({self.max_stagnant_generations})"
