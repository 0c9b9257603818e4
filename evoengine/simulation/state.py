from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from evoengine.exceptions import InvalidStateError
from evoengine.genetic import Evaluated

__all__ = [
    "BestSolution",
    "SimState",
    "SimulationStatus",
    "is_valid_transition",
    "validate_transition",
]


class SimulationStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    TERMINATED = "terminated"


VALID_TRANSITIONS: dict[SimulationStatus, set[SimulationStatus]] = {
    SimulationStatus.UNINITIALIZED: {SimulationStatus.RUNNING},
    SimulationStatus.RUNNING: {SimulationStatus.RUNNING, SimulationStatus.TERMINATED},
    SimulationStatus.TERMINATED: {SimulationStatus.RUNNING},
}


def is_valid_transition(current: SimulationStatus, new: SimulationStatus) -> bool:
    return new in VALID_TRANSITIONS.get(current, set())


def validate_transition(current: SimulationStatus, new: SimulationStatus) -> None:
    if not is_valid_transition(current, new):
        valid_next = VALID_TRANSITIONS.get(current, set())
        raise InvalidStateError(
            f"Invalid simulation transition: {current.value} -> {new.value}. "
            f"Valid transitions from {current.value}: {[s.value for s in valid_next]}"
        )


class BestSolution(BaseModel):
    """Fittest individual seen so far and the generation that produced it."""

    found_at: datetime
    generation: int = Field(ge=1, description="Step during which it was found")
    solution: Evaluated
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class SimState(BaseModel):
    """Snapshot of a simulation at the end of a step."""

    started_at: datetime
    generation: int = Field(ge=0, description="Number of generations processed")
    average_fitness: Any
    highest_fitness: Any
    lowest_fitness: Any
    best_solution: BestSolution | None = None
    duration: timedelta = Field(description="Wall-clock time of the last step")
    processing_time: timedelta = Field(
        description="Cumulative wall-clock time spent inside steps"
    )
    population: list[Any] = Field(
        default_factory=list, description="Population entering the next generation"
    )
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
