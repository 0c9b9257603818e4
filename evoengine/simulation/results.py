from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from evoengine.simulation.state import BestSolution, SimState

__all__ = ["IntermediateResult", "FinalResult", "SimResult"]


class _ResultBase(BaseModel):
    state: SimState
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def generation(self) -> int:
        return self.state.generation

    @property
    def average_fitness(self) -> Any:
        return self.state.average_fitness

    @property
    def best_solution(self) -> BestSolution:
        return self.state.best_solution

    @property
    def duration(self) -> timedelta:
        return self.state.duration

    @property
    def processing_time(self) -> timedelta:
        return self.state.processing_time


class IntermediateResult(_ResultBase):
    """Outcome of a step after which the simulation keeps running."""

    kind: Literal["intermediate"] = "intermediate"


class FinalResult(_ResultBase):
    """Outcome of the step that terminated the simulation."""

    kind: Literal["final"] = "final"
    total_duration: timedelta = Field(
        description="Wall-clock time since the simulation started"
    )
    stop_reason: str


SimResult = Annotated[
    Union[IntermediateResult, FinalResult], Field(discriminator="kind")
]
