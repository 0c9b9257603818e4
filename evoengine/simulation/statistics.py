from __future__ import annotations

from datetime import timedelta
import math
from typing import Any

from pydantic import BaseModel, Field


class RunningStats(BaseModel):
    n: int = 0
    mean: float = 0.0
    m2: float = 0.0
    minimum: float | None = None
    maximum: float | None = None

    def update(self, x: float) -> None:
        self.n += 1
        delta = x - self.mean
        self.mean = self.mean + delta * (1.0 / self.n)
        delta2 = x - self.mean
        self.m2 = self.m2 + delta * delta2
        self.minimum = x if self.minimum is None else min(self.minimum, x)
        self.maximum = x if self.maximum is None else max(self.maximum, x)

    def mean_value(self) -> float:
        return self.mean if self.n > 0 else 0.0

    def std_value(self) -> float:
        if self.n <= 1:
            return 0.0
        return math.sqrt(self.m2 / (self.n - 1))


class SimulationStatistics(BaseModel):
    """Running aggregates across all steps of a simulation."""

    step_seconds: RunningStats = Field(default_factory=RunningStats)
    average_fitness: RunningStats = Field(default_factory=RunningStats)
    improvements: int = Field(
        default=0, description="Steps that improved the best solution"
    )

    def record_step(
        self, duration: timedelta, average_fitness: Any, improved: bool
    ) -> None:
        self.step_seconds.update(duration.total_seconds())
        self.average_fitness.update(float(average_fitness))
        if improved:
            self.improvements += 1

    def mean_step_time(self) -> timedelta:
        return timedelta(seconds=self.step_seconds.mean_value())

    def to_dict(self) -> dict[str, float]:
        return {
            "steps": self.step_seconds.n,
            "improvements": self.improvements,
            "step_seconds_mean": round(self.step_seconds.mean_value(), 6),
            "step_seconds_std": round(self.step_seconds.std_value(), 6),
            "average_fitness_mean": round(self.average_fitness.mean_value(), 6),
            "average_fitness_std": round(self.average_fitness.std_value(), 6),
        }
