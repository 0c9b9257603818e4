from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Sequence, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, computed_field

from evoengine.exceptions import InvalidInputError
from evoengine.random_source import RandomSource, uniform_int

G = TypeVar("G")
F = TypeVar("F")

__all__ = [
    "Evaluated",
    "EvaluatedPopulation",
    "FitnessEvaluation",
    "PopulationGenerator",
    "RandomValuesGenerator",
    "mean_fitness",
    "ranked_indices",
]


def mean_fitness(fitness_values: Sequence[Any]) -> Any:
    """Arithmetic mean; integer division when every value is an ``int``."""
    if len(fitness_values) == 0:
        raise InvalidInputError("Cannot average an empty list of fitness values")
    total = sum(fitness_values)
    if all(isinstance(v, int) for v in fitness_values):
        return total // len(fitness_values)
    return total / len(fitness_values)


def ranked_indices(fitness_values: Sequence[Any]) -> list[int]:
    """Indices ordered by descending fitness; ties keep their original order."""
    return sorted(
        range(len(fitness_values)), key=lambda i: fitness_values[i], reverse=True
    )


class FitnessEvaluation(ABC, Generic[G, F]):
    """Maps genotypes to fitness and defines the fitness domain."""

    @abstractmethod
    def fitness_of(self, genome: G) -> F:
        """Fitness of ``genome``. Must be pure and deterministic."""

    @abstractmethod
    def average(self, fitness_values: Sequence[F]) -> F:
        """Summarize a population's fitness.

        Implementations must raise ``InvalidInputError`` for an empty
        sequence; :func:`mean_fitness` does.
        """

    @abstractmethod
    def highest_possible_fitness(self) -> F:
        pass

    @abstractmethod
    def lowest_possible_fitness(self) -> F:
        pass

    def normalized(self, fitness: F) -> float:
        """Position of ``fitness`` inside the closed domain, in ``[0, 1]``."""
        lowest = float(self.lowest_possible_fitness())
        highest = float(self.highest_possible_fitness())
        if highest == lowest:
            return 1.0
        value = (float(fitness) - lowest) / (highest - lowest)
        return max(0.0, min(value, 1.0))


class PopulationGenerator(ABC, Generic[G]):
    """Produces the initial population of a simulation."""

    @abstractmethod
    def generate_genotype(self, rng: RandomSource) -> G:
        """Create one genotype by drawing from ``rng``."""

    def generate_population(self, size: int, rng: RandomSource) -> list[G]:
        if size < 1:
            raise InvalidInputError(f"population size must be at least 1, got {size}")
        population = [self.generate_genotype(rng) for _ in range(size)]
        logger.debug(
            "[{}] Generated population of {} genotypes",
            type(self).__name__,
            size,
        )
        return population


class RandomValuesGenerator(PopulationGenerator[list[int]]):
    """Fixed-length integer genotypes with genes drawn from ``[min_value, max_value]``."""

    def __init__(self, length: int, min_value: int, max_value: int):
        if length < 1:
            raise InvalidInputError(f"length must be at least 1, got {length}")
        if min_value > max_value:
            raise InvalidInputError(
                f"min_value ({min_value}) must be <= max_value ({max_value})"
            )
        self.length = length
        self.min_value = min_value
        self.max_value = max_value

    def generate_genotype(self, rng: RandomSource) -> list[int]:
        return [
            uniform_int(rng, self.min_value, self.max_value) for _ in range(self.length)
        ]


class Evaluated(BaseModel):
    """A genotype paired with its fitness."""

    genome: Any
    fitness: Any
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class EvaluatedPopulation(BaseModel):
    """One generation's genotypes with their fitness and summary values."""

    individuals: list[Any] = Field(description="Genotypes in population order")
    fitness_values: list[Any] = Field(
        description="Fitness of each genotype, aligned with individuals"
    )
    average_fitness: Any
    highest_fitness: Any
    lowest_fitness: Any
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @computed_field
    @property
    def size(self) -> int:
        return len(self.individuals)

    @computed_field
    @property
    def index_of_best(self) -> int:
        """Index of the first individual with the highest fitness."""
        return ranked_indices(self.fitness_values)[0]

    def evaluated(self, index: int) -> Evaluated:
        return Evaluated(
            genome=self.individuals[index], fitness=self.fitness_values[index]
        )

    def ranked(self) -> list[int]:
        return ranked_indices(self.fitness_values)

    @classmethod
    def from_fitness(
        cls,
        individuals: list[Any],
        fitness_values: list[Any],
        evaluator: FitnessEvaluation,
    ) -> "EvaluatedPopulation":
        if not individuals:
            raise InvalidInputError("Cannot evaluate an empty population")
        if len(individuals) != len(fitness_values):
            raise InvalidInputError(
                f"{len(individuals)} individuals but "
                f"{len(fitness_values)} fitness values"
            )
        return cls(
            individuals=individuals,
            fitness_values=fitness_values,
            average_fitness=evaluator.average(fitness_values),
            highest_fitness=max(fitness_values),
            lowest_fitness=min(fitness_values),
        )
