from __future__ import annotations

from abc import ABC, abstractmethod
import math
from typing import Any

from loguru import logger

from evoengine.exceptions import InvalidInputError
from evoengine.genetic import EvaluatedPopulation, FitnessEvaluation, ranked_indices
from evoengine.random_source import RandomSource

__all__ = [
    "ReinsertionOp",
    "ElitistReinserter",
    "UniformReinserter",
    "ReplaceAllReinserter",
]


def _check_ratio(replace_ratio: float) -> None:
    if not 0.0 <= replace_ratio <= 1.0:
        raise InvalidInputError(f"replace_ratio must be in [0, 1], got {replace_ratio}")


class ReinsertionOp(ABC):
    """Merges offspring into the current population.

    The returned population always has as many genotypes as ``evaluated``.
    """

    @abstractmethod
    def combine(
        self,
        offspring: list[Any],
        evaluated: EvaluatedPopulation,
        rng: RandomSource,
    ) -> list[Any]:
        """Return the next-generation population."""


class ElitistReinserter(ReinsertionOp):
    """Keeps the best offspring and fills the remaining slots with the fittest survivors.

    ``replace_ratio`` is the share of the new population reserved for
    offspring: ``floor(N * replace_ratio + 0.5)`` slots, fewer when fewer
    offspring exist. Offspring are ranked by fitness and the best of them
    are kept; ties keep production order. The remaining slots go to the
    highest-ranked individuals of the old population, ties keeping
    population order.

    With ``offspring_has_precedence=False`` the kept offspring compete with
    the whole old population and the best N of both survive.
    """

    def __init__(
        self,
        fitness_evaluator: FitnessEvaluation,
        offspring_has_precedence: bool,
        replace_ratio: float,
    ):
        _check_ratio(replace_ratio)
        self.fitness_evaluator = fitness_evaluator
        self.offspring_has_precedence = offspring_has_precedence
        self.replace_ratio = replace_ratio

    def combine(
        self,
        offspring: list[Any],
        evaluated: EvaluatedPopulation,
        rng: RandomSource,
    ) -> list[Any]:
        population_size = evaluated.size
        slots = math.floor(population_size * self.replace_ratio + 0.5)
        num_offspring = min(slots, len(offspring))

        offspring_fitness = [self.fitness_evaluator.fitness_of(g) for g in offspring]
        kept = ranked_indices(offspring_fitness)[:num_offspring]

        if self.offspring_has_precedence:
            num_elites = population_size - num_offspring
            elites = evaluated.ranked()[:num_elites]
            new_population = [offspring[i] for i in kept]
            new_population.extend(evaluated.individuals[i] for i in elites)
        else:
            pool = [offspring[i] for i in kept] + list(evaluated.individuals)
            pool_fitness = [offspring_fitness[i] for i in kept] + list(
                evaluated.fitness_values
            )
            survivors = ranked_indices(pool_fitness)[:population_size]
            new_population = [pool[i] for i in survivors]

        logger.debug(
            "ElitistReinserter: {} offspring kept of {}, {} survivors",
            num_offspring,
            len(offspring),
            population_size - num_offspring,
        )
        return new_population


class UniformReinserter(ReinsertionOp):
    """Replaces randomly chosen individuals with randomly chosen offspring."""

    def __init__(self, replace_ratio: float):
        _check_ratio(replace_ratio)
        self.replace_ratio = replace_ratio

    def combine(
        self,
        offspring: list[Any],
        evaluated: EvaluatedPopulation,
        rng: RandomSource,
    ) -> list[Any]:
        population_size = evaluated.size
        count = min(
            math.floor(population_size * self.replace_ratio + 0.5), len(offspring)
        )
        new_population = list(evaluated.individuals)
        if count == 0:
            return new_population

        chosen = rng.choice(len(offspring), size=count, replace=False)
        replaced = rng.choice(population_size, size=count, replace=False)
        for slot, child in zip(replaced, chosen):
            new_population[int(slot)] = offspring[int(child)]
        return new_population


class ReplaceAllReinserter(ReinsertionOp):
    """Generational replacement: the first N offspring become the population."""

    def combine(
        self,
        offspring: list[Any],
        evaluated: EvaluatedPopulation,
        rng: RandomSource,
    ) -> list[Any]:
        if len(offspring) < evaluated.size:
            raise InvalidInputError(
                f"Replacing a population of {evaluated.size} needs at least as many "
                f"offspring, got {len(offspring)}"
            )
        return list(offspring[: evaluated.size])
