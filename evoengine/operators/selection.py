from __future__ import annotations

from abc import ABC, abstractmethod
import math
from typing import Any

from loguru import logger
import numpy as np

from evoengine.exceptions import InvalidInputError
from evoengine.genetic import EvaluatedPopulation, FitnessEvaluation
from evoengine.random_source import RandomSource

ParentGroup = list[Any]

__all__ = [
    "ParentGroup",
    "SelectionOp",
    "MaximizeSelector",
    "TournamentSelector",
    "RouletteWheelSelector",
    "UniversalSamplingSelector",
]


class SelectionOp(ABC):
    """Chooses groups of parents from an evaluated population.

    The number of groups is ``floor(population_size * selection_ratio + 0.5)``
    and every group holds ``num_individuals_per_parents`` genotypes.
    """

    def __init__(self, selection_ratio: float, num_individuals_per_parents: int):
        if not selection_ratio > 0:
            raise InvalidInputError(
                f"selection_ratio must be positive, got {selection_ratio}"
            )
        if num_individuals_per_parents < 1:
            raise InvalidInputError(
                "num_individuals_per_parents must be at least 1, "
                f"got {num_individuals_per_parents}"
            )
        self.selection_ratio = selection_ratio
        self.num_individuals_per_parents = num_individuals_per_parents

    @abstractmethod
    def select_from(
        self, evaluated: EvaluatedPopulation, rng: RandomSource
    ) -> list[ParentGroup]:
        """Return the parent groups for this generation."""

    def num_groups(self, population_size: int) -> int:
        return math.floor(population_size * self.selection_ratio + 0.5)

    def _check_population(self, evaluated: EvaluatedPopulation) -> None:
        if evaluated.size < self.num_individuals_per_parents:
            raise InvalidInputError(
                f"Population of {evaluated.size} is smaller than one parent group "
                f"of {self.num_individuals_per_parents}"
            )


class MaximizeSelector(SelectionOp):
    """Truncation selection: the fittest individuals fill the groups in rank order.

    The ranking is a stable descending sort, so individuals with equal
    fitness keep their population order. When more slots are requested than
    there are individuals the ranking is consumed cyclically. Consumes no
    randomness.
    """

    def select_from(
        self, evaluated: EvaluatedPopulation, rng: RandomSource
    ) -> list[ParentGroup]:
        self._check_population(evaluated)
        ranking = evaluated.ranked()
        pool_size = len(ranking)

        groups: list[ParentGroup] = []
        cursor = 0
        for _ in range(self.num_groups(evaluated.size)):
            group = []
            for _ in range(self.num_individuals_per_parents):
                group.append(evaluated.individuals[ranking[cursor]])
                cursor = (cursor + 1) % pool_size
            groups.append(group)

        logger.debug(
            "MaximizeSelector: {} groups of {} from {} individuals",
            len(groups),
            self.num_individuals_per_parents,
            pool_size,
        )
        return groups


class TournamentSelector(SelectionOp):
    """Each parent is the winner of a tournament among random contestants.

    Contestants are ranked by fitness (ties by population order); the best
    wins with ``probability``, else the second best with the same
    probability, and so on, the last contestant winning by default.
    """

    def __init__(
        self,
        selection_ratio: float,
        num_individuals_per_parents: int,
        tournament_size: int = 3,
        probability: float = 1.0,
        remove_selected_individuals: bool = False,
    ):
        super().__init__(selection_ratio, num_individuals_per_parents)
        if tournament_size < 1:
            raise InvalidInputError(
                f"tournament_size must be at least 1, got {tournament_size}"
            )
        if not 0.0 < probability <= 1.0:
            raise InvalidInputError(
                f"probability must be in (0, 1], got {probability}"
            )
        self.tournament_size = tournament_size
        self.probability = probability
        self.remove_selected_individuals = remove_selected_individuals

    def select_from(
        self, evaluated: EvaluatedPopulation, rng: RandomSource
    ) -> list[ParentGroup]:
        self._check_population(evaluated)
        num_groups = self.num_groups(evaluated.size)
        if self.remove_selected_individuals:
            needed = num_groups * self.num_individuals_per_parents
            if needed > evaluated.size:
                raise InvalidInputError(
                    f"Cannot select {needed} distinct individuals from a population "
                    f"of {evaluated.size}"
                )

        candidates = list(range(evaluated.size))
        groups: list[ParentGroup] = []
        for _ in range(num_groups):
            group = []
            for _ in range(self.num_individuals_per_parents):
                winner = self._tournament(candidates, evaluated, rng)
                group.append(evaluated.individuals[winner])
                if self.remove_selected_individuals:
                    candidates.remove(winner)
            groups.append(group)
        return groups

    def _tournament(
        self, candidates: list[int], evaluated: EvaluatedPopulation, rng: RandomSource
    ) -> int:
        size = min(self.tournament_size, len(candidates))
        drawn = rng.choice(len(candidates), size=size, replace=False)
        contestants = sorted(int(candidates[i]) for i in drawn)
        contestants.sort(key=lambda i: evaluated.fitness_values[i], reverse=True)
        for contestant in contestants[:-1]:
            if rng.random() < self.probability:
                return contestant
        return contestants[-1]


class RouletteWheelSelector(SelectionOp):
    """Fitness-proportionate selection on fitness normalized to the evaluator's bounds."""

    def __init__(
        self,
        fitness_evaluator: FitnessEvaluation,
        selection_ratio: float,
        num_individuals_per_parents: int,
    ):
        super().__init__(selection_ratio, num_individuals_per_parents)
        self.fitness_evaluator = fitness_evaluator

    def weights(self, evaluated: EvaluatedPopulation) -> np.ndarray:
        weights = np.array(
            [self.fitness_evaluator.normalized(f) for f in evaluated.fitness_values],
            dtype=float,
        )
        total = weights.sum()
        if total <= 0:
            logger.debug("{}: all weights zero, sampling uniformly", type(self).__name__)
            return np.full(len(weights), 1.0 / len(weights))
        return weights / total

    def select_from(
        self, evaluated: EvaluatedPopulation, rng: RandomSource
    ) -> list[ParentGroup]:
        self._check_population(evaluated)
        cumulative = np.cumsum(self.weights(evaluated))
        groups: list[ParentGroup] = []
        for _ in range(self.num_groups(evaluated.size)):
            group = []
            for _ in range(self.num_individuals_per_parents):
                index = self._spin(cumulative, rng.random())
                group.append(evaluated.individuals[index])
            groups.append(group)
        return groups

    @staticmethod
    def _spin(cumulative: np.ndarray, pointer: float) -> int:
        index = int(np.searchsorted(cumulative, pointer * cumulative[-1], side="right"))
        return min(index, len(cumulative) - 1)


class UniversalSamplingSelector(RouletteWheelSelector):
    """Stochastic universal sampling: evenly spaced pointers from a single random offset.

    Draws one offset, then one permutation of the picks before they are
    grouped; without it neighbouring pointers would pair an individual
    with itself.
    """

    def select_from(
        self, evaluated: EvaluatedPopulation, rng: RandomSource
    ) -> list[ParentGroup]:
        self._check_population(evaluated)
        cumulative = np.cumsum(self.weights(evaluated))
        num_groups = self.num_groups(evaluated.size)
        total = num_groups * self.num_individuals_per_parents
        if total == 0:
            return []

        distance = 1.0 / total
        start = rng.random() * distance
        picks = [self._spin(cumulative, start + i * distance) for i in range(total)]
        picks = [picks[int(i)] for i in rng.permutation(total)]

        arity = self.num_individuals_per_parents
        return [
            [evaluated.individuals[i] for i in picks[g * arity : (g + 1) * arity]]
            for g in range(num_groups)
        ]
