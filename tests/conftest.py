from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import pytest

from evoengine.genetic import (
    Evaluated,
    EvaluatedPopulation,
    FitnessEvaluation,
    RandomValuesGenerator,
    mean_fitness,
)
from evoengine.operators import (
    ElitistReinserter,
    MaximizeSelector,
    MultiPointCrossBreeder,
    RandomValueMutator,
)
from evoengine.random_source import make_rng
from evoengine.simulation import BestSolution, SimState, Simulator

GENOME_LENGTH = 8
MAX_GENE = 9


class SumFitness(FitnessEvaluation[list[int], int]):
    """Fitness is the sum of the genes; maximal when every gene is MAX_GENE."""

    def __init__(self, length: int = GENOME_LENGTH, max_value: int = MAX_GENE):
        self.length = length
        self.max_value = max_value

    def fitness_of(self, genome: Sequence[int]) -> int:
        return int(sum(genome))

    def average(self, fitness_values: Sequence[int]) -> int:
        return mean_fitness(fitness_values)

    def highest_possible_fitness(self) -> int:
        return self.length * self.max_value

    def lowest_possible_fitness(self) -> int:
        return 0


def evaluate(population: list[Any], evaluator: FitnessEvaluation) -> EvaluatedPopulation:
    return EvaluatedPopulation.from_fitness(
        population, [evaluator.fitness_of(g) for g in population], evaluator
    )


def make_state(
    generation: int,
    best_fitness: Any = None,
    best_generation: int = 1,
    processing_time: timedelta = timedelta(0),
) -> SimState:
    best = None
    if best_fitness is not None:
        best = BestSolution(
            found_at=datetime.now(timezone.utc),
            generation=best_generation,
            solution=Evaluated(genome=[best_fitness], fitness=best_fitness),
        )
    return SimState(
        started_at=datetime.now(timezone.utc),
        generation=generation,
        average_fitness=0,
        highest_fitness=0,
        lowest_fitness=0,
        best_solution=best,
        duration=timedelta(0),
        processing_time=processing_time,
    )


def build_simulator(
    termination,
    *,
    seed: int = 1,
    population_size: int = 20,
    reinsertion=None,
    mutation=None,
    **options: Any,
) -> Simulator:
    fitness = SumFitness()
    rng = make_rng(seed)
    population = RandomValuesGenerator(GENOME_LENGTH, 0, MAX_GENE).generate_population(
        population_size, rng
    )
    return Simulator.builder(
        fitness,
        MaximizeSelector(selection_ratio=1.0, num_individuals_per_parents=2),
        MultiPointCrossBreeder(num_cut_points=2),
        mutation or RandomValueMutator(mutation_rate=0.1, min_value=0, max_value=MAX_GENE),
        reinsertion or ElitistReinserter(fitness, True, 0.7),
        termination,
        **options,
    ).initialize(population, rng)


@pytest.fixture
def rng():
    return make_rng(42)


@pytest.fixture
def sum_fitness():
    return SumFitness()
