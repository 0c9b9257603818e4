import pytest

from conftest import evaluate
from evoengine.exceptions import InvalidInputError
from evoengine.operators import ElitistReinserter, ReplaceAllReinserter, UniformReinserter


@pytest.fixture
def population():
    return [[1], [4], [3], [2]]


def test_elitist_keeps_best_offspring_then_best_survivors(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    offspring = [[9], [0], [7], [8], [5]]

    result = ElitistReinserter(sum_fitness, True, 0.5).combine(offspring, evaluated, rng)

    assert result == [[9], [8], [4], [3]]


def test_elitist_precedence_controls_weak_offspring(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    offspring = [[0], [0]]

    with_precedence = ElitistReinserter(sum_fitness, True, 0.5).combine(
        offspring, evaluated, rng
    )
    without_precedence = ElitistReinserter(sum_fitness, False, 0.5).combine(
        offspring, evaluated, rng
    )

    assert with_precedence == [[0], [0], [4], [3]]
    assert without_precedence == [[4], [3], [2], [1]]


def test_elitist_fills_missing_offspring_with_survivors(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    result = ElitistReinserter(sum_fitness, True, 1.0).combine([[6]], evaluated, rng)
    assert result == [[6], [4], [3], [2]]


def test_elitist_ties_keep_population_order(sum_fitness, rng):
    population = [[2], [2], [2], [2]]
    evaluated = evaluate(population, sum_fitness)

    result = ElitistReinserter(sum_fitness, True, 0.0).combine([[9]], evaluated, rng)

    assert all(kept is original for kept, original in zip(result, population))


@pytest.mark.parametrize("ratio", [-0.1, 1.5])
def test_reinserters_validate_ratio(sum_fitness, ratio):
    with pytest.raises(InvalidInputError):
        ElitistReinserter(sum_fitness, True, ratio)
    with pytest.raises(InvalidInputError):
        UniformReinserter(ratio)


def test_uniform_reinserter_conserves_size(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    offspring = [[10], [11], [12]]

    result = UniformReinserter(0.5).combine(offspring, evaluated, rng)

    assert len(result) == 4
    assert sum(1 for g in result if g in offspring) == 2
    assert sum(1 for g in result if g in population) == 2


def test_uniform_reinserter_with_zero_ratio_keeps_population(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    assert UniformReinserter(0.0).combine([[10]], evaluated, rng) == population


def test_replace_all_takes_first_offspring(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    offspring = [[5], [6], [7], [8], [9]]
    assert ReplaceAllReinserter().combine(offspring, evaluated, rng) == offspring[:4]


def test_replace_all_needs_enough_offspring(sum_fitness, population, rng):
    evaluated = evaluate(population, sum_fitness)
    with pytest.raises(InvalidInputError):
        ReplaceAllReinserter().combine([[5]], evaluated, rng)
