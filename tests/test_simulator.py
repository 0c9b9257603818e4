import pytest
from pydantic import TypeAdapter

from conftest import SumFitness, build_simulator
from evoengine.exceptions import InvalidInputError, InvalidStateError, PopulationSizeError
from evoengine.operators import (
    ElitistReinserter,
    MaximizeSelector,
    MultiPointCrossBreeder,
    MutationOp,
    RandomValueMutator,
    ReinsertionOp,
    ReplaceAllReinserter,
    UniformReinserter,
)
from evoengine.random_source import make_rng
from evoengine.simulation import (
    USER_STOP_REASON,
    FinalResult,
    IntermediateResult,
    SimResult,
    SimulationStatus,
    Simulator,
)
from evoengine.termination import FitnessLimit, GenerationLimit, StopFlag, Termination, or_


class _FlakyMutator(MutationOp):
    def __init__(self):
        self.inner = RandomValueMutator(0.1, 0, 9)
        self.fail = False

    def mutate(self, genome, rng):
        if self.fail:
            raise RuntimeError("mutation exploded")
        return self.inner.mutate(genome, rng)


class _FlakyTermination(Termination):
    def __init__(self):
        self.fail = False

    def evaluate(self, state):
        if self.fail:
            raise RuntimeError("termination exploded")
        return StopFlag.continue_()


class _ShrinkingReinserter(ReinsertionOp):
    def combine(self, offspring, evaluated, rng):
        return offspring[:1]


def _run(simulator):
    results = []
    while True:
        result = simulator.step()
        results.append(result)
        if isinstance(result, FinalResult):
            return results


def test_generation_limit_terminates_at_exactly_that_generation():
    results = _run(build_simulator(GenerationLimit(5)))

    assert [r.generation for r in results] == [1, 2, 3, 4, 5]
    assert all(isinstance(r, IntermediateResult) for r in results[:-1])
    final = results[-1]
    assert final.kind == "final"
    assert "5 generations" in final.stop_reason
    assert final.total_duration >= final.processing_time


def test_step_after_final_result_is_invalid_state():
    simulator = build_simulator(GenerationLimit(1))
    assert isinstance(simulator.step(), FinalResult)
    assert simulator.status == SimulationStatus.TERMINATED

    with pytest.raises(InvalidStateError):
        simulator.step()
    with pytest.raises(InvalidStateError):
        simulator.stop()


def test_fitness_limit_stops_at_first_generation_reaching_it():
    target = 55
    results = _run(build_simulator(or_(FitnessLimit(target), GenerationLimit(500))))

    final = results[-1]
    assert "fitness limit" in final.stop_reason
    assert final.best_solution.solution.fitness >= target
    assert all(r.best_solution.solution.fitness < target for r in results[:-1])


@pytest.mark.parametrize(
    "reinsertion",
    [
        ElitistReinserter(SumFitness(), True, 0.7),
        ElitistReinserter(SumFitness(), False, 0.3),
        UniformReinserter(0.5),
        ReplaceAllReinserter(),
    ],
    ids=["elitist", "elitist-competing", "uniform", "replace-all"],
)
def test_population_size_and_best_fitness_invariants(reinsertion):
    simulator = build_simulator(GenerationLimit(25), reinsertion=reinsertion)
    size = len(simulator.population)

    previous_best = None
    for result in _run(simulator):
        assert len(result.state.population) == size
        best = result.best_solution.solution.fitness
        if previous_best is not None:
            assert best >= previous_best
        previous_best = best
        assert all(0 <= gene <= 9 for genome in result.state.population for gene in genome)


def test_best_solution_records_the_generation_it_was_found_in():
    simulator = build_simulator(GenerationLimit(10))
    for result in _run(simulator):
        best = result.best_solution
        assert 1 <= best.generation <= result.generation
        assert SumFitness().fitness_of(best.solution.genome) == best.solution.fitness


def test_fixed_seed_runs_are_identical():
    def trace(simulator):
        return [
            (
                r.generation,
                r.average_fitness,
                r.state.highest_fitness,
                r.best_solution.generation,
                r.best_solution.solution.genome,
                r.state.population,
            )
            for r in _run(simulator)
        ]

    assert trace(build_simulator(GenerationLimit(15), seed=9)) == trace(
        build_simulator(GenerationLimit(15), seed=9)
    )


def test_threaded_evaluation_matches_inline_evaluation():
    inline = _run(build_simulator(GenerationLimit(8), seed=4))
    threaded = _run(build_simulator(GenerationLimit(8), seed=4, max_workers=4))
    assert [r.state.population for r in inline] == [r.state.population for r in threaded]


def test_failing_operator_leaves_committed_state_intact():
    mutator = _FlakyMutator()
    simulator = build_simulator(GenerationLimit(3), mutation=mutator)
    simulator.step()

    population = simulator.population
    best = simulator.best_solution
    rng_state = simulator.rng.bit_generator.state

    mutator.fail = True
    with pytest.raises(RuntimeError, match="mutation exploded"):
        simulator.step()

    assert simulator.generation == 1
    assert simulator.population == population
    assert simulator.best_solution == best
    assert simulator.rng.bit_generator.state == rng_state
    assert simulator.status == SimulationStatus.RUNNING

    mutator.fail = False
    assert simulator.step().generation == 2


def test_failing_termination_leaves_committed_state_intact():
    termination = _FlakyTermination()
    simulator = build_simulator(termination)
    simulator.step()

    population = simulator.population
    best = simulator.best_solution
    processing_time = simulator.processing_time
    rng_state = simulator.rng.bit_generator.state
    steps = simulator.statistics.to_dict()["steps"]

    termination.fail = True
    with pytest.raises(RuntimeError, match="termination exploded"):
        simulator.step()

    assert simulator.generation == 1
    assert simulator.population == population
    assert simulator.best_solution == best
    assert simulator.processing_time == processing_time
    assert simulator.rng.bit_generator.state == rng_state
    assert simulator.statistics.to_dict()["steps"] == steps
    assert simulator.status == SimulationStatus.RUNNING

    termination.fail = False
    assert simulator.step().generation == 2


def test_reinsertion_breaking_population_size_is_reported():
    simulator = build_simulator(GenerationLimit(3), reinsertion=_ShrinkingReinserter())
    with pytest.raises(PopulationSizeError):
        simulator.step()
    assert simulator.generation == 0


def test_stop_request_ends_the_run_on_the_next_step():
    simulator = build_simulator(GenerationLimit(100))
    simulator.step()
    simulator.stop()

    result = simulator.step()

    assert isinstance(result, FinalResult)
    assert result.stop_reason == USER_STOP_REASON
    assert result.generation == 2


def test_reset_restarts_from_the_initial_population():
    simulator = build_simulator(GenerationLimit(3))
    initial = simulator.population
    final = simulator.run()
    assert final.generation == 3
    assert simulator.final_result is final

    simulator.reset()

    assert simulator.status == SimulationStatus.RUNNING
    assert simulator.generation == 0
    assert simulator.best_solution is None
    assert simulator.population == initial
    assert simulator.final_result is None
    assert simulator.run().generation == 3


def test_statistics_follow_the_steps():
    simulator = build_simulator(GenerationLimit(6))
    simulator.run()
    stats = simulator.statistics.to_dict()
    assert stats["steps"] == 6
    assert 1 <= stats["improvements"] <= 6
    assert simulator.processing_time.total_seconds() >= 0


def test_empty_initial_population_is_invalid_input():
    fitness = SumFitness()
    builder = Simulator.builder(
        fitness,
        MaximizeSelector(1.0, 2),
        MultiPointCrossBreeder(2),
        RandomValueMutator(0.1, 0, 9),
        ElitistReinserter(fitness, True, 0.7),
        GenerationLimit(1),
    )
    with pytest.raises(InvalidInputError):
        builder.initialize([], make_rng(1))


def test_results_form_a_discriminated_union():
    final = build_simulator(GenerationLimit(1)).step()
    dumped = {
        "kind": "final",
        "state": final.state,
        "total_duration": final.total_duration,
        "stop_reason": final.stop_reason,
    }
    restored = TypeAdapter(SimResult).validate_python(dumped)
    assert isinstance(restored, FinalResult)
    assert restored.stop_reason == final.stop_reason
