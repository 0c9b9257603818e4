from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger

from evoengine.exceptions import InvalidInputError, InvalidStateError, PopulationSizeError
from evoengine.genetic import EvaluatedPopulation, FitnessEvaluation
from evoengine.operators.mutation import MutationOp
from evoengine.operators.recombination import CrossoverOp
from evoengine.operators.reinsertion import ReinsertionOp
from evoengine.operators.selection import SelectionOp
from evoengine.random_source import RandomSource, make_rng
from evoengine.simulation.config import SimulatorConfig
from evoengine.simulation.results import FinalResult, IntermediateResult
from evoengine.simulation.state import (
    BestSolution,
    SimState,
    SimulationStatus,
    validate_transition,
)
from evoengine.simulation.statistics import SimulationStatistics
from evoengine.termination.base import Termination
from evoengine.utils.timing import Stopwatch, format_duration

__all__ = ["Simulator", "SimulatorBuilder", "USER_STOP_REASON"]

USER_STOP_REASON = "Simulation stopped by the user"


class SimulatorBuilder:
    """Binds a configuration; :meth:`initialize` starts a simulation from a population."""

    def __init__(self, config: SimulatorConfig):
        self.config = config

    def initialize(
        self, population: list[Any], rng: RandomSource | None = None
    ) -> "Simulator":
        simulator = Simulator(self.config, rng if rng is not None else make_rng())
        simulator.initialize(population)
        return simulator


class Simulator:
    """
    Generational simulation loop:
    - `step()` evaluates, selects, breeds, mutates and reinserts one generation.
    - All state (population, generation, best solution, timers) is committed
      only after a step succeeds, termination check included; a failing
      operator or termination condition leaves it and the random source untouched.
    - The random source is consumed by selection, crossover, mutation and
      reinsertion in that order, never during fitness evaluation.
    """

    def __init__(self, config: SimulatorConfig, rng: RandomSource):
        self.config = config
        self._rng = rng

        self._status = SimulationStatus.UNINITIALIZED
        self._initial_population: list[Any] = []
        self._population: list[Any] = []
        self._generation = 0
        self._best_solution: BestSolution | None = None
        self._processing_time = timedelta(0)
        self._started_at = datetime.now(timezone.utc)
        self._stop_requested = False
        self._final_result: FinalResult | None = None

        self.statistics = SimulationStatistics()

        logger.info(
            "[Simulator] Init | selection={}, crossover={}, mutation={}, reinsertion={}, termination={}",
            type(config.selection).__name__,
            type(config.crossover).__name__,
            type(config.mutation).__name__,
            type(config.reinsertion).__name__,
            config.termination,
        )

    @classmethod
    def builder(
        cls,
        fitness_evaluator: FitnessEvaluation,
        selection: SelectionOp,
        crossover: CrossoverOp,
        mutation: MutationOp,
        reinsertion: ReinsertionOp,
        termination: Termination,
        **options: Any,
    ) -> SimulatorBuilder:
        return SimulatorBuilder(
            SimulatorConfig(
                fitness_evaluator=fitness_evaluator,
                selection=selection,
                crossover=crossover,
                mutation=mutation,
                reinsertion=reinsertion,
                termination=termination,
                **options,
            )
        )

    # -------------------------- Public API --------------------------

    @property
    def status(self) -> SimulationStatus:
        return self._status

    @property
    def population(self) -> list[Any]:
        return list(self._population)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def best_solution(self) -> BestSolution | None:
        return self._best_solution

    @property
    def processing_time(self) -> timedelta:
        return self._processing_time

    @property
    def rng(self) -> RandomSource:
        return self._rng

    @property
    def final_result(self) -> FinalResult | None:
        """The result that terminated the run, ``None`` while running."""
        return self._final_result

    def initialize(self, population: list[Any]) -> None:
        if not population:
            raise InvalidInputError("Cannot start a simulation with an empty population")
        self._initial_population = list(population)
        self._reset_run_state()
        self._set_status(SimulationStatus.RUNNING)
        logger.info("[Simulator] Start | population={}", len(population))

    def reset(self) -> None:
        """Restart from the initial population with zeroed counters."""
        if self._status == SimulationStatus.UNINITIALIZED:
            raise InvalidStateError("Cannot reset a simulation that was never initialized")
        self._reset_run_state()
        self._set_status(SimulationStatus.RUNNING)
        logger.info("[Simulator] Reset | population={}", len(self._population))

    def stop(self) -> None:
        """Request termination; the next step returns a final result."""
        if self._status != SimulationStatus.RUNNING:
            raise InvalidStateError(
                f"Cannot stop a simulation in state {self._status.value}"
            )
        self._stop_requested = True
        logger.info("[Simulator] Stop requested")

    def step(self) -> IntermediateResult | FinalResult:
        if self._status == SimulationStatus.TERMINATED:
            raise InvalidStateError(
                "Simulation already terminated at generation "
                f"{self._generation}; call reset() to run again"
            )
        if self._status != SimulationStatus.RUNNING:
            raise InvalidStateError("Simulation has not been initialized")

        rng_state = self._rng.bit_generator.state
        try:
            with Stopwatch() as watch:
                evaluated = self._evaluate(self._population)
                next_population = self._breed(evaluated)
            state, improved = self._next_state(evaluated, next_population, watch.elapsed)
            flag = self.config.termination.evaluate(state)
        except Exception:
            self._rng.bit_generator.state = rng_state
            logger.debug(
                "[Simulator] Step for generation {} failed; state rolled back",
                self._generation + 1,
            )
            raise

        stop_reason = flag.reason if flag.should_stop else None
        return self._commit(state, improved, stop_reason)

    def run(self) -> FinalResult:
        """Step until the simulation terminates."""
        while True:
            result = self.step()
            if isinstance(result, FinalResult):
                return result

    # -------------------------- Internals --------------------------

    def _evaluate(self, population: list[Any]) -> EvaluatedPopulation:
        evaluator = self.config.fitness_evaluator
        if self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                fitness_values = list(pool.map(evaluator.fitness_of, population))
        else:
            fitness_values = [evaluator.fitness_of(genome) for genome in population]
        return EvaluatedPopulation.from_fitness(population, fitness_values, evaluator)

    def _breed(self, evaluated: EvaluatedPopulation) -> list[Any]:
        rng = self._rng
        parent_groups = self.config.selection.select_from(evaluated, rng)

        offspring: list[Any] = []
        for parents in parent_groups:
            offspring.extend(self.config.crossover.crossover(parents, rng))

        mutated = [self.config.mutation.mutate(child, rng) for child in offspring]
        next_population = self.config.reinsertion.combine(mutated, evaluated, rng)

        if len(next_population) != evaluated.size:
            raise PopulationSizeError(
                f"{type(self.config.reinsertion).__name__} returned "
                f"{len(next_population)} individuals, expected {evaluated.size}"
            )
        logger.debug(
            "[Simulator] Bred {} parent groups -> {} offspring",
            len(parent_groups),
            len(offspring),
        )
        return next_population

    def _next_state(
        self,
        evaluated: EvaluatedPopulation,
        next_population: list[Any],
        duration: timedelta,
    ) -> tuple[SimState, bool]:
        """Candidate state after this step; nothing on ``self`` changes."""
        generation = self._generation + 1

        best_index = evaluated.index_of_best
        best = self._best_solution
        improved = (
            best is None
            or evaluated.fitness_values[best_index] > best.solution.fitness
        )
        if improved:
            best = BestSolution(
                found_at=datetime.now(timezone.utc),
                generation=generation,
                solution=evaluated.evaluated(best_index),
            )

        state = SimState(
            started_at=self._started_at,
            generation=generation,
            average_fitness=evaluated.average_fitness,
            highest_fitness=evaluated.highest_fitness,
            lowest_fitness=evaluated.lowest_fitness,
            best_solution=best,
            duration=duration,
            processing_time=self._processing_time + duration,
            population=list(next_population),
        )
        return state, improved

    def _commit(
        self, state: SimState, improved: bool, stop_reason: str | None
    ) -> IntermediateResult | FinalResult:
        self._population = list(state.population)
        self._generation = state.generation
        self._best_solution = state.best_solution
        self._processing_time = state.processing_time
        self.statistics.record_step(state.duration, state.average_fitness, improved)
        self._log_progress(state)

        if stop_reason is None and self._stop_requested:
            stop_reason = USER_STOP_REASON
        if stop_reason is None:
            return IntermediateResult(state=state)

        total_duration = datetime.now(timezone.utc) - self._started_at
        self._final_result = FinalResult(
            state=state, total_duration=total_duration, stop_reason=stop_reason
        )
        self._set_status(SimulationStatus.TERMINATED)
        logger.info(
            "[Simulator] Stop: {} | generation={}, best_fitness={} (generation {}), processing_time={}",
            stop_reason,
            state.generation,
            self._best_solution.solution.fitness,
            self._best_solution.generation,
            format_duration(self._processing_time),
        )
        return self._final_result

    def _log_progress(self, state: SimState) -> None:
        interval = self.config.log_interval
        message = "[Simulator] Generation {} | average={}, highest={}, best={}, duration={}"
        args = (
            state.generation,
            state.average_fitness,
            state.highest_fitness,
            state.best_solution.solution.fitness,
            format_duration(state.duration),
        )
        if interval is not None and state.generation % interval == 0:
            logger.info(message, *args)
        else:
            logger.debug(message, *args)

    def _reset_run_state(self) -> None:
        self._population = list(self._initial_population)
        self._generation = 0
        self._best_solution = None
        self._processing_time = timedelta(0)
        self._started_at = datetime.now(timezone.utc)
        self._stop_requested = False
        self._final_result = None
        self.statistics = SimulationStatistics()

    def _set_status(self, status: SimulationStatus) -> None:
        validate_transition(self._status, status)
        self._status = status
