"""
evoengine - a generic evolutionary-computation engine.

- evoengine.genetic: fitness evaluation and population generation contracts
- evoengine.operators: selection, recombination, mutation and reinsertion
- evoengine.termination: composable stop conditions
- evoengine.simulation: the generation-stepping simulator
"""

from evoengine.exceptions import (
    EvoEngineError,
    EvolutionError,
    InvalidInputError,
    InvalidStateError,
)
from evoengine.genetic import (
    Evaluated,
    EvaluatedPopulation,
    FitnessEvaluation,
    PopulationGenerator,
)
from evoengine.random_source import RandomSource, make_rng
from evoengine.simulation import (
    FinalResult,
    IntermediateResult,
    SimResult,
    SimState,
    SimulationStatus,
    Simulator,
    SimulatorBuilder,
    SimulatorConfig,
)
from evoengine.termination import and_, or_

__version__ = "0.1.0"

__all__ = [
    "EvoEngineError",
    "EvolutionError",
    "InvalidInputError",
    "InvalidStateError",
    "Evaluated",
    "EvaluatedPopulation",
    "FitnessEvaluation",
    "PopulationGenerator",
    "RandomSource",
    "make_rng",
    "FinalResult",
    "IntermediateResult",
    "SimResult",
    "SimState",
    "SimulationStatus",
    "Simulator",
    "SimulatorBuilder",
    "SimulatorConfig",
    "and_",
    "or_",
    "__version__",
]
