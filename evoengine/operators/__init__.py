from evoengine.operators.mutation import MutationOp, RandomValueMutator
from evoengine.operators.recombination import (
    CrossoverOp,
    MultiPointCrossBreeder,
    SinglePointCrossBreeder,
    UniformCrossBreeder,
)
from evoengine.operators.reinsertion import (
    ElitistReinserter,
    ReinsertionOp,
    ReplaceAllReinserter,
    UniformReinserter,
)
from evoengine.operators.selection import (
    MaximizeSelector,
    ParentGroup,
    RouletteWheelSelector,
    SelectionOp,
    TournamentSelector,
    UniversalSamplingSelector,
)

__all__ = [
    "MutationOp",
    "RandomValueMutator",
    "CrossoverOp",
    "MultiPointCrossBreeder",
    "SinglePointCrossBreeder",
    "UniformCrossBreeder",
    "ElitistReinserter",
    "ReinsertionOp",
    "ReplaceAllReinserter",
    "UniformReinserter",
    "MaximizeSelector",
    "ParentGroup",
    "RouletteWheelSelector",
    "SelectionOp",
    "TournamentSelector",
    "UniversalSamplingSelector",
]
