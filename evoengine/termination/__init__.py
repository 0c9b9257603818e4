from evoengine.termination.base import And, Or, StopFlag, Termination, and_, or_
from evoengine.termination.limiters import (
    FitnessLimit,
    GenerationLimit,
    StagnationLimit,
    TimeLimit,
)

__all__ = [
    "And",
    "Or",
    "StopFlag",
    "Termination",
    "and_",
    "or_",
    "FitnessLimit",
    "GenerationLimit",
    "StagnationLimit",
    "TimeLimit",
]
