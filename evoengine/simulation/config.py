from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from evoengine.genetic import FitnessEvaluation
from evoengine.operators.mutation import MutationOp
from evoengine.operators.recombination import CrossoverOp
from evoengine.operators.reinsertion import ReinsertionOp
from evoengine.operators.selection import SelectionOp
from evoengine.termination.base import Termination


class SimulatorConfig(BaseModel):
    """Operators and options controlling Simulator behaviour."""

    fitness_evaluator: FitnessEvaluation = Field(
        description="Scores genotypes and defines the fitness domain"
    )
    selection: SelectionOp = Field(description="Chooses parent groups")
    crossover: CrossoverOp = Field(description="Breeds offspring from parent groups")
    mutation: MutationOp = Field(description="Perturbs offspring")
    reinsertion: ReinsertionOp = Field(
        description="Builds the next population from offspring and survivors"
    )
    termination: Termination = Field(description="Decides when the simulation stops")
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used for fitness evaluation (1 = evaluate inline)",
    )
    log_interval: int | None = Field(
        default=None,
        ge=1,
        description="Log progress every N generations (None = debug level only)",
    )
    model_config = ConfigDict(arbitrary_types_allowed=True)
