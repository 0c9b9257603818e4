from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from evoengine.exceptions import InvalidInputError
from evoengine.operators.recombination import rebuild_like
from evoengine.random_source import RandomSource, uniform_int

__all__ = ["MutationOp", "RandomValueMutator"]


class MutationOp(ABC):
    """Stochastically perturbs a single genotype."""

    @abstractmethod
    def mutate(self, genome: Any, rng: RandomSource) -> Any:
        """Return the (possibly) altered genome; ``genome`` itself is not modified."""


class RandomValueMutator(MutationOp):
    """Replaces genes with uniform values from ``[min_value, max_value]``.

    Genes are visited left to right. Each gene costs one draw for the
    mutate decision and, when it mutates, one more for the new value.
    """

    def __init__(self, mutation_rate: float, min_value: int, max_value: int):
        if not 0.0 <= mutation_rate <= 1.0:
            raise InvalidInputError(
                f"mutation_rate must be in [0, 1], got {mutation_rate}"
            )
        if min_value > max_value:
            raise InvalidInputError(
                f"min_value ({min_value}) must be <= max_value ({max_value})"
            )
        self.mutation_rate = mutation_rate
        self.min_value = min_value
        self.max_value = max_value

    def mutate(self, genome: Any, rng: RandomSource) -> Any:
        genes = list(genome)
        for index in range(len(genes)):
            if rng.random() < self.mutation_rate:
                genes[index] = uniform_int(rng, self.min_value, self.max_value)
        return rebuild_like(genome, genes)
