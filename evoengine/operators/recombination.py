from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from loguru import logger
import numpy as np

from evoengine.exceptions import InvalidInputError
from evoengine.random_source import RandomSource

__all__ = [
    "CrossoverOp",
    "MultiPointCrossBreeder",
    "SinglePointCrossBreeder",
    "UniformCrossBreeder",
    "rebuild_like",
]


def rebuild_like(template: Any, genes: list[Any]) -> Any:
    """Build a genotype of the same sequence type as ``template`` from ``genes``."""
    if isinstance(template, np.ndarray):
        return np.array(genes, dtype=template.dtype)
    if isinstance(template, (bytes, bytearray)):
        return type(template)(genes)
    if isinstance(template, str):
        return "".join(genes)
    if isinstance(template, tuple):
        return tuple(genes)
    return list(genes)


class CrossoverOp(ABC):
    """Combines one parent group into offspring genotypes."""

    @abstractmethod
    def crossover(self, parents: Sequence[Any], rng: RandomSource) -> list[Any]:
        """Return the offspring bred from ``parents``."""

    @staticmethod
    def _genome_length(parents: Sequence[Any]) -> int:
        if not parents:
            raise InvalidInputError("Cannot breed offspring from an empty parent group")
        lengths = {len(parent) for parent in parents}
        if len(lengths) != 1:
            raise InvalidInputError(
                f"Parents must have equal length, got lengths {sorted(lengths)}"
            )
        return lengths.pop()


class MultiPointCrossBreeder(CrossoverOp):
    """Cuts all parents at the same K random points and alternates the segments.

    One offspring per parent: offspring ``i`` takes segment ``s`` from parent
    ``(i + s) % len(parents)``.
    """

    def __init__(self, num_cut_points: int):
        if num_cut_points < 1:
            raise InvalidInputError(
                f"num_cut_points must be at least 1, got {num_cut_points}"
            )
        self.num_cut_points = num_cut_points

    def crossover(self, parents: Sequence[Any], rng: RandomSource) -> list[Any]:
        length = self._genome_length(parents)
        if self.num_cut_points >= length:
            raise InvalidInputError(
                f"num_cut_points ({self.num_cut_points}) must be smaller than the "
                f"genome length ({length})"
            )

        cut_points = self._cut_points(length, rng)
        bounds = [0, *cut_points, length]
        num_parents = len(parents)

        offspring = []
        for child_index in range(num_parents):
            genes: list[Any] = []
            for segment, (start, end) in enumerate(zip(bounds[:-1], bounds[1:])):
                donor = parents[(child_index + segment) % num_parents]
                genes.extend(donor[start:end])
            offspring.append(rebuild_like(parents[child_index], genes))

        logger.debug(
            "{}: cut points {} over length {}",
            type(self).__name__,
            cut_points,
            length,
        )
        return offspring

    def _cut_points(self, length: int, rng: RandomSource) -> list[int]:
        drawn = rng.choice(np.arange(1, length), size=self.num_cut_points, replace=False)
        return sorted(int(point) for point in drawn)


class SinglePointCrossBreeder(MultiPointCrossBreeder):
    def __init__(self):
        super().__init__(num_cut_points=1)


class UniformCrossBreeder(CrossoverOp):
    """Every gene of every offspring comes from a uniformly chosen parent."""

    def crossover(self, parents: Sequence[Any], rng: RandomSource) -> list[Any]:
        length = self._genome_length(parents)
        num_parents = len(parents)
        offspring = []
        for child_index in range(num_parents):
            donors = rng.integers(0, num_parents, size=length)
            genes = [parents[int(donor)][gene] for gene, donor in enumerate(donors)]
            offspring.append(rebuild_like(parents[child_index], genes))
        return offspring
