from __future__ import annotations

import math
from typing import Sequence

from evoengine.exceptions import InvalidInputError
from evoengine.genetic import FitnessEvaluation, RandomValuesGenerator, mean_fitness

TARGET_TEXT = "See how a genius creates a legend"

# printable ASCII, inclusive
MIN_CHAR = 32
MAX_CHAR = 126

TextGenome = list[int]


def as_text(genome: Sequence[int]) -> str:
    """Phenotype of a text genome."""
    return "".join(chr(code) for code in genome)


class TextFitness(FitnessEvaluation[TextGenome, int]):
    """Squared share of characters matching the target, scaled to 0..100."""

    def __init__(self, target: str = TARGET_TEXT):
        if not target:
            raise InvalidInputError("target text must not be empty")
        self.target = target

    def fitness_of(self, genome: TextGenome) -> int:
        score = sum(1 for code, char in zip(genome, self.target) if chr(code) == char)
        fraction = score / len(self.target)
        return math.floor(fraction * fraction * 100 + 0.5)

    def average(self, fitness_values: Sequence[int]) -> int:
        return mean_fitness(fitness_values)

    def highest_possible_fitness(self) -> int:
        return 100

    def lowest_possible_fitness(self) -> int:
        return 0


class Monkey(RandomValuesGenerator):
    """Types random printable characters, one genome per target-length string."""

    def __init__(self, target: str = TARGET_TEXT):
        super().__init__(length=len(target), min_value=MIN_CHAR, max_value=MAX_CHAR)
