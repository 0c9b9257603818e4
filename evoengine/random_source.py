"""Seedable random streams handed to every stochastic operator.

There is no module-level random state: a simulation owns exactly one
``numpy.random.Generator`` and threads it through selection,
recombination, mutation and reinsertion in a fixed order, so a run is
fully reproducible from its seed.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from evoengine.exceptions import InvalidInputError

RandomSource = np.random.Generator

__all__ = ["RandomSource", "make_rng", "random_seed", "uniform_int"]


def random_seed() -> int:
    """Draw fresh OS entropy usable as a replayable seed."""
    return int(np.random.SeedSequence().entropy)


def make_rng(seed: int | None = None) -> RandomSource:
    """Create a random stream.

    Args:
        seed: Non-negative seed; ``None`` draws fresh entropy, which is
            logged so the run can be replayed with ``make_rng(seed)``.
    """
    if seed is None:
        seed = random_seed()
        logger.info("[random_source] Using fresh seed {}", seed)
    elif seed < 0:
        raise InvalidInputError(f"seed must be non-negative, got {seed}")
    return np.random.default_rng(seed)


def uniform_int(rng: RandomSource, low: int, high: int) -> int:
    """One draw from the inclusive range ``[low, high]``."""
    return int(rng.integers(low, high, endpoint=True))
