class EvoEngineError(Exception):
    """Base for all evoengine exceptions."""

    pass


# High-level families
class InvalidInputError(EvoEngineError, ValueError):
    """Malformed configuration or operator arguments."""

    pass


class InvalidStateError(EvoEngineError, RuntimeError):
    """Operation not allowed in the current simulation state."""

    pass


class EvolutionError(EvoEngineError):
    """Evolution process failures."""

    pass


# Evolution subtypes
class PopulationSizeError(EvolutionError):
    """An operator broke the population size conservation."""

    pass
