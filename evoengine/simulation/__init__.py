from __future__ import annotations

from evoengine.simulation.config import SimulatorConfig
from evoengine.simulation.core import USER_STOP_REASON, Simulator, SimulatorBuilder
from evoengine.simulation.results import FinalResult, IntermediateResult, SimResult
from evoengine.simulation.state import BestSolution, SimState, SimulationStatus
from evoengine.simulation.statistics import RunningStats, SimulationStatistics

__all__ = [
    "SimulatorConfig",
    "USER_STOP_REASON",
    "Simulator",
    "SimulatorBuilder",
    "FinalResult",
    "IntermediateResult",
    "SimResult",
    "BestSolution",
    "SimState",
    "SimulationStatus",
    "RunningStats",
    "SimulationStatistics",
]
