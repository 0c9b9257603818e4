from datetime import datetime, timezone
import time

import hydra
from hydra.utils import instantiate
from loguru import logger
from omegaconf import DictConfig

from evoengine.genetic import PopulationGenerator
from evoengine.random_source import make_rng
from evoengine.simulation import (
    FinalResult,
    IntermediateResult,
    SimulatorBuilder,
    SimulatorConfig,
)
from evoengine.utils.logger_setup import run_name, setup_logger
from evoengine.utils.timing import format_duration
from problems.monkeys.fitness import as_text


def run_simulation(cfg: DictConfig) -> FinalResult:
    start_time = time.time()

    logger.info("=" * 80)
    logger.info("evoengine monkeys simulation")
    logger.info("=" * 80)
    logger.info(f"Target: {cfg.target_text!r}")
    logger.info(f"Start time: {datetime.now(timezone.utc).isoformat()}")

    try:
        logger.info("Step 1/3: Initializing components...")
        generator: PopulationGenerator = instantiate(cfg.generator)
        config: SimulatorConfig = instantiate(cfg.simulation)
        rng = make_rng(cfg.seed)
        logger.info("Step 1/3: Complete")

        logger.info("Step 2/3: Generating initial population...")
        population = generator.generate_population(cfg.population_size, rng)
        simulator = SimulatorBuilder(config).initialize(population, rng)
        logger.info(f"Step 2/3: Generated {len(population)} genotypes")

        logger.info("Step 3/3: Running simulation...")
        logger.info(f"  Max generations: {cfg.max_generations}")
        while True:
            result = simulator.step()
            best = result.best_solution
            if isinstance(result, IntermediateResult):
                logger.debug(
                    "Step: generation: {}, average_fitness: {}, best_solution: [{}], "
                    "fitness: {}, processing_time: {}",
                    result.generation,
                    result.average_fitness,
                    as_text(best.solution.genome),
                    best.solution.fitness,
                    format_duration(result.processing_time),
                )
                continue

            logger.info(result.stop_reason)
            logger.info(
                "Final result after {}: generation: {}, best_solution: [{}] with fitness {} "
                "found in generation {}, processing_time: {}",
                format_duration(result.total_duration),
                result.generation,
                as_text(best.solution.genome),
                best.solution.fitness,
                best.generation,
                format_duration(result.processing_time),
            )
            logger.info(f"Statistics: {simulator.statistics.to_dict()}")
            return result

    except KeyboardInterrupt:
        logger.info("Simulation interrupted by user")
        raise
    except Exception as e:  # pylint: disable=broad-except
        logger.error(f"Simulation failed: {e}")
        raise
    finally:
        duration = time.time() - start_time
        logger.info(f"Total run duration: {duration:.2f} seconds")
        logger.info("=" * 80)


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entrypoint with Hydra configuration management."""
    setup_logger(cfg.logging, run_name(cfg))
    run_simulation(cfg)


if __name__ == "__main__":
    main()
