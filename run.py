import asyncio
from datetime import datetime, timezone
import time

from dotenv import load_dotenv
import hydra
from hydra.utils import instantiate
from loguru import logger
from omegaconf import DictConfig

from simevo.evolution import (
    EvaluatorParams,
    GenerationFitnessPair,
    LoggingProgressWindow,
    evaluate_with_params,
)
from simevo.genetics import PopulatingFunction
from simevo.utils.logger_setup import setup_logger
from simevo.workspace import Workspace


async def run_experiment(cfg: DictConfig) -> Workspace:
    start_time = time.time()

    logger.info("=" * 80)
    logger.info("SimEvo Evolution Experiment")
    logger.info("=" * 80)
    logger.info(f"Problem: {cfg.problem.name}")
    logger.info(f"Start time: {datetime.now(timezone.utc).isoformat()}")

    try:
        logger.info("Step 1/3: Initializing components...")
        params: EvaluatorParams = instantiate(cfg.problem.evaluator)
        populating_function: PopulatingFunction = instantiate(
            cfg.problem.populating_function
        )
        logger.info(f"  Population size: {params.population_size}")
        logger.info(f"  Max generations: {params.max_generations}")
        logger.info(
            f"  Stop when {params.evaluation_percentile} percentile "
            f"{params.stopping_condition.label.lower()} passes {params.target_metric}"
        )
        logger.info(f"  Seed: {params.seed}")

        logger.info("Step 2/3: Evolving...")
        history: list[GenerationFitnessPair] = []
        population = await evaluate_with_params(
            params,
            populating_function,
            peek=history.append,
            progress=LoggingProgressWindow(),
        )
        last = history[-1]
        if last.generation > params.max_generations:
            logger.info("Step 2/3: Generation cap reached")
        else:
            logger.info(f"Step 2/3: Target reached at generation {last.generation}")

        logger.info("Step 3/3: Visualizing best candidate...")
        workspace = Workspace(cfg.problem.name)
        # Survivors lead the returned population, best first.
        population[0].visualize(workspace)
        logger.info(f"Step 3/3: Workspace components: {workspace.names}")
        return workspace

    except KeyboardInterrupt:
        logger.info("Evolution experiment interrupted by user")
        raise
    except Exception as e:  # pylint: disable=broad-except
        logger.error(f"Evolution experiment failed: {e}")
        raise
    finally:
        duration = time.time() - start_time
        logger.info(f"Total experiment duration: {duration:.2f} seconds")
        logger.info(f"End time: {datetime.now(timezone.utc).isoformat()}")
        logger.info("=" * 80)


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entrypoint with Hydra configuration management."""
    load_dotenv()

    log_file_path = setup_logger(
        problem=cfg.problem.name,
        log_dir=cfg.logging.log_dir,
        level=cfg.logging.level,
        rotation=cfg.logging.rotation,
        retention=cfg.logging.retention,
    )
    logger.info(
        "Experiment working directory: {}.",
        hydra.core.hydra_config.HydraConfig.get().runtime.output_dir,
    )
    logger.info(f"Log file: {log_file_path}")
    asyncio.run(run_experiment(cfg))


if __name__ == "__main__":
    main()
