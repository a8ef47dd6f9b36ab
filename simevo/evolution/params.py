from __future__ import annotations

from enum import Enum
import random

from loguru import logger
from pydantic import Field

from simevo.evolution.engine.config import ConfigModel, EngineConfig
from simevo.evolution.engine.core import Evaluator, Peek
from simevo.evolution.fitness import GenerationFitnessPair
from simevo.evolution.progress import ProgressWindow, progress_text
from simevo.genetics.evosim import EvoSim, PopulatingFunction

__all__ = ["StoppingCondition", "EvaluatorParams", "evaluate_with_params"]


class StoppingCondition(str, Enum):
    """Use ERROR when minimizing a value and FITNESS when maximizing one."""

    FITNESS = "fitness"
    ERROR = "error"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def should_stop(self, actual: float, target: float) -> bool:
        if self is StoppingCondition.ERROR:
            return actual < target
        return actual > target


class EvaluatorParams(ConfigModel):
    """User facing configuration of one evaluator run."""

    population_size: int = Field(
        default=100, gt=0, description="Number of simulations spawned per generation"
    )
    elimination_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Percentage of the population eliminated each generation",
    )
    iterations_per_run: int = Field(
        default=100,
        ge=0,
        description="Each generation, the simulation is iterated this many times",
    )
    max_generations: int = Field(
        default=500,
        ge=0,
        description="After this many generations stop, regardless of fitness or error",
    )
    evaluation_percentile: int = Field(
        default=5,
        ge=0,
        le=100,
        description="When deciding whether to stop, consider the score at this percentile of the population",
    )
    stopping_condition: StoppingCondition = Field(
        default=StoppingCondition.FITNESS,
        description="Fitness stops above the target, error stops below it",
    )
    target_metric: float = Field(
        description="Once the percentile score passes this amount, the simulation is stopped"
    )
    seed: int = Field(
        default_factory=lambda: random.randrange(2**31),
        description="Random seed that can be used for replicability",
    )

    @property
    def maximize(self) -> bool:
        return self.stopping_condition is StoppingCondition.FITNESS

    def should_stop(self, pair: GenerationFitnessPair) -> bool:
        percentile = pair.nth_percentile_fitness(self.evaluation_percentile)
        return (
            self.stopping_condition.should_stop(percentile, self.target_metric)
            or pair.generation > self.max_generations
        )

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            population_size=self.population_size,
            elimination_ratio=self.elimination_ratio,
            sort_descending=self.maximize,
            seed=self.seed,
        )


async def evaluate_with_params(
    params: EvaluatorParams,
    populating_function: PopulatingFunction,
    peek: Peek | None = None,
    progress: ProgressWindow | None = None,
) -> list[EvoSim]:
    """Run the evaluator with named parameters and percentile based stopping.

    Hitting ``max_generations`` ends the run normally. The returned population
    does not say which branch fired; capture the last pair with *peek* for that.
    """
    config = params.engine_config()

    def report(pair: GenerationFitnessPair) -> None:
        logger.info("[{}] {}", pair.generation, pair.percentile_summary())
        if progress is not None:
            progress.update(pair.generation, progress_text(params, pair))
        if peek is not None:
            peek(pair)

    engine = Evaluator(
        populating_function,
        config,
        stopping_function=params.should_stop,
        peek=report,
    )
    if progress is not None:
        progress.open(params.max_generations, progress_text(params, None))
    try:
        return await engine.run()
    finally:
        if progress is not None:
            progress.close()
