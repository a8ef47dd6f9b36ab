from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import random
import time
from typing import Callable

from loguru import logger

from simevo.evolution.engine.config import EngineConfig
from simevo.evolution.engine.metrics import EngineMetrics
from simevo.evolution.engine.selection import elimination_count, next_generation, rank
from simevo.evolution.fitness import GenerationFitnessPair
from simevo.exceptions import CandidateError
from simevo.genetics.evosim import EvoSim, PopulatingFunction, PopulatingFunctionParams

__all__ = ["Evaluator", "evaluator", "StoppingFunction", "Peek"]

StoppingFunction = Callable[[GenerationFitnessPair], bool]
Peek = Callable[[GenerationFitnessPair], None]


def _no_peek(_: GenerationFitnessPair) -> None:
    pass


class Evaluator:
    """
    Generational evolution loop:
    - Generation 0 comes from the populating function; later ones only from
      copy() + mutate() of survivors.
    - Every generation evaluates all members concurrently, ranks them, keeps
      the top survivors unmutated and refills with mutated copies.
    - All stochastic choices draw from one random stream owned by the run.
    """

    def __init__(
        self,
        populating_function: PopulatingFunction,
        config: EngineConfig,
        stopping_function: StoppingFunction,
        peek: Peek | None = None,
        rng: random.Random | None = None,
    ):
        self.populating_function = populating_function
        self.config = config
        self.stopping_function = stopping_function
        self.peek = peek or _no_peek

        self.seed = config.seed if config.seed is not None else random.randrange(2**63)
        self.rng = rng if rng is not None else random.Random(self.seed)

        self.metrics = EngineMetrics()
        self.history: list[GenerationFitnessPair] = []
        self._stop_requested = False
        self._running = False

        logger.info(
            "[Evaluator] Init | population_size={}, elimination_ratio={}, maximize={}, seed={}",
            config.population_size,
            config.elimination_ratio,
            config.sort_descending,
            self.seed,
        )

    @property
    def last_generation(self) -> GenerationFitnessPair | None:
        return self.history[-1] if self.history else None

    async def run(self) -> list[EvoSim]:
        """Run generations until the stopping function holds.

        Returns:
            The population after the last refill; the copy of the best
            survivor comes first. It has not been re-evaluated.
        """
        if self._running:
            raise RuntimeError("Evaluator is already running")
        self._running, self._stop_requested = True, False
        logger.info("[Evaluator] Start")

        try:
            population = self._populate()
            generation = 0
            while True:
                generation += 1
                started = time.perf_counter()

                scores = await self._evaluate(population, generation)
                ranked = rank(population, scores, self.rng, self.config.sort_descending)
                eliminated = elimination_count(
                    self.config.population_size, self.config.elimination_ratio
                )
                survivors = [sim for sim, _ in ranked[: len(ranked) - eliminated]]
                try:
                    population = next_generation(survivors, eliminated, self.rng)
                except Exception as exc:
                    raise CandidateError(
                        f"Generation {generation}: refill failed: {exc}", generation
                    ) from exc

                self.metrics.record_generation(
                    evaluations=len(scores),
                    survivors=len(survivors),
                    mutations=eliminated,
                    finished_at=datetime.now(timezone.utc),
                    duration=time.perf_counter() - started,
                )
                pair = GenerationFitnessPair(
                    generation=generation,
                    fitness_scores=tuple(score for _, score in ranked),
                    maximize=self.config.sort_descending,
                )
                self.history.append(pair)
                logger.debug(
                    "[Evaluator] Generation {} | best={:.4f}, survivors={}, offspring={}",
                    generation,
                    pair.best,
                    len(survivors),
                    eliminated,
                )

                self.peek(pair)
                if self.stopping_function(pair):
                    logger.info("[Evaluator] Stop: stopping condition met at generation {}", generation)
                    break
                if self._stop_requested:
                    logger.info("[Evaluator] Stop: requested at generation {}", generation)
                    break
            return population
        finally:
            self._running = False
            logger.info("[Evaluator] Stopped | {}", self.metrics.to_dict())

    def _populate(self) -> list[EvoSim]:
        reset = getattr(self.populating_function, "reset", None)
        if callable(reset):
            reset()
        params = PopulatingFunctionParams(seed=self.seed)
        return [self.populating_function(params) for _ in range(self.config.population_size)]

    async def _evaluate(self, population: list[EvoSim], generation: int) -> list[float]:
        """Build and evaluate every member concurrently; all succeed or the generation fails."""
        limit = self.config.max_concurrent_evaluations
        semaphore = asyncio.Semaphore(limit) if limit else None

        async def build_and_eval(sim: EvoSim) -> float:
            if semaphore is None:
                await sim.build()
                return float(await sim.eval())
            async with semaphore:
                await sim.build()
                return float(await sim.eval())

        tasks = [
            asyncio.create_task(build_and_eval(sim), name=f"eval-{generation}-{i}")
            for i, sim in enumerate(population)
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except Exception as exc:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error("[Evaluator] Generation {} failed: {}", generation, exc)
            raise CandidateError(
                f"Generation {generation}: candidate evaluation failed: {exc}", generation
            ) from exc

    def stop(self) -> None:
        """Request the loop to exit after the current generation."""
        self._stop_requested = True

    def is_running(self) -> bool:
        return self._running


async def evaluator(
    populating_function: PopulatingFunction,
    population_size: int,
    elimination_ratio: float,
    stopping_function: StoppingFunction,
    peek: Peek | None = None,
    sort_descending: bool = True,
    seed: int | None = None,
    rng: random.Random | None = None,
    max_concurrent_evaluations: int | None = None,
) -> list[EvoSim]:
    """
    Run one evolutionary optimisation and return the last generation.

    Args:
        populating_function: builds one fresh candidate for generation 0
        population_size: stays constant during the run
        elimination_ratio: fraction of the population replaced each generation
        stopping_function: checked after each generation, loop ends when True
        peek: called once per generation before the stopping check
        sort_descending: True for fitness (bigger is better), False for error
        seed: seed of the run's random stream
        rng: explicit random stream, overrides *seed* for the run's choices
        max_concurrent_evaluations: optional bound on evaluations in flight
    """
    config = EngineConfig(
        population_size=population_size,
        elimination_ratio=elimination_ratio,
        sort_descending=sort_descending,
        seed=seed,
        max_concurrent_evaluations=max_concurrent_evaluations,
    )
    return await Evaluator(
        populating_function,
        config,
        stopping_function,
        peek=peek,
        rng=rng,
    ).run()
