from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from loguru import logger

from simevo.evolution.fitness import GenerationFitnessPair

if TYPE_CHECKING:
    from simevo.evolution.params import EvaluatorParams

__all__ = ["ProgressWindow", "LoggingProgressWindow", "progress_text"]


def progress_text(params: EvaluatorParams, pair: GenerationFitnessPair | None) -> str:
    if pair is None:
        generation, metric = 0, ""
    else:
        generation = pair.generation
        metric = f"{pair.nth_percentile_fitness(params.evaluation_percentile):.3f}"
    return (
        f"Generation: {generation}\n"
        f"{params.evaluation_percentile} Percentile {params.stopping_condition.label}: {metric}"
    )


class ProgressWindow(ABC):
    """Sink for run progress. It never influences the algorithm."""

    @abstractmethod
    def open(self, max_generations: int, text: str) -> None:
        pass

    @abstractmethod
    def update(self, generation: int, text: str) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class LoggingProgressWindow(ProgressWindow):
    """Reports progress through the log instead of a window."""

    def __init__(self) -> None:
        self.max_generations = 0
        self.value = 0
        self.text = ""
        self.is_open = False

    def open(self, max_generations: int, text: str) -> None:
        self.max_generations, self.value, self.text = max_generations, 0, text
        self.is_open = True
        logger.info("[Progress] Open | max_generations={}", max_generations)

    def update(self, generation: int, text: str) -> None:
        self.value, self.text = generation, text
        logger.info(
            "[Progress] {}/{} | {}",
            generation,
            self.max_generations,
            text.replace("\n", " | "),
        )

    def close(self) -> None:
        if self.is_open:
            self.is_open = False
            logger.info("[Progress] Closed at generation {}", self.value)
