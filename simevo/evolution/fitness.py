from __future__ import annotations

import math
from typing import Iterable

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, computed_field

__all__ = ["GenerationFitnessPair", "DEFAULT_SUMMARY_PERCENTILES"]

DEFAULT_SUMMARY_PERCENTILES: tuple[int, ...] = (0, 10, 25, 50, 75, 90, 100)


class GenerationFitnessPair(BaseModel):
    """Fitness scores of one generation, in the order the population was ranked."""

    generation: int = Field(ge=0, description="1-based generation number")
    fitness_scores: tuple[float, ...] = Field(
        min_length=1, description="Scores of every member of the generation"
    )
    maximize: bool = Field(
        default=True, description="True when higher scores are better"
    )

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def best(self) -> float:
        return max(self.fitness_scores) if self.maximize else min(self.fitness_scores)

    @property
    def mean(self) -> float:
        return float(np.mean(self.fitness_scores))

    @property
    def std(self) -> float:
        return float(np.std(self.fitness_scores))

    def nth_percentile_fitness(self, n: float) -> float:
        """Nearest-rank percentile of this generation's scores.

        Scores are sorted ascending and the value at rank ``ceil(n / 100 * N)``
        is returned, so ``n=0`` gives the minimum and ``n=100`` the maximum.
        """
        if not 0 <= n <= 100:
            raise ValueError(f"Percentile must be within [0, 100], got {n}")
        ordered = np.sort(np.asarray(self.fitness_scores, dtype=float))
        index = math.ceil(n * len(ordered) / 100) - 1
        index = min(max(index, 0), len(ordered) - 1)
        return float(ordered[index])

    def percentile_summary(
        self,
        percentiles: Iterable[int] = DEFAULT_SUMMARY_PERCENTILES,
        decimals: int = 3,
    ) -> str:
        return " ".join(
            f"{p}: {self.nth_percentile_fitness(p):.{decimals}f}" for p in percentiles
        )
