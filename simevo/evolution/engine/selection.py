"""Ranking, elimination and refill steps of a generation."""

from __future__ import annotations

import math
import random
from typing import Iterator, Sequence, TypeVar

from simevo.genetics.evosim import EvoSim

__all__ = [
    "elimination_count",
    "rank",
    "sample_with_replacement",
    "next_generation",
]

T = TypeVar("T")


def elimination_count(population_size: int, elimination_ratio: float) -> int:
    """Number of members replaced each generation, rounding halves up."""
    return math.floor(population_size * elimination_ratio + 0.5)


def rank(
    population: Sequence[EvoSim],
    scores: Sequence[float],
    rng: random.Random,
    descending: bool = True,
) -> list[tuple[EvoSim, float]]:
    """Pair members with their scores, shuffle, then stable-sort by score.

    The shuffle breaks ties without positional bias; it draws from *rng* so
    the ranking is reproducible for a fixed seed.
    """
    if len(population) != len(scores):
        raise ValueError(
            f"Got {len(scores)} scores for a population of {len(population)}"
        )
    pairs = list(zip(population, scores))
    rng.shuffle(pairs)
    return sorted(pairs, key=lambda pair: pair[1], reverse=descending)


def sample_with_replacement(items: Sequence[T], rng: random.Random) -> Iterator[T]:
    """Endless uniform draws from *items*."""
    if not items:
        return
    while True:
        yield items[rng.randrange(len(items))]


def next_generation(
    survivors: Sequence[EvoSim], count: int, rng: random.Random
) -> list[EvoSim]:
    """Unmutated copies of every survivor followed by *count* mutated offspring.

    Offspring parents are drawn uniformly over the survivors, not weighted by
    score, so one survivor may parent several offspring and another none.
    """
    population = [sim.copy() for sim in survivors]
    draws = sample_with_replacement(survivors, rng)
    for _ in range(count):
        child = next(draws).copy()
        child.mutate()
        population.append(child)
    return population
