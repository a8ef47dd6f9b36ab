from __future__ import annotations

from abc import ABC, abstractmethod
import random
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from simevo.workspace import Workspace

__all__ = ["Genotype", "EvoSim", "PopulatingFunctionParams", "PopulatingFunction"]


class Genotype:
    """Owner of the random stream used for its own stochastic choices."""

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.random = rng if rng is not None else random.Random(seed)


class EvoSim(ABC):
    """
    A complete candidate solution: the unit of evolution.

    The evaluator only ever talks to candidates through these five operations.
    ``build`` and ``eval`` may run concurrently with sibling candidates, so they
    must only touch state owned by this candidate.
    """

    @abstractmethod
    def mutate(self) -> None:
        """Apply one round of domain specific mutation to the chromosomes."""

    @abstractmethod
    async def build(self) -> None:
        """Materialize the live simulation from the current chromosomes."""

    @abstractmethod
    async def eval(self) -> float:
        """Run the built simulation and return its fitness (or error) score."""

    @abstractmethod
    def copy(self) -> EvoSim:
        """Return an independent clone suitable for further mutation."""

    @abstractmethod
    def visualize(self, workspace: Workspace) -> EvoSim:
        """Materialize an inspectable version of this candidate in *workspace*."""


class PopulatingFunctionParams(BaseModel):
    """Arguments handed to the populating function for each generation 0 member."""

    seed: int

    model_config = ConfigDict(frozen=True)


PopulatingFunction = Callable[[PopulatingFunctionParams], EvoSim]
