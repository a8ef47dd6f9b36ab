"""Error minimisation demo: evolve a vector of bounded scalars toward a target."""

from __future__ import annotations

import random
from typing import Sequence

import numpy as np

from simevo.genetics.chromosome import Chromosome
from simevo.genetics.evosim import EvoSim, Genotype, PopulatingFunctionParams
from simevo.problems.genes import ScalarGene, ScalarTemplate
from simevo.workspace import Workspace

__all__ = ["TargetVectorSim", "TargetVectorPopulator"]


class TargetVectorSim(EvoSim, Genotype):
    def __init__(
        self,
        target: Sequence[float],
        genes: Chromosome[ScalarTemplate, ScalarGene],
        *,
        mutation_scale: float = 0.1,
        seed: int | None = None,
    ):
        Genotype.__init__(self, seed=seed)
        self.target = np.asarray([float(x) for x in target])
        if len(genes) != len(self.target):
            raise ValueError(
                f"Expected {len(self.target)} genes for the target, got {len(genes)}"
            )
        self.genes = genes
        self.mutation_scale = mutation_scale
        self.phenotype: np.ndarray | None = None

    @classmethod
    def create(
        cls,
        target: Sequence[float],
        seed: int,
        *,
        lower: float = -1.0,
        upper: float = 1.0,
        mutation_scale: float = 0.1,
    ) -> TargetVectorSim:
        rng = random.Random(seed)
        genes = Chromosome(
            ScalarGene(value=rng.uniform(lower, upper), lower=lower, upper=upper)
            for _ in target
        )
        return cls(target, genes, mutation_scale=mutation_scale, seed=rng.getrandbits(63))

    def mutate(self) -> None:
        for gene in self.genes:
            delta = self.random.gauss(0.0, self.mutation_scale)
            gene.mutate(lambda template: template.nudge(delta))

    async def build(self) -> None:
        self.phenotype = self._express()

    async def eval(self) -> float:
        if self.phenotype is None:
            raise RuntimeError("eval() called before build()")
        return float(np.mean((self.phenotype - self.target) ** 2))

    def copy(self) -> TargetVectorSim:
        return TargetVectorSim(
            self.target,
            self.genes.copy(),
            mutation_scale=self.mutation_scale,
            seed=self.random.getrandbits(63),
        )

    def visualize(self, workspace: Workspace) -> TargetVectorSim:
        visible = self.copy()
        visible.phenotype = visible._express()
        workspace.add_component("target_vector", visible)
        return visible

    def _express(self) -> np.ndarray:
        return np.array([gene.express().value for gene in self.genes])


class TargetVectorPopulator:
    """Populating function giving each generation 0 member its own seed.

    Member seeds are drawn from a stream seeded by the run seed. The engine
    calls reset() before populating, so reusing an instance for another run
    with the same seed reproduces generation 0.
    """

    def __init__(
        self,
        target: Sequence[float],
        lower: float = -1.0,
        upper: float = 1.0,
        mutation_scale: float = 0.1,
    ):
        self.target = [float(x) for x in target]
        self.lower = lower
        self.upper = upper
        self.mutation_scale = mutation_scale
        self._seed: int | None = None
        self._rng: random.Random | None = None

    def reset(self) -> None:
        self._seed, self._rng = None, None

    def __call__(self, params: PopulatingFunctionParams) -> TargetVectorSim:
        if self._rng is None or self._seed != params.seed:
            self._seed, self._rng = params.seed, random.Random(params.seed)
        return TargetVectorSim.create(
            self.target,
            self._rng.getrandbits(63),
            lower=self.lower,
            upper=self.upper,
            mutation_scale=self.mutation_scale,
        )
