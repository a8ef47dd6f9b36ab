from __future__ import annotations

import asyncio
import itertools
from typing import Callable

import pytest

from simevo.genetics.evosim import EvoSim, PopulatingFunctionParams
from simevo.workspace import Workspace

_uids = itertools.count()


class ScriptedSim(EvoSim):
    """Candidate with a fixed score; each mutation adds ``delta`` to it."""

    def __init__(self, score: float, delta: float = 0.0, uid: int | None = None):
        self.score = score
        self.delta = delta
        self.uid = next(_uids) if uid is None else uid
        self.mutations = 0
        self.builds = 0
        self.evals = 0
        self.built = False

    def mutate(self) -> None:
        self.score += self.delta
        self.mutations += 1

    async def build(self) -> None:
        self.builds += 1
        self.built = True

    async def eval(self) -> float:
        assert self.built, "eval() before build()"
        self.evals += 1
        return self.score

    def copy(self) -> ScriptedSim:
        clone = ScriptedSim(self.score, self.delta, uid=self.uid)
        clone.mutations = self.mutations
        return clone

    def visualize(self, workspace: Workspace) -> ScriptedSim:
        visible = self.copy()
        workspace.add_component("scripted", visible)
        return visible


class InFlightTracker:
    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    async def hold(self, seconds: float) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)
        try:
            await asyncio.sleep(seconds)
        finally:
            self.current -= 1


def counting_populator(
    start: float = 1.0, delta: float = 0.0
) -> tuple[Callable[[PopulatingFunctionParams], ScriptedSim], list[ScriptedSim]]:
    """Populating function producing scores start, start + 1, ... in call order."""
    created: list[ScriptedSim] = []
    counter = itertools.count()

    def populate(params: PopulatingFunctionParams) -> ScriptedSim:
        sim = ScriptedSim(start + next(counter), delta)
        created.append(sim)
        return sim

    return populate, created


@pytest.fixture
def workspace() -> Workspace:
    return Workspace("test")
