"""Fitness maximisation demo: evolve a small recurrent network that computes XOR.

The genome holds input, hidden and output node chromosomes plus a growing
chromosome of connections between them.
"""

from __future__ import annotations

import asyncio
import random

import numpy as np

from simevo.genetics.chromosome import Chromosome
from simevo.genetics.evosim import EvoSim, Genotype, PopulatingFunctionParams
from simevo.problems.genes import (
    Activation,
    ConnectionGene,
    ConnectionTemplate,
    NodeGene,
    NodeTemplate,
)
from simevo.workspace import Workspace

__all__ = ["CompiledNetwork", "XorNetworkSim", "XorNetworkPopulator", "XOR_PATTERNS", "XOR_TARGETS"]

XOR_PATTERNS = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
XOR_TARGETS = np.array([0.0, 1.0, 1.0, 0.0])

Nodes = Chromosome[NodeTemplate, NodeGene]
Connections = Chromosome[ConnectionTemplate, ConnectionGene]


class CompiledNetwork:
    """Weights and update rules expressed from a genome, updated synchronously."""

    def __init__(
        self,
        weights: np.ndarray,
        biases: np.ndarray,
        activations: list[Activation],
        input_count: int,
        output_count: int,
        labels: list[str | None] | None = None,
    ):
        self.weights = weights
        self.biases = biases
        self.activations = activations
        self.input_count = input_count
        self.output_count = output_count
        self.labels = labels or [None] * len(biases)
        self._masks = [
            (activation, np.array([a is activation for a in activations]))
            for activation in set(activations)
        ]

    @property
    def size(self) -> int:
        return len(self.biases)

    def step(self, state: np.ndarray, inputs: np.ndarray) -> np.ndarray:
        net = state @ self.weights + self.biases
        updated = np.empty_like(net)
        for activation, mask in self._masks:
            updated[mask] = activation.apply(net[mask])
        updated[: self.input_count] = inputs
        return updated

    def run(self, inputs: np.ndarray, iterations: int) -> np.ndarray:
        state = np.zeros(self.size)
        state[: self.input_count] = inputs
        for _ in range(iterations):
            state = self.step(state, inputs)
        return state[self.size - self.output_count :]


class XorNetworkSim(EvoSim, Genotype):
    def __init__(
        self,
        inputs: Nodes,
        hiddens: Nodes,
        outputs: Nodes,
        connections: Connections,
        *,
        iterations_per_run: int = 10,
        seed: int | None = None,
    ):
        Genotype.__init__(self, seed=seed)
        self.inputs = inputs
        self.hiddens = hiddens
        self.outputs = outputs
        self.connections = connections
        self.iterations_per_run = iterations_per_run
        self.network: CompiledNetwork | None = None

    @classmethod
    def create(
        cls, seed: int, *, hidden_count: int = 3, iterations_per_run: int = 10
    ) -> XorNetworkSim:
        rng = random.Random(seed)
        inputs = Chromosome(NodeGene(label=label) for label in ("left", "right"))
        hiddens = Chromosome(
            NodeGene(bias=rng.uniform(-0.2, 0.2), activation=Activation.TANH)
            for _ in range(hidden_count)
        )
        outputs = Chromosome([NodeGene(activation=Activation.SIGMOID, label="xor")])
        return cls(
            inputs,
            hiddens,
            outputs,
            Chromosome(),
            iterations_per_run=iterations_per_run,
            seed=rng.getrandbits(63),
        )

    @property
    def nodes(self) -> Nodes:
        """Inputs, hiddens and outputs in network order."""
        return self.inputs + self.hiddens + self.outputs

    def mutate(self) -> None:
        for gene in self.hiddens:
            delta = self.random.uniform(-0.2, 0.2)
            gene.mutate(lambda node: node.shift_bias(delta))

        for gene in self.outputs:
            choice = self.random.randrange(3)
            if choice == 0:
                gene.mutate(lambda node: node.set_activation(Activation.SIGMOID))
            elif choice == 1:
                gene.mutate(lambda node: node.set_activation(Activation.TANH))
            # 2: leave the same

        for gene in self.connections:
            delta = self.random.uniform(-0.5, 0.5)
            gene.mutate(lambda connection: connection.shift_strength(delta))

        self.connections.append(
            ConnectionGene(
                source=self._random_source(),
                target=self._random_target(),
                strength=self.random.uniform(-0.2, 0.2),
            )
        )

    def _random_source(self) -> int:
        # Any input or hidden node; they are contiguous at the front.
        return self.random.randrange(len(self.inputs) + len(self.hiddens))

    def _random_target(self) -> int:
        index = self.random.randrange(len(self.outputs) + len(self.hiddens))
        if index < len(self.outputs):
            return len(self.inputs) + len(self.hiddens) + index
        return len(self.inputs) + index - len(self.outputs)

    async def build(self) -> None:
        self.network = self.compile()

    def compile(self) -> CompiledNetwork:
        nodes = [gene.express() for gene in self.nodes]
        weights = np.zeros((len(nodes), len(nodes)))
        for gene in self.connections:
            gene.express(weights)
        return CompiledNetwork(
            weights=weights,
            biases=np.array([node.bias for node in nodes]),
            activations=[node.activation for node in nodes],
            input_count=len(self.inputs),
            output_count=len(self.outputs),
            labels=[node.label for node in nodes],
        )

    async def eval(self) -> float:
        if self.network is None:
            raise RuntimeError("eval() called before build()")
        return await asyncio.to_thread(self._score, self.network)

    def _score(self, network: CompiledNetwork) -> float:
        error = 0.0
        for pattern, target in zip(XOR_PATTERNS, XOR_TARGETS):
            output = network.run(pattern, self.iterations_per_run)
            error += float(np.sum((output - target) ** 2))
        return 1.0 / (1.0 + error)

    def copy(self) -> XorNetworkSim:
        return XorNetworkSim(
            self.inputs.copy(),
            self.hiddens.copy(),
            self.outputs.copy(),
            self.connections.copy(),
            iterations_per_run=self.iterations_per_run,
            seed=self.random.getrandbits(63),
        )

    def visualize(self, workspace: Workspace) -> XorNetworkSim:
        visible = self.copy()
        visible.network = visible.compile()
        workspace.add_component("xor_network", visible)
        return visible


class XorNetworkPopulator:
    """Populating function giving each generation 0 member its own seed.

    Member seeds are drawn from a stream seeded by the run seed. The engine
    calls reset() before populating, so reusing an instance for another run
    with the same seed reproduces generation 0.
    """

    def __init__(self, hidden_count: int = 3, iterations_per_run: int = 10):
        self.hidden_count = hidden_count
        self.iterations_per_run = iterations_per_run
        self._seed: int | None = None
        self._rng: random.Random | None = None

    def reset(self) -> None:
        self._seed, self._rng = None, None

    def __call__(self, params: PopulatingFunctionParams) -> XorNetworkSim:
        if self._rng is None or self._seed != params.seed:
            self._seed, self._rng = params.seed, random.Random(params.seed)
        return XorNetworkSim.create(
            self._rng.getrandbits(63),
            hidden_count=self.hidden_count,
            iterations_per_run=self.iterations_per_run,
        )
