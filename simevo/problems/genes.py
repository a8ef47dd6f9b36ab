"""Gene types used by the bundled demo simulations."""

from __future__ import annotations

from enum import Enum

import numpy as np
from pydantic import BaseModel, Field, model_validator

from simevo.genetics.gene import Gene, TopLevelGene

__all__ = [
    "Activation",
    "ScalarTemplate",
    "ScalarGene",
    "NodeTemplate",
    "NodeGene",
    "ConnectionTemplate",
    "ConnectionGene",
]


class Activation(str, Enum):
    LINEAR = "linear"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"

    def apply(self, x: np.ndarray) -> np.ndarray:
        if self is Activation.SIGMOID:
            return 1.0 / (1.0 + np.exp(-x))
        if self is Activation.TANH:
            return np.tanh(x)
        if self is Activation.RELU:
            return np.maximum(x, 0.0)
        return x


class ScalarTemplate(BaseModel):
    """A bounded real value."""

    value: float = 0.0
    lower: float = -1.0
    upper: float = 1.0

    @model_validator(mode="after")
    def _check_bounds(self) -> ScalarTemplate:
        if self.lower > self.upper:
            raise ValueError(f"lower ({self.lower}) must be <= upper ({self.upper})")
        self.value = min(max(self.value, self.lower), self.upper)
        return self

    def nudge(self, delta: float) -> None:
        self.value = min(max(self.value + delta, self.lower), self.upper)


class ScalarGene(TopLevelGene[ScalarTemplate]):
    def __init__(self, template: ScalarTemplate | None = None, **kwargs):
        self.template = template if template is not None else ScalarTemplate(**kwargs)

    def copy(self) -> ScalarGene:
        return ScalarGene(self.template.model_copy(deep=True))

    def express(self) -> ScalarTemplate:
        return self.template.model_copy(deep=True)


class NodeTemplate(BaseModel):
    """Update rule parameters of one neuron."""

    bias: float = 0.0
    activation: Activation = Activation.LINEAR
    label: str | None = None

    def shift_bias(self, delta: float) -> None:
        self.bias += delta

    def set_activation(self, activation: Activation) -> None:
        self.activation = activation


class NodeGene(TopLevelGene[NodeTemplate]):
    def __init__(self, template: NodeTemplate | None = None, **kwargs):
        self.template = template if template is not None else NodeTemplate(**kwargs)

    def copy(self) -> NodeGene:
        return NodeGene(self.template.model_copy(deep=True))

    def express(self) -> NodeTemplate:
        return self.template.model_copy(deep=True)


class ConnectionTemplate(BaseModel):
    """A weighted edge between two node positions of the expressed network."""

    source: int = Field(ge=0)
    target: int = Field(ge=0)
    strength: float = 0.0

    def shift_strength(self, delta: float) -> None:
        self.strength += delta


class ConnectionGene(Gene[ConnectionTemplate]):
    """Needs the node layout to be expressed, so it is not a top-level gene."""

    def __init__(self, template: ConnectionTemplate | None = None, **kwargs):
        self.template = (
            template if template is not None else ConnectionTemplate(**kwargs)
        )

    def copy(self) -> ConnectionGene:
        return ConnectionGene(self.template.model_copy(deep=True))

    def express(self, weights: np.ndarray) -> None:
        """Add this connection's strength into a ``(source, target)`` weight matrix."""
        size = weights.shape[0]
        if self.template.source >= size or self.template.target >= size:
            raise IndexError(
                f"Connection {self.template.source}->{self.template.target} "
                f"outside a network of {size} nodes"
            )
        weights[self.template.source, self.template.target] += self.template.strength
