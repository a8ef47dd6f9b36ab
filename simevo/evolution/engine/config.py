from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from simevo.evolution.engine.selection import elimination_count
from simevo.exceptions import ConfigurationError


class ConfigModel(BaseModel):
    """Frozen settings model whose invalid values raise ConfigurationError."""

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise ConfigurationError(
                f"Invalid {type(self).__name__}: {exc}"
            ) from exc


class EngineConfig(ConfigModel):
    """Configuration options controlling Evaluator behaviour."""

    population_size: int = Field(
        gt=0, description="Number of simulations per generation, constant during the run"
    )
    elimination_ratio: float = Field(
        ge=0.0,
        le=1.0,
        description="Fraction of the population eliminated and refilled each generation",
    )
    sort_descending: bool = Field(
        default=True,
        description="True to maximize fitness, False to minimize error",
    )
    seed: int | None = Field(
        default=None, description="Seed of the run's random stream (None = random)"
    )
    max_concurrent_evaluations: int | None = Field(
        default=None,
        gt=0,
        description="Upper bound on evaluations in flight (None = whole population)",
    )
    @model_validator(mode="after")
    def _validate_survivors(self) -> EngineConfig:
        eliminated = elimination_count(self.population_size, self.elimination_ratio)
        if eliminated >= self.population_size:
            raise ValueError(
                f"elimination_ratio={self.elimination_ratio} eliminates all "
                f"{self.population_size} members; at least one must survive"
            )
        return self

    @property
    def survivor_count(self) -> int:
        return self.population_size - elimination_count(
            self.population_size, self.elimination_ratio
        )
