from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class EngineMetrics(BaseModel):
    """Run bookkeeping for one Evaluator."""

    total_generations: int = Field(
        default=0, description="Total number of generations run"
    )
    evaluations_run: int = Field(
        default=0, description="Total number of candidate evaluations"
    )
    mutations_created: int = Field(
        default=0, description="Total number of mutated offspring created"
    )
    survivors_kept: int = Field(
        default=0, description="Total number of survivors copied unmutated"
    )
    last_generation_time: datetime | None = Field(
        default=None, description="Timestamp of last generation"
    )
    last_generation_duration: float = Field(
        default=0.0, description="Wall time of the last generation in seconds"
    )

    def record_generation(
        self,
        evaluations: int,
        survivors: int,
        mutations: int,
        finished_at: datetime,
        duration: float,
    ) -> None:
        self.total_generations += 1
        self.evaluations_run += evaluations
        self.survivors_kept += survivors
        self.mutations_created += mutations
        self.last_generation_time = finished_at
        self.last_generation_duration = duration

    def to_dict(self) -> dict[str, int | float | str | None]:
        """Plain values for logging; the timestamp is ISO 8601."""
        return {
            "total_generations": self.total_generations,
            "evaluations_run": self.evaluations_run,
            "mutations_created": self.mutations_created,
            "survivors_kept": self.survivors_kept,
            "last_generation_time": (
                self.last_generation_time.isoformat()
                if self.last_generation_time is not None
                else None
            ),
            "last_generation_duration": self.last_generation_duration,
        }
