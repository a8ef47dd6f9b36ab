"""Generational evolutionary optimisation over EvoSim candidates."""

from simevo.evolution.engine import EngineConfig, EngineMetrics, Evaluator, evaluator
from simevo.evolution.fitness import GenerationFitnessPair
from simevo.evolution.params import (
    EvaluatorParams,
    StoppingCondition,
    evaluate_with_params,
)
from simevo.evolution.progress import LoggingProgressWindow, ProgressWindow

__all__ = [
    "EngineConfig",
    "EngineMetrics",
    "Evaluator",
    "evaluator",
    "GenerationFitnessPair",
    "EvaluatorParams",
    "StoppingCondition",
    "evaluate_with_params",
    "ProgressWindow",
    "LoggingProgressWindow",
]
