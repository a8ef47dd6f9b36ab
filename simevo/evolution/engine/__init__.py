from __future__ import annotations

from simevo.evolution.engine.config import ConfigModel, EngineConfig
from simevo.evolution.engine.core import Evaluator, Peek, StoppingFunction, evaluator
from simevo.evolution.engine.metrics import EngineMetrics
from simevo.evolution.engine.selection import (
    elimination_count,
    next_generation,
    rank,
    sample_with_replacement,
)
