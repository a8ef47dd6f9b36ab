"""
SimEvo - evolutionary simulation engine

Evolves complete simulation candidates (EvoSim) built from typed chromosomes
of mutable genes, evaluating each generation concurrently.
"""

__version__ = "0.1.0"

from simevo.evolution import (  # noqa: F401
    EvaluatorParams,
    Evaluator,
    GenerationFitnessPair,
    StoppingCondition,
    evaluate_with_params,
    evaluator,
)
from simevo.genetics import (  # noqa: F401
    Chromosome,
    EvoSim,
    Gene,
    Genotype,
    PopulatingFunctionParams,
    TopLevelGene,
)
from simevo.workspace import Workspace  # noqa: F401
