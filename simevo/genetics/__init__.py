from simevo.genetics.chromosome import Chromosome
from simevo.genetics.evosim import (
    EvoSim,
    Genotype,
    PopulatingFunction,
    PopulatingFunctionParams,
)
from simevo.genetics.gene import Gene, TopLevelGene
