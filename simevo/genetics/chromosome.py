from __future__ import annotations

from typing import Generic, Iterable, TypeVar

from simevo.genetics.gene import Gene

__all__ = ["Chromosome"]

P = TypeVar("P")
G = TypeVar("G", bound=Gene)


class Chromosome(list, Generic[P, G]):
    """A typed, ordered list of genes with copy and concatenation."""

    def __init__(self, genes: Iterable[G] = ()):
        super().__init__(genes)

    def copy(self) -> Chromosome[P, G]:
        """Element-wise deep copy, preserving order."""
        return Chromosome(gene.copy() for gene in self)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Chromosome(list.__getitem__(self, index))
        return list.__getitem__(self, index)

    # Concatenation and repetition share genes by reference; the operands
    # must not be mutated afterwards.
    def __add__(self, other: Iterable[G]) -> Chromosome[P, G]:
        return Chromosome([*self, *other])

    def __radd__(self, other: Iterable[G]) -> Chromosome[P, G]:
        return Chromosome([*other, *self])

    def __mul__(self, times: int) -> Chromosome[P, G]:
        repeated = list.__mul__(self, times)
        if repeated is NotImplemented:
            return NotImplemented
        return Chromosome(repeated)

    __rmul__ = __mul__

    def __repr__(self) -> str:
        return f"Chromosome({list.__repr__(self)})"
