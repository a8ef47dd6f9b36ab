from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

__all__ = ["Gene", "TopLevelGene"]

P = TypeVar("P")


class Gene(ABC, Generic[P]):
    """Smallest evolvable unit.

    A gene owns a mutable *template* (the phenotype precursor). Subclasses
    decide how the template becomes a live object; see :class:`TopLevelGene`.
    """

    template: P

    @abstractmethod
    def copy(self) -> Gene[P]:
        """Return a clone whose template shares no mutable state with this one."""

    def mutate(self, block: Callable[[P], None]) -> None:
        """Apply *block* to the live template in place."""
        block(self.template)


class TopLevelGene(Gene[P]):
    """A gene that can be expressed without any outside context."""

    @abstractmethod
    def express(self) -> P:
        """Produce a live phenotype object from the template."""
