"""Annotated gene record."""
from dataclasses import dataclass

from methwin.core.strand import Strand


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class GeneError(ValueError): pass


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Gene:
    """
    Immutable annotated gene interval.

    Attributes:
        chromosome: Chromosome number (1-based).
        start: First base of the gene.
        end: Last base of the gene, ``start <= end``.
        strand: Orientation of the gene.
        name: Gene identifier from the annotation.
    """
    chromosome: int
    start: int
    end: int
    strand: Strand
    name: str = ''

    def __post_init__(self):
        if self.chromosome < 1: raise GeneError(f'Chromosome numbers start at 1, got {self.chromosome}')
        if self.start > self.end: raise GeneError(f'Gene {self.name!r} starts after it ends ({self.start} > {self.end})')

    @property
    def length(self) -> int: return self.end - self.start
    def __str__(self): return f'{self.name or "gene"} {self.chromosome}:{self.start}-{self.end}({self.strand})'
