"""Strand orientation and gene-relative region enumerations."""
from typing import Any, ClassVar
from enum import IntEnum, auto


# Classes --------------------------------------------------------------------------------------------------------------
class Strand(IntEnum):
    """
    Enumeration for genomic strands.

    Only the two orientations are modelled; an unstranded record cannot be placed relative to a gene.
    """
    SENSE = 1
    ANTISENSE = -1
    _STR_CACHE: ClassVar[dict]

    def __str__(self): return self._STR_CACHE[self]

    @classmethod
    def from_symbol(cls, s: Any, invert: bool = False) -> 'Strand':
        """
        Builds a strand from a strand symbol.

        Anything other than ``'+'`` is read as the antisense strand, and ``invert`` flips the result.

        Args:
            s: Strand symbol (str, bytes or Strand).
            invert: Swap sense and antisense.

        Returns:
            The Strand.

        Examples:
            >>> Strand.from_symbol('+')
            <Strand.SENSE: 1>
            >>> Strand.from_symbol('+', invert=True)
            <Strand.ANTISENSE: -1>
        """
        if isinstance(s, cls): sense = s is cls.SENSE
        elif isinstance(s, bytes): sense = s == b'+'
        else: sense = s == '+'
        return cls.SENSE if sense ^ invert else cls.ANTISENSE

    @classmethod
    def _init_caches(cls):
        cls._STR_CACHE = {cls.SENSE: '+', cls.ANTISENSE: '-'}


class Region(IntEnum):
    """Position of a site relative to the coding interval of a gene."""
    UPSTREAM = auto()
    GENE = auto()
    DOWNSTREAM = auto()

    @property
    def dirname(self) -> str:
        """Name of the output directory holding this region's bins."""
        return self.name.lower()

    @property
    def title(self) -> str:
        """Section header used in the distribution summary."""
        return self.name.capitalize()


Strand._init_caches()
