"""CG methylation site records and the methylome line parser."""
from dataclasses import dataclass

from methwin.core.strand import Strand
from methwin.containers.gene import Gene


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class SiteParseError(ValueError): pass


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class MethylationSite:
    """
    A single CG methylation measurement.

    Sites are immutable, so a site placed into several overlapping windows is shared between them rather than copied.

    Attributes:
        chromosome: Chromosome number.
        location: Position of the site on the chromosome.
        strand: Strand of the site, already adjusted for strand inversion.
        original: The source record, without its line terminator.

    Examples:
        >>> site = MethylationSite.from_line('1\\t23151\\t+\\tCG\\t0\\t8\\t0.9999\\tU\\t0.0025')
        >>> site.chromosome, site.location, site.strand
        (1, 23151, <Strand.SENSE: 1>)
    """
    chromosome: int
    location: int
    strand: Strand
    original: str = ''
    _N_FIELDS = 9
    _CONTEXT = 'CG'
    _MAX_CHROMOSOME = 255
    _LOCATION_RANGE = (-2 ** 31, 2 ** 31 - 1)

    @classmethod
    def from_line(cls, line: str, invert: bool = False) -> 'MethylationSite':
        """
        Parses a tab separated methylome record.

        Only records with exactly nine fields and a ``CG`` context are accepted, which also rejects header lines.

        Args:
            line: The record, with or without its line terminator.
            invert: Swap sense and antisense strands.

        Returns:
            A MethylationSite.

        Raises:
            SiteParseError: If the record is malformed or not a CG site.
        """
        line = line.rstrip('\r\n')
        parts = line.split('\t')
        if len(parts) != cls._N_FIELDS:
            raise SiteParseError(f'Expected {cls._N_FIELDS} fields, got {len(parts)}')
        if parts[3] != cls._CONTEXT: raise SiteParseError(f'Not a {cls._CONTEXT} site: {parts[3]!r}')
        chromosome, location = parts[0], parts[1]
        if not _is_digits(chromosome) or int(chromosome) > cls._MAX_CHROMOSOME:
            raise SiteParseError(f'Invalid chromosome {chromosome!r}')
        if not _is_digits(location[1:] if location[:1] in '+-' else location):
            raise SiteParseError(f'Invalid location {location!r}')
        lo, hi = cls._LOCATION_RANGE
        if not lo <= (pos := int(location)) <= hi: raise SiteParseError(f'Location out of range: {location!r}')
        return cls(int(chromosome), pos, Strand.from_symbol(parts[2], invert), line)

    def is_in_gene(self, gene: Gene, cutoff: int) -> bool:
        """
        Checks whether the site lies within a gene extended by ``cutoff`` bases on both sides.

        Pass a cutoff of 0 to test for the gene body alone.
        A negative cutoff is accepted but gives undefined results together with ``GeneIndex.lookup``.

        Args:
            gene: The gene to test against.
            cutoff: Number of flanking bases considered part of the gene.

        Returns:
            True if chromosome and strand match and the location is inside the extended interval.
        """
        return (self.chromosome == gene.chromosome
                and gene.start <= self.location + cutoff
                and self.location <= gene.end + cutoff
                and self.strand == gene.strand)

    def __str__(self):
        return f'CG site on the {self.strand} strand of chromosome {self.chromosome} at bp {self.location}'


# Functions ------------------------------------------------------------------------------------------------------------
def _is_digits(s: str) -> bool: return s.isascii() and s.isdigit()
