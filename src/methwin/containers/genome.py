"""Per-chromosome, per-strand gene index supporting O(log n) site lookup."""
from typing import Iterable, Optional

import numpy as np

from methwin.core.strand import Strand
from methwin.containers.gene import Gene
from methwin.containers.site import MethylationSite


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class GenomeIndexError(IndexError): pass


# Classes --------------------------------------------------------------------------------------------------------------
class _Bucket:
    """Genes of one chromosome and strand, sorted by end, with their ends as an array for binary search."""
    __slots__ = ('genes', 'ends')

    def __init__(self, genes: list[Gene]):
        self.genes: tuple[Gene, ...] = tuple(sorted(genes, key=lambda g: g.end))
        self.ends = np.fromiter((g.end for g in self.genes), dtype=np.int64, count=len(self.genes))
        self.ends.setflags(write=False)

    def __len__(self): return len(self.genes)


class GeneIndex:
    """
    Read-only index of genes by chromosome and strand.

    Chromosomes are assumed to be numbered densely from 1 to the highest chromosome seen. Within each chromosome and
    strand, genes are sorted by their end and must not overlap; overlapping genes give undefined lookup results.
    The index is built once and can be shared between threads.

    Examples:
        >>> genome = GeneIndex([Gene(1, 100, 200, Strand.SENSE, 'AT1G01010')])
        >>> genome.lookup(MethylationSite(1, 150, Strand.SENSE), cutoff=0)
        Gene(chromosome=1, start=100, end=200, strand=<Strand.SENSE: 1>, name='AT1G01010')
    """
    __slots__ = ('_buckets', '_n_genes', '_n_sense', '_total_length', '_max_length')

    def __init__(self, genes: Iterable[Gene]):
        genes = list(genes)
        if not genes: raise GenomeIndexError('Cannot build a gene index without genes')
        max_chromosome = max(g.chromosome for g in genes)
        by_strand = [{Strand.SENSE: [], Strand.ANTISENSE: []} for _ in range(max_chromosome)]
        for gene in genes: by_strand[gene.chromosome - 1][gene.strand].append(gene)
        self._buckets = tuple({strand: _Bucket(g) for strand, g in b.items()} for b in by_strand)
        self._n_genes = len(genes)
        self._n_sense = sum(g.strand is Strand.SENSE for g in genes)
        self._total_length = sum(g.length for g in genes)
        self._max_length = max(g.length for g in genes)

    def __len__(self): return self._n_genes
    def __iter__(self):
        for chromosome in self._buckets:
            for bucket in chromosome.values(): yield from bucket.genes

    def __repr__(self):
        return (f'<GeneIndex: {self._n_genes} genes on {self.max_chromosome} chromosomes, '
                f'{self._n_sense} sense / {self.n_antisense} antisense>')

    @property
    def max_chromosome(self) -> int: return len(self._buckets)
    @property
    def n_sense(self) -> int: return self._n_sense
    @property
    def n_antisense(self) -> int: return self._n_genes - self._n_sense
    @property
    def mean_length(self) -> int:
        """Mean gene length in bp, rounded down."""
        return self._total_length // self._n_genes
    @property
    def max_length(self) -> int: return self._max_length

    def bucket(self, chromosome: int, strand: Strand) -> tuple[Gene, ...]:
        """
        Returns the genes of a chromosome and strand, sorted by end.

        Raises:
            GenomeIndexError: If the chromosome is outside the indexed range.
        """
        return self._get_bucket(chromosome, strand).genes

    def locate(self, site: MethylationSite, cutoff: int) -> Optional[int]:
        """
        Finds the position of the gene a site belongs to within its chromosome/strand bucket.

        The candidate is the first gene whose ``end + cutoff`` is at or past the site. This covers both a site on the
        extended end of a gene and a site between two genes, because only one candidate is ever tested.

        Args:
            site: The site to look up.
            cutoff: Number of flanking bases considered part of a gene.

        Returns:
            The index into ``bucket(site.chromosome, site.strand)``, or None if no gene contains the site.

        Raises:
            GenomeIndexError: If the site's chromosome is outside the indexed range.
        """
        bucket = self._get_bucket(site.chromosome, site.strand)
        # end + cutoff >= location  <=>  end >= location - cutoff
        i = int(np.searchsorted(bucket.ends, site.location - cutoff, side='left'))
        if i >= len(bucket): return None
        return i if site.is_in_gene(bucket.genes[i], cutoff) else None

    def lookup(self, site: MethylationSite, cutoff: int) -> Optional[Gene]:
        """
        Finds the gene a site belongs to, in O(log n) for n genes on the site's chromosome and strand.

        Args:
            site: The site to look up.
            cutoff: Number of flanking bases considered part of a gene.

        Returns:
            The gene, or None if the site is in an unannotated region.
        """
        if (i := self.locate(site, cutoff)) is None: return None
        return self._buckets[site.chromosome - 1][site.strand].genes[i]

    def _get_bucket(self, chromosome: int, strand: Strand) -> _Bucket:
        if not 1 <= chromosome <= len(self._buckets):
            raise GenomeIndexError(f'Chromosome {chromosome} is outside the annotated range 1-{len(self._buckets)}')
        return self._buckets[chromosome - 1][strand]
