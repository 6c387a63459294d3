"""Gene-relative window aggregation of CG sites."""
from pathlib import Path
from typing import Iterator, Optional, Union

import numpy as np

from methwin.core.strand import Region
from methwin.containers.gene import Gene
from methwin.containers.site import MethylationSite
from methwin.utils import ExtractionConfig

Window = list[MethylationSite]


# Classes --------------------------------------------------------------------------------------------------------------
class Windows:
    """
    Upstream, gene body and downstream windows of one methylome file.

    Each region is a fixed-length list of windows, and each window lists the sites placed into it in insertion order.
    Instances are owned by a single extraction and are not thread-safe.

    Examples:
        >>> windows = Windows.new(4096, ExtractionConfig(window_size=512, window_step=256, absolute=True))
        >>> len(windows.upstream), len(windows.gene), len(windows.downstream)
        (8, 16, 8)
    """
    __slots__ = ('upstream', 'gene', 'downstream')

    def __init__(self, upstream: list[Window], gene: list[Window], downstream: list[Window]):
        self.upstream = upstream
        self.gene = gene
        self.downstream = downstream

    @classmethod
    def new(cls, max_gene_length: int, config: ExtractionConfig) -> 'Windows':
        """
        Creates empty windows.

        With absolute sizes there are ``max_gene_length // step`` gene windows and ``cutoff // step`` flank windows;
        with relative sizes there are always 100 of each.

        Args:
            max_gene_length: Length of the longest gene in bp (ignored for relative sizes).
            config: Run configuration.
        """
        if config.absolute:
            n_gene, n_flank = max_gene_length // config.step, config.cutoff // config.step
        else:
            n_gene = n_flank = 100
        return cls([[] for _ in range(n_flank)], [[] for _ in range(n_gene)], [[] for _ in range(n_flank)])

    def __getitem__(self, region: Region) -> list[Window]:
        if region is Region.UPSTREAM: return self.upstream
        if region is Region.GENE: return self.gene
        if region is Region.DOWNSTREAM: return self.downstream
        raise KeyError(region)

    def __iter__(self) -> Iterator[tuple[Region, list[Window]]]:
        yield Region.UPSTREAM, self.upstream
        yield Region.GENE, self.gene
        yield Region.DOWNSTREAM, self.downstream

    def __eq__(self, other):
        if not isinstance(other, Windows): return False
        return self.upstream == other.upstream and self.gene == other.gene and self.downstream == other.downstream

    def __repr__(self):
        return f'<Windows: {len(self.upstream)} upstream, {len(self.gene)} gene, {len(self.downstream)} downstream>'

    def __str__(self):
        return f'Upstream: {self.upstream}\n\nGene: {self.gene}\n\nDownstream: {self.downstream}\n\n'

    def place(self, site: MethylationSite, gene: Gene, config: ExtractionConfig) -> list[tuple[Region, int]]:
        """Places a site into every matching window, see ``methwin.engines.placement.place``."""
        from methwin.engines.placement import place
        return place(site, gene, self, config)

    def invert(self) -> 'Windows':
        """
        Returns the windows seen from the opposite strand.

        The reversed downstream windows become the upstream windows and vice versa, and the gene windows are
        reversed. The windows themselves are shared with this instance, not copied.
        """
        return Windows(self.downstream[::-1], self.gene[::-1], self.upstream[::-1])

    def counts(self, region: Optional[Region] = None) -> np.ndarray:
        """
        Returns the number of sites per window.

        Args:
            region: Region to count, or None for upstream, gene and downstream concatenated.
        """
        if region is None:
            return np.concatenate([self.counts(r) for r, _ in self]).astype(np.int64, copy=False)
        return np.fromiter(map(len, self[region]), dtype=np.int64, count=len(self[region]))

    @property
    def total(self) -> int:
        """Number of placements; a site in overlapping windows is counted once per window."""
        return int(self.counts().sum())

    def distribution(self) -> str:
        """
        Summarises the number of sites per window as CSV-like ``index,count`` rows.

        Rows are grouped under ``Upstream``, ``Gene``, ``Downstream`` and ``Combined`` headers; the combined section
        numbers the upstream, gene and downstream windows continuously.
        """
        lines = []
        for region, _ in self:
            lines.append(region.title)
            lines.extend(f'{i},{n}' for i, n in enumerate(self.counts(region).tolist()))
        lines.append('Combined')
        lines.extend(f'{i},{n}' for i, n in enumerate(self.counts().tolist()))
        return '\n'.join(lines) + '\n'

    def save(self, output_dir: Union[str, Path], filename: str, step: int):
        """
        Appends the sites of every window to its output file, see ``methwin.io.WindowWriter``.

        Args:
            output_dir: Root output directory.
            filename: Name of the methylome file the windows were extracted from.
            step: Window step, used to name each window's directory after its lower bound.
        """
        from methwin.io import WindowWriter
        WindowWriter(output_dir, step).write(self, filename)
