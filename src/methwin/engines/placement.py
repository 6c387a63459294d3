"""Placement of CG sites into the gene-relative windows of a gene."""
from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np

from methwin.core.strand import Strand, Region
from methwin.containers.gene import Gene
from methwin.containers.site import MethylationSite
from methwin.utils import ExtractionConfig

if TYPE_CHECKING:
    from methwin.containers.windows import Windows


# Constants ------------------------------------------------------------------------------------------------------------
EPSILON = 0.1
"""Tolerance on window bounds, in the unit of the position (percent or bp)."""


# Functions ------------------------------------------------------------------------------------------------------------
def classify(site: MethylationSite, gene: Gene) -> Region:
    """
    Classifies a site as upstream of, within, or downstream of a gene.

    Offsets are measured from the start for sense genes and from the end for antisense genes, so downstream always
    means past the transcription end. A site exactly on the last base of a gene belongs to the gene.
    """
    offset = site.location - gene.start if site.strand is Strand.SENSE else gene.end - site.location
    if offset < 0: return Region.UPSTREAM
    if offset > gene.length: return Region.DOWNSTREAM
    return Region.GENE


def position(site: MethylationSite, gene: Gene, region: Region, config: ExtractionConfig) -> float:
    """
    Computes the position of a site within a region of a gene.

    Upstream positions run from 0 at ``cutoff`` bp before the gene to ``cutoff`` at its start, gene positions from
    the start to the end, and downstream positions from the end outwards, all in the gene's own orientation.
    With relative sizing the position is a percentage of the flank (``cutoff``) or of the gene length; a zero
    extent gives NaN, which matches no window.

    Args:
        site: The site.
        gene: The gene the site belongs to.
        region: The region of the site, see ``classify``.
        config: Run configuration.

    Returns:
        The position in bp or percent.
    """
    location, start, end, cutoff = site.location, gene.start, gene.end, config.cutoff
    if site.strand is Strand.SENSE:
        if region is Region.UPSTREAM: pos = location - start + cutoff
        elif region is Region.GENE: pos = location - start
        else: pos = location - end
    else:
        if region is Region.UPSTREAM: pos = end - location + cutoff
        elif region is Region.GENE: pos = end - location
        else: pos = start - location
    if config.absolute: return float(pos)
    extent = gene.length if region is Region.GENE else cutoff
    if extent == 0: return float('nan')
    return pos / extent * 100.0


@lru_cache(maxsize=None)
def window_bounds(n_windows: int, step: int, size: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Returns the inclusive lower and upper bounds of ``n_windows`` windows, widened by ``EPSILON``.

    Window ``i`` covers ``[i * step - EPSILON, i * step + size + EPSILON]``; with ``step < size`` windows overlap.
    """
    starts = np.arange(n_windows, dtype=np.float64) * step
    lower, upper = starts - EPSILON, starts + size + EPSILON
    lower.setflags(write=False)
    upper.setflags(write=False)
    return lower, upper


def find_windows(pos: float, n_windows: int, config: ExtractionConfig) -> np.ndarray:
    """Returns the indices of every window containing a position."""
    lower, upper = window_bounds(n_windows, config.step, config.window_size)
    return np.flatnonzero((pos >= lower) & (pos <= upper))


def place(site: MethylationSite, gene: Gene, windows: 'Windows', config: ExtractionConfig) -> list[tuple[Region, int]]:
    """
    Places a site into every window of a gene it falls into.

    Args:
        site: The site to place.
        gene: The gene the site belongs to.
        windows: The windows to insert into.
        config: Run configuration.

    Returns:
        A (region, window index) tuple for each insertion, in ascending window order.

    Examples:
        >>> config = ExtractionConfig(window_size=2, window_step=1, cutoff=2048)
        >>> windows = Windows.new(100, config)
        >>> place(MethylationSite(1, 100, Strand.SENSE), Gene(1, 100, 200, Strand.SENSE), windows, config)
        [(<Region.GENE: 2>, 0)]
    """
    region = classify(site, gene)
    local = windows[region]
    placed = []
    for i in find_windows(position(site, gene, region, config), len(local), config).tolist():
        local[i].append(site)
        placed.append((region, i))
    return placed
