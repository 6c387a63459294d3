"""
Streaming extraction of gene-relative windows from methylome files.

Each methylome file is processed by one task. Records must be sorted by ascending position within a chromosome: the
gene of the previous site is reused for as long as the following sites still fall into it, and the gene index is
only searched again once they leave it.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from methwin import RESOURCES
from methwin.containers.gene import Gene
from methwin.containers.genome import GeneIndex
from methwin.containers.site import MethylationSite, SiteParseError
from methwin.containers.windows import Windows
from methwin.io import Xopen, MethylomeReader, find_methylome_files, prepare_output_dir, read_annotation
from methwin.utils import ExtractionConfig


# Functions ------------------------------------------------------------------------------------------------------------
def extract_windows(handle: BinaryIO, genome: GeneIndex, max_gene_length: int, config: ExtractionConfig) -> Windows:
    """
    Places the CG sites of one methylome file into windows.

    Lines that are not valid CG records are skipped, and sites outside every gene's cutoff-extended interval are
    dropped.

    Args:
        handle: Binary handle of the methylome file, positioned before its header line.
        genome: The shared gene index.
        max_gene_length: Length of the longest gene (only used with absolute window sizes).
        config: Run configuration.

    Returns:
        The populated windows, in the strand orientation of the records (not yet inverted).

    Raises:
        GenomeIndexError: If a site lies on a chromosome missing from the index.
    """
    windows = Windows.new(max_gene_length, config)
    cutoff, invert = config.cutoff, config.invert
    # Sticky gene: bucket of the last matched site and the gene's position in it
    bucket: tuple[Gene, ...] = ()
    last: Optional[int] = None
    for line in MethylomeReader(handle):
        try: site = MethylationSite.from_line(line, invert)
        except SiteParseError: continue
        if last is None or not site.is_in_gene(bucket[last], cutoff):
            if (last := genome.locate(site, cutoff)) is None: continue
            bucket = genome.bucket(site.chromosome, site.strand)
        windows.place(site, bucket[last], config)
    return windows


def extract_file(path: Union[str, Path], genome: GeneIndex, max_gene_length: int, config: ExtractionConfig,
                 output_dir: Union[str, Path]) -> Windows:
    """
    Extracts, orients and saves the windows of one methylome file.

    The windows are written with ``Windows.save`` and their distribution to ``<output_dir>/<name>_distribution.txt``.

    Returns:
        The windows as saved (inverted if ``config.invert`` is set).
    """
    path = Path(path)
    with Xopen(path) as handle: windows = extract_windows(handle, genome, max_gene_length, config)
    if config.invert: windows = windows.invert()
    windows.save(output_dir, path.name, config.step)
    (Path(output_dir) / f'{path.name}_distribution.txt').write_text(windows.distribution())
    return windows


def extract(config: ExtractionConfig, genome: Union[str, Path, GeneIndex], methylome: Union[str, Path],
            output_dir: Union[str, Path], callback: Callable[[Path, Windows], None] = None) -> dict[str, Windows]:
    """
    Runs a window extraction over every methylome file.

    The gene index is built once and shared read-only between the worker threads, each of which owns the windows
    of its own file. The first failing file aborts the run: files not yet started are cancelled and the error is
    re-raised.

    Args:
        config: Run configuration.
        genome: Annotation file, or a prebuilt gene index.
        methylome: A methylome file or a directory of methylome files.
        output_dir: Root output directory, created if missing.
        callback: Called with the path and windows of each completed file, e.g. to report progress.

    Returns:
        The windows of each file, keyed by file name.

    Examples:
        >>> results = extract(ExtractionConfig(window_size=5), "genes.tsv", "methylomes/", "windows/")
    """
    if not isinstance(genome, GeneIndex): genome = GeneIndex(read_annotation(genome, invert=config.invert))
    files = find_methylome_files(methylome)
    max_gene_length = config.max_gene_length(genome)
    prepare_output_dir(output_dir, Windows.new(max_gene_length, config), config.step)

    pool = ThreadPoolExecutor(config.threads) if config.threads else RESOURCES.pool
    futures = {pool.submit(extract_file, f, genome, max_gene_length, config, output_dir): f for f in files}
    results = {}
    try:
        for future in as_completed(futures):
            path = futures[future]
            results[path.name] = windows = future.result()
            if callback: callback(path, windows)
    except BaseException:
        for future in futures: future.cancel()
        raise
    finally:
        if pool is not RESOURCES.pool: pool.shutdown(wait=True)
    return {f.name: results[f.name] for f in files}
