"""
Command line interface: separate a methylome by position within genes.
"""
from argparse import ArgumentParser, Namespace
import sys
from time import time
from typing import Optional, Sequence

from methwin.containers.genome import GeneIndex
from methwin.io import find_methylome_files, read_annotation
from methwin.pipeline import extract
from methwin.utils import ExtractionConfig, ConfigError, ProgressBar


# Functions ------------------------------------------------------------------------------------------------------------
def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog='methwin', description='Separate a methylome by position within genes')
    parser.add_argument('-m', '--methylome', required=True,
                        help='Methylome file, or directory of methylome files, to extract the CG sites from')
    parser.add_argument('-g', '--genome', required=True,
                        help='Annotation file with the chromosome, start, end, strand and name of each gene')
    parser.add_argument('-o', '--output-dir', required=True, help='Directory to store the extracted windows in')
    parser.add_argument('-w', '--window-size', type=int, default=5,
                        help='Window size in percent of the gene length, or in bp with --absolute (default: %(default)s)')
    parser.add_argument('-s', '--window-step', type=int, default=0,
                        help='Step between window starts; 0 uses the window size, so windows do not overlap '
                             '(default: %(default)s)')
    parser.add_argument('-a', '--absolute', action='store_true',
                        help='Use absolute window sizes in bp instead of percentages of the gene length')
    parser.add_argument('-c', '--cutoff', type=int, default=2048,
                        help='Number of bp to include upstream and downstream of each gene (default: %(default)s)')
    parser.add_argument('-i', '--invert', action='store_true',
                        help="Invert strands, to switch from 5' to 3' and vice versa")
    parser.add_argument('-t', '--threads', type=int, default=None,
                        help='Number of files to process in parallel (default: number of CPUs + 4, at most 32)')
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> Namespace: return build_parser().parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try: config = ExtractionConfig.from_obj(args)
    except ConfigError as e: parser.error(str(e))
    start = time()

    genome = GeneIndex(read_annotation(args.genome, invert=config.invert))
    print(f'Average gene length: {genome.mean_length} bp, {len(genome)} genes, of which {genome.n_sense} are on '
          f'the sense strand and {genome.n_antisense} on the antisense strand', file=sys.stderr)
    if config.absolute: print(f'The maximum gene length is {config.max_gene_length(genome)} bp', file=sys.stderr)

    files = find_methylome_files(args.methylome)
    with ProgressBar(total=len(files), desc='Extracting', unit='files', file=sys.stderr) as bar:
        extract(config, genome, args.methylome, args.output_dir, callback=lambda path, windows: bar.update())
    print(f'Done in: {time() - start:.2f}s', file=sys.stderr)
    return 0
