"""
Module for reading annotation and methylome files and writing window files.
"""
from abc import ABC, abstractmethod
from importlib import import_module
from io import IOBase
from os import fstat
from pathlib import Path
from sys import stdin
from typing import BinaryIO, Generator, Optional, Union
from warnings import warn

from methwin import MethwinWarning
from methwin.core.strand import Strand, Region
from methwin.containers.gene import Gene
from methwin.containers.windows import Windows


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class AnnotationWarning(MethwinWarning): pass


# Constants ------------------------------------------------------------------------------------------------------------
METHYLOME_HEADER = ('seqnames', 'start', 'strand', 'context', 'counts.methylated', 'counts.total', 'posteriorMax',
                    'status', 'rc.meth.lvl')


# Classes --------------------------------------------------------------------------------------------------------------
class Xopen:
    """
    Opens a file for reading, transparently decompressing gzip, bz2 and xz files.

    Examples:
        >>> with Xopen("methylome.tsv.gz") as f:
        ...     header = f.readline()
    """
    _MAGIC = {
        b'\x1f\x8b': 'gzip',
        b'\x42\x5a': 'bz2',
        b'\xfd7zXZ\x00': 'lzma',
    }
    _MIN_N_BYTES = max(len(i) for i in _MAGIC.keys())
    _OPEN_FUNCS = {}

    def __init__(self, file: Union[str, Path, BinaryIO]):
        """
        Initializes the Xopen context manager.

        Args:
            file: File path (str or Path), ``'-'`` for stdin, or an existing binary file object.
        """
        self.file = file
        self._handle: Optional[BinaryIO] = None
        self._raw: Optional[BinaryIO] = None

    def __enter__(self) -> BinaryIO:
        self._handle = self._open()
        return self._handle

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._handle is not None and self._handle is not self._raw: self._handle.close()
        if self._raw is not None: self._raw.close()

    def _get_opener(self, pkg_name: str):
        if pkg_name not in self._OPEN_FUNCS: self._OPEN_FUNCS[pkg_name] = import_module(pkg_name).open
        return self._OPEN_FUNCS[pkg_name]

    def _open(self) -> BinaryIO:
        if isinstance(self.file, IOBase): raw_stream = self.file
        elif str(self.file) in {'-', 'stdin'}: raw_stream = stdin.buffer
        else: raw_stream = self._raw = open(Path(self.file).expanduser(), mode='rb')
        if hasattr(raw_stream, 'peek'): start = raw_stream.peek(self._MIN_N_BYTES)[:self._MIN_N_BYTES]
        elif raw_stream.seekable():
            start = raw_stream.read(self._MIN_N_BYTES)
            raw_stream.seek(0)
        else: return raw_stream
        for magic, pkg in self._MAGIC.items():
            if start.startswith(magic):
                return self._get_opener(pkg)(raw_stream, mode='rb')
        return raw_stream


class BaseReader(ABC):
    """Abstract base class for line-based text file readers."""
    __slots__ = ('_handle', '_encoding')

    def __init__(self, handle: BinaryIO, encoding: str = 'utf-8'):
        """
        Initializes the reader.

        Args:
            handle: The open binary file handle to read from.
            encoding: Text encoding of the file.
        """
        self._handle = handle
        self._encoding = encoding

    def __enter__(self): return self
    def __exit__(self, exc_type, exc_val, exc_tb): pass

    def lines(self) -> Generator[str, None, None]:
        """Yields decoded lines without their line terminators."""
        encoding = self._encoding
        for raw in self._handle: yield raw.decode(encoding).rstrip('\r\n')

    @abstractmethod
    def __iter__(self) -> Generator: ...


class AnnotationReader(BaseReader):
    """
    Reader for tab separated gene annotations with ``chromosome``, ``start``, ``end``, ``strand`` and ``name`` columns.

    Chromosomes may carry a ``chr`` prefix. Blank lines and ``#`` comments are ignored; other rows that cannot be
    parsed are skipped and reported in a single ``AnnotationWarning`` once the file is exhausted.

    Examples:
        >>> with Xopen("genes.tsv") as f:
        ...     genes = list(AnnotationReader(f))
    """
    _min_cols = 5
    __slots__ = ('_invert', 'skipped')

    def __init__(self, handle: BinaryIO, invert: bool = False, encoding: str = 'utf-8'):
        super().__init__(handle, encoding)
        self._invert = invert
        self.skipped = 0

    def __iter__(self) -> Generator[Gene, None, None]:
        self.skipped = 0
        for line in self.lines():
            if not line.strip() or line.startswith('#'): continue
            try: yield self.parse_row(line.split('\t'))
            except ValueError: self.skipped += 1
        if self.skipped:
            warn(f'Skipped {self.skipped} malformed annotation line(s)', AnnotationWarning, stacklevel=2)

    def parse_row(self, parts: list[str]) -> Gene:
        """
        Parses an annotation row.

        Args:
            parts: List of column strings.

        Returns:
            A Gene, with its strand inverted if requested.

        Raises:
            ValueError: If the row is too short, or a coordinate, strand or chromosome is invalid.
        """
        if len(parts) < self._min_cols: raise ValueError(f'Expected at least {self._min_cols} columns, got {len(parts)}')
        chromosome, start, end, strand, name = (p.strip() for p in parts[:self._min_cols])
        if chromosome[:3].lower() == 'chr': chromosome = chromosome[3:]
        if strand not in {'+', '-'}: raise ValueError(f'Invalid strand {strand!r}')
        return Gene(int(chromosome), int(start), int(end), Strand.from_symbol(strand, self._invert), name)


class MethylomeReader(BaseReader):
    """
    Reader for methylome files, yielding the records after the header line as text.

    Records are not parsed here; parsing and CG filtering happen per line in the extraction pipeline. Lines that
    cannot be decoded are skipped, and the header line is never decoded.
    """
    __slots__ = ()

    def __iter__(self) -> Generator[str, None, None]:
        encoding = self._encoding
        next(self._handle, None)  # Header
        for raw in self._handle:
            try: line = raw.decode(encoding)
            except UnicodeDecodeError: continue
            yield line.rstrip('\r\n')


class WindowWriter:
    """
    Writes the sites of each window to ``<output_dir>/<region>/<i * step>/<filename>``.

    Files are opened for appending and the methylome header is written only when the file is empty after opening,
    so several extractions may append to the same window file.

    Examples:
        >>> WindowWriter("out", step=5).write(windows, "sample.tsv")
    """
    __slots__ = ('output_dir', 'step')
    _HEADER = '\t'.join(METHYLOME_HEADER) + '\n'

    def __init__(self, output_dir: Union[str, Path], step: int):
        self.output_dir = Path(output_dir)
        self.step = step

    def path(self, region: Region, index: int, filename: str) -> Path:
        """Returns the output file of a window, named after the window's lower bound."""
        return self.output_dir / region.dirname / str(index * self.step) / filename

    def write(self, windows: Windows, filename: str):
        for region, local in windows:
            for i, window in enumerate(local):
                with open(self.path(region, i, filename), 'a', encoding='utf-8') as f:
                    if fstat(f.fileno()).st_size == 0: f.write(self._HEADER)
                    f.writelines(f'{site.original}\n' for site in window)


# Functions ------------------------------------------------------------------------------------------------------------
def read_annotation(file: Union[str, Path, BinaryIO], invert: bool = False) -> list[Gene]:
    """Reads all genes of an annotation file, see ``AnnotationReader``."""
    with Xopen(file) as handle: return list(AnnotationReader(handle, invert=invert))


def find_methylome_files(path: Union[str, Path]) -> list[Path]:
    """
    Lists the methylome files to process.

    Args:
        path: A methylome file, or a directory whose regular, non-hidden files are all methylome files.

    Returns:
        The files, sorted by name.

    Raises:
        FileNotFoundError: If the path does not exist.
    """
    path = Path(path).expanduser()
    if not path.exists(): raise FileNotFoundError(f'No such file or directory: {str(path)!r}')
    if path.is_file(): return [path]
    return sorted(p for p in path.iterdir() if p.is_file() and not p.name.startswith('.'))


def prepare_output_dir(output_dir: Union[str, Path], windows: Windows, step: int) -> Path:
    """
    Creates the directory of every window below ``output_dir``.

    Args:
        output_dir: Root output directory, created if missing.
        windows: Windows giving the number of windows per region.
        step: Window step.

    Returns:
        The output directory.
    """
    writer = WindowWriter(output_dir, step)
    for region, local in windows:
        for i in range(len(local)): writer.path(region, i, '').mkdir(parents=True, exist_ok=True)
    return writer.output_dir

