"""
Module containing configuration and progress reporting utilities.
"""
from dataclasses import dataclass, fields
from shutil import get_terminal_size
from sys import stderr
from time import time
from typing import Any, IO, Optional, TYPE_CHECKING
import threading

if TYPE_CHECKING:
    from methwin.containers.genome import GeneIndex


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class ConfigError(ValueError): pass


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass(slots=True, frozen=True, kw_only=True)
class Config:
    """
    Config parent class that can conveniently set attributes from CLI args
    """
    @classmethod
    def from_obj(cls, obj: Any) -> 'Config':
        return cls(**{f.name: val for f in fields(cls) if (val := getattr(obj, f.name, None)) is not None})


@dataclass(slots=True, frozen=True, kw_only=True)
class ExtractionConfig(Config):
    """
    Parameters of a window extraction run.

    Attributes:
        window_size: Window size, in percent of the region or in bp if ``absolute`` is set.
        window_step: Distance between window starts; 0 means ``window_size`` (no overlap).
        absolute: Use absolute window sizes in bp instead of percentages.
        cutoff: Number of bp upstream and downstream of a gene that are still assigned to it.
        invert: Invert strands, switching from 5' to 3' and vice versa.
        threads: Number of worker threads; None uses the shared pool.

    Examples:
        >>> ExtractionConfig(window_size=5).step
        5
    """
    window_size: int = 5
    window_step: int = 0
    absolute: bool = False
    cutoff: int = 2048
    invert: bool = False
    threads: Optional[int] = None

    def __post_init__(self):
        if self.window_size <= 0: raise ConfigError(f'Window size must be positive, got {self.window_size}')
        if self.window_step < 0: raise ConfigError(f'Window step must not be negative, got {self.window_step}')
        if self.cutoff < 0: raise ConfigError(f'Cutoff must not be negative, got {self.cutoff}')
        if self.threads is not None and self.threads < 1:
            raise ConfigError(f'Thread count must be positive, got {self.threads}')

    @property
    def step(self) -> int:
        """The effective window step."""
        return self.window_step or self.window_size

    def max_gene_length(self, genome: 'GeneIndex') -> int:
        """
        Returns the gene body extent that windows are laid out over.

        With relative sizes this is always 100 (percent); with absolute sizes it is the longest gene, but at least 100.
        """
        if not self.absolute: return 100
        return max(100, genome.max_length)


class ProgressBar:
    """
    A lightweight progress bar written to stderr.
    Used as a context manager, with thread-safe updates.
    """
    __slots__ = ('_total', '_desc', '_unit', '_leave', '_file', '_cols', '_min_interval',
                 '_last_print_t', '_start_t', '_n', '_bar_char', '_lock')

    def __init__(self, total: int = None, desc: str = None, unit: str = 'it',
                 leave: bool = True, file: IO = stderr, min_interval: float = 0.1, bar_char: str = '#',
                 cols: int = None):
        self._total = total
        self._desc = desc + ": " if desc else ""
        self._unit = unit
        self._leave = leave
        self._file = file
        self._min_interval = min_interval
        self._bar_char = bar_char
        self._cols = cols
        self._n = 0
        self._start_t = time()
        self._last_print_t = self._start_t
        self._lock = threading.Lock()

    def __enter__(self):
        self._start_t = time()
        self._last_print_t = self._start_t
        self._update(self._start_t)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._update(time(), final=True)

    @property
    def n(self) -> int: return self._n

    def update(self, n: int = 1):
        with self._lock:
            self._n += n
            curr_t = time()
            if curr_t - self._last_print_t >= self._min_interval or self._n == self._total:
                self._update(curr_t)

    @staticmethod
    def _format_time(seconds):
        if not seconds or seconds < 0 or seconds == float('inf'): return "??:??"
        m, s = divmod(int(seconds), 60)
        h, m = divmod(m, 60)
        if h: return f"{h}:{m:02d}:{s:02d}"
        return f"{m:02d}:{s:02d}"

    def _update(self, curr_t, final=False):
        self._last_print_t = curr_t
        cols = self._cols or get_terminal_size().columns
        elapsed = curr_t - self._start_t
        if self._total:
            frac = min(1.0, self._n / self._total)
            l_bar = f"{self._desc}{frac * 100:3.0f}%|"
            r_bar = f"| {self._n}/{self._total} {self._unit} [{self._format_time(elapsed)}]"
            bar_len = max(1, cols - len(l_bar) - len(r_bar) - 1)
            fill = int(frac * bar_len)
            line = f"\r{l_bar}{self._bar_char * fill}{'-' * (bar_len - fill)}{r_bar}"
        else:
            line = f"\r{self._desc}{self._n} {self._unit} [{self._format_time(elapsed)}]"
        # Pad to clear previous
        if len(line) < cols: line += " " * (cols - len(line))
        self._file.write(line)
        if final:
            if self._leave: self._file.write('\n')
            else: self._file.write(f"\r{' ' * cols}\r")
        self._file.flush()
