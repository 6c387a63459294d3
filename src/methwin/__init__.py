"""
Top-level module, including warnings and shared resource management.
"""
from functools import cached_property
from concurrent.futures import ThreadPoolExecutor
import atexit
import os


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class MethwinWarning(Warning): pass


# Classes --------------------------------------------------------------------------------------------------------------
class Resources:
    """
    Manages global resources like the worker thread pool.
    """
    def __init__(self) -> None:
        # Register cleanup to run automatically when the program exits
        atexit.register(self._cleanup)

    @cached_property
    def available_cpus(self) -> int:
        """Returns the number of available CPUs."""
        try: return os.process_cpu_count()
        except AttributeError: return os.cpu_count()

    @cached_property
    def pool(self) -> ThreadPoolExecutor:
        """Returns a shared ThreadPoolExecutor."""
        return ThreadPoolExecutor(min(32, (self.available_cpus or 1) + 4))

    def _cleanup(self):
        """Shuts down the thread pool."""
        # Check if 'pool' is in __dict__ (meaning it was initialized)
        if 'pool' in self.__dict__: self.pool.shutdown(wait=False, cancel_futures=True)


# Constants ------------------------------------------------------------------------------------------------------------
RESOURCES = Resources()
