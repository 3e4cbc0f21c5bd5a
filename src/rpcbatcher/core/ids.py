"""
Correlation id generation.

Every non-notification request takes its id from a single process-wide
generator so that ids never collide between concurrently open batches and
single calls. The generator starts at 1, only ever increments, and is never
reset by library code. Tests swap it out through ``set_id_generator``.
"""

import itertools
import threading
from numbers import Integral, Real
from typing import Any, Optional


class IdGenerator:
    """Thread-safe monotonically increasing integer id source."""
    
    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()
    
    def next_id(self) -> int:
        """Return the next id."""
        with self._lock:
            return next(self._counter)
    
    __call__ = next_id


_generator = IdGenerator()


def get_id_generator() -> IdGenerator:
    """Get the process-wide id generator."""
    return _generator


def set_id_generator(generator: IdGenerator) -> None:
    """Replace the process-wide id generator."""
    global _generator
    _generator = generator


def normalize_id(value: Any) -> Optional[str]:
    """
    Map a request/response id to its canonical registry key.
    
    Wire ids are numeric but may come back as strings or floats, so every
    id is compared through this function. Returns None for values that can
    never be correlated (null ids, booleans, containers).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Integral):
        return str(int(value))
    if isinstance(value, Real):
        if float(value).is_integer():
            return str(int(value))
        return repr(float(value))
    if isinstance(value, str):
        return value
    return None
