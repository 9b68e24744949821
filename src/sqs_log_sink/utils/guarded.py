"""
Module: guarded.py
Description: Lock-guarded holder for a nullable shared handle.

The sink publishes its live transport through a GuardedHandle. All
writes (create, replace, clear) happen inside `hold()`, which takes a
re-entrant lock and releases it on every exit path. Readers on the hot
path call `get()` without the lock: a published reference is stable
until a writer swaps it, and readers must cope with it turning None.
"""

import threading
from contextlib import contextmanager
from typing import Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class GuardedHandle(Generic[T]):
    """Nullable reference whose mutations are serialized by an RLock."""

    def __init__(self, value: Optional[T] = None):
        self._lock = threading.RLock()
        self._value = value

    @contextmanager
    def hold(self) -> Iterator["GuardedHandle[T]"]:
        """Acquire the lock for the duration of the block."""
        with self._lock:
            yield self

    def get(self) -> Optional[T]:
        return self._value

    def set(self, value: Optional[T]) -> None:
        with self._lock:
            self._value = value

    def take(self) -> Optional[T]:
        """Clear the handle and return what it held."""
        with self._lock:
            value, self._value = self._value, None
            return value

    @property
    def is_set(self) -> bool:
        return self._value is not None
