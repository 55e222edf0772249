"""Thread safety utilities."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")

def wrap_with_lock(
    fn: Callable[..., T] | None,
    lock: Any = None,
) -> Callable[..., T] | None:
    """Wraps a function call with a lock."""
    if fn is None:
        return None
    lk = lock if lock is not None else threading.RLock()

    def wrapped(*args: Any, **kwargs: Any) -> T:
        """Wrapped function call."""
        with lk:
            return fn(*args, **kwargs)

    return wrapped


class AtomicReference:
    """Holds a single reference that is swapped with compare-and-set semantics.

    Reads are plain attribute loads and never take the lock. Only
    :meth:`compare_and_set` is serialized, so a writer can publish a new
    value if and only if nobody else published one since it last read.
    """

    def __init__(self, value: Any = None) -> None:
        """Initializes the reference with ``value``."""
        self._value = value
        self.compare_and_set = wrap_with_lock(self._compare_and_set, threading.Lock())

    def get(self) -> Any:
        """Returns the current value."""
        return self._value

    def _compare_and_set(self, expected: Any, new: Any) -> bool:
        """Replaces the value by ``new`` if it is still ``expected``.

        Args:
            expected: Value the caller read before building ``new``.
            new: Replacement value.

        Returns:
            ``True`` if the value was replaced, ``False`` if another writer
            got there first.
        """
        if self._value is not expected:
            return False
        self._value = new
        return True
