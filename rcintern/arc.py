"""Thread-safe reference-counted handles and interner."""

from __future__ import annotations

import threading
from typing import TypeVar

from rcintern.base import _RELEASED, Box, Shared
from rcintern.hashing import InternTable

T = TypeVar("T")


class _ArcBox(Box[T]):
    """Control block whose counts are updated atomically."""

    __slots__ = ("_lock",)

    def __init__(self, value: T):
        """Initialise the object."""
        super().__init__(value)
        self._lock = threading.Lock()

    def incref(self) -> None:
        """Increment the strong count."""
        with self._lock:
            self.strong += 1

    def try_incref(self) -> bool:
        """Increment the strong count, unless it has already reached zero."""
        with self._lock:
            if self.strong == 0:
                return False
            self.strong += 1
            return True

    def decref(self) -> None:
        """Decrement the strong count, releasing the value when it reaches zero."""
        with self._lock:
            self.strong -= 1
            if self.strong:
                return
            value, self._value = self._value, _RELEASED
        # The value is finalised outside the lock
        del value

    def incweak(self) -> None:
        """Increment the weak count."""
        with self._lock:
            self.weak += 1

    def decweak(self) -> None:
        """Decrement the weak count."""
        with self._lock:
            self.weak -= 1


class Arc(Shared[T]):
    """Reference-counted handle that can be shared between threads.

    Args:
        value: The value to take ownership of.
    """

    __slots__ = ()

    @classmethod
    def _allocate(cls, value: T) -> Box[T]:
        """Allocate a new control block holding a value."""
        return _ArcBox(value)


class ArcInterner(InternTable[T]):
    """Interner returning `Arc` handles.

    Args:
        synchronized: Whether to serialise access to the interner with a lock. Without it, the
            handles may be shared between threads but the interner itself must be guarded by the
            caller.
    """

    def __init__(self, synchronized: bool = False) -> None:
        """Initialise the interner."""
        super().__init__(Arc, synchronized=synchronized)
