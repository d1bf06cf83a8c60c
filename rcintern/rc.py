"""Single-thread reference-counted handles and interner."""

from __future__ import annotations

import threading
from typing import TypeVar

from rcintern.base import Box, Shared
from rcintern.hashing import InternTable

T = TypeVar("T")


class _RcBox(Box[T]):
    """Control block confined to the thread that allocated it."""

    __slots__ = ("_owner",)

    def __init__(self, value: T):
        """Initialise the object."""
        super().__init__(value)
        self._owner = threading.get_ident()

    def check(self) -> None:
        """Check that the calling thread owns this allocation.

        Raises:
            RuntimeError: If called from a thread other than the owner.
        """
        if threading.get_ident() != self._owner:
            raise RuntimeError("Rc handles cannot be used outside the thread that created them")


class Rc(Shared[T]):
    """Reference-counted handle for use within a single thread.

    Args:
        value: The value to take ownership of.
    """

    __slots__ = ()

    _thread_confined = True

    @classmethod
    def _allocate(cls, value: T) -> Box[T]:
        """Allocate a new control block holding a value."""
        return _RcBox(value)


class RcInterner(InternTable[T]):
    """Interner returning `Rc` handles.

    The interner and the handles it returns are confined to the thread that created the interner.
    """

    def __init__(self) -> None:
        """Initialise the interner."""
        super().__init__(Rc)
