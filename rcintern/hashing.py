"""Hashing utilities."""

from __future__ import annotations

import contextlib
import logging
import threading
import warnings
from typing import TYPE_CHECKING, Generic, TypeVar

import numpy as np

import rcintern
from rcintern.base import Shared
from rcintern.borrow import Borrowed, Cloned

if TYPE_CHECKING:
    from typing import Any, ContextManager, Iterator, Optional, Sequence

    from rcintern.base import Weak
    from rcintern.types import InternKey

T = TypeVar("T")

logger = logging.getLogger(__name__)


class InternTable(Generic[T]):
    """A table for interning values behind reference-counted handles.

    The table keeps a `Weak` tracker for each interned allocation, bucketed by the hash of the
    value. Values are owned collectively by the handles returned from `intern`, and entries whose
    handles have all been dropped are purged by `shrink_to_fit`, or evicted when a lookup touches
    them.

    Args:
        handle_type: The handle class returned by the table.
        synchronized: Whether to serialise access to the table with a lock.
    """

    _buckets: dict[int, list[Weak[T]]]

    def __init__(self, handle_type: type[Shared[T]], synchronized: bool = False) -> None:
        """Initialise the intern table."""
        if synchronized and handle_type._thread_confined:
            raise ValueError(
                f"{handle_type.__name__} handles cannot be used in a synchronized table"
            )
        self._handle_type = handle_type
        self._buckets = {}
        self._occupancy = 0
        self._owner = threading.get_ident()
        self._lock: ContextManager[Any] = (
            threading.RLock() if synchronized else contextlib.nullcontext()
        )

    def _check(self) -> None:
        """Check that the calling thread may use the table."""
        if self._handle_type._thread_confined and threading.get_ident() != self._owner:
            raise RuntimeError(
                f"{self.__class__.__name__} cannot be used outside the thread that created it"
            )

    def _probe(self, view: InternKey, key: int) -> Optional[Shared[T]]:
        """Look up a live entry equal to a value or view.

        Args:
            view: The value or borrowed view to look up.
            key: The hash of `view`.

        Returns:
            A new strong handle to the matching entry, or `None` if there is no live match.
        """
        bucket = self._buckets.get(key)
        if not bucket:
            return None

        handle = None
        dead = 0
        for weak in bucket:
            value = weak.peek()
            if value is None and weak.expired:
                dead += 1
                continue
            if handle is None and view == value:
                handle = weak.upgrade()
                if handle is None:
                    dead += 1

        if dead and rcintern.EVICT_ON_TOUCH:
            self._evict(key, bucket)

        return handle

    def _evict(self, key: int, bucket: list[Weak[T]]) -> None:
        """Remove the dead entries from a bucket."""
        live = []
        for weak in bucket:
            if weak.expired:
                weak.drop()
            else:
                live.append(weak)
        self._occupancy -= len(bucket) - len(live)
        logger.debug("Evicted %d dead entries from bucket %d", len(bucket) - len(live), key)
        if live:
            self._buckets[key] = live
        else:
            del self._buckets[key]

    def _insert(self, value: T, key: int) -> Shared[T]:
        """Allocate a new entry for a value.

        Args:
            value: The owned value to store.
            key: The hash of `value`.

        Returns:
            The first strong handle to the new allocation.
        """
        handle = self._handle_type.new(value)
        self._buckets.setdefault(key, []).append(handle.downgrade())
        self._occupancy += 1
        return handle

    def intern(self, value: T | Borrowed[T]) -> Shared[T]:
        """Get a handle to the canonical instance of a value, interning it if necessary.

        Args:
            value: An owned value, or a `Borrowed` view of one. A view is only converted to an
                owned value if no equal value is interned yet.

        Returns:
            Strong handle to the interned value.
        """
        if isinstance(value, Shared):
            warnings.warn(
                "Interning a handle interns the value it points to.",
                RuntimeWarning,
                stacklevel=2,
            )
            value = value.value

        with self._lock:
            self._check()
            key = hash(value)
            handle = self._probe(value, key)
            if handle is not None:
                return handle

            if isinstance(value, Borrowed):
                owned = value.to_owned()
            else:
                owned = value
            logger.debug("Interning new %s value", type(owned).__name__)

            return self._insert(owned, key)

    def try_intern(self, value: T | Borrowed[T]) -> Optional[Shared[T]]:
        """Get a handle to the canonical instance of a value, if it is interned.

        Args:
            value: An owned value, or a `Borrowed` view of one.

        Returns:
            Strong handle to the interned value, or `None` if no equal value is live.
        """
        with self._lock:
            self._check()
            return self._probe(value, hash(value))

    def intern_cloned(self, value: T) -> Shared[T]:
        """Intern a value, storing a shallow copy of it if it is not already interned."""
        return self.intern(Cloned(value))

    def intern_slice(self, items: Sequence[Any] | np.ndarray) -> Shared[T]:
        """Intern the contents of a sequence as a tuple.

        Args:
            items: The sequence to intern. One-dimensional arrays are interned as a tuple of Python
                scalars.

        Returns:
            Strong handle to the interned tuple.
        """
        if isinstance(items, np.ndarray):
            if items.ndim != 1:
                raise ValueError(f"Only one-dimensional arrays can be interned, got {items.ndim}")
            items = items.tolist()
        return self.intern(tuple(items))  # type: ignore

    def intern_str(self, text: str | bytes) -> Shared[T]:
        """Intern text as a `str`.

        Args:
            text: The text to intern. Bytes are decoded as UTF-8, and `str` subclasses are
                converted to `str`.

        Returns:
            Strong handle to the interned string.
        """
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        elif not isinstance(text, str):
            raise TypeError(f"text must be str or bytes, got {type(text).__name__}")
        elif type(text) is not str:
            text = str(text)
        return self.intern(text)  # type: ignore

    def shrink_to_fit(self) -> None:
        """Purge dead entries and rebuild the table to fit the live entries."""
        with self._lock:
            self._check()
            self._compact()

    def _compact(self) -> None:
        """Purge dead entries and rebuild the table."""
        buckets: dict[int, list[Weak[T]]] = {}
        purged = 0
        for key, bucket in self._buckets.items():
            live = []
            for weak in bucket:
                if weak.expired:
                    weak.drop()
                    purged += 1
                else:
                    live.append(weak)
            if live:
                buckets[key] = live
        self._buckets = buckets
        self._occupancy -= purged
        logger.debug("Purged %d dead entries, %d remaining", purged, self._occupancy)

    @property
    def occupancy(self) -> int:
        """Get the number of entries in the table, including dead entries."""
        return self._occupancy

    @property
    def handle_type(self) -> type[Shared[T]]:
        """Get the handle class returned by the table."""
        return self._handle_type

    def is_empty(self) -> bool:
        """Check if the table has no live entries."""
        return len(self) == 0

    def __len__(self) -> int:
        """Get the number of live entries in the table."""
        with self._lock:
            self._check()
            return sum(not weak.expired for bucket in self._buckets.values() for weak in bucket)

    def __contains__(self, value: InternKey) -> bool:
        """Check if a value equal to `value` is live in the table."""
        with self._lock:
            self._check()
            bucket = self._buckets.get(hash(value), ())
            for weak in bucket:
                if not weak.expired and value == weak.peek():
                    return True
            return False

    def __iter__(self) -> Iterator[Shared[T]]:
        """Iterate over new strong handles to the live entries."""
        with self._lock:
            self._check()
            weaks = [weak for bucket in self._buckets.values() for weak in bucket]
        for weak in weaks:
            handle = weak.upgrade()
            if handle is not None:
                yield handle

    def __del__(self) -> None:
        """Compact the table on destruction."""
        if rcintern.SHRINK_ON_DELETE and getattr(self, "_buckets", None):
            self._compact()

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        return (
            f"{self.__class__.__name__}({self._handle_type.__name__}, "
            f"occupancy={self._occupancy})"
        )
