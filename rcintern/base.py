"""Base classes for reference-counted handles."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Optional, TypeVar, cast

if TYPE_CHECKING:
    from typing import Any

    from typing_extensions import Self

T = TypeVar("T")

_RELEASED: Any = object()


class Box(Generic[T]):
    """Reference-counted allocation holding a single value.

    Args:
        value: The value to store. The first strong reference is owned by the caller.

    Note:
        The counts are plain integers, so a `Box` is only suitable for use from a single thread.
        Subclasses override the counting methods to add thread confinement or atomicity. Once the
        strong count reaches zero the value is released, but the counts themselves remain
        readable for as long as any `Weak` tracker refers to the box.
    """

    __slots__ = ("_value", "strong", "weak")

    def __init__(self, value: T):
        """Initialise the object."""
        self._value = value
        self.strong = 1
        self.weak = 0

    def check(self) -> None:
        """Check that the calling thread may use this allocation."""
        pass

    def get(self) -> T:
        """Get the stored value."""
        if self._value is _RELEASED:
            raise ValueError("value has already been released")
        return cast(T, self._value)

    def incref(self) -> None:
        """Increment the strong count."""
        self.strong += 1

    def try_incref(self) -> bool:
        """Increment the strong count, unless it has already reached zero.

        Returns:
            Whether the strong count was incremented.
        """
        if self.strong == 0:
            return False
        self.strong += 1
        return True

    def decref(self) -> None:
        """Decrement the strong count, releasing the value when it reaches zero."""
        self.strong -= 1
        if self.strong == 0:
            self._value = _RELEASED

    def incweak(self) -> None:
        """Increment the weak count."""
        self.weak += 1

    def decweak(self) -> None:
        """Decrement the weak count."""
        self.weak -= 1


class Shared(ABC, Generic[T]):
    """Base class for shared-ownership handles to an immutable value.

    Args:
        value: The value to take ownership of.

    Note:
        Handles are released either explicitly with `drop`, or when they are garbage collected.
        Equality between handles compares the values they point to, and `ptr_eq` compares the
        allocations.
    """

    __slots__ = ("_box",)

    _box: Optional[Box[T]]
    _thread_confined: bool = False

    def __init__(self, value: T):
        """Initialise the object."""
        self._box = self._allocate(value)

    @classmethod
    @abstractmethod
    def _allocate(cls, value: T) -> Box[T]:
        """Allocate a new control block holding a value.

        Args:
            value: The value to store.

        Returns:
            Control block with a strong count of one.
        """
        pass

    @classmethod
    def new(cls, value: T) -> Self:
        """Create a handle to a new allocation.

        Args:
            value: The value to take ownership of.

        Returns:
            The first strong handle to the allocation.
        """
        return cls(value)

    @classmethod
    def _from_box(cls, box: Box[T]) -> Self:
        """Wrap a control block whose strong count has already been incremented."""
        handle = cls.__new__(cls)
        handle._box = box
        return handle

    def _live_box(self) -> Box[T]:
        """Get the control block, checking that the handle is still usable."""
        box = self._box
        if box is None:
            raise ValueError(f"{self.__class__.__name__} handle has already been dropped")
        box.check()
        return box

    @property
    def value(self) -> T:
        """Get the value pointed to by the handle."""
        return self._live_box().get()

    @property
    def strong_count(self) -> int:
        """Get the number of strong handles to the allocation."""
        return self._live_box().strong

    @property
    def weak_count(self) -> int:
        """Get the number of weak trackers of the allocation."""
        return self._live_box().weak

    @property
    def dropped(self) -> bool:
        """Get whether the handle has been dropped."""
        return self._box is None

    def clone(self) -> Self:
        """Return a new strong handle to the same allocation."""
        box = self._live_box()
        box.incref()
        return self._from_box(box)

    def drop(self) -> None:
        """Release the handle.

        Raises:
            ValueError: If the handle has already been dropped.
        """
        box = self._live_box()
        self._box = None
        box.decref()

    def downgrade(self) -> Weak[T]:
        """Return a weak tracker for the allocation."""
        return Weak(self._live_box(), type(self))

    def ptr_eq(self, other: Shared[T]) -> bool:
        """Check if two handles point to the same allocation."""
        return self._live_box() is other._live_box()

    def __copy__(self) -> Self:
        """Return a new strong handle to the same allocation."""
        return self.clone()

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        """Return a new strong handle to the same allocation."""
        return self.clone()

    def __del__(self) -> None:
        """Release the handle if it has not been dropped."""
        box = getattr(self, "_box", None)
        if box is not None:
            self._box = None
            box.decref()

    def __hash__(self) -> int:
        """Return the hash of the value."""
        return hash(self.value)

    def __eq__(self, other: Any) -> bool:
        """Check if two handles point to equal values."""
        if not isinstance(other, Shared):
            return NotImplemented
        if self.ptr_eq(other):
            return True
        return bool(self.value == other.value)

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        if self._box is None:
            return f"{self.__class__.__name__}(<dropped>)"
        return f"{self.__class__.__name__}({self.value!r})"


class Weak(Generic[T]):
    """Non-owning tracker of an allocation.

    Args:
        box: The control block to track.
        handle_type: Type of handle returned by `upgrade`.
    """

    __slots__ = ("_box", "_handle_type")

    def __init__(self, box: Box[T], handle_type: type[Shared[T]]):
        """Initialise the object."""
        box.incweak()
        self._box: Optional[Box[T]] = box
        self._handle_type = handle_type

    @property
    def strong_count(self) -> int:
        """Get the number of strong handles to the allocation."""
        if self._box is None:
            return 0
        return self._box.strong

    @property
    def expired(self) -> bool:
        """Get whether no strong handles to the allocation remain."""
        return self.strong_count == 0

    def peek(self) -> Optional[T]:
        """Get the value without creating a strong handle.

        Returns:
            The value, or `None` if the allocation has expired. The returned reference must not
            outlive the probe it is used for.
        """
        box = self._box
        if box is None or box.strong == 0:
            return None
        box.check()
        value = box._value
        if value is _RELEASED:
            return None
        return cast(T, value)

    def upgrade(self) -> Optional[Shared[T]]:
        """Return a new strong handle, or `None` if the allocation has expired."""
        box = self._box
        if box is None:
            return None
        box.check()
        if not box.try_incref():
            return None
        return self._handle_type._from_box(box)

    def drop(self) -> None:
        """Release the tracker."""
        box = self._box
        if box is not None:
            self._box = None
            box.decweak()

    def __del__(self) -> None:
        """Release the tracker if it has not been dropped."""
        if getattr(self, "_box", None) is not None:
            self.drop()

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        state = "expired" if self.expired else "live"
        return f"Weak({self._handle_type.__name__}, {state})"
