"""Borrowed views used to look up interned values."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from typing import Any

T = TypeVar("T")


class Borrowed(ABC, Generic[T]):
    """Base class for borrowed views of a value.

    A view stands in for an owned value during a lookup, so that an owned value only needs to be
    constructed when the lookup misses. Subclasses must hash identically to the owned value they
    describe, and compare equal to it.
    """

    __slots__ = ()

    @abstractmethod
    def __hash__(self) -> int:
        """Return the hash of the owned value."""
        pass

    @abstractmethod
    def __eq__(self, other: Any) -> bool:
        """Check if the view is equal to an owned value."""
        pass

    @abstractmethod
    def to_owned(self) -> T:
        """Construct the owned value described by the view.

        Returns:
            Owned value, hashing and comparing equal to the view.
        """
        pass


class Cloned(Borrowed[T]):
    """View of an existing value which is copied if it needs to be stored.

    Args:
        value: The value to borrow.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T):
        """Initialise the object."""
        self._value = value

    def __hash__(self) -> int:
        """Return the hash of the borrowed value."""
        return hash(self._value)

    def __eq__(self, other: Any) -> bool:
        """Check if the borrowed value is equal to another value."""
        if isinstance(other, Cloned):
            other = other._value
        return bool(self._value == other)

    def to_owned(self) -> T:
        """Return a shallow copy of the borrowed value."""
        return copy.copy(self._value)

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        return f"{self.__class__.__name__}({self._value!r})"
