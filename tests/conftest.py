"""Configuration file for `pytest`."""

import pytest

from rcintern import ArcInterner, Borrowed, RcInterner


class Counted:
    """Value type which counts its constructions."""

    def __init__(self, key, helper):
        helper.constructed += 1
        self.key = key
        self.helper = helper

    def __hash__(self):
        return hash(("Counted", self.key))

    def __eq__(self, other):
        if isinstance(other, (Counted, CountedView)):
            return self.key == other.key
        return NotImplemented


class CountedView(Borrowed):
    """Borrowed view of a `Counted` value."""

    __slots__ = ("key", "helper")

    def __init__(self, key, helper):
        self.key = key
        self.helper = helper

    def __hash__(self):
        return hash(("Counted", self.key))

    def __eq__(self, other):
        if isinstance(other, (Counted, CountedView)):
            return self.key == other.key
        return NotImplemented

    def to_owned(self):
        return Counted(self.key, self.helper)


class Droppable:
    """Value type which records when it is finalised."""

    def __init__(self, key, helper):
        self.key = key
        self.helper = helper

    def __hash__(self):
        return hash(("Droppable", self.key))

    def __eq__(self, other):
        if isinstance(other, Droppable):
            return self.key == other.key
        return NotImplemented

    def __del__(self):
        self.helper.dropped.add(self.key)


class Helper:
    """Helper class for tests."""

    def __init__(self):
        self.constructed = 0
        self.dropped = set()

    def counted(self, key):
        """Construct a value, incrementing the construction count."""
        return Counted(key, self)

    def view(self, key):
        """Construct a borrowed view, which does not count as a construction."""
        return CountedView(key, self)

    def droppable(self, key):
        """Construct a value which records its finalisation in `dropped`."""
        return Droppable(key, self)


@pytest.fixture
def helper():
    """Fixture for the helper class."""
    return Helper()


@pytest.fixture(params=["rc", "arc", "arc-synchronized"])
def interner(request):
    """Fixture for an empty interner of each variant."""
    if request.param == "rc":
        return RcInterner()
    elif request.param == "arc":
        return ArcInterner()
    return ArcInterner(synchronized=True)
