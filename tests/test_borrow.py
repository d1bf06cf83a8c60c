import pytest

from rcintern import Borrowed, Cloned


def test_cloned():
    value = ("a", 1)
    view = Cloned(value)
    assert hash(view) == hash(value)
    assert view == value
    assert view == Cloned(("a", 1))
    assert view != ("b", 1)
    assert view.to_owned() == value
    assert repr(view) == "Cloned(('a', 1))"


def test_cloned_copies():
    value = {"a": 1}
    owned = Cloned(value).to_owned()
    assert owned == value
    assert owned is not value


def test_borrowed_abstract():
    class Partial(Borrowed):
        def __hash__(self):
            return 0

    with pytest.raises(TypeError):
        Partial()
