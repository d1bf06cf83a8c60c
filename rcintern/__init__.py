"""
******************************************************
rcintern: Reference-counted interning of Python values
******************************************************

The `rcintern` package deduplicates equal values into a single shared allocation, handed out
through reference-counted handles. Interned values that are no longer referenced by any handle are
purged when the interner is compacted with `shrink_to_fit`, or when the interner is destroyed.

Two interners are provided, `RcInterner` and `ArcInterner`, returning `Rc` and `Arc` handles
respectively. `Rc` handles are confined to the thread that created them, while `Arc` handles update
their counts atomically and can be shared between threads.


Installation
------------

        pip install .

"""  # noqa: D205, D212, D415

from __future__ import annotations

__version__ = "0.1.0"

EVICT_ON_TOUCH = 1
SHRINK_ON_DELETE = 1

from rcintern.arc import Arc, ArcInterner  # noqa: E402
from rcintern.base import Shared, Weak  # noqa: E402
from rcintern.borrow import Borrowed, Cloned  # noqa: E402
from rcintern.hashing import InternTable  # noqa: E402
from rcintern.rc import Rc, RcInterner  # noqa: E402

__all__ = [
    "Arc",
    "ArcInterner",
    "Borrowed",
    "Cloned",
    "InternTable",
    "Rc",
    "RcInterner",
    "Shared",
    "Weak",
]
