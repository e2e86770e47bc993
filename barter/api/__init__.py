# barter/api/__init__.py
# This file makes the api directory a Python package.

from . import conversations
from . import ratings
from . import swaps
from . import sync

__all__ = [
    "swaps",
    "conversations",
    "ratings",
    "sync",
]
