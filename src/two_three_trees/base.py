"""Shared definitions for 2-3 trees: errors and key infinity markers"""

from enum import Enum


class Infinity(Enum):
    """
    Marks whether a composite key is a finite key or one of the two
    sentinel bounds of a tree.
    """
    MINUS = -1
    NONE = 0
    PLUS = 1


class TreeError(Exception):
    """Base class for errors raised by the tree engine."""
    pass


class InvalidKeyError(TreeError, ValueError):
    """
    Raised when a key is malformed, e.g. a finite key without a primary
    component takes part in a comparison.
    """
    pass


class EmptyTreeError(TreeError, LookupError):
    """Raised when an operation needs a real leaf but the tree only holds its sentinels."""
    pass
