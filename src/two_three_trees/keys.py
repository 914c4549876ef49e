"""Composite keys with plus- and minus-infinity sentinels"""

from __future__ import annotations
from typing import Generic, Optional, TypeVar

from two_three_trees.base import Infinity, InvalidKeyError

P = TypeVar("P")
S = TypeVar("S")


def _cmp(a, b) -> int:
    if a < b:
        return -1
    if b < a:
        return 1
    return 0


class CompositeKey(Generic[P, S]):
    """
    An ordered (primary, secondary) pair used to position leaves in a 2-3 tree.

    Keys are totally ordered:
      - minus infinity < every finite key < plus infinity,
      - finite keys compare by primary, then by secondary when both sides
        carry one. A key without a secondary ("primary-only") compares equal
        to every key sharing its primary, which makes it usable as a search
        boundary.

    Equality follows the order, so it is not transitive for primary-only
    keys. Keys are therefore unhashable.
    """
    __slots__ = ("primary", "secondary", "infinity")

    def __init__(
            self,
            primary: Optional[P] = None,
            secondary: Optional[S] = None,
            infinity: Infinity = Infinity.NONE
    ):
        """
        Initialize a key.

        Parameters:
            primary: The primary component. Required for finite keys.
            secondary: The optional secondary component.
            infinity (Infinity): Sentinel marker. Sentinel keys carry no components.

        Raises:
            InvalidKeyError: If a sentinel key is given components.
        """
        if infinity is not Infinity.NONE and (primary is not None or secondary is not None):
            raise InvalidKeyError("Sentinel keys can't carry primary or secondary values")
        object.__setattr__(self, "primary", primary)
        object.__setattr__(self, "secondary", secondary)
        object.__setattr__(self, "infinity", infinity)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def minus_infinity(cls) -> CompositeKey:
        return cls(infinity=Infinity.MINUS)

    @classmethod
    def plus_infinity(cls) -> CompositeKey:
        return cls(infinity=Infinity.PLUS)

    @property
    def is_plus_infinity(self) -> bool:
        return self.infinity is Infinity.PLUS

    @property
    def is_minus_infinity(self) -> bool:
        return self.infinity is Infinity.MINUS

    @property
    def is_infinite(self) -> bool:
        return self.infinity is not Infinity.NONE

    def _compare_infinity(self, other: CompositeKey) -> Optional[int]:
        """Order decided by sentinel markers alone, or None if both keys are finite."""
        mine, theirs = self.infinity, other.infinity
        if mine is Infinity.NONE and theirs is Infinity.NONE:
            return None
        return _cmp(mine.value, theirs.value)

    def _check_primaries(self, other: CompositeKey) -> None:
        if self.primary is None or other.primary is None:
            raise InvalidKeyError("Primary keys are null!")

    def compare(self, other: CompositeKey) -> int:
        """
        Three-way comparison.

        Returns:
            int: -1, 0 or 1 as self is smaller than, equal to or greater than other.

        Raises:
            InvalidKeyError: If both keys are finite and either lacks a primary.
        """
        by_infinity = self._compare_infinity(other)
        if by_infinity is not None:
            return by_infinity
        self._check_primaries(other)
        result = _cmp(self.primary, other.primary)
        if result != 0:
            return result
        if self.secondary is None or other.secondary is None:
            return 0
        return _cmp(self.secondary, other.secondary)

    def compare_primary_only(self, other: CompositeKey) -> int:
        """Like compare(), but ignores the secondary components."""
        by_infinity = self._compare_infinity(other)
        if by_infinity is not None:
            return by_infinity
        self._check_primaries(other)
        return _cmp(self.primary, other.primary)

    def equals_primary_only(self, other: CompositeKey) -> bool:
        return self.compare_primary_only(other) == 0

    def less_or_equal(self, other: CompositeKey) -> bool:
        return self.compare(other) <= 0

    def less_than(self, other: CompositeKey) -> bool:
        return self.compare(other) < 0

    # Rich comparisons delegate to compare()
    def __eq__(self, other) -> bool:
        if not isinstance(other, CompositeKey):
            return NotImplemented
        return self.compare(other) == 0

    def __ne__(self, other) -> bool:
        if not isinstance(other, CompositeKey):
            return NotImplemented
        return self.compare(other) != 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, CompositeKey):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other) -> bool:
        if not isinstance(other, CompositeKey):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other) -> bool:
        if not isinstance(other, CompositeKey):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other) -> bool:
        if not isinstance(other, CompositeKey):
            return NotImplemented
        return self.compare(other) >= 0

    __hash__ = None

    def short_key(self) -> str:
        """Create a short representation of the key for display purposes."""
        if self.is_minus_infinity:
            return "-inf"
        if self.is_plus_infinity:
            return "+inf"
        if self.secondary is None:
            s = str(self.primary)
        else:
            s = f"{self.primary}/{self.secondary}"
        return s if len(s) <= 12 else f"{s[:4]}...{s[-4:]}"

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        if self.is_infinite:
            return f"{cls}(infinity={self.infinity.name})"
        return f"{cls}(primary={self.primary!r}, secondary={self.secondary!r})"

    def __str__(self):
        return self.short_key()
