"""Leaf and branch nodes of 2-3 trees"""

from __future__ import annotations
from typing import Generic, Optional, Tuple, TypeVar

from two_three_trees.keys import CompositeKey, P, S

V = TypeVar("V")


class NodeBase(Generic[P, S, V]):
    """
    Common part of both node variants: a key and a parent back-reference.
    Nodes compare through their keys only.
    """
    __slots__ = ("key", "parent")

    def __init__(self, key: CompositeKey[P, S]):
        self.key: CompositeKey[P, S] = key
        self.parent: Optional[BranchNode[P, S, V]] = None

    def is_leaf(self) -> bool:
        raise NotImplementedError

    @property
    def size(self) -> int:
        raise NotImplementedError

    def __eq__(self, other) -> bool:
        if not isinstance(other, NodeBase):
            return NotImplemented
        return self.key == other.key

    def __ne__(self, other) -> bool:
        if not isinstance(other, NodeBase):
            return NotImplemented
        return self.key != other.key

    def __lt__(self, other: NodeBase) -> bool:
        return self.key < other.key

    def __le__(self, other: NodeBase) -> bool:
        return self.key <= other.key

    def __gt__(self, other: NodeBase) -> bool:
        return self.key > other.key

    def __ge__(self, other: NodeBase) -> bool:
        return self.key >= other.key

    __hash__ = None


class LeafNode(NodeBase[P, S, V]):
    """
    A leaf of a 2-3 tree holding a value.

    All leaves of a tree, including its two sentinels, form a doubly-linked
    chain in key order through `left_sibling` and `right_sibling`.
    """
    __slots__ = ("value", "left_sibling", "right_sibling")

    def __init__(
            self,
            primary: Optional[P] = None,
            secondary: Optional[S] = None,
            value: Optional[V] = None,
            *,
            key: Optional[CompositeKey[P, S]] = None
    ):
        """
        Initialize a detached leaf.

        Parameters:
            primary: The primary key component.
            secondary: The secondary key component, optional.
            value: The stored value.
            key (CompositeKey): A prebuilt key, used instead of primary/secondary.
        """
        if key is None:
            key = CompositeKey(primary, secondary)
        super().__init__(key)
        self.value: Optional[V] = value
        self.left_sibling: Optional[LeafNode[P, S, V]] = None
        self.right_sibling: Optional[LeafNode[P, S, V]] = None

    @classmethod
    def left_sentinel(cls) -> LeafNode:
        return cls(key=CompositeKey.minus_infinity())

    @classmethod
    def right_sentinel(cls) -> LeafNode:
        return cls(key=CompositeKey.plus_infinity())

    def is_leaf(self) -> bool:
        return True

    @property
    def is_sentinel(self) -> bool:
        return self.key.is_infinite

    @property
    def size(self) -> int:
        return 0 if self.key.is_infinite else 1

    def rank(self) -> int:
        """
        Return the 1-based position of this leaf among all real leaves of its tree.

        Walks from the leaf to the root. Whenever the current node is the
        middle child, the size of its left sibling subtree is added; when it
        is the right child, the sizes of both the left and middle siblings are.
        Runs in O(log n).

        Raises:
            ValueError: If called on a sentinel leaf.
        """
        if self.is_sentinel:
            raise ValueError("rank(): sentinel leaves have no rank")
        rank = 1
        x = self
        y = x.parent
        while y is not None:
            if x is y.middle:
                rank += y.left.size
            elif x is y.right:
                rank += y.left.size + y.middle.size
            x = y
            y = y.parent
        return rank

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}(key={self.key!r}, value={self.value!r})"

    def __str__(self):
        cls = self.__class__.__name__
        return f"{cls}(key={self.key.short_key()}, value={self.value})"


class BranchNode(NodeBase[P, S, V]):
    """
    An internal node with two or three ordered children.

    Caches the key of its last child (the maximum key in its subtree) and the
    number of real leaves below it. Both caches are refreshed by recompute(),
    which callers invoke bottom-up after changing children.
    """
    __slots__ = ("left", "middle", "right", "_size")

    def __init__(self):
        super().__init__(CompositeKey.plus_infinity())
        self.left: Optional[NodeBase[P, S, V]] = None
        self.middle: Optional[NodeBase[P, S, V]] = None
        self.right: Optional[NodeBase[P, S, V]] = None
        self._size = 0

    def is_leaf(self) -> bool:
        return False

    @property
    def size(self) -> int:
        return self._size

    @property
    def children(self) -> Tuple[NodeBase[P, S, V], ...]:
        """The present children in left-to-right order."""
        return tuple(c for c in (self.left, self.middle, self.right) if c is not None)

    def child_count(self) -> int:
        return len(self.children)

    def recompute(self) -> None:
        """Refresh the cached key and size from the children. Ancestors are not touched."""
        last = self.left
        if self.middle is not None:
            last = self.middle
        if self.right is not None:
            last = self.right
        if last is None:
            return
        self.key = last.key
        # Sentinels count 0, so a branch over sentinels only has size 0
        self._size = sum(c.size for c in self.children)

    def set_children(
            self,
            left: NodeBase[P, S, V],
            middle: Optional[NodeBase[P, S, V]] = None,
            right: Optional[NodeBase[P, S, V]] = None
    ) -> None:
        """Replace the children of this branch, adopt them and recompute the caches."""
        self.left = left
        self.middle = middle
        self.right = right
        left.parent = self
        if middle is not None:
            middle.parent = self
        if right is not None:
            right.parent = self
        self.recompute()

    def detach(self) -> None:
        """Drop all links of a branch that was merged away."""
        self.left = self.middle = self.right = None
        self.parent = None
        self._size = 0

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}(key={self.key!r}, size={self._size}, children={self.child_count()})"

    __str__ = __repr__
