"""Search, navigation, insertion and deletion on 2-3 trees"""

from __future__ import annotations
import logging
from typing import Iterator, Optional, Tuple

from two_three_trees.base import EmptyTreeError
from two_three_trees.keys import CompositeKey, P, S
from two_three_trees.node import BranchNode, LeafNode, NodeBase, V
from two_three_trees.tree import TwoThreeTree
from two_three_trees.profiling import track_performance

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

DEBUG = False


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

@track_performance(tag="search")
def search(node: NodeBase[P, S, V], key: CompositeKey[P, S]) -> LeafNode[P, S, V]:
    """
    Descend from `node` to the leaf where `key` belongs.

    Returns the smallest leaf whose key is >= `key`, or the right sentinel
    when `key` exceeds every real key. With a primary-only key this is the
    first leaf sharing (or exceeding) that primary.
    """
    while not node.is_leaf():
        if key <= node.left.key:
            node = node.left
        elif node.right is None or key <= node.middle.key:
            node = node.middle
        else:
            node = node.right
    return node


@track_performance(tag="search_larger")
def search_larger(node: NodeBase[P, S, V], key: CompositeKey[P, S]) -> LeafNode[P, S, V]:
    """Like search(), but returns the smallest leaf whose key is strictly greater than `key`."""
    while not node.is_leaf():
        if key < node.left.key:
            node = node.left
        elif node.right is None or key < node.middle.key:
            node = node.middle
        else:
            node = node.right
    return node


def exists(tree: TwoThreeTree[P, S, V], key: CompositeKey[P, S]) -> bool:
    """True if a real leaf of `tree` has a key equal to `key`."""
    found = search(tree.root, key)
    return not found.is_sentinel and found.key == key


def find(tree: TwoThreeTree[P, S, V], key: CompositeKey[P, S]) -> Optional[LeafNode[P, S, V]]:
    """The real leaf whose key equals `key`, or None."""
    found = search(tree.root, key)
    if found.is_sentinel or found.key != key:
        return None
    return found


def minimum(tree: TwoThreeTree[P, S, V]) -> LeafNode[P, S, V]:
    """
    Return the leaf with the smallest real key.

    Raises:
        EmptyTreeError: If the tree holds only its sentinels.
    """
    node = tree.root
    while not node.is_leaf():
        node = node.left
    first = successor(node)
    if first is None:
        raise EmptyTreeError("The tree is empty!")
    return first


def maximum(tree: TwoThreeTree[P, S, V]) -> LeafNode[P, S, V]:
    """
    Return the leaf with the greatest real key.

    Raises:
        EmptyTreeError: If the tree holds only its sentinels.
    """
    last = predecessor(tree.right_sentinel)
    if last is None:
        raise EmptyTreeError("The tree is empty!")
    return last


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def _rightmost_leaf(node: NodeBase) -> LeafNode:
    while not node.is_leaf():
        node = node.right if node.right is not None else node.middle
    return node


def _leftmost_leaf(node: NodeBase) -> LeafNode:
    while not node.is_leaf():
        node = node.left
    return node


def predecessor(node: NodeBase[P, S, V]) -> Optional[LeafNode[P, S, V]]:
    """
    The leaf immediately before `node` in key order, via parent links.

    Climbs while `node` is the leftmost child, then descends to the rightmost
    leaf of the adjacent left subtree. Returns None instead of the left
    sentinel, and for the left sentinel itself.
    """
    x = node
    z = x.parent
    while z is not None and x is z.left:
        x = z
        z = z.parent
    if z is None:
        return None
    y = z.middle if x is z.right else z.left
    y = _rightmost_leaf(y)
    if y.key.is_minus_infinity:
        return None
    return y


def successor(node: NodeBase[P, S, V]) -> Optional[LeafNode[P, S, V]]:
    """
    The leaf immediately after `node` in key order, via parent links.

    Symmetric to predecessor(). Returns None instead of the right sentinel,
    and for the right sentinel itself.
    """
    x = node
    z = x.parent
    while z is not None and (x is z.right or (z.right is None and x is z.middle)):
        x = z
        z = z.parent
    if z is None:
        return None
    y = z.middle if x is z.left else z.right
    y = _leftmost_leaf(y)
    if y.key.is_plus_infinity:
        return None
    return y


# ---------------------------------------------------------------------------
# Sibling chain
# ---------------------------------------------------------------------------

def link_siblings(tree: TwoThreeTree[P, S, V], leaf: LeafNode[P, S, V]) -> None:
    """
    Splice a freshly inserted leaf into the sibling chain between its
    structural predecessor and successor. Sentinels stand in for missing ends.
    """
    if leaf.is_sentinel:
        return
    pred = predecessor(leaf) or tree.left_sentinel
    succ = successor(leaf) or tree.right_sentinel
    pred.right_sibling = leaf
    succ.left_sibling = leaf
    leaf.left_sibling = pred
    leaf.right_sibling = succ


def unlink_siblings(leaf: LeafNode[P, S, V]) -> None:
    """Remove a leaf from the sibling chain, joining its two neighbours."""
    left, right = leaf.left_sibling, leaf.right_sibling
    if left is not None:
        left.right_sibling = right
    if right is not None:
        right.left_sibling = left
    leaf.left_sibling = leaf.right_sibling = None


# ---------------------------------------------------------------------------
# Insertion
# ---------------------------------------------------------------------------

def _insert_and_split(x: BranchNode, z: NodeBase) -> Optional[BranchNode]:
    """
    Insert `z` among the children of `x` in key order.

    Returns None when `x` had room; otherwise `x` keeps the two smallest of
    the four children and a new branch holding the two largest is returned
    for insertion one level up.
    """
    l, m, r = x.left, x.middle, x.right
    if r is None:
        if z.key < l.key:
            x.set_children(z, l, m)
        elif z.key < m.key:
            x.set_children(l, z, m)
        else:
            x.set_children(l, m, z)
        return None

    y = BranchNode()
    if z.key < l.key:
        x.set_children(z, l)
        y.set_children(m, r)
    elif z.key < m.key:
        x.set_children(l, z)
        y.set_children(m, r)
    elif z.key < r.key:
        x.set_children(l, m)
        y.set_children(z, r)
    else:
        x.set_children(l, m)
        y.set_children(r, z)
    if DEBUG:
        logger.debug(f"split branch {x.key.short_key()} | {y.key.short_key()}")
    return y


def _check_insertable(tree: TwoThreeTree, leaf) -> None:
    if not isinstance(tree, TwoThreeTree):
        raise TypeError(f"insert(): expected TwoThreeTree, got {type(tree).__name__}")
    if not isinstance(leaf, LeafNode):
        raise TypeError(f"insert(): expected LeafNode, got {type(leaf).__name__}")
    if leaf.is_sentinel:
        raise ValueError("insert(): sentinel leaves can't be inserted")
    if leaf.parent is not None or leaf.left_sibling is not None or leaf.right_sibling is not None:
        raise ValueError(f"insert(): leaf {leaf.key.short_key()} is already attached to a tree")


@track_performance(tag="insert")
def insert(tree: TwoThreeTree[P, S, V], leaf: LeafNode[P, S, V]) -> LeafNode[P, S, V]:
    """
    Insert a detached leaf into the tree in O(log n).

    Splits propagate upward while branches overflow; a split of the root
    grows the tree by one level. The leaf is then spliced into the sibling
    chain. Uniqueness of keys is not checked here: callers test with
    exists() first.

    Returns:
        LeafNode: The inserted leaf.

    Raises:
        TypeError: If `tree` or `leaf` have the wrong type.
        ValueError: If `leaf` is a sentinel or already attached.
    """
    _check_insertable(tree, leaf)
    key = leaf.key

    y = tree.root
    while not y.is_leaf():
        if key < y.left.key:
            y = y.left
        elif y.right is None or key < y.middle.key:
            y = y.middle
        else:
            y = y.right

    x = y.parent
    z = _insert_and_split(x, leaf)
    while x is not tree.root:
        x = x.parent
        if z is not None:
            z = _insert_and_split(x, z)
        else:
            x.recompute()

    if z is not None:
        new_root = BranchNode()
        new_root.set_children(x, z)
        tree.root = new_root
        logger.debug(f"insert(): root split, height is now {tree.height()}")

    link_siblings(tree, leaf)
    return leaf


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------

def _borrow_or_merge(y: BranchNode) -> BranchNode:
    """
    Repair a branch `y` left with a single child.

    Borrows a child from the adjacent sibling when that sibling has three
    children, otherwise merges `y` into the sibling. Returns the parent,
    which may now be underfull itself.
    """
    z = y.parent
    if y is z.left:
        x = z.middle
        if x.right is not None:
            y.set_children(y.left, x.left)
            x.set_children(x.middle, x.right)
            if DEBUG:
                logger.debug(f"borrowed from right sibling {x.key.short_key()}")
        else:
            x.set_children(y.left, x.left, x.middle)
            z.set_children(x, z.right)
            y.detach()
            if DEBUG:
                logger.debug(f"merged into right sibling {x.key.short_key()}")
        return z

    # y is the middle or right child, its left neighbour is x
    x = z.left if y is z.middle else z.middle
    if x.right is not None:
        y.set_children(x.right, y.left)
        x.set_children(x.left, x.middle)
        if DEBUG:
            logger.debug(f"borrowed from left sibling {x.key.short_key()}")
    else:
        x.set_children(x.left, x.middle, y.left)
        if y is z.middle:
            z.set_children(x, z.right)
        else:
            z.set_children(z.left, x)
        y.detach()
        if DEBUG:
            logger.debug(f"merged into left sibling {x.key.short_key()}")
    return z


def _check_deletable(tree: TwoThreeTree, leaf) -> None:
    if not isinstance(leaf, LeafNode):
        raise TypeError(f"delete(): expected LeafNode, got {type(leaf).__name__}")
    if leaf.is_sentinel:
        raise ValueError("delete(): sentinel leaves can't be deleted")
    top = leaf
    while top.parent is not None:
        top = top.parent
    if top is not tree.root:
        raise ValueError(f"delete(): leaf {leaf.key.short_key()} is not in this tree")


@track_performance(tag="delete")
def delete(tree: TwoThreeTree[P, S, V], leaf: LeafNode[P, S, V]) -> LeafNode[P, S, V]:
    """
    Remove a leaf from the tree in O(log n).

    The leaf is unspliced from the sibling chain and removed from its
    parent. Underfull branches are repaired bottom-up by borrowing or
    merging; when the root is left with a single child, that child becomes
    the new root. The returned leaf is fully detached and may be re-keyed and
    inserted again.

    Raises:
        TypeError: If `leaf` is not a LeafNode.
        ValueError: If `leaf` is a sentinel or not part of `tree`.
    """
    _check_deletable(tree, leaf)
    unlink_siblings(leaf)

    y = leaf.parent
    if leaf is y.left:
        y.set_children(y.middle, y.right)
    elif leaf is y.middle:
        y.set_children(y.left, y.right)
    else:
        y.set_children(y.left, y.middle)
    leaf.parent = None

    while y is not None:
        if y.middle is not None:
            y.recompute()
            y = y.parent
        elif y is not tree.root:
            y = _borrow_or_merge(y)
        else:
            new_root = y.left
            new_root.parent = None
            y.detach()
            tree.root = new_root
            logger.debug(f"delete(): root collapsed, height is now {tree.height()}")
            break
    return leaf


def rekey(leaf: LeafNode[P, S, V], key: CompositeKey[P, S]) -> LeafNode[P, S, V]:
    """
    Give a detached leaf a new key. Attached leaves must be deleted first so
    the tree order is never violated.
    """
    if leaf.parent is not None:
        raise ValueError(f"rekey(): leaf {leaf.key.short_key()} is still attached; delete it first")
    if key.is_infinite:
        raise ValueError("rekey(): leaves can't take a sentinel key")
    leaf.key = key
    return leaf


# ---------------------------------------------------------------------------
# Range queries
# ---------------------------------------------------------------------------

def range_bounds(
        tree: TwoThreeTree[P, S, V],
        low: CompositeKey[P, S],
        high: CompositeKey[P, S]
) -> Optional[Tuple[LeafNode[P, S, V], LeafNode[P, S, V]]]:
    """
    Locate the first and last leaves with low <= key <= high.

    With primary-only bounds the range covers every secondary for both
    boundary primaries.

    Returns:
        (first, last) leaves, or None if no leaf falls in the range.

    Raises:
        ValueError: If either bound is None.
    """
    if low is None or high is None:
        raise ValueError("range_bounds(): boundary keys can't be None")
    first = search(tree.root, low)
    last = search_larger(tree.root, high).left_sibling
    if first.is_sentinel or last is None or last.is_sentinel:
        return None
    if last.key < first.key:
        return None
    return first, last


def count_in_range(
        tree: TwoThreeTree[P, S, V],
        low: CompositeKey[P, S],
        high: CompositeKey[P, S]
) -> int:
    """Number of leaves with low <= key <= high, by rank difference in O(log n)."""
    bounds = range_bounds(tree, low, high)
    if bounds is None:
        return 0
    first, last = bounds
    return last.rank() - first.rank() + 1


def iter_range(
        tree: TwoThreeTree[P, S, V],
        low: CompositeKey[P, S],
        high: CompositeKey[P, S]
) -> Iterator[LeafNode[P, S, V]]:
    """Leaves with low <= key <= high in ascending order, walking the sibling chain in O(k)."""
    bounds = range_bounds(tree, low, high)
    if bounds is None:
        return
    current, last = bounds
    while True:
        yield current
        if current is last:
            return
        current = current.right_sibling
