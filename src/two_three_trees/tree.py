"""2-3 tree container and structural diagnostics"""

from __future__ import annotations
import logging
from typing import Generic, Iterator, List, Optional
from dataclasses import dataclass

from two_three_trees.keys import CompositeKey, P, S
from two_three_trees.node import BranchNode, LeafNode, NodeBase, V

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class TwoThreeTree(Generic[P, S, V]):
    """
    A 2-3 tree bounded by two permanent sentinel leaves.

    The container only owns the root and the sentinels. All structural
    changes go through the functions in `two_three_trees.operations`.

    Attributes:
        root (BranchNode): The root branch. Never a leaf.
        left_sentinel (LeafNode): Leaf keyed minus infinity, leftmost at all times.
        right_sentinel (LeafNode): Leaf keyed plus infinity, rightmost at all times.
    """
    __slots__ = ("root", "left_sentinel", "right_sentinel")

    def __init__(self):
        self.left_sentinel: LeafNode[P, S, V] = LeafNode.left_sentinel()
        self.right_sentinel: LeafNode[P, S, V] = LeafNode.right_sentinel()
        self.root: BranchNode[P, S, V] = BranchNode()
        self.root.set_children(self.left_sentinel, self.right_sentinel)
        self.left_sentinel.right_sibling = self.right_sentinel
        self.right_sentinel.left_sibling = self.left_sentinel

    def is_empty(self) -> bool:
        return self.root.left is self.left_sentinel and self.root.middle is self.right_sentinel

    def __len__(self) -> int:
        return self.root.size

    def height(self) -> int:
        """Number of branch levels above the leaves."""
        h = 0
        node = self.root
        while not node.is_leaf():
            node = node.left
            h += 1
        return h

    def iter_leaf_nodes(self) -> Iterator[LeafNode[P, S, V]]:
        """
        Iterates over the whole sibling chain, sentinels included,
        starting from the left sentinel and following `right_sibling`.
        """
        current = self.left_sentinel
        while current is not None:
            yield current
            current = current.right_sibling

    def __iter__(self) -> Iterator[LeafNode[P, S, V]]:
        """Iterates over the real leaves in key order."""
        current = self.left_sentinel.right_sibling
        while current is not None and current is not self.right_sentinel:
            yield current
            current = current.right_sibling

    def keys(self) -> List[CompositeKey[P, S]]:
        return [leaf.key for leaf in self]

    def __str__(self):
        return "Empty TwoThreeTree" if self.is_empty() else f"TwoThreeTree(size={len(self)}, height={self.height()})"

    __repr__ = __str__

    def print_structure(self, max_depth: Optional[int] = None) -> str:
        """Render the tree one node per line, indented by depth."""
        lines = []

        def _walk(node: NodeBase, depth: int) -> None:
            prefix = "    " * depth
            if max_depth is not None and depth > max_depth:
                lines.append(f"{prefix}... (max depth reached)")
                return
            if node.is_leaf():
                lines.append(f"{prefix}Leaf({node.key.short_key()}, value={node.value!r})")
                return
            lines.append(f"{prefix}Branch(key={node.key.short_key()}, size={node.size})")
            for child in node.children:
                _walk(child, depth + 1)

        _walk(self.root, 0)
        return "\n".join(lines)


@dataclass
class Stats:
    height: int
    branch_count: int
    leaf_count: int
    real_leaf_count: int
    least_key: Optional[CompositeKey]
    greatest_key: Optional[CompositeKey]
    is_balanced: bool
    branches_packed: bool
    sizes_consistent: bool
    keys_consistent: bool
    parents_consistent: bool
    is_search_tree: bool
    linked_leaf_nodes: bool
    leaf_keys_in_order: bool
    sentinels_at_extremes: bool


def _subtree_stats(node: NodeBase, depth: int, leaves: List[LeafNode], depths: set) -> Stats:
    """Aggregate statistics for the subtree rooted at `node`, collecting its leaves in order."""
    if node.is_leaf():
        leaves.append(node)
        depths.add(depth)
        real = 0 if node.is_sentinel else 1
        return Stats(
            height=0, branch_count=0, leaf_count=1, real_leaf_count=real,
            least_key=node.key, greatest_key=node.key,
            is_balanced=True, branches_packed=True, sizes_consistent=True,
            keys_consistent=True, parents_consistent=True, is_search_tree=True,
            linked_leaf_nodes=True, leaf_keys_in_order=True, sentinels_at_extremes=True,
        )

    children = node.children
    stats = Stats(
        height=0, branch_count=1, leaf_count=0, real_leaf_count=0,
        least_key=None, greatest_key=None,
        is_balanced=True,
        # a present right child implies a present middle child
        branches_packed=(len(children) in (2, 3) and not (node.middle is None and node.right is not None)),
        sizes_consistent=True, keys_consistent=True, parents_consistent=True,
        is_search_tree=True, linked_leaf_nodes=True, leaf_keys_in_order=True,
        sentinels_at_extremes=True,
    )

    child_heights = set()
    prev: Optional[Stats] = None
    for child in children:
        if child.parent is not node:
            stats.parents_consistent = False
        cs = _subtree_stats(child, depth + 1, leaves, depths)
        child_heights.add(cs.height)

        stats.branch_count += cs.branch_count
        stats.leaf_count += cs.leaf_count
        stats.real_leaf_count += cs.real_leaf_count
        stats.is_balanced &= cs.is_balanced
        stats.branches_packed &= cs.branches_packed
        stats.sizes_consistent &= cs.sizes_consistent
        stats.keys_consistent &= cs.keys_consistent
        stats.parents_consistent &= cs.parents_consistent
        stats.is_search_tree &= cs.is_search_tree

        # a child's cached key must be the maximum of its subtree
        if child.key.compare(cs.greatest_key) != 0:
            stats.keys_consistent = False
        if prev is not None and not prev.greatest_key < cs.least_key:
            stats.is_search_tree = False
        prev = cs

    stats.least_key = _subtree_least(children)
    stats.greatest_key = prev.greatest_key if prev is not None else None
    stats.height = 1 + max(child_heights, default=0)
    if len(child_heights) > 1:
        stats.is_balanced = False
    if node.size != stats.real_leaf_count:
        stats.sizes_consistent = False
    if stats.greatest_key is not None and node.key.compare(stats.greatest_key) != 0:
        stats.keys_consistent = False
    return stats


def _subtree_least(children) -> Optional[CompositeKey]:
    node = children[0] if children else None
    while node is not None and not node.is_leaf():
        node = node.left
    return node.key if node is not None else None


def tree_stats_(t: TwoThreeTree) -> Stats:
    """
    Returns aggregated statistics and invariant flags for a 2-3 tree in O(n) time.

    Besides the per-branch checks (arity, cached key and size, parent
    back-references, key order, equal leaf depth) the sibling chain is walked
    once and compared against the in-order leaf sequence.
    """
    leaves: List[LeafNode] = []
    depths: set = set()
    stats = _subtree_stats(t.root, 0, leaves, depths)

    if t.root.parent is not None:
        stats.parents_consistent = False
    if len(depths) > 1:
        stats.is_balanced = False

    # Sentinels bound the tree shape and the chain
    stats.sentinels_at_extremes = (
        bool(leaves)
        and leaves[0] is t.left_sentinel
        and leaves[-1] is t.right_sentinel
        and t.left_sentinel.left_sibling is None
        and t.right_sentinel.right_sibling is None
    )

    chain = list(t.iter_leaf_nodes())
    linked = len(chain) == len(leaves) and all(a is b for a, b in zip(chain, leaves))
    if linked:
        for left, right in zip(chain, chain[1:]):
            if right.left_sibling is not left:
                linked = False
                break
    stats.linked_leaf_nodes = linked

    in_order = True
    for left, right in zip(chain, chain[1:]):
        if not left.key < right.key:
            in_order = False
            break
    stats.leaf_keys_in_order = in_order

    if stats.real_leaf_count != len(t):
        stats.sizes_consistent = False
    if stats.real_leaf_count:
        stats.least_key = leaves[1].key
        stats.greatest_key = leaves[-2].key
    else:
        stats.least_key = stats.greatest_key = None

    logger.debug(f"tree_stats_: {stats}")
    return stats


def collect_leaf_keys(tree: TwoThreeTree) -> list:
    """Primary components of all real leaves in sibling-chain order."""
    return [leaf.key.primary for leaf in tree]
