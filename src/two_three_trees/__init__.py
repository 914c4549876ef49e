"""
Rank-augmented 2-3 trees with composite keys and sentinel-bounded leaf chains,
plus a stock index built on top of them.
"""

from two_three_trees.base import (
    Infinity,
    TreeError,
    InvalidKeyError,
    EmptyTreeError,
)
from two_three_trees.keys import CompositeKey
from two_three_trees.node import LeafNode, BranchNode
from two_three_trees.tree import TwoThreeTree, tree_stats_, collect_leaf_keys, Stats
from two_three_trees.operations import (
    search,
    search_larger,
    exists,
    find,
    minimum,
    maximum,
    predecessor,
    successor,
    insert,
    delete,
    rekey,
    range_bounds,
    count_in_range,
    iter_range,
)

__all__ = [
    'Infinity',
    'TreeError',
    'InvalidKeyError',
    'EmptyTreeError',
    'CompositeKey',
    'LeafNode',
    'BranchNode',
    'TwoThreeTree',
    'Stats',
    'tree_stats_',
    'collect_leaf_keys',
    'search',
    'search_larger',
    'exists',
    'find',
    'minimum',
    'maximum',
    'predecessor',
    'successor',
    'insert',
    'delete',
    'rekey',
    'range_bounds',
    'count_in_range',
    'iter_range',
]
