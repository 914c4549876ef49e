"""Utility functions for testing 2-3 tree invariants."""

import logging
from two_three_trees.tree import (
    TwoThreeTree,
    Stats
)

TREE_FLAGS = (
    "is_balanced",
    "branches_packed",
    "sizes_consistent",
    "keys_consistent",
    "parents_consistent",
    "is_search_tree",
    "linked_leaf_nodes",
    "leaf_keys_in_order",
    "sentinels_at_extremes",
)

def assert_tree_invariants_tc(tc, t: TwoThreeTree, stats: Stats) -> None:
    """TestCase version: use inside unittest.TestCase methods."""
    for flag in TREE_FLAGS:
        tc.assertTrue(
            getattr(stats, flag),
            f"Invariant failed: {flag} is False\n{t.print_structure()}"
        )

    tc.assertEqual(
        stats.real_leaf_count, len(t),
        f"Invariant failed: real_leaf_count={stats.real_leaf_count} ≠ len(tree)={len(t)}"
    )
    tc.assertEqual(
        stats.leaf_count, stats.real_leaf_count + 2,
        "Invariant failed: the two sentinels are not the only extra leaves"
    )
    tc.assertGreater(
        stats.height, 0,
        f"Invariant failed: height={stats.height} ≤ 0, the root must be a branch"
    )

    if t.is_empty():
        tc.assertEqual(len(t), 0, "Invariant failed: empty tree has a non-zero size")
        tc.assertIsNone(stats.least_key, "Invariant failed: least_key set for an empty tree")
    else:
        tc.assertIsNotNone(
            stats.least_key,
            "Invariant failed: least_key is None for non-empty tree"
        )
        tc.assertIsNotNone(
            stats.greatest_key,
            "Invariant failed: greatest_key is None for non-empty tree"
        )

def assert_tree_invariants_log(t: TwoThreeTree, stats: Stats) -> bool:
    """Check all invariants, logging the first failure. Returns True if all hold."""
    for flag in TREE_FLAGS:
        if not getattr(stats, flag):
            logging.error(f"Invariant failed: {flag} is False")
            return False
    if stats.real_leaf_count != len(t):
        logging.error(f"Invariant failed: real_leaf_count={stats.real_leaf_count} ≠ len(tree)={len(t)}")
        return False
    return True
