"""Tests for order-statistic range queries"""
# pylint: skip-file

import unittest

from two_three_trees.keys import CompositeKey
from two_three_trees.node import LeafNode
from two_three_trees import operations as ops

from tests.base import TreeTestCase
from tests.stats_two_three_tree import random_keys


class TestRangeQueries(TreeTestCase):
    def setUp(self):
        super().setUp()
        self._insert_all([5, 10, 20, 30, 40])

    def _range(self, low, high):
        return [leaf.key.primary for leaf in ops.iter_range(self.tree, CompositeKey(low), CompositeKey(high))]

    def _count(self, low, high):
        return ops.count_in_range(self.tree, CompositeKey(low), CompositeKey(high))

    def test_inclusive_bounds(self):
        self.assertEqual(self._count(10, 30), 3)
        self.assertEqual(self._range(10, 30), [10, 20, 30])

    def test_bounds_between_keys(self):
        self.assertEqual(self._count(6, 29), 2)
        self.assertEqual(self._range(6, 29), [10, 20])

    def test_whole_tree(self):
        self.assertEqual(self._count(0, 100), 5)
        self.assertEqual(self._range(0, 100), [5, 10, 20, 30, 40])

    def test_single_point(self):
        self.assertEqual(self._count(20, 20), 1)
        self.assertEqual(self._range(20, 20), [20])

    def test_empty_ranges(self):
        self.assertEqual(self._count(11, 19), 0)
        self.assertEqual(self._range(11, 19), [])
        self.assertEqual(self._count(41, 100), 0)
        self.assertEqual(self._count(0, 4), 0)
        self.assertIsNone(ops.range_bounds(self.tree, CompositeKey(41), CompositeKey(50)))

    def test_inverted_range_is_empty(self):
        self.assertEqual(self._count(30, 10), 0)
        self.assertEqual(self._range(30, 10), [])

    def test_range_bounds(self):
        first, last = ops.range_bounds(self.tree, CompositeKey(6), CompositeKey(35))
        self.assertIs(first, self.leaves[10])
        self.assertIs(last, self.leaves[30])

    def test_none_bounds_rejected(self):
        with self.assertRaises(ValueError):
            ops.count_in_range(self.tree, None, CompositeKey(1))
        with self.assertRaises(ValueError):
            list(ops.iter_range(self.tree, CompositeKey(1), None))


class TestRangeWithSecondaries(TreeTestCase):
    def setUp(self):
        super().setUp()
        for price, name in [(10, "b"), (10, "a"), (20, "c"), (30, "e"), (30, "d"), (40, "f")]:
            ops.insert(self.tree, LeafNode(price, name, name))

    def test_primary_only_bounds_include_all_secondaries(self):
        leaves = list(ops.iter_range(self.tree, CompositeKey(10), CompositeKey(30)))
        self.assertEqual([leaf.value for leaf in leaves], ["a", "b", "c", "d", "e"])
        self.assertEqual(ops.count_in_range(self.tree, CompositeKey(10), CompositeKey(30)), 5)

    def test_full_key_bounds(self):
        count = ops.count_in_range(self.tree, CompositeKey(10, "b"), CompositeKey(30, "d"))
        self.assertEqual(count, 3)


class TestRangeAgainstBruteForce(TreeTestCase):
    def test_counts_match_enumeration(self):
        keys = random_keys(250, 2000, seed=9)
        self._insert_all(keys)
        ordered = sorted(keys)
        bounds = [(0, 2000), (100, 900), (500, 501), (1500, 1200), (1999, 2500)]
        for low, high in bounds:
            expected = [k for k in ordered if low <= k <= high]
            got = [leaf.key.primary for leaf in ops.iter_range(self.tree, CompositeKey(low), CompositeKey(high))]
            self.assertEqual(got, expected, f"range [{low}, {high}]")
            self.assertEqual(ops.count_in_range(self.tree, CompositeKey(low), CompositeKey(high)), len(expected))


if __name__ == "__main__":
    unittest.main()
