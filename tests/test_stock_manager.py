"""Tests for the stock manager and its two synchronized indexes"""
# pylint: skip-file

import unittest
from decimal import Decimal

from two_three_trees.keys import CompositeKey
from two_three_trees.stock import StockError
from two_three_trees.stock_manager import StockManager
from two_three_trees.tree import tree_stats_
from two_three_trees import operations as ops

from tests.utils import assert_tree_invariants_tc


class StockManagerTestCase(unittest.TestCase):
    def setUp(self):
        self.manager = StockManager()

    def tearDown(self):
        for tree in (self.manager.id_tree, self.manager.price_tree):
            assert_tree_invariants_tc(self, tree, tree_stats_(tree))
        self.assertEqual(len(self.manager.id_tree), len(self.manager.price_tree),
                         "ID and price indexes out of sync")
        # every stock sits in the price tree under its current price
        for leaf in self.manager.id_tree:
            stock = leaf.value
            self.assertTrue(ops.exists(self.manager.price_tree, CompositeKey(stock.price, stock.stock_id)),
                            f"{stock.stock_id} missing from price index at {stock.price}")

    def _price_order(self):
        return [leaf.value.stock_id for leaf in self.manager.price_tree]


class TestAddRemove(StockManagerTestCase):
    def test_add_stock(self):
        stock = self.manager.add_stock("AAPL", 1, 150)
        self.assertEqual(stock.price, Decimal(150))
        self.assertIn("AAPL", self.manager)
        self.assertNotIn("MSFT", self.manager)
        self.assertEqual(len(self.manager), 1)
        self.assertEqual(self.manager.get_stock_price("AAPL"), Decimal(150))
        self.assertIs(self.manager.get_stock("AAPL"), stock)

    def test_add_validation(self):
        with self.assertRaises(StockError):
            self.manager.add_stock("A", 1, 0)
        with self.assertRaises(StockError):
            self.manager.add_stock("A", 1, -5)
        with self.assertRaises(StockError):
            self.manager.add_stock("A", 0, 5)
        with self.assertRaises(StockError):
            self.manager.add_stock(None, 1, 5)
        self.manager.add_stock("A", 1, 5)
        with self.assertRaises(StockError):
            self.manager.add_stock("A", 2, 7)
        self.assertEqual(len(self.manager), 1)

    def test_remove_stock(self):
        self.manager.add_stock("A", 1, 5)
        self.manager.add_stock("B", 1, 6)
        removed = self.manager.remove_stock("A")
        self.assertEqual(removed.stock_id, "A")
        self.assertNotIn("A", self.manager)
        self.assertEqual(self._price_order(), ["B"])
        with self.assertRaises(StockError):
            self.manager.remove_stock("A")

    def test_price_index_orders_ties_by_id(self):
        self.manager.add_stock("C", 1, 10)
        self.manager.add_stock("A", 1, 10)
        self.manager.add_stock("B", 1, 5)
        self.assertEqual(self._price_order(), ["B", "A", "C"])

    def test_init_stocks_clears_everything(self):
        self.manager.add_stock("A", 1, 5)
        self.manager.init_stocks()
        self.assertEqual(len(self.manager), 0)
        self.assertTrue(self.manager.price_tree.is_empty())


class TestUpdates(StockManagerTestCase):
    def setUp(self):
        super().setUp()
        self.manager.add_stock("A", 1, 10)
        self.manager.add_stock("B", 1, 20)
        self.manager.add_stock("C", 1, 30)

    def test_update_moves_stock_in_price_index(self):
        new_price = self.manager.update_stock("A", 2, 25)
        self.assertEqual(new_price, Decimal(35))
        self.assertEqual(self.manager.get_stock_price("A"), Decimal(35))
        self.assertEqual(self._price_order(), ["B", "C", "A"])

    def test_update_validation(self):
        with self.assertRaises(StockError):
            self.manager.update_stock("A", -1, 5)
        with self.assertRaises(StockError):
            self.manager.update_stock("A", 2, 0)
        with self.assertRaises(StockError):
            self.manager.update_stock("Z", 2, 5)
        with self.assertRaises(StockError):
            self.manager.update_stock("A", 1, 5)
        self.assertEqual(self.manager.get_stock_price("A"), Decimal(10))

    def test_remove_stock_timestamp(self):
        self.manager.update_stock("A", 2, "0.5")
        self.manager.update_stock("A", 3, "0.25")
        new_price = self.manager.remove_stock_timestamp("A", 2)
        self.assertEqual(new_price, Decimal("10.25"))
        self.assertEqual(self.manager.get_stock_price("A"), Decimal("10.25"))

    def test_remove_stock_timestamp_validation(self):
        with self.assertRaises(StockError):
            self.manager.remove_stock_timestamp("A", 1)
        with self.assertRaises(StockError):
            self.manager.remove_stock_timestamp("A", 99)
        with self.assertRaises(StockError):
            self.manager.remove_stock_timestamp("Z", 1)

    def test_many_small_updates_do_not_drift(self):
        for ts in range(2, 12):
            self.manager.update_stock("A", ts, 0.1)
        self.assertEqual(self.manager.get_stock_price("A"), Decimal(11))
        self.assertEqual(self.manager.count_stocks_in_price_range(11, 11), 1)


class TestPriceRanges(StockManagerTestCase):
    def setUp(self):
        super().setUp()
        for stock_id, price in [("E", 5), ("T", 10), ("W", 20), ("H", 30), ("F", 40)]:
            self.manager.add_stock(stock_id, 1, price)

    def test_count_and_list(self):
        self.assertEqual(self.manager.count_stocks_in_price_range(10, 30), 3)
        self.assertEqual(self.manager.get_stocks_in_price_range(10, 30), ["T", "W", "H"])

    def test_empty_range(self):
        self.assertEqual(self.manager.count_stocks_in_price_range(11, 19), 0)
        self.assertEqual(self.manager.get_stocks_in_price_range(41, 50), [])

    def test_range_validation(self):
        with self.assertRaises(StockError):
            self.manager.count_stocks_in_price_range(None, 10)
        with self.assertRaises(StockError):
            self.manager.get_stocks_in_price_range(10, None)
        with self.assertRaises(StockError):
            self.manager.count_stocks_in_price_range(30, 10)

    def test_range_follows_updates(self):
        self.manager.update_stock("E", 2, 20)
        self.assertEqual(self.manager.get_stock_price("E"), Decimal(25))
        self.assertEqual(self.manager.get_stocks_in_price_range(20, 30), ["W", "E", "H"])
        self.manager.remove_stock_timestamp("E", 2)
        self.assertEqual(self.manager.get_stocks_in_price_range(20, 30), ["W", "H"])


if __name__ == "__main__":
    unittest.main()
