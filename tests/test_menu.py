"""Tests for the interactive stock menu"""
# pylint: skip-file

import io
import unittest
from decimal import Decimal
from unittest.mock import patch

from two_three_trees.menu import StockMenu, main
from two_three_trees.stock_manager import StockManager
from two_three_trees.profiling import PerformanceTracker


def _script(*lines) -> io.StringIO:
    return io.StringIO("\n".join(str(line) for line in lines) + "\n")


class TestStockMenu(unittest.TestCase):
    def setUp(self):
        self.manager = StockManager()
        self.out = io.StringIO()

    def _run(self, *lines) -> str:
        StockMenu(self.manager, _script(*lines), self.out).run()
        return self.out.getvalue()

    def test_add_and_get_price(self):
        output = self._run(1, "AAPL", 10, "150.5", 4, "AAPL", 8)
        self.assertIn("Stock added.", output)
        self.assertIn("Stock price: 150.5", output)
        self.assertIn("Goodbye!", output)
        self.assertEqual(self.manager.get_stock_price("AAPL"), Decimal("150.5"))

    def test_update_remove_timestamp_and_remove(self):
        output = self._run(
            1, "A", 1, 10,
            3, "A", 2, "-2.5",
            5, "A", 2,
            2, "A",
            8,
        )
        self.assertIn("Stock updated.", output)
        self.assertIn("Timestamp removed.", output)
        self.assertIn("Stock removed.", output)
        self.assertEqual(len(self.manager), 0)

    def test_range_queries(self):
        output = self._run(
            1, "A", 1, 5,
            1, "B", 1, 15,
            1, "C", 1, 25,
            6, 10, 30,
            7, 10, 30,
            8,
        )
        self.assertIn("Stock count in range: 2", output)
        self.assertIn("Stock IDs in range:\n- B\n- C\n", output)

    def test_errors_are_reported_and_loop_continues(self):
        output = self._run(4, "missing", "x", 1, "A", "not a number", 9, 8)
        self.assertIn("Error: No such stock with that stock id!", output)
        self.assertIn("Error: invalid literal for int()", output)
        self.assertIn("Invalid choice.", output)
        self.assertIn("Goodbye!", output)
        self.assertEqual(len(self.manager), 0)

    def test_end_of_input_stops(self):
        output = self._run(1, "A")
        self.assertNotIn("Goodbye!", output)
        self.assertEqual(len(self.manager), 0)


class TestMain(unittest.TestCase):
    def test_main_with_profiling(self):
        tracker = PerformanceTracker.get_instance()
        was_enabled = tracker.enabled
        try:
            with patch("sys.stdin", _script(1, "A", 1, 10, 8)), \
                    patch("sys.stdout", new_callable=io.StringIO) as out:
                code = main(["--profile", "--log-level", "ERROR"])
            self.assertEqual(code, 0)
            self.assertIn("Performance Metrics:", out.getvalue())
            self.assertIn("insert", out.getvalue())
        finally:
            tracker.enabled = was_enabled
            tracker.reset()


if __name__ == "__main__":
    unittest.main()
