#!/usr/bin/env python3
"""
Interactive text menu over a StockManager.

Usage:
    two-three-stocks [--log-level LEVEL] [--profile]
    python -m two_three_trees [--log-level LEVEL] [--profile]
"""
import argparse
import logging
import sys
from typing import Callable, List, Optional, TextIO

from two_three_trees.stock_manager import StockManager
from two_three_trees.profiling import PerformanceTracker

logger = logging.getLogger(__name__)

MENU = """
Choose an option:
1. Add Stock
2. Remove Stock
3. Update Stock
4. Get Stock Price
5. Remove Stock Timestamp
6. Get Stock Count in Price Range
7. Get Stock IDs in Price Range
8. Exit"""

EXIT_CHOICE = 8


class StockMenu:
    """Reads menu choices from `stdin` and writes results to `stdout`."""

    def __init__(self, manager: StockManager, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.manager = manager
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _ask(self, prompt: str, convert: Callable = str):
        print(prompt, end="", file=self.stdout)
        line = self.stdin.readline()
        if not line:
            raise EOFError("input closed")
        return convert(line.strip())

    # One handler per menu entry
    def add_stock(self) -> None:
        stock_id = self._ask("Stock ID: ")
        timestamp = self._ask("Timestamp: ", int)
        price = self._ask("Price: ")
        self.manager.add_stock(stock_id, timestamp, price)
        self._print("Stock added.")

    def remove_stock(self) -> None:
        self.manager.remove_stock(self._ask("Stock ID: "))
        self._print("Stock removed.")

    def update_stock(self) -> None:
        stock_id = self._ask("Stock ID: ")
        timestamp = self._ask("Timestamp: ", int)
        diff = self._ask("Price difference: ")
        self.manager.update_stock(stock_id, timestamp, diff)
        self._print("Stock updated.")

    def get_stock_price(self) -> None:
        price = self.manager.get_stock_price(self._ask("Stock ID: "))
        self._print(f"Stock price: {price}")

    def remove_stock_timestamp(self) -> None:
        stock_id = self._ask("Stock ID: ")
        timestamp = self._ask("Timestamp: ", int)
        self.manager.remove_stock_timestamp(stock_id, timestamp)
        self._print("Timestamp removed.")

    def count_in_range(self) -> None:
        low = self._ask("Min price: ")
        high = self._ask("Max price: ")
        count = self.manager.count_stocks_in_price_range(low, high)
        self._print(f"Stock count in range: {count}")

    def list_in_range(self) -> None:
        low = self._ask("Min price: ")
        high = self._ask("Max price: ")
        ids = self.manager.get_stocks_in_price_range(low, high)
        self._print("Stock IDs in range:")
        for stock_id in ids:
            self._print(f"- {stock_id}")

    def run(self) -> None:
        """Loop until the exit choice or end of input. Rejected requests are reported and skipped."""
        actions = {
            1: self.add_stock,
            2: self.remove_stock,
            3: self.update_stock,
            4: self.get_stock_price,
            5: self.remove_stock_timestamp,
            6: self.count_in_range,
            7: self.list_in_range,
        }
        while True:
            self._print(MENU)
            try:
                choice = self._ask("Your choice: ", int)
                if choice == EXIT_CHOICE:
                    self._print("Goodbye!")
                    return
                action = actions.get(choice)
                if action is None:
                    self._print("Invalid choice.")
                    continue
                action()
            except EOFError:
                self._print()
                return
            except ValueError as e:
                logger.warning(f"Request rejected: {e}")
                self._print(f"Error: {e}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Stock index backed by 2-3 trees")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level for the two_three_trees package")
    parser.add_argument("--profile", action="store_true",
                        help="Time tree operations and print a report on exit")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s: [%(levelname)s] %(message)s")
    for name in ("two_three_trees.tree", "two_three_trees.operations",
                 "two_three_trees.stock", "two_three_trees.stock_manager"):
        logging.getLogger(name).setLevel(args.log_level)

    tracker = PerformanceTracker.get_instance()
    if args.profile:
        tracker.enable()

    StockMenu(StockManager()).run()

    if args.profile:
        print(tracker.report())
    return 0


if __name__ == "__main__":
    sys.exit(main())
