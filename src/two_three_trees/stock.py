"""Stock with a timestamped price-change history"""

from __future__ import annotations
import logging
from decimal import Decimal, InvalidOperation
from typing import Iterator, Tuple

from two_three_trees.keys import CompositeKey
from two_three_trees.node import LeafNode
from two_three_trees.tree import TwoThreeTree
from two_three_trees import operations as ops

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class StockError(ValueError):
    """Raised when a stock or stock-manager request is rejected."""
    pass


def to_price(value) -> Decimal:
    """
    Convert a user-supplied number to an exact Decimal.

    Floats go through their shortest string form so that 0.1 becomes
    Decimal('0.1') rather than its binary expansion.

    Raises:
        StockError: If the value is None, a bool, or not a finite number.
    """
    if value is None or isinstance(value, bool):
        raise StockError(f"Invalid price value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise StockError(f"Invalid price value: {value!r}") from None
    if not result.is_finite():
        raise StockError(f"Invalid price value: {value!r}")
    return result


def _change_key(timestamp: int) -> CompositeKey[int, int]:
    return CompositeKey(timestamp, timestamp)


class Stock:
    """
    A stock identified by `stock_id` whose current price is the sum of all
    recorded price changes.

    Changes live in a 2-3 tree keyed by timestamp. The first change (the
    initial price) can never be removed.
    """
    __slots__ = ("stock_id", "first_time", "price", "change_tree")

    def __init__(self, stock_id: str, first_time: int, initial_price):
        """
        Parameters:
            stock_id (str): Unique identifier of the stock.
            first_time (int): Timestamp of the initial price.
            initial_price: The initial price; converted to Decimal.

        Raises:
            StockError: For a missing id or timestamp, or a negative price.
        """
        if stock_id is None or first_time is None or initial_price is None:
            raise StockError("The stock's values are incorrect!")
        initial_price = to_price(initial_price)
        if initial_price < 0:
            raise StockError("The stock's values are incorrect!")
        self.stock_id = stock_id
        self.first_time = first_time
        self.price = Decimal(0)
        self.change_tree: TwoThreeTree[int, int, Decimal] = TwoThreeTree()
        self.add_change(first_time, initial_price)

    def has_change(self, timestamp: int) -> bool:
        if timestamp is None:
            raise StockError("Timestamp is null!")
        return ops.exists(self.change_tree, _change_key(timestamp))

    def add_change(self, timestamp: int, change) -> None:
        """
        Record a price change at `timestamp` and adjust the current price.

        Raises:
            StockError: If the timestamp is None or already recorded.
        """
        if self.has_change(timestamp):
            raise StockError("Timestamp already exists!")
        change = to_price(change)
        ops.insert(self.change_tree, LeafNode(timestamp, timestamp, change))
        self.price += change
        logger.debug(f"{self.stock_id}: +{change} at {timestamp}, price is now {self.price}")

    def remove_change(self, timestamp: int) -> Decimal:
        """
        Remove the change recorded at `timestamp` and revert its effect on the price.

        Returns:
            Decimal: The removed change.

        Raises:
            StockError: If no such change exists or it is the initial price.
        """
        if not self.has_change(timestamp):
            raise StockError("No such timestamp")
        if timestamp == self.first_time:
            raise StockError("Removing the initial timestamp is not possible!")
        leaf = ops.search(self.change_tree.root, _change_key(timestamp))
        ops.delete(self.change_tree, leaf)
        self.price -= leaf.value
        logger.debug(f"{self.stock_id}: reverted {leaf.value} at {timestamp}, price is now {self.price}")
        return leaf.value

    def history(self) -> Iterator[Tuple[int, Decimal]]:
        """Yields (timestamp, change) pairs in time order."""
        for leaf in self.change_tree:
            yield leaf.key.primary, leaf.value

    def __repr__(self) -> str:
        return f"Stock(stock_id={self.stock_id!r}, price={self.price}, changes={len(self.change_tree)})"
