"""Stock index keeping an ID tree and a price tree in sync"""

from __future__ import annotations
import logging
from decimal import Decimal
from typing import List, Tuple

from two_three_trees.keys import CompositeKey
from two_three_trees.node import LeafNode
from two_three_trees.tree import TwoThreeTree
from two_three_trees.stock import Stock, StockError, to_price
from two_three_trees import operations as ops

# Configure logging
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class StockManager:
    """
    Manages stocks indexed both by ID and by current price.

    Attributes:
        id_tree (TwoThreeTree): Leaves keyed (stock_id, None).
        price_tree (TwoThreeTree): Leaves keyed (price, stock_id), so equal
            prices are ordered by ID.

    Both trees store the Stock as the leaf value. A price change moves the
    stock's leaf in the price tree by delete, rekey and insert.
    """

    def __init__(self):
        self.id_tree: TwoThreeTree[str, None, Stock] = TwoThreeTree()
        self.price_tree: TwoThreeTree[Decimal, str, Stock] = TwoThreeTree()

    def init_stocks(self) -> None:
        """Drop every managed stock."""
        self.id_tree = TwoThreeTree()
        self.price_tree = TwoThreeTree()
        logger.debug("init_stocks(): cleared all stocks")

    def __len__(self) -> int:
        return len(self.id_tree)

    def __contains__(self, stock_id) -> bool:
        return self._does_stock_exist(stock_id)

    # Lookups
    def _does_stock_exist(self, stock_id: str) -> bool:
        if stock_id is None:
            raise StockError("StockId is null!")
        return ops.exists(self.id_tree, CompositeKey(stock_id))

    def _require_stock(self, stock_id: str) -> Stock:
        if not self._does_stock_exist(stock_id):
            raise StockError("No such stock with that stock id!")
        return ops.search(self.id_tree.root, CompositeKey(stock_id)).value

    def _price_leaf(self, stock: Stock) -> LeafNode[Decimal, str, Stock]:
        return ops.search(self.price_tree.root, CompositeKey(stock.price, stock.stock_id))

    def _reindex_price(self, stock: Stock, mutate) -> None:
        """Pull the stock's price leaf, apply `mutate` to the stock and reinsert under the new price."""
        leaf = self._price_leaf(stock)
        ops.delete(self.price_tree, leaf)
        try:
            mutate()
        finally:
            ops.rekey(leaf, CompositeKey(stock.price, stock.stock_id))
            ops.insert(self.price_tree, leaf)

    # Mutations
    def add_stock(self, stock_id: str, timestamp: int, price) -> Stock:
        """
        Add a new stock with its initial price.

        Raises:
            StockError: For a non-positive price or timestamp, or an existing ID.
        """
        price = to_price(price)
        if price <= 0:
            raise StockError("Initial price must be positive!")
        if timestamp is None or timestamp <= 0:
            raise StockError("Timestamp can't be negative!")
        if self._does_stock_exist(stock_id):
            raise StockError("Stock already exists!")
        stock = Stock(stock_id, timestamp, price)
        ops.insert(self.id_tree, LeafNode(stock_id, None, stock))
        ops.insert(self.price_tree, LeafNode(stock.price, stock_id, stock))
        logger.debug(f"add_stock(): {stock!r}")
        return stock

    def remove_stock(self, stock_id: str) -> Stock:
        """Remove a stock from both indexes and return it."""
        stock = self._require_stock(stock_id)
        ops.delete(self.id_tree, ops.search(self.id_tree.root, CompositeKey(stock_id)))
        ops.delete(self.price_tree, self._price_leaf(stock))
        logger.debug(f"remove_stock(): {stock_id}")
        return stock

    def update_stock(self, stock_id: str, timestamp: int, price_difference) -> Decimal:
        """
        Record a price change for a stock.

        Returns:
            Decimal: The stock's new price.

        Raises:
            StockError: For a negative timestamp, a zero difference, an unknown
                stock or an already recorded timestamp.
        """
        if timestamp is None or timestamp < 0:
            raise StockError("Timestamp can't be negative!")
        price_difference = to_price(price_difference)
        if price_difference == 0:
            raise StockError("Price difference can't be 0!")
        stock = self._require_stock(stock_id)
        if stock.has_change(timestamp):
            raise StockError("Such timestamp already exists!")
        self._reindex_price(stock, lambda: stock.add_change(timestamp, price_difference))
        logger.debug(f"update_stock(): {stock_id} -> {stock.price}")
        return stock.price

    def remove_stock_timestamp(self, stock_id: str, timestamp: int) -> Decimal:
        """
        Remove a recorded price change, other than the initial one.

        Returns:
            Decimal: The stock's new price.
        """
        stock = self._require_stock(stock_id)
        if timestamp is None or not stock.has_change(timestamp):
            raise StockError("Timestamp does not exist for this stock!")
        if timestamp == stock.first_time:
            raise StockError("Removing the initial timestamp is not possible!")
        self._reindex_price(stock, lambda: stock.remove_change(timestamp))
        logger.debug(f"remove_stock_timestamp(): {stock_id}@{timestamp} -> {stock.price}")
        return stock.price

    # Queries
    def get_stock(self, stock_id: str) -> Stock:
        return self._require_stock(stock_id)

    def get_stock_price(self, stock_id: str) -> Decimal:
        return self._require_stock(stock_id).price

    def _price_bounds(self, price1, price2) -> Tuple[CompositeKey, CompositeKey]:
        if price1 is None or price2 is None:
            raise StockError("Prices can't be null")
        low, high = to_price(price1), to_price(price2)
        if low > high:
            raise StockError("The price interval is not possible!")
        return CompositeKey(low), CompositeKey(high)

    def count_stocks_in_price_range(self, price1, price2) -> int:
        """Number of stocks priced within [price1, price2], in O(log n)."""
        low, high = self._price_bounds(price1, price2)
        return ops.count_in_range(self.price_tree, low, high)

    def get_stocks_in_price_range(self, price1, price2) -> List[str]:
        """IDs of stocks priced within [price1, price2], ascending by price then ID."""
        low, high = self._price_bounds(price1, price2)
        return [leaf.value.stock_id for leaf in ops.iter_range(self.price_tree, low, high)]
