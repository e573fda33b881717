"""
Order book store with a time-indexed query layer.

This module keeps every known order in a single list sorted by timestamp
and provides filtered lookup, insertion and navigation of the discrete
clock formed by the distinct timestamps present in the data.
"""

import logging
import threading
from typing import Iterable, List, Optional, Sequence, Set

from .entry import Entry, Order, Trade
from .entry_types import EntryType
from .errors import EmptyBookError, EmptySelectionError

logger = logging.getLogger(__name__)


def _by_timestamp(entry: Entry) -> str:
    return entry.timestamp


class OrderBook:
    """
    Chronological store of all raw orders.

    The backing list is re-sorted on every insertion, which is acceptable
    because insertions (manual order entry) are rare compared to the size
    of the replayed dataset. Writes take the lock exclusively and reads
    return snapshots copied under the lock, so callers on other threads
    never observe a partially sorted list.
    """

    def __init__(self, entries: Optional[Iterable[Order]] = None):
        """
        Initialize the order book.

        Args:
            entries: Initial orders, e.g. as read from the source files
        """
        self._orders: List[Order] = []
        self._lock = threading.RLock()

        for entry in entries or []:
            self._check_order(entry)
            self._orders.append(entry)
        self._orders.sort(key=_by_timestamp)

        logger.info(f"Initialized order book with {len(self._orders)} entries")

    @staticmethod
    def _check_order(order: Entry) -> None:
        if isinstance(order, Trade) or not isinstance(order, Order):
            raise TypeError(f"Only raw orders can be stored in the order book, got {type(order).__name__}")

    def insert(self, order: Order) -> None:
        """
        Insert an order and restore timestamp order.

        Args:
            order: The order to insert

        Raises:
            TypeError: If a trade record is passed instead of an order
        """
        self._check_order(order)
        with self._lock:
            self._orders.append(order)
            self._orders.sort(key=_by_timestamp)
        logger.debug(f"Inserted {order.side.value} {order.product} {order.amount}@{order.price} at {order.timestamp}")

    def orders_matching(self, side: EntryType, product: str, timestamp: str) -> List[Order]:
        """
        Get every order with exactly this side, product and timestamp.

        Args:
            side: Entry type to select
            product: Product such as "ETH/USDT"
            timestamp: Exact timestamp to select

        Returns:
            Matching orders in storage order (empty if none)
        """
        with self._lock:
            return [
                order for order in self._orders
                if order.side == side and order.product == product and order.timestamp == timestamp
            ]

    def known_products(self) -> Set[str]:
        """Get the distinct products across all stored entries."""
        with self._lock:
            return {order.product for order in self._orders}

    def earliest_time(self) -> str:
        """
        Get the timestamp of the first stored entry.

        Raises:
            EmptyBookError: If the book holds no entries
        """
        with self._lock:
            if not self._orders:
                raise EmptyBookError("Order book is empty")
            return self._orders[0].timestamp

    def next_time(self, current: str) -> str:
        """
        Get the smallest stored timestamp strictly after ``current``.

        When ``current`` is at or past the last timestamp the clock wraps
        around to the earliest one.

        Args:
            current: The current timestamp

        Returns:
            The next timestamp on the circular clock

        Raises:
            EmptyBookError: If the book holds no entries
        """
        with self._lock:
            for order in self._orders:
                if order.timestamp > current:
                    return order.timestamp
        return self.earliest_time()

    def timestamps(self) -> List[str]:
        """Get the sorted distinct timestamps stored in the book."""
        with self._lock:
            return sorted({order.timestamp for order in self._orders})

    @property
    def entries(self) -> List[Order]:
        """Snapshot of all stored orders in timestamp order."""
        with self._lock:
            return list(self._orders)

    @staticmethod
    def high_price(entries: Sequence[Entry]) -> float:
        """
        Get the highest price in a sequence of entries.

        Raises:
            EmptySelectionError: If the sequence is empty
        """
        if not entries:
            raise EmptySelectionError("Cannot take the high price of no entries")
        return max(entry.price for entry in entries)

    @staticmethod
    def low_price(entries: Sequence[Entry]) -> float:
        """
        Get the lowest price in a sequence of entries.

        Raises:
            EmptySelectionError: If the sequence is empty
        """
        if not entries:
            raise EmptySelectionError("Cannot take the low price of no entries")
        return min(entry.price for entry in entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)

    def __repr__(self) -> str:
        return f"OrderBook(entries={len(self)}, products={len(self.known_products())})"
