"""
Price aggregation over the order book.

Derives chart-ready series (candlesticks, volume, per-minute mean price)
and per-product entry counts from the order book.
"""

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Tuple

from .candle import Candle
from .entry_types import EntryType
from .order_book import OrderBook

logger = logging.getLogger(__name__)

# Offset of "HH:MM" inside "YYYY/MM/DD HH:MM:SS"
MINUTE_SLICE = slice(11, 16)
MEAN_PRICE_QUANTUM = Decimal("0.000001")


def round_price(value: float) -> float:
    """Round a price to 6 decimal places, halves away from zero."""
    return float(Decimal(repr(value)).quantize(MEAN_PRICE_QUANTUM, rounding=ROUND_HALF_UP))


class Aggregator:
    """
    Builds price series from an order book.

    The timestamp grid is supplied by ingestion: the sorted, de-duplicated
    timestamps of every configured data source. Grid points may have no
    orders for a given side and product.
    """

    def __init__(self, order_book: OrderBook, timestamps: Iterable[str]):
        """
        Initialize the aggregator.

        Args:
            order_book: Order book to read from
            timestamps: Global sorted, de-duplicated timestamp grid
        """
        self.order_book = order_book
        self.timestamps: List[str] = sorted(set(timestamps))

    def candlesticks(self, side: EntryType, product: str) -> List[Candle]:
        """
        Build OHLC candles, one per grid timestamp that has orders.

        Each candle opens at the previous emitted candle's close, so gaps in
        the data are compressed rather than producing empty candles.

        Args:
            side: Entry type to chart
            product: Product such as "ETH/USDT"

        Returns:
            Candles in ascending timestamp order
        """
        candles: List[Candle] = []
        prev_close = 0.0

        for timestamp in self.timestamps:
            entries = self.order_book.orders_matching(side, product, timestamp)
            if not entries:
                continue

            total_value = sum(e.price * e.amount for e in entries)
            total_amount = sum(e.amount for e in entries)
            close = total_value / total_amount
            open_ = close if not candles else prev_close

            candles.append(Candle(
                timestamp=timestamp,
                open=open_,
                high=OrderBook.high_price(entries),
                low=OrderBook.low_price(entries),
                close=close,
            ))
            prev_close = close

        logger.debug(f"Built {len(candles)} {side.value} candles for {product}")
        return candles

    def volume_series(self, side: EntryType, product: str) -> List[Tuple[str, float]]:
        """
        Total order amount at every grid timestamp (0.0 where empty).
        """
        return [
            (timestamp, sum(e.amount for e in self.order_book.orders_matching(side, product, timestamp)))
            for timestamp in self.timestamps
        ]

    def trade_counts_by_product(self) -> Dict[str, int]:
        """
        Count stored entries per product.

        This counts raw orders of any side, not executed trades.
        """
        counts: Dict[str, int] = defaultdict(int)
        for entry in self.order_book.entries:
            counts[entry.product] += 1
        return dict(sorted(counts.items()))

    def mean_price_by_minute(self, side: EntryType, product: str) -> List[Tuple[str, float]]:
        """
        Mean price per "HH:MM" bucket across all stored timestamps.

        Args:
            side: Entry type to average
            product: Product such as "ETH/USDT"

        Returns:
            (minute, mean price) pairs in ascending minute order, with the
            mean rounded to 6 decimal places
        """
        prices_by_minute: Dict[str, List[float]] = defaultdict(list)
        for entry in self.order_book.entries:
            if entry.side == side and entry.product == product:
                prices_by_minute[entry.timestamp[MINUTE_SLICE]].append(entry.price)

        return [
            (minute, round_price(sum(prices) / len(prices)))
            for minute, prices in sorted(prices_by_minute.items())
        ]
