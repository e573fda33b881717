"""
Matching engine pairing asks against bids at a single instant.

This module contains the MatchingEngine class that runs one matching pass
for a product at a timestamp and produces trade records, plus callbacks
and statistics for the layers built on top of it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .entry import Order, Trade, TraderId
from .entry_types import EntryType
from .order_book import OrderBook

logger = logging.getLogger(__name__)

DEFAULT_TRADER_ID: TraderId = "simuser"


class MatchingEngine:
    """
    Discrete-time matching engine over a replayed order book.

    Matching rules:
    - Asks are visited cheapest first, bids richest first (stable on ties)
    - A pair trades when the bid price is at or above the ask price
    - Trades execute at the ask's price
    - Matching works on copies, the stored orders are never modified
    """

    def __init__(self, order_book: OrderBook, trader_id: Optional[TraderId] = DEFAULT_TRADER_ID):
        """
        Initialize the matching engine.

        Args:
            order_book: Order book holding the orders to match
            trader_id: Identity of the simulated trader whose trades are tagged
        """
        self.order_book = order_book
        self.trader_id = trader_id

        # Callbacks for real-time data
        self.trade_callbacks: List[Callable[[Trade], None]] = []

        # Statistics
        self.total_matches_run = 0
        self.total_trades_executed = 0
        self.total_volume = 0.0
        self.start_time = datetime.now(timezone.utc)

        logger.info(f"Matching engine initialized for trader {trader_id}")

    def _is_trader(self, order: Order) -> bool:
        return self.trader_id is not None and order.owner == self.trader_id

    def match(self, product: str, timestamp: str) -> List[Trade]:
        """
        Match asks to bids for one product at one timestamp.

        Args:
            product: Product such as "ETH/USDT"
            timestamp: Exact timestamp to match at

        Returns:
            Trades in the order produced (ask-major, bid-minor); empty when
            either side of the market has no orders
        """
        asks = [order.copy() for order in self.order_book.orders_matching(EntryType.ASK, product, timestamp)]
        bids = [order.copy() for order in self.order_book.orders_matching(EntryType.BID, product, timestamp)]

        self.total_matches_run += 1

        if not asks or not bids:
            logger.debug(f"No bids or asks for {product} at {timestamp}")
            return []

        asks.sort(key=lambda order: order.price)
        bids.sort(key=lambda order: order.price, reverse=True)

        logger.debug(
            f"Matching {product} at {timestamp}: asks {asks[0].price}..{asks[-1].price}, "
            f"bids {bids[0].price}..{bids[-1].price}"
        )

        trades: List[Trade] = []
        for ask in asks:
            if ask.amount <= 0:
                continue

            for bid in bids:
                if bid.price < ask.price or bid.amount <= 0:
                    continue

                trade = Trade(
                    price=ask.price,
                    amount=min(ask.amount, bid.amount),
                    timestamp=timestamp,
                    product=product,
                )
                if self._is_trader(bid):
                    trade.owner = self.trader_id
                    trade.side = EntryType.BID_SALE
                # An ask owned by the trader takes precedence, even when the
                # bid is the trader's too.
                if self._is_trader(ask):
                    trade.owner = self.trader_id
                    trade.side = EntryType.ASK_SALE
                trades.append(trade)

                if bid.amount == ask.amount:
                    bid.amount = 0.0
                    ask.amount = 0.0
                    break
                if bid.amount > ask.amount:
                    bid.amount -= ask.amount
                    ask.amount = 0.0
                    break
                ask.amount -= bid.amount
                bid.amount = 0.0

        self.total_trades_executed += len(trades)
        for trade in trades:
            self.total_volume += trade.notional_value

        self._notify_trades(trades)

        logger.info(f"Matched {product} at {timestamp}: {len(trades)} trades executed")
        return trades

    def match_all(self, timestamp: str) -> List[Trade]:
        """
        Match every known product at a timestamp.

        Args:
            timestamp: Exact timestamp to match at

        Returns:
            Trades for all products, products in ascending order
        """
        trades: List[Trade] = []
        for product in sorted(self.order_book.known_products()):
            trades.extend(self.match(product, timestamp))
        return trades

    def add_trade_callback(self, callback: Callable[[Trade], None]) -> None:
        """Add callback for trade executions."""
        self.trade_callbacks.append(callback)

    def _notify_trades(self, trades: List[Trade]) -> None:
        """Notify trade callbacks."""
        for trade in trades:
            for callback in self.trade_callbacks:
                try:
                    callback(trade)
                except Exception as e:
                    logger.error(f"Error in trade callback: {str(e)}")

    def get_statistics(self) -> Dict[str, Any]:
        """Get engine statistics."""
        uptime = datetime.now(timezone.utc) - self.start_time

        return {
            "uptime_seconds": uptime.total_seconds(),
            "total_matches_run": self.total_matches_run,
            "total_trades_executed": self.total_trades_executed,
            "total_volume": self.total_volume,
            "known_products": sorted(self.order_book.known_products()),
            "trader_id": self.trader_id,
        }
