"""
Exchange simulation driver.

This module ties the order book, aggregator, matching engine and the
simulated trader's wallet to a discrete clock that walks the timestamps
present in the replayed data.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .core.aggregator import Aggregator
from .core.entry import Order, Trade, TraderId
from .core.entry_types import EntryType, validate_entry_type
from .core.errors import InsufficientFundsError
from .core.matching_engine import DEFAULT_TRADER_ID, MatchingEngine
from .core.order_book import OrderBook
from .core.wallet import Wallet
from .ingest.csv_reader import load_orders
from .utils.logger import ExchangeLogger, log_order_audit, log_trade_audit
from .utils.performance import get_performance_monitor, measure_latency

logger = logging.getLogger(__name__)


class ExchangeSimulation:
    """
    One simulated trader replaying a historical market.

    Each call to advance() matches every product at the current time,
    applies the trader's trades to the wallet and moves the clock to the
    next timestamp, wrapping around after the last one.
    """

    def __init__(
        self,
        order_book: OrderBook,
        timestamps: Optional[Iterable[str]] = None,
        trader_id: TraderId = DEFAULT_TRADER_ID,
        wallet: Optional[Wallet] = None,
        products: Optional[Iterable[str]] = None,
        audit_logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the simulation.

        Args:
            order_book: Order book with the replayed data
            timestamps: Global timestamp grid (defaults to the book's own)
            trader_id: Identity of the simulated trader
            wallet: Trader's wallet (defaults to an empty one)
            products: Products of interest for market stats (defaults to all)
            audit_logger: Optional audit trail for orders and trades

        Raises:
            EmptyBookError: If the order book has no entries
        """
        self.order_book = order_book
        self.trader_id = trader_id
        self.wallet = wallet or Wallet()
        self.aggregator = Aggregator(order_book, timestamps if timestamps is not None else order_book.timestamps())
        self.matching_engine = MatchingEngine(order_book, trader_id=trader_id)
        self.products = sorted(products) if products else None
        self.audit_logger = audit_logger
        self.events = ExchangeLogger()
        self.tick_callbacks: List[Callable[[str, str, List[Trade]], None]] = []

        self.current_time = order_book.earliest_time()
        self.events.log_system_event("SIMULATION_START", self.current_time)

    @classmethod
    def from_files(
        cls,
        paths: Iterable[str],
        trader_id: TraderId = DEFAULT_TRADER_ID,
        initial_balances: Optional[Dict[str, float]] = None,
        **kwargs
    ) -> "ExchangeSimulation":
        """
        Build a simulation from CSV data files.

        Args:
            paths: CSV files to replay
            trader_id: Identity of the simulated trader
            initial_balances: Opening wallet balances, e.g. {"BTC": 10}
        """
        paths = list(paths)
        orders = load_orders(paths)
        order_book = OrderBook(orders)

        wallet = Wallet()
        for currency, amount in (initial_balances or {}).items():
            wallet.insert_currency(currency, amount)

        timestamps = sorted({order.timestamp for order in orders})
        return cls(order_book, timestamps=timestamps, trader_id=trader_id, wallet=wallet, **kwargs)

    @property
    def selected_products(self) -> List[str]:
        """Products of interest, defaulting to every known product."""
        return self.products or sorted(self.order_book.known_products())

    def place_order(self, side: Union[EntryType, str], product: str, price: float, amount: float) -> Order:
        """
        Place an order for the simulated trader at the current time.

        Args:
            side: "bid" or "ask"
            product: Product such as "ETH/BTC"
            price: Limit price
            amount: Amount of the base currency

        Returns:
            The inserted order

        Raises:
            ValueError: If side is not bid or ask
            InsufficientFundsError: If the wallet cannot fund the order
        """
        if isinstance(side, str):
            side = validate_entry_type(side)
        if side not in (EntryType.BID, EntryType.ASK):
            raise ValueError(f"Only bids and asks can be placed, got: {side.value}")

        order = Order(
            price=float(price),
            amount=float(amount),
            timestamp=self.current_time,
            product=product,
            side=side,
            owner=self.trader_id,
        )

        if not self.wallet.can_fulfill_order(order):
            self.events.log_error("wallet", f"Insufficient funds for {side.value} {product} {amount}@{price}")
            if self.audit_logger:
                log_order_audit(self.audit_logger, "REJECT", order.to_dict())
            raise InsufficientFundsError(f"Wallet cannot fund {side.value} of {amount} {product} at {price}")

        self.order_book.insert(order)
        self.events.log_order_insert(order.timestamp, order.product, order.side.value, order.amount, order.price)
        if self.audit_logger:
            log_order_audit(self.audit_logger, "INSERT", order.to_dict())

        return order

    def advance(self) -> List[Trade]:
        """
        Match the current time and move the clock forward.

        Returns:
            Every trade produced at the time that was current on entry
        """
        timestamp = self.current_time

        with measure_latency(get_performance_monitor(), "match_all"):
            trades = self.matching_engine.match_all(timestamp)

        for trade in trades:
            self.events.log_trade_execution(trade.timestamp, trade.product, trade.price, trade.amount, trade.side.value)
            if trade.owner == self.trader_id:
                self.wallet.process_sale(trade)
                if self.audit_logger:
                    log_trade_audit(self.audit_logger, trade.to_dict())

        self.current_time = self.order_book.next_time(timestamp)
        self.events.log_clock_tick(timestamp, self.current_time, len(trades))
        self._notify_tick(timestamp, trades)

        return trades

    def market_stats(self) -> List[Dict[str, Any]]:
        """
        Summarise the asks at the current time for each selected product.

        Returns:
            One record per product with the ask count and the max/min ask
            price (None when there are no asks)
        """
        stats = []
        for product in self.selected_products:
            asks = self.order_book.orders_matching(EntryType.ASK, product, self.current_time)
            stats.append({
                "product": product,
                "asks_seen": len(asks),
                "max_ask": OrderBook.high_price(asks) if asks else None,
                "min_ask": OrderBook.low_price(asks) if asks else None,
            })
        return stats

    def add_tick_callback(self, callback: Callable[[str, str, List[Trade]], None]) -> None:
        """Add callback called with (previous time, current time, trades) after each advance."""
        self.tick_callbacks.append(callback)

    def _notify_tick(self, previous: str, trades: List[Trade]) -> None:
        for callback in self.tick_callbacks:
            try:
                callback(previous, self.current_time, trades)
            except Exception as e:
                logger.error(f"Error in tick callback: {str(e)}")
