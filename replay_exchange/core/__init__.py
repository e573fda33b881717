"""
Core order book engine components.

This module contains the entry model, the order book store, the price
aggregator and the matching engine.
"""

from .entry import Entry, Order, Trade, TraderId
from .entry_types import EntryType
from .candle import Candle
from .errors import ExchangeError, EmptyBookError, EmptySelectionError, MalformedInputError, InsufficientFundsError
from .order_book import OrderBook
from .aggregator import Aggregator
from .matching_engine import MatchingEngine
from .wallet import Wallet

__all__ = [
    "Entry",
    "Order",
    "Trade",
    "TraderId",
    "EntryType",
    "Candle",
    "ExchangeError",
    "EmptyBookError",
    "EmptySelectionError",
    "MalformedInputError",
    "InsufficientFundsError",
    "OrderBook",
    "Aggregator",
    "MatchingEngine",
    "Wallet",
]
