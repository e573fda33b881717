"""
Exception types raised by the replay exchange.

"No data" outcomes (no orders at a timestamp, no trades produced) are
represented by empty results and never by these exceptions.
"""


class ExchangeError(Exception):
    """Base class for replay exchange errors."""


class EmptyBookError(ExchangeError, LookupError):
    """Raised when a time query is made against an order book with no entries."""


class EmptySelectionError(ExchangeError, ValueError):
    """Raised when a high/low price is requested for an empty entry sequence."""


class MalformedInputError(ExchangeError, ValueError):
    """Raised when a source record cannot be turned into an order."""


class InsufficientFundsError(ExchangeError):
    """Raised when the simulated trader's wallet cannot fund a new order."""
