"""
Order and Trade data structures for the replay exchange.

Both record kinds share the same fields. Keeping them as distinct types
makes it impossible to insert a trade record into the order book as if it
were a raw order.
"""

from dataclasses import dataclass, asdict, replace
from typing import Optional, Dict, Any

from .entry_types import EntryType, is_order_type, is_sale_type

# Identity of a trader whose orders and trades affect a wallet
TraderId = str


@dataclass
class Entry:
    """
    Fields common to every order book entry.

    Timestamps are kept in the canonical "YYYY/MM/DD HH:MM:SS[.ffffff]" form
    so that lexicographic order equals chronological order.
    An owner of None means the entry came from the historical dataset.
    """

    price: float
    amount: float
    timestamp: str
    product: str
    side: EntryType
    owner: Optional[TraderId] = None

    @property
    def base_currency(self) -> str:
        """Currency being bought or sold, e.g. ETH for ETH/USDT."""
        return self.product.split("/")[0]

    @property
    def quote_currency(self) -> str:
        """Currency the price is expressed in, e.g. USDT for ETH/USDT."""
        return self.product.split("/")[-1]

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to dictionary for serialization."""
        data = asdict(self)
        data["side"] = self.side.value
        return data


@dataclass
class Order(Entry):
    """
    A raw bid or ask, read from the dataset or placed by the simulated trader.
    """

    def __post_init__(self):
        if not is_order_type(self.side):
            raise ValueError(f"Orders cannot have side {self.side.value}")

    def copy(self) -> "Order":
        """Return an independent copy, used as a working copy while matching."""
        return replace(self)


@dataclass
class Trade(Entry):
    """
    A trade record produced by the matching engine.

    Trades are created per matching pass and never stored in the order book.
    """

    side: EntryType = EntryType.ASK_SALE

    def __post_init__(self):
        if not is_sale_type(self.side):
            raise ValueError(f"Trades must have a sale side, got: {self.side.value}")

    @property
    def notional_value(self) -> float:
        """Quote currency value of the trade."""
        return self.price * self.amount
