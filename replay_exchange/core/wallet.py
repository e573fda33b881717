"""
Currency balances of the simulated trader.

The wallet approves new orders against the trader's holdings and applies
the trades the matching engine attributes to the trader.
"""

import logging
from typing import Dict

from .entry import Entry, Trade
from .entry_types import EntryType

logger = logging.getLogger(__name__)


class Wallet:
    """
    Balance ledger keyed by currency symbol.
    """

    def __init__(self):
        self.currencies: Dict[str, float] = {}

    def insert_currency(self, currency: str, amount: float) -> None:
        """
        Deposit an amount of a currency.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Cannot deposit a negative amount: {amount}")
        self.currencies[currency] = self.currencies.get(currency, 0.0) + amount

    def remove_currency(self, currency: str, amount: float) -> bool:
        """
        Withdraw an amount of a currency.

        Returns:
            True if the balance covered the withdrawal
        """
        if amount < 0 or not self.contains_currency(currency, amount):
            return False
        self.currencies[currency] -= amount
        return True

    def contains_currency(self, currency: str, amount: float) -> bool:
        """Check the wallet holds at least ``amount`` of ``currency``."""
        if currency not in self.currencies:
            return False
        return self.currencies[currency] >= amount

    def can_fulfill_order(self, order: Entry) -> bool:
        """
        Check the wallet can fund an order.

        An ask needs the amount in the base currency; a bid needs
        amount * price in the quote currency.
        """
        if order.side == EntryType.ASK:
            needed, currency = order.amount, order.base_currency
        elif order.side == EntryType.BID:
            needed, currency = order.amount * order.price, order.quote_currency
        else:
            return False

        logger.debug(f"Checking wallet for {currency} : {needed}")
        return self.contains_currency(currency, needed)

    def process_sale(self, trade: Trade) -> None:
        """
        Apply a trade to the balances.

        ASK_SALE: the trader sold base currency for quote currency.
        BID_SALE: the trader bought base currency with quote currency.
        """
        base, quote = trade.base_currency, trade.quote_currency
        value = trade.amount * trade.price

        if trade.side == EntryType.ASK_SALE:
            self.currencies[quote] = self.currencies.get(quote, 0.0) + value
            self.currencies[base] = self.currencies.get(base, 0.0) - trade.amount
        elif trade.side == EntryType.BID_SALE:
            self.currencies[base] = self.currencies.get(base, 0.0) + trade.amount
            self.currencies[quote] = self.currencies.get(quote, 0.0) - value

    def balances(self) -> Dict[str, float]:
        """Get a copy of the balances sorted by currency."""
        return dict(sorted(self.currencies.items()))

    def to_dict(self) -> Dict[str, float]:
        return self.balances()

    def __str__(self) -> str:
        return "".join(f"{currency} : {amount}\n" for currency, amount in self.balances().items())
