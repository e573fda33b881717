"""
Shared fixtures for the replay exchange tests.
"""

from replay_exchange.core.entry import Order
from replay_exchange.core.entry_types import EntryType

T1 = "2020/03/17 17:01:24.884492"
T2 = "2020/03/17 17:01:30.123456"
T3 = "2020/03/17 17:02:01.000000"
T4 = "2020/03/17 17:02:05.500000"

PRODUCT = "ETH/BTC"


def make_order(price, amount, side=EntryType.ASK, timestamp=T1, product=PRODUCT, owner=None):
    """Build an order with test defaults."""
    return Order(
        price=price,
        amount=amount,
        timestamp=timestamp,
        product=product,
        side=side,
        owner=owner,
    )


def ask(price, amount, **kwargs):
    return make_order(price, amount, side=EntryType.ASK, **kwargs)


def bid(price, amount, **kwargs):
    return make_order(price, amount, side=EntryType.BID, **kwargs)
