"""
Input validation utilities for the API layer.

This module validates order placement requests and query parameters
before they reach the simulation.
"""

import math
import re
import logging
from typing import Dict, Any, Optional, Tuple

from ..core.entry_types import EntryType
from ..ingest.csv_reader import TIMESTAMP_PATTERN

logger = logging.getLogger(__name__)

# Product pattern (e.g., ETH/BTC, DOGE/USDT)
PRODUCT_PATTERN = re.compile(r'^[A-Z0-9]+/[A-Z0-9]+$')

# Sides a trader may place
PLACEABLE_SIDES = (EntryType.BID, EntryType.ASK)
# Sides stored in the order book
QUERYABLE_SIDES = (EntryType.BID, EntryType.ASK, EntryType.UNKNOWN)

MAX_LIMIT = 1000


def validate_product(product: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate product format.

    Args:
        product: Product to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not product:
        return False, "Product cannot be empty"

    if not isinstance(product, str):
        return False, "Product must be a string"

    if not PRODUCT_PATTERN.match(product):
        return False, f"Invalid product format: {product}. Expected format: BASE/QUOTE (e.g., ETH/BTC)"

    return True, None


def validate_side(side: Any, allowed=QUERYABLE_SIDES) -> Tuple[bool, Optional[str], Optional[EntryType]]:
    """
    Validate an order side.

    Args:
        side: Side to validate
        allowed: Entry types accepted in this context

    Returns:
        Tuple of (is_valid, error_message, parsed_side)
    """
    if not side or not isinstance(side, str):
        return False, "Side is required", None

    try:
        parsed = EntryType(side.lower())
    except ValueError:
        parsed = None

    if parsed not in allowed:
        return False, f"Invalid side: {side}. Must be one of: {[s.value for s in allowed]}", None

    return True, None, parsed


def _validate_positive_number(value: Any, name: str) -> Tuple[bool, Optional[str], Optional[float]]:
    if value is None or isinstance(value, bool):
        return False, f"{name.capitalize()} is required", None

    try:
        number = float(value)
    except (ValueError, TypeError):
        return False, f"Invalid {name} format: {value}", None

    if not math.isfinite(number) or number <= 0:
        return False, f"{name.capitalize()} must be a positive number", None

    return True, None, number


def validate_price(price: Any) -> Tuple[bool, Optional[str], Optional[float]]:
    """Validate an order price."""
    return _validate_positive_number(price, "price")


def validate_amount(amount: Any) -> Tuple[bool, Optional[str], Optional[float]]:
    """Validate an order amount."""
    return _validate_positive_number(amount, "amount")


def validate_timestamp(timestamp: Any) -> Tuple[bool, Optional[str]]:
    """Validate a canonical "YYYY/MM/DD HH:MM:SS[.ffffff]" timestamp."""
    if not timestamp or not isinstance(timestamp, str):
        return False, "Timestamp is required"

    if not TIMESTAMP_PATTERN.match(timestamp):
        return False, f"Invalid timestamp: {timestamp}. Expected format: YYYY/MM/DD HH:MM:SS[.ffffff]"

    return True, None


def validate_limit(limit: Any) -> Tuple[bool, Optional[str], Optional[int]]:
    """
    Validate a result count limit.

    Returns:
        Tuple of (is_valid, error_message, parsed_limit)
    """
    try:
        parsed = int(limit)
    except (ValueError, TypeError):
        return False, f"Invalid limit: {limit}", None

    if parsed <= 0 or parsed > MAX_LIMIT:
        return False, f"Limit must be between 1 and {MAX_LIMIT}", None

    return True, None, parsed


def validate_order_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str], Optional[Dict[str, Any]]]:
    """
    Validate a complete order placement request.

    Args:
        data: Request body with side, product, price and amount

    Returns:
        Tuple of (is_valid, error_message, validated_data)
    """
    is_valid, error, side = validate_side(data.get("side"), PLACEABLE_SIDES)
    if not is_valid:
        return False, error, None

    product = data.get("product")
    is_valid, error = validate_product(product)
    if not is_valid:
        return False, error, None

    is_valid, error, price = validate_price(data.get("price"))
    if not is_valid:
        return False, error, None

    is_valid, error, amount = validate_amount(data.get("amount"))
    if not is_valid:
        return False, error, None

    return True, None, {
        "side": side,
        "product": product,
        "price": price,
        "amount": amount,
    }
