"""
Entry type definitions for the replay exchange.

This module defines the kinds of records the order book deals with:
raw orders read from the historical dataset or placed by the simulated
trader, and the trade records produced by the matching engine.
"""

from enum import Enum


class EntryType(Enum):
    """
    Kinds of order book entries.

    Raw orders:
    - BID: Offer to buy the base currency
    - ASK: Offer to sell the base currency
    - UNKNOWN: Any unrecognised side found in the source data

    Trade records (output of matching only):
    - ASK_SALE: Trade where the simulated trader sold (or nobody in particular)
    - BID_SALE: Trade where the simulated trader bought
    """
    BID = "bid"
    ASK = "ask"
    UNKNOWN = "unknown"
    ASK_SALE = "asksale"
    BID_SALE = "bidsale"


ORDER_TYPES = frozenset({EntryType.BID, EntryType.ASK, EntryType.UNKNOWN})
SALE_TYPES = frozenset({EntryType.ASK_SALE, EntryType.BID_SALE})


def entry_type_from_string(value: str) -> EntryType:
    """
    Convert the side column of a source record into an EntryType.

    Anything other than "ask" or "bid" maps to UNKNOWN rather than failing,
    so the record is kept but never takes part in matching.

    Args:
        value: String representation of the side

    Returns:
        EntryType enum value
    """
    normalized = value.strip().lower()
    if normalized == EntryType.ASK.value:
        return EntryType.ASK
    if normalized == EntryType.BID.value:
        return EntryType.BID
    return EntryType.UNKNOWN


def validate_entry_type(value: str) -> EntryType:
    """
    Strictly convert a string to an EntryType enum.

    Args:
        value: String representation of the entry type

    Returns:
        EntryType enum value

    Raises:
        ValueError: If value is not a known entry type
    """
    try:
        return EntryType(value.lower())
    except ValueError:
        raise ValueError(f"Invalid entry type: {value}. Must be one of: {[et.value for et in EntryType]}")


def is_order_type(entry_type: EntryType) -> bool:
    """Check if an entry type describes a raw order."""
    return entry_type in ORDER_TYPES


def is_sale_type(entry_type: EntryType) -> bool:
    """Check if an entry type describes a trade record."""
    return entry_type in SALE_TYPES
