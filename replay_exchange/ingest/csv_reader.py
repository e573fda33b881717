"""
Line-oriented ingestion of historical order records.

Each source line holds one order as ``timestamp,product,side,price,amount``,
for example ``2020/03/17 17:01:24.884492,ETH/BTC,bid,0.02187308,7.44564869``.
Malformed lines are skipped and logged; everything returned is a valid Order.
"""

import csv
import logging
import re
from typing import Iterable, List, Optional, Sequence

from ..core.entry import Order, TraderId
from ..core.entry_types import EntryType, entry_type_from_string
from ..core.errors import MalformedInputError

logger = logging.getLogger(__name__)

# Fixed-width timestamps keep lexicographic and chronological order equal
TIMESTAMP_PATTERN = re.compile(r'^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}(\.\d+)?$')
FIELD_COUNT = 5
# Stands in for undecodable bytes when reading
UNDECODABLE = "\ufffd"


def tokenise(line: str, separator: str = ",") -> List[str]:
    """
    Split a line on a separator, dropping empty tokens.

    Used for manual input ("ETH/BTC,200,0.5") and for splitting products
    into their base and quote currencies.
    """
    return [token for token in line.split(separator) if token]


def validate_timestamp(timestamp: str) -> str:
    """
    Check a timestamp is in canonical "YYYY/MM/DD HH:MM:SS[.ffffff]" form.

    Raises:
        MalformedInputError: If the timestamp does not match
    """
    if not TIMESTAMP_PATTERN.match(timestamp):
        raise MalformedInputError(f"Bad timestamp: {timestamp!r}")
    return timestamp


def parse_order(
    price: str,
    amount: str,
    timestamp: str,
    product: str,
    side: EntryType,
    owner: Optional[TraderId] = None
) -> Order:
    """
    Build an Order from its string fields.

    Raises:
        MalformedInputError: If price or amount is not a number, or the
            timestamp is not canonical
    """
    try:
        parsed_price = float(price)
        parsed_amount = float(amount)
    except (TypeError, ValueError):
        raise MalformedInputError(f"Bad float! price={price!r} amount={amount!r}")

    return Order(
        price=parsed_price,
        amount=parsed_amount,
        timestamp=validate_timestamp(timestamp),
        product=product,
        side=side,
        owner=owner,
    )


def strings_to_order(tokens: Sequence[str]) -> Order:
    """
    Convert the five columns of a source record into an Order.

    Raises:
        MalformedInputError: If the record does not have five fields or a
            field cannot be parsed
    """
    if len(tokens) != FIELD_COUNT:
        raise MalformedInputError(f"Expected {FIELD_COUNT} fields, got {len(tokens)}")

    timestamp, product, side, price, amount = (token.strip() for token in tokens)
    return parse_order(price, amount, timestamp, product, entry_type_from_string(side))


def parse_row(line: str) -> List[str]:
    """
    Split one CSV line into its non-empty fields.

    Empty fields are dropped, so a trailing separator is tolerated.

    Raises:
        MalformedInputError: If the line held bytes that are not UTF-8
        csv.Error: If the line cannot be parsed as CSV
    """
    if UNDECODABLE in line:
        raise MalformedInputError("Line is not valid UTF-8")
    row = next(csv.reader([line]), [])
    return [field for field in row if field]


def read_csv(path: str) -> List[Order]:
    """
    Read every valid order from a CSV file.

    Args:
        path: Path to the CSV file

    Returns:
        Orders in file order; empty if the file cannot be opened
    """
    orders: List[Order] = []
    skipped = 0

    try:
        with open(path, newline="", encoding="utf-8", errors="replace") as csv_file:
            for line_number, line in enumerate(csv_file, start=1):
                try:
                    row = parse_row(line)
                    if row:
                        orders.append(strings_to_order(row))
                except (MalformedInputError, csv.Error) as e:
                    skipped += 1
                    logger.warning(f"Skipping bad data in {path}:{line_number}: {str(e)}")
    except OSError as e:
        logger.error(f"Could not open file {path}: {str(e)}")
        return []

    logger.info(f"Read {len(orders)} entries from {path} ({skipped} skipped)")
    return orders


def load_orders(paths: Iterable[str]) -> List[Order]:
    """Read and concatenate the orders of several CSV files."""
    orders: List[Order] = []
    for path in paths:
        orders.extend(read_csv(path))
    return orders


def all_timestamps(paths: Iterable[str]) -> List[str]:
    """
    Get the sorted, de-duplicated timestamps across every data source.

    Args:
        paths: Paths to every configured CSV file

    Returns:
        Sorted list of distinct timestamps
    """
    return sorted({order.timestamp for order in load_orders(paths)})
