"""
Ingestion of historical order data.

This module reads order records from CSV sources and builds the global
timestamp grid used by the aggregator.
"""

from .csv_reader import read_csv, load_orders, all_timestamps, tokenise, parse_order, parse_row, strings_to_order

__all__ = [
    "read_csv",
    "load_orders",
    "all_timestamps",
    "tokenise",
    "parse_order",
    "parse_row",
    "strings_to_order",
]
