"""
Tests for CSV ingestion.
"""

import csv
import os
import shutil
import tempfile
import unittest

from replay_exchange.core.entry_types import EntryType
from replay_exchange.core.errors import MalformedInputError
from replay_exchange.ingest.csv_reader import (
    all_timestamps,
    load_orders,
    parse_order,
    parse_row,
    read_csv,
    strings_to_order,
    tokenise,
)

GOOD_LINES = [
    "2020/03/17 17:01:24.884492,ETH/BTC,bid,0.02187308,7.44564869",
    "2020/03/17 17:01:24.884492,ETH/BTC,ask,0.02189093,7.2",
    "2020/03/17 17:01:30.099017,DOGE/BTC,ask,3.1e-07,100",
]


class TestCsvReader(unittest.TestCase):
    """Test cases for CSV ingestion."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def write_file(self, name, lines):
        path = os.path.join(self.tmp_dir, name)
        with open(path, "w") as f:
            f.write("\n".join(lines) + "\n")
        return path

    def test_tokenise(self):
        """Test splitting drops empty tokens."""
        self.assertEqual(tokenise("ETH/BTC,200,0.5"), ["ETH/BTC", "200", "0.5"])
        self.assertEqual(tokenise(",a,,b,"), ["a", "b"])
        self.assertEqual(tokenise("ETH/BTC", "/"), ["ETH", "BTC"])

    def test_strings_to_order(self):
        """Test a five field record becomes an order."""
        order = strings_to_order(GOOD_LINES[0].split(","))

        self.assertEqual(order.timestamp, "2020/03/17 17:01:24.884492")
        self.assertEqual(order.product, "ETH/BTC")
        self.assertEqual(order.side, EntryType.BID)
        self.assertEqual(order.price, 0.02187308)
        self.assertEqual(order.amount, 7.44564869)
        self.assertIsNone(order.owner)

    def test_unrecognised_side_is_unknown(self):
        """Test a side other than bid/ask is kept as unknown."""
        order = strings_to_order(["2020/03/17 17:01:24", "ETH/BTC", "offer", "1", "1"])
        self.assertEqual(order.side, EntryType.UNKNOWN)

    def test_wrong_field_count(self):
        """Test records without five fields are rejected."""
        with self.assertRaises(MalformedInputError):
            strings_to_order(["2020/03/17 17:01:24", "ETH/BTC", "bid", "1"])

    def test_bad_number(self):
        """Test non-numeric price or amount is rejected."""
        with self.assertRaises(MalformedInputError):
            parse_order("abc", "1", "2020/03/17 17:01:24", "ETH/BTC", EntryType.BID)

    def test_bad_timestamp(self):
        """Test non-canonical timestamps are rejected."""
        for timestamp in ("2020-03-17 17:01:24", "2020/3/17 17:01:24", "17:01:24"):
            with self.assertRaises(MalformedInputError):
                parse_order("1", "1", timestamp, "ETH/BTC", EntryType.BID)

    def test_read_csv_skips_bad_lines(self):
        """Test malformed lines are skipped and good ones kept."""
        path = self.write_file("data.csv", [
            GOOD_LINES[0],
            "not,a,valid,line",
            "2020/03/17 17:01:24.884492,ETH/BTC,bid,nan?,1",
            "",
            GOOD_LINES[1],
        ])

        orders = read_csv(path)

        self.assertEqual(len(orders), 2)
        self.assertEqual([o.side for o in orders], [EntryType.BID, EntryType.ASK])

    def test_read_csv_skips_undecodable_line(self):
        """Test a line with invalid UTF-8 bytes is skipped, not fatal."""
        path = os.path.join(self.tmp_dir, "binary.csv")
        with open(path, "wb") as f:
            f.write(GOOD_LINES[0].encode() + b"\n")
            f.write(b"2020/03/17 17:01:24.884492,ETH/BTC,\xff\xfe,0.02,1.0\n")

        orders = read_csv(path)

        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0].side, EntryType.BID)

    def test_read_csv_skips_oversized_field(self):
        """Test a field over the csv size limit is skipped."""
        path = self.write_file("huge.csv", [
            '2020/03/17 17:01:24.884492,ETH/BTC,bid,0.02,"' + "1" * (csv.field_size_limit() + 1) + '"',
            GOOD_LINES[1],
        ])

        orders = read_csv(path)

        self.assertEqual([o.side for o in orders], [EntryType.ASK])

    def test_read_csv_trailing_separator(self):
        """Test empty fields such as a trailing comma are ignored."""
        path = self.write_file("trailing.csv", [GOOD_LINES[0] + ","])

        orders = read_csv(path)

        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0].amount, 7.44564869)

    def test_parse_row(self):
        """Test row splitting drops empty fields and skips blank lines."""
        self.assertEqual(parse_row("a,,b,\r\n"), ["a", "b"])
        self.assertEqual(parse_row("\n"), [])

    def test_read_csv_missing_file(self):
        """Test a missing file yields no orders."""
        self.assertEqual(read_csv(os.path.join(self.tmp_dir, "missing.csv")), [])

    def test_load_orders_and_timestamps(self):
        """Test several sources are combined and timestamps de-duplicated."""
        first = self.write_file("a.csv", GOOD_LINES[:2])
        second = self.write_file("b.csv", [GOOD_LINES[2], GOOD_LINES[0]])

        self.assertEqual(len(load_orders([first, second])), 4)
        self.assertEqual(all_timestamps([second, first]), [
            "2020/03/17 17:01:24.884492",
            "2020/03/17 17:01:30.099017",
        ])


if __name__ == '__main__':
    unittest.main()
