"""
Tests for the exchange simulation driver.

This module tests order placement against the wallet, clock advancement
with matching, market statistics and tick notifications.
"""

import logging
import os
import shutil
import tempfile
import unittest

from replay_exchange.core.entry_types import EntryType
from replay_exchange.core.errors import EmptyBookError, InsufficientFundsError
from replay_exchange.core.order_book import OrderBook
from replay_exchange.core.wallet import Wallet
from replay_exchange.simulation import ExchangeSimulation

from helpers import T1, T2, PRODUCT, ask, bid

TRADER = "simuser"


class TestExchangeSimulation(unittest.TestCase):
    """Test cases for the simulation driver."""

    def setUp(self):
        """Set up test fixtures."""
        self.book = OrderBook([
            ask(0.02, 5.0, timestamp=T1),
            ask(0.03, 1.0, timestamp=T1),
            ask(0.025, 1.0, timestamp=T2),
            bid(0.019, 3.0, timestamp=T2),
        ])
        self.wallet = Wallet()
        self.wallet.insert_currency("BTC", 10.0)
        self.simulation = ExchangeSimulation(self.book, trader_id=TRADER, wallet=self.wallet)

    def test_starts_at_earliest_time(self):
        """Test the clock starts at the earliest stored timestamp."""
        self.assertEqual(self.simulation.current_time, T1)

    def test_empty_book_rejected(self):
        """Test a simulation cannot start without data."""
        with self.assertRaises(EmptyBookError):
            ExchangeSimulation(OrderBook())

    def test_place_order(self):
        """Test a funded order is stored at the current time for the trader."""
        order = self.simulation.place_order("bid", PRODUCT, 0.021, 2.0)

        self.assertEqual(order.side, EntryType.BID)
        self.assertEqual(order.timestamp, T1)
        self.assertEqual(order.owner, TRADER)
        self.assertEqual(len(self.book), 5)

    def test_place_order_insufficient_funds(self):
        """Test an unfunded order is rejected and not stored."""
        with self.assertRaises(InsufficientFundsError):
            self.simulation.place_order(EntryType.ASK, PRODUCT, 0.02, 1.0)
        with self.assertRaises(InsufficientFundsError):
            self.simulation.place_order(EntryType.BID, PRODUCT, 0.02, 501.0)

        self.assertEqual(len(self.book), 4)

    def test_place_order_bad_side(self):
        """Test only bids and asks can be placed."""
        with self.assertRaises(ValueError):
            self.simulation.place_order("unknown", PRODUCT, 0.02, 1.0)
        with self.assertRaises(ValueError):
            self.simulation.place_order("sideways", PRODUCT, 0.02, 1.0)

    def test_advance_matches_and_updates_wallet(self):
        """Test the trader's fills are applied to the wallet."""
        self.simulation.place_order("bid", PRODUCT, 0.021, 2.0)

        trades = self.simulation.advance()

        self.assertEqual(len(trades), 1)
        self.assertEqual(trades[0].side, EntryType.BID_SALE)
        self.assertEqual(trades[0].price, 0.02)
        self.assertEqual(trades[0].amount, 2.0)
        balances = self.wallet.balances()
        self.assertAlmostEqual(balances["BTC"], 9.96)
        self.assertEqual(balances["ETH"], 2.0)

    def test_advance_ignores_dataset_trades_in_wallet(self):
        """Test trades between dataset orders leave the wallet alone."""
        self.book.insert(bid(0.05, 1.0, timestamp=T1))

        trades = self.simulation.advance()

        self.assertEqual(len(trades), 1)
        self.assertIsNone(trades[0].owner)
        self.assertEqual(self.wallet.balances(), {"BTC": 10.0})

    def test_advance_wraps_around(self):
        """Test the clock returns to the start after the last timestamp."""
        self.simulation.advance()
        self.assertEqual(self.simulation.current_time, T2)

        self.simulation.advance()
        self.assertEqual(self.simulation.current_time, T1)

    def test_market_stats(self):
        """Test ask statistics at the current time."""
        stats = self.simulation.market_stats()

        self.assertEqual(stats, [{
            "product": PRODUCT,
            "asks_seen": 2,
            "max_ask": 0.03,
            "min_ask": 0.02,
        }])

    def test_market_stats_selected_products(self):
        """Test products without asks report no prices."""
        simulation = ExchangeSimulation(self.book, products=["DOGE/BTC", PRODUCT])

        stats = simulation.market_stats()

        self.assertEqual([s["product"] for s in stats], ["DOGE/BTC", PRODUCT])
        self.assertEqual(stats[0]["asks_seen"], 0)
        self.assertIsNone(stats[0]["max_ask"])
        self.assertIsNone(stats[0]["min_ask"])

    def test_tick_callbacks(self):
        """Test tick callbacks receive the times and trades of each advance."""
        ticks = []
        self.simulation.add_tick_callback(lambda previous, current, trades: ticks.append((previous, current, trades)))
        self.simulation.place_order("bid", PRODUCT, 0.021, 1.0)

        trades = self.simulation.advance()

        self.assertEqual(ticks, [(T1, T2, trades)])

    def test_audit_trail(self):
        """Test placed orders and the trader's trades reach the audit log."""
        audit_logger = logging.getLogger("test.audit")
        simulation = ExchangeSimulation(self.book, trader_id=TRADER, wallet=self.wallet, audit_logger=audit_logger)

        with self.assertLogs(audit_logger, level="INFO") as captured:
            simulation.place_order("bid", PRODUCT, 0.021, 1.0)
            simulation.advance()

        self.assertTrue(captured.output[0].endswith(f"OWNER:{TRADER}"))
        self.assertIn("ORDER_INSERT", captured.output[0])
        self.assertIn("TRADE_EXECUTE", captured.output[1])


class TestSimulationFromFiles(unittest.TestCase):
    """Test cases for building a simulation from CSV files."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "data.csv")
        with open(self.path, "w") as f:
            f.write(f"{T2},{PRODUCT},ask,0.025,1.0\n")
            f.write(f"{T1},{PRODUCT},bid,0.02,2.0\n")
            f.write("garbage\n")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_from_files(self):
        """Test data files and opening balances are loaded."""
        simulation = ExchangeSimulation.from_files([self.path], trader_id=TRADER, initial_balances={"BTC": 1.5})

        self.assertEqual(len(simulation.order_book), 2)
        self.assertEqual(simulation.current_time, T1)
        self.assertEqual(simulation.aggregator.timestamps, [T1, T2])
        self.assertEqual(simulation.wallet.balances(), {"BTC": 1.5})


if __name__ == '__main__':
    unittest.main()
