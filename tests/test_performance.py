"""
Tests for performance monitoring and its configuration switch.
"""

import os
import unittest
from unittest import mock

from replay_exchange.api.rest_api import create_app
from replay_exchange.config.settings import reload_settings
from replay_exchange.core.order_book import OrderBook
from replay_exchange.simulation import ExchangeSimulation
from replay_exchange.utils.performance import PerformanceMonitor, get_performance_monitor, measure_latency

from helpers import T1, ask, bid


class TestPerformanceMonitor(unittest.TestCase):
    """Test cases for the performance monitor."""

    def test_measure_latency_records(self):
        """Test an enabled monitor records latency and counts calls."""
        monitor = PerformanceMonitor()

        with measure_latency(monitor, "match_all"):
            pass
        with measure_latency(monitor, "match_all"):
            pass

        summary = monitor.get_summary()
        self.assertEqual(summary["counters"], {"match_all": 2})
        self.assertEqual(summary["metrics"]["match_all_latency_ms"]["count"], 2)

    def test_measure_latency_disabled(self):
        """Test a disabled monitor records nothing."""
        monitor = PerformanceMonitor(enabled=False)

        with measure_latency(monitor, "match_all"):
            pass

        self.assertEqual(monitor.get_summary()["counters"], {})
        self.assertEqual(monitor.get_metric_stats("match_all_latency_ms")["count"], 0)

    def test_metric_samples_are_capped(self):
        monitor = PerformanceMonitor(max_samples=3)

        for value in range(5):
            monitor.record_metric("latency", float(value))

        self.assertEqual(monitor.get_metric_stats("latency")["min"], 2.0)
        self.assertEqual(monitor.get_metric_stats("latency")["count"], 3)


class TestPerformanceSetting(unittest.TestCase):
    """Test cases for the ENABLE_PERFORMANCE_MONITORING setting."""

    def setUp(self):
        """Set up test fixtures."""
        self.monitor = get_performance_monitor()
        self.monitor.reset()
        self.addCleanup(self.restore)
        book = OrderBook([ask(0.02, 1.0, timestamp=T1), bid(0.03, 1.0, timestamp=T1)])
        self.simulation = ExchangeSimulation(book)

    def restore(self):
        reload_settings()
        self.monitor.enabled = True
        self.monitor.reset()

    def test_disabled_by_setting(self):
        """Test turning the setting off stops measurement and hides the summary."""
        with mock.patch.dict(os.environ, {"ENABLE_PERFORMANCE_MONITORING": "false"}):
            reload_settings()
            client = create_app(self.simulation).test_client()

        client.post('/time/next')
        data = client.get('/statistics').get_json()

        self.assertIsNone(data['performance'])
        self.assertEqual(data['engine']['total_trades_executed'], 1)
        self.assertEqual(self.monitor.get_summary()["counters"], {})

    def test_enabled_by_setting(self):
        """Test the default setting measures clock advances."""
        with mock.patch.dict(os.environ, {"ENABLE_PERFORMANCE_MONITORING": "true"}):
            reload_settings()
            client = create_app(self.simulation).test_client()

        client.post('/time/next')
        data = client.get('/statistics').get_json()

        self.assertEqual(data['performance']['counters']['match_all'], 1)


if __name__ == '__main__':
    unittest.main()
