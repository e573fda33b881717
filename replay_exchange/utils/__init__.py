"""
Utility modules for the replay exchange.

This module provides logging and performance monitoring helpers.
"""

from .logger import setup_logging, get_logger, ExchangeLogger, create_audit_logger
from .performance import PerformanceMonitor, measure_latency, get_performance_monitor

__all__ = [
    "setup_logging",
    "get_logger",
    "ExchangeLogger",
    "create_audit_logger",
    "PerformanceMonitor",
    "measure_latency",
    "get_performance_monitor",
]
