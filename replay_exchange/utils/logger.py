"""
Logging configuration for the replay exchange.

This module provides logging setup with console and rotating file
handlers, structured event logging for the simulation and a separate
audit trail for the simulated trader's orders and trades.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Set up logging configuration for the replay exchange.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        _ensure_log_dir(log_file)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger('websockets').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized - Level: {level}, File: {log_file or 'Console only'}")


def _ensure_log_dir(log_file: str) -> None:
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class ExchangeLogger:
    """
    Structured logger for simulation events.

    Records are pipe separated so they can be grepped or split easily.
    """

    def __init__(self, name: str = "replay_exchange"):
        self.logger = logging.getLogger(name)
        self.order_logger = logging.getLogger(f"{name}.orders")
        self.trade_logger = logging.getLogger(f"{name}.trades")
        self.clock_logger = logging.getLogger(f"{name}.clock")

    def log_order_insert(self, timestamp: str, product: str, side: str, amount: float, price: float) -> None:
        """Log an order placed by the simulated trader."""
        self.order_logger.info(f"ORDER_INSERT|{timestamp}|{product}|{side}|{amount}|{price}")

    def log_trade_execution(self, timestamp: str, product: str, price: float, amount: float, side: str) -> None:
        """Log trade execution."""
        self.trade_logger.info(f"TRADE_EXEC|{timestamp}|{product}|{price}|{amount}|{side}")

    def log_clock_tick(self, previous: str, current: str, trade_count: int) -> None:
        """Log the clock moving to the next timestamp."""
        self.clock_logger.info(f"CLOCK_TICK|{previous}|{current}|{trade_count}")

    def log_system_event(self, event: str, details: str = "") -> None:
        """Log system event."""
        self.logger.info(f"SYSTEM_EVENT|{event}|{details}")

    def log_error(self, component: str, error: str) -> None:
        """Log error."""
        self.logger.error(f"ERROR|{component}|{error}")


def create_audit_logger(log_file: str = "logs/audit.log") -> logging.Logger:
    """
    Create a dedicated audit logger for the simulated trader's activity.

    Args:
        log_file: Path to audit log file

    Returns:
        Audit logger instance
    """
    _ensure_log_dir(log_file)

    audit_logger = logging.getLogger("audit")
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False

    audit_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=50 * 1024 * 1024,  # 50MB
        backupCount=10
    )
    audit_handler.setFormatter(logging.Formatter(
        '%(asctime)s|%(levelname)s|%(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    audit_logger.addHandler(audit_handler)

    return audit_logger


def log_order_audit(audit_logger: logging.Logger, action: str, order_data: dict) -> None:
    """
    Log order action to audit trail.

    Args:
        audit_logger: Audit logger instance
        action: Action performed (INSERT, REJECT)
        order_data: Order data dictionary
    """
    audit_logger.info(
        f"ORDER_{action}|"
        f"TIME:{order_data.get('timestamp', 'N/A')}|"
        f"PRODUCT:{order_data.get('product', 'N/A')}|"
        f"SIDE:{order_data.get('side', 'N/A')}|"
        f"AMOUNT:{order_data.get('amount', 'N/A')}|"
        f"PRICE:{order_data.get('price', 'N/A')}|"
        f"OWNER:{order_data.get('owner') or 'dataset'}"
    )


def log_trade_audit(audit_logger: logging.Logger, trade_data: dict) -> None:
    """
    Log trade execution to audit trail.

    Args:
        audit_logger: Audit logger instance
        trade_data: Trade data dictionary
    """
    audit_logger.info(
        f"TRADE_EXECUTE|"
        f"TIME:{trade_data.get('timestamp', 'N/A')}|"
        f"PRODUCT:{trade_data.get('product', 'N/A')}|"
        f"SIDE:{trade_data.get('side', 'N/A')}|"
        f"PRICE:{trade_data.get('price', 'N/A')}|"
        f"AMOUNT:{trade_data.get('amount', 'N/A')}"
    )
