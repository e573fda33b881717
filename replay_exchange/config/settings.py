"""
Configuration settings for the replay exchange.

This module provides centralized configuration management
with environment variable support and validation.
"""

import os
from typing import Optional, Dict, Any, List


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_balances(value: str) -> Dict[str, float]:
    """
    Parse opening balances written as "BTC:10,USDT:500".

    Raises:
        ValueError: If an item is not CURRENCY:AMOUNT
    """
    balances: Dict[str, float] = {}
    for item in _split_list(value):
        currency, sep, amount = item.partition(":")
        if not sep or not currency.strip():
            raise ValueError(f"Invalid balance entry: {item}. Expected CURRENCY:AMOUNT")
        balances[currency.strip()] = float(amount)
    return balances


class Settings:
    """
    Configuration settings for the replay exchange.

    Supports environment variables and provides sensible defaults.
    """

    def __init__(self):
        """Initialize settings from environment variables."""
        # Server configuration
        self.rest_host = os.getenv("REST_HOST", "0.0.0.0")
        self.rest_port = int(os.getenv("REST_PORT", "5000"))
        self.websocket_host = os.getenv("WEBSOCKET_HOST", "localhost")
        self.websocket_port = int(os.getenv("WEBSOCKET_PORT", "8765"))

        # Logging configuration
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_file = os.getenv("LOG_FILE", "logs/replay_exchange.log")
        self.audit_log_file = os.getenv("AUDIT_LOG_FILE", "logs/audit.log")

        # Replay data
        self.data_files = _split_list(os.getenv("DATA_FILES", "20200317.csv,20200601.csv"))
        self.products: Optional[List[str]] = _split_list(os.getenv("PRODUCTS", "")) or None

        # Simulated trader
        self.trader_id = os.getenv("TRADER_ID", "simuser")
        self.initial_balances = parse_balances(os.getenv("INITIAL_BALANCES", "BTC:10"))

        # Charting
        self.max_candles = int(os.getenv("MAX_CANDLES", "50"))

        # Performance monitoring
        self.enable_performance_monitoring = os.getenv("ENABLE_PERFORMANCE_MONITORING", "true").lower() == "true"

        # Security
        self.enable_cors = os.getenv("ENABLE_CORS", "true").lower() == "true"
        self.cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")

        # Debug mode
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            "rest_host": self.rest_host,
            "rest_port": self.rest_port,
            "websocket_host": self.websocket_host,
            "websocket_port": self.websocket_port,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "audit_log_file": self.audit_log_file,
            "data_files": self.data_files,
            "products": self.products,
            "trader_id": self.trader_id,
            "initial_balances": self.initial_balances,
            "max_candles": self.max_candles,
            "enable_performance_monitoring": self.enable_performance_monitoring,
            "enable_cors": self.enable_cors,
            "cors_origins": self.cors_origins,
            "debug": self.debug,
        }

    def validate(self) -> None:
        """Validate configuration settings."""
        errors = []

        if not (1 <= self.rest_port <= 65535):
            errors.append(f"Invalid REST port: {self.rest_port}")

        if not (1 <= self.websocket_port <= 65535):
            errors.append(f"Invalid WebSocket port: {self.websocket_port}")

        if not self.data_files:
            errors.append("At least one data file must be configured")

        if not self.trader_id:
            errors.append("Trader id cannot be empty")

        for currency, amount in self.initial_balances.items():
            if amount < 0:
                errors.append(f"Initial balance for {currency} cannot be negative: {amount}")

        if self.max_candles <= 0:
            errors.append(f"Max candles must be positive: {self.max_candles}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.validate()
    return _settings


def reload_settings() -> Settings:
    """
    Reload settings from environment variables.

    Returns:
        New settings instance
    """
    global _settings
    _settings = Settings()
    _settings.validate()
    return _settings
