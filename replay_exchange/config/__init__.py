"""
Configuration module for the replay exchange.

This module provides configuration management and settings
for the replay exchange.
"""

from .settings import Settings, get_settings, reload_settings

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
]
