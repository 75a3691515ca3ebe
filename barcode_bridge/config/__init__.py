"""
Configuration management for barcode-bridge.
"""

from barcode_bridge.config.logging import configure_logging
from barcode_bridge.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging"]
