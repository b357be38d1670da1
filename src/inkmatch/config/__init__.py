"""
Configuration Module

Modules:
- settings.py: Settings model and layered loading
- logging.py: structlog configuration
"""

from .logging import configure_logging, get_logger
from .settings import Settings, get_settings, load_settings, set_settings

__all__ = [
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "load_settings",
    "set_settings",
]
