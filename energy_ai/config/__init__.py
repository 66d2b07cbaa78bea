"""
Configuration for the energy AI engine.
"""

from energy_ai.config.settings import Settings, settings, get_settings
from energy_ai.config.log_config import configure_logging

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "configure_logging",
]
