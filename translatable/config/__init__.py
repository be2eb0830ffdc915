"""
Configuration package for translatable records.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "settings",
    "get_settings",
    "reload_settings",
]
