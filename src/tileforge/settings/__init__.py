"""
Settings package for tileforge.

This package provides a modular, type-safe configuration management system
using Qt's QSettings for cross-platform storage.

Usage:
    from tileforge.settings import AppSettings, ValidationResult

    settings = AppSettings()
    result = settings.validate()
"""

from .core import AppSettings
from .types import ConfigVersion, ConfigError, EdgeMode, ValidationResult
from .render import RenderSettings
from .logging import LoggingSettings

__all__ = [
    "AppSettings",
    "ConfigVersion",
    "ConfigError",
    "EdgeMode",
    "ValidationResult",
    "RenderSettings",
    "LoggingSettings",
]
