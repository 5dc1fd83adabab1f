"""
Shared typed access to a QSettings store for settings subsystems.
"""

from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings


class SettingsSection:
    """Base for settings subsystems sharing one QSettings store.

    QSettings hands back strings from INI files and native types from the
    platform store, so every getter normalizes the raw value.
    """

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _get_str(self, key: str, default: str = "") -> str:
        value = self.settings.value(key, default)
        return str(value) if value is not None else default

    def _get_bool(self, key: str, default: bool = False) -> bool:
        value = self.settings.value(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    def _get_int(self, key: str, default: int = 0) -> int:
        value = self.settings.value(key, default)
        try:
            return int(cast(str | int, value)) if value is not None else default
        except (ValueError, TypeError):
            return default

    def _get_float(self, key: str, default: float = 0.0) -> float:
        value = self.settings.value(key, default)
        try:
            return float(cast(str | float, value)) if value is not None else default
        except (ValueError, TypeError):
            return default

    def _store(self, key: str, value: Any) -> None:
        """Write a value and flush it to storage."""
        self.settings.setValue(key, value)
        self.settings.sync()
