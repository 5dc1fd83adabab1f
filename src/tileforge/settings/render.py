"""
Rendering and animation settings for tileforge.
"""

import logging

from .base import SettingsSection
from .types import EdgeMode

logger = logging.getLogger(__name__)

VALID_TILE_SIZES = (16, 32, 48)


class RenderSettings(SettingsSection):
    """Manages autotiling, compositing and animation settings."""

    @property
    def edge_mode(self) -> EdgeMode:
        """How out-of-bounds neighbors are treated by the autotiler."""
        value = self._get_str("render/edge_mode", EdgeMode.SAME.value)
        try:
            return EdgeMode(value)
        except ValueError:
            logger.warning(f"Invalid edge mode in settings: {value}, using 'same'")
            return EdgeMode.SAME

    @edge_mode.setter
    def edge_mode(self, value: EdgeMode | str) -> None:
        """Set edge mode ("same" or "different")."""
        mode = EdgeMode(value)
        self._store("render/edge_mode", mode.value)

    @property
    def run_speed_multiplier(self) -> float:
        """Speed multiplier applied to running animations (0.1-10)."""
        value = self._get_float("render/run_speed_multiplier", 1.5)
        return max(0.1, min(10.0, value))

    @run_speed_multiplier.setter
    def run_speed_multiplier(self, value: float) -> None:
        """Set running animation speed multiplier (0.1-10)."""
        validated = max(0.1, min(10.0, float(value)))
        self._store("render/run_speed_multiplier", validated)

    @property
    def default_tile_size(self) -> int:
        """Destination cell size used when a map does not declare one."""
        value = self._get_int("render/default_tile_size", 32)
        if value not in VALID_TILE_SIZES:
            return 32
        return value

    @default_tile_size.setter
    def default_tile_size(self, value: int) -> None:
        """Set default tile size (16, 32 or 48)."""
        if value in VALID_TILE_SIZES:
            self._store("render/default_tile_size", value)
        else:
            logger.warning(
                f"Invalid tile size: {value}, keeping current: {self.default_tile_size}"
            )

    @property
    def fallback_animation(self) -> str:
        """Animation state used when a requested state is missing."""
        return self._get_str("render/fallback_animation", "idle-down")

    @fallback_animation.setter
    def fallback_animation(self, value: str) -> None:
        """Set fallback animation state name (``<action>-<direction>``)."""
        if "-" not in value:
            logger.warning(
                f"Invalid fallback animation: {value}, keeping current: {self.fallback_animation}"
            )
            return
        self._store("render/fallback_animation", value)
