"""
Settings validation system for tileforge.
"""

import logging
from typing import List, TYPE_CHECKING

from .logging import VALID_LEVELS
from .types import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []

        raw_edge_mode = str(self.settings.settings.value("render/edge_mode", "same"))
        if raw_edge_mode not in ("same", "different"):
            errors.append(f"Unknown edge mode: {raw_edge_mode}")

        fallback = self.settings.render.fallback_animation
        if "-" not in fallback:
            errors.append(f"Fallback animation must look like 'action-direction': {fallback}")

        level = self.settings.logging.console_log_level.upper()
        if level not in VALID_LEVELS:
            warnings.append(f"Unknown console log level: {level}")

        if self.settings.logging.file_logging:
            log_dir = self.settings.logging.log_file_absolute_path.parent
            if log_dir.exists() and not log_dir.is_dir():
                errors.append(f"Log directory is not a directory: {log_dir}")

        return ValidationResult(
            is_valid=len(errors) == 0, errors=errors, warnings=warnings
        )
