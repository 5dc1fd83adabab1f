"""
Catalog of loaded sprite sheet definitions.
"""

import logging
from pathlib import Path
from typing import Any, Iterator

import orjson

from ..errors import ValidationError
from .models import FrameSize, SpriteSheetDefinition
from .validation import SpriteSheetSchema

COMMON_FRAME_SIZES = (16, 32, 48, 64, 128)


def detect_frame_size(image_width: int, image_height: int) -> FrameSize | None:
    """Guess a square frame size for an atlas from its pixel dimensions.

    The smallest common size dividing both dimensions wins; None when no
    common size fits.
    """
    for size in COMMON_FRAME_SIZES:
        if image_width % size == 0 and image_height % size == 0:
            return FrameSize(width=size, height=size)
    return None


class SpriteSheetCatalog:
    """Registry of sprite sheet definitions keyed by id.

    Loading is all-or-nothing; reloading an id replaces the sheet wholesale.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.sheets: dict[str, SpriteSheetDefinition] = {}

    def load(self, definition: dict[str, Any] | SpriteSheetDefinition) -> SpriteSheetDefinition:
        """Validate and register a sprite sheet.

        Raises:
            ValidationError: If the document violates the schema
        """
        if isinstance(definition, SpriteSheetDefinition):
            sheet = definition
        else:
            source = definition.get("id") if isinstance(definition, dict) else None
            errors = SpriteSheetSchema.validate_sprite_sheet(definition)
            if errors:
                self.logger.error(f"Rejected sprite sheet {source!r}: {len(errors)} error(s)")
                raise ValidationError(errors, source=str(source) if source else None)
            sheet = SpriteSheetDefinition.from_dict(definition)

        if sheet.id in self.sheets:
            self.logger.info(f"Reloading sprite sheet '{sheet.id}'")
        self.sheets[sheet.id] = sheet
        self.logger.info(f"Loaded sprite sheet '{sheet.id}' ({len(sheet.animations)} animations)")
        return sheet

    def load_file(self, path: str | Path) -> SpriteSheetDefinition:
        """Parse a sprite sheet JSON file and register it.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the JSON is unparsable or invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Sprite sheet file not found: {path}")

        self.logger.debug(f"Reading sprite sheet from: {path}")
        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ValidationError([f"Failed to parse JSON: {e}"], source=str(path)) from e
        return self.load(data)

    def unload(self, sheet_id: str) -> bool:
        if self.sheets.pop(sheet_id, None) is None:
            return False
        self.logger.info(f"Unloaded sprite sheet '{sheet_id}'")
        return True

    def get(self, sheet_id: str) -> SpriteSheetDefinition | None:
        return self.sheets.get(sheet_id)

    def __contains__(self, sheet_id: object) -> bool:
        return sheet_id in self.sheets

    def __len__(self) -> int:
        return len(self.sheets)

    def __iter__(self) -> Iterator[SpriteSheetDefinition]:
        return iter(self.sheets.values())
