"""Loading maps from JSON files.

Handles deserialization of project map JSON into GameMap instances.
"""

import logging
from pathlib import Path
from typing import Any, cast

import orjson

from .models import GameMap, LayerType


class MapSchema:
    """Structural checks for map JSON."""

    VALID_LAYER_TYPES = {t.value for t in LayerType}

    @staticmethod
    def validate_map(data: Any) -> list[str]:
        """Validate a map document.

        Args:
            data: Parsed JSON data

        Returns:
            List of error messages (empty if valid)
        """
        if not isinstance(data, dict):
            return ["Map must be a JSON object"]

        errors: list[str] = []
        doc = cast(dict[str, Any], data)
        layers = doc.get("layers")
        if not isinstance(layers, list):
            return errors + ["'layers' must be an array"]

        for idx, layer in enumerate(cast(list[Any], layers)):
            if not isinstance(layer, dict):
                errors.append(f"Layer {idx} must be an object")
                continue
            layer_data = cast(dict[str, Any], layer)
            layer_type = layer_data.get("type", "tile")
            if layer_type not in MapSchema.VALID_LAYER_TYPES:
                errors.append(f"Layer {idx}: unknown type {layer_type!r}")
            tiles = layer_data.get("tiles", [])
            if not isinstance(tiles, list):
                errors.append(f"Layer {idx}: 'tiles' must be an array")
                continue
            for t_idx, tile in enumerate(cast(list[Any], tiles)):
                if not isinstance(tile, dict) or not {"x", "y", "tileId"} <= cast(dict[str, Any], tile).keys():
                    errors.append(f"Layer {idx} tile {t_idx}: needs x, y and tileId")
        return errors


class MapLoader:
    """Loads maps from JSON files."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_from_json(self, path: Path) -> GameMap:
        """Load a map from JSON file.

        Args:
            path: Path to JSON file

        Returns:
            Loaded GameMap instance

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If JSON is invalid or doesn't match schema
        """
        if not path.exists():
            raise FileNotFoundError(f"Map file not found: {path}")

        self.logger.info(f"Loading map from: {path}")

        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON from {path}: {e}") from e

        return self.load_from_dict(data, source=str(path))

    def load_from_dict(self, data: Any, source: str = "<dict>") -> GameMap:
        """Validate and convert an already parsed map document."""
        errors = MapSchema.validate_map(data)
        if errors:
            error_msg = "\n  - ".join(errors)
            raise ValueError(f"Invalid map JSON in {source}:\n  - {error_msg}")

        game_map = GameMap.from_dict(data)
        self.logger.info(
            f"Loaded map '{game_map.id}' with {len(game_map.layers)} layer(s)"
        )
        return game_map
