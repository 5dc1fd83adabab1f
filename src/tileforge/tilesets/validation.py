"""Schema checks for tileset JSON documents.

Validation collects every problem it can find instead of stopping at the
first one, so the caller can report them all at once.
"""

import re
from typing import Any, cast

from .models import VALID_TILE_SIZES, AutotileType, TileType

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_int_key(key: Any) -> bool:
    try:
        int(key)
    except (TypeError, ValueError):
        return False
    return True


class TilesetSchema:
    """Validation rules for tileset JSON structure."""

    REQUIRED_ROOT_FIELDS = {"id", "name", "image", "tileSize", "tiles"}
    VALID_TILE_TYPES = {t.value for t in TileType}
    VALID_AUTOTILE_TYPES = {t.value for t in AutotileType}

    @staticmethod
    def validate_root(data: dict[str, Any]) -> list[str]:
        """Validate root-level fields.

        Args:
            data: Parsed JSON data

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        missing = TilesetSchema.REQUIRED_ROOT_FIELDS - data.keys()
        if missing:
            errors.append(f"Missing required fields: {sorted(missing)}")

        if "id" in data and (not isinstance(data["id"], str) or not data["id"]):
            errors.append("'id' must be a non-empty string")
        if "name" in data and not isinstance(data["name"], str):
            errors.append("'name' must be a string")
        if "image" in data and (not isinstance(data["image"], str) or not data["image"]):
            errors.append("'image' must be a non-empty string")

        tile_size = data.get("tileSize")
        if tile_size is not None:
            if not isinstance(tile_size, dict):
                errors.append("'tileSize' must be an object")
            else:
                size = cast(dict[str, Any], tile_size)
                for axis in ("width", "height"):
                    value = size.get(axis)
                    if value not in VALID_TILE_SIZES or not _is_int(value):
                        errors.append(
                            f"'tileSize.{axis}' must be one of {list(VALID_TILE_SIZES)}, got {value!r}"
                        )

        for name in ("margin", "spacing"):
            value = data.get(name, 0)
            if not _is_int(value) or value < 0:
                errors.append(f"'{name}' must be a non-negative integer, got {value!r}")

        columns = data.get("columns")
        if columns is not None and (not _is_int(columns) or columns <= 0):
            errors.append(f"'columns' must be a positive integer, got {columns!r}")

        first_gid = data.get("firstGid", 0)
        if not _is_int(first_gid) or first_gid < 0:
            errors.append(f"'firstGid' must be a non-negative integer, got {first_gid!r}")

        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(
            isinstance(t, str) for t in cast(list[Any], tags)
        ):
            errors.append("'tags' must be an array of strings")

        return errors

    @staticmethod
    def validate_tile(key: str, tile: Any) -> list[str]:
        """Validate a single tile entry stored under ``key``."""
        errors: list[str] = []
        if not _is_int_key(key) or int(key) < 0:
            errors.append(f"Tile key {key!r} must be a non-negative integer")
            return errors
        if not isinstance(tile, dict):
            errors.append(f"Tile {key} must be an object")
            return errors

        tile_data = cast(dict[str, Any], tile)
        tile_id = tile_data.get("id", int(key))
        if not _is_int_key(tile_id) or int(tile_id) != int(key):
            errors.append(f"Tile {key}: 'id' {tile_id!r} does not match its key")

        tile_type = tile_data.get("type", TileType.PASSABLE.value)
        if tile_type not in TilesetSchema.VALID_TILE_TYPES:
            errors.append(
                f"Tile {key}: 'type' must be one of {sorted(TilesetSchema.VALID_TILE_TYPES)}, got {tile_type!r}"
            )

        terrain = tile_data.get("terrain")
        if terrain is not None and not isinstance(terrain, str):
            errors.append(f"Tile {key}: 'terrain' must be a string")

        properties = tile_data.get("properties")
        if properties is not None and not isinstance(properties, dict):
            errors.append(f"Tile {key}: 'properties' must be an object")

        animation = tile_data.get("animation")
        if animation is not None:
            if not isinstance(animation, dict):
                errors.append(f"Tile {key}: 'animation' must be an object")
            else:
                anim = cast(dict[str, Any], animation)
                frames = anim.get("frames")
                if not isinstance(frames, list) or not frames:
                    errors.append(f"Tile {key}: 'animation.frames' must be a non-empty array")
                elif not all(_is_int(f) and f >= 0 for f in cast(list[Any], frames)):
                    errors.append(f"Tile {key}: 'animation.frames' must hold tile ids")
                duration = anim.get("duration")
                if not isinstance(duration, (int, float)) or isinstance(duration, bool) or duration <= 0:
                    errors.append(f"Tile {key}: 'animation.duration' must be a positive number")
                loop = anim.get("loop", True)
                if not isinstance(loop, bool):
                    errors.append(f"Tile {key}: 'animation.loop' must be a boolean")

        return errors

    @staticmethod
    def validate_terrain(index: int, terrain: Any) -> list[str]:
        """Validate a terrain entry."""
        errors: list[str] = []
        if not isinstance(terrain, dict):
            return [f"Terrain {index} must be an object"]

        terrain_data = cast(dict[str, Any], terrain)
        name = terrain_data.get("name")
        if not isinstance(name, str) or not name:
            errors.append(f"Terrain {index}: 'name' must be a non-empty string")

        color = terrain_data.get("color", "#000000")
        if not isinstance(color, str) or not COLOR_PATTERN.match(color):
            errors.append(f"Terrain {index}: 'color' must look like #RRGGBB, got {color!r}")

        transitions = terrain_data.get("transitions", {})
        if not isinstance(transitions, dict):
            errors.append(f"Terrain {index}: 'transitions' must be an object")
        else:
            for other, tiles in cast(dict[str, Any], transitions).items():
                if not isinstance(tiles, list) or not all(
                    _is_int(t) and t >= 0 for t in cast(list[Any], tiles)
                ):
                    errors.append(
                        f"Terrain {index}: transition to '{other}' must be an array of tile ids"
                    )
        return errors

    @staticmethod
    def validate_autotile(name: str, spec: Any) -> list[str]:
        """Validate one autotile spec."""
        errors: list[str] = []
        if not isinstance(spec, dict):
            return [f"Autotile '{name}' must be an object"]

        spec_data = cast(dict[str, Any], spec)
        autotile_type = spec_data.get("type")
        if autotile_type not in TilesetSchema.VALID_AUTOTILE_TYPES:
            errors.append(
                f"Autotile '{name}': 'type' must be one of {sorted(TilesetSchema.VALID_AUTOTILE_TYPES)}, got {autotile_type!r}"
            )

        base_tile = spec_data.get("baseTile")
        if not _is_int(base_tile) or base_tile < 0:
            errors.append(f"Autotile '{name}': 'baseTile' must be a non-negative integer")

        rules = spec_data.get("rules")
        if rules is not None:
            if not isinstance(rules, dict):
                errors.append(f"Autotile '{name}': 'rules' must be an object")
            else:
                for mask, offset in cast(dict[str, Any], rules).items():
                    if not _is_int_key(mask) or not 0 <= int(mask) <= 255:
                        errors.append(f"Autotile '{name}': rule mask {mask!r} must be 0-255")
                    if not _is_int(offset):
                        errors.append(f"Autotile '{name}': rule {mask!r} offset must be an integer")
        return errors

    @staticmethod
    def validate_tileset(data: Any) -> list[str]:
        """Validate a complete tileset document.

        Args:
            data: Parsed JSON data

        Returns:
            List of all validation errors (empty if valid)
        """
        if not isinstance(data, dict):
            return ["Tileset must be a JSON object"]

        doc = cast(dict[str, Any], data)
        errors = TilesetSchema.validate_root(doc)

        tiles = doc.get("tiles")
        tile_ids: set[int] = set()
        if tiles is not None:
            if not isinstance(tiles, dict):
                errors.append("'tiles' must be an object keyed by tile id")
            else:
                for key, tile in cast(dict[str, Any], tiles).items():
                    tile_errors = TilesetSchema.validate_tile(str(key), tile)
                    errors.extend(tile_errors)
                    if _is_int_key(key):
                        tile_ids.add(int(key))

                # Animation frames must point at tiles of this tileset
                for key, tile in cast(dict[str, Any], tiles).items():
                    if not isinstance(tile, dict):
                        continue
                    animation = cast(dict[str, Any], tile).get("animation")
                    if not isinstance(animation, dict):
                        continue
                    frames = cast(dict[str, Any], animation).get("frames")
                    if not isinstance(frames, list):
                        continue
                    unknown = [f for f in cast(list[Any], frames) if _is_int(f) and f not in tile_ids]
                    if unknown:
                        errors.append(f"Tile {key}: animation frames {unknown} are not defined")

        terrains = doc.get("terrains", [])
        terrain_names: set[str] = set()
        if not isinstance(terrains, list):
            errors.append("'terrains' must be an array")
        else:
            for idx, terrain in enumerate(cast(list[Any], terrains)):
                errors.extend(TilesetSchema.validate_terrain(idx, terrain))
                if isinstance(terrain, dict):
                    name = cast(dict[str, Any], terrain).get("name")
                    if isinstance(name, str) and name:
                        if name in terrain_names:
                            errors.append(f"Terrain {idx}: duplicate name '{name}'")
                        terrain_names.add(name)

        autotiles = doc.get("autotiles", {})
        if not isinstance(autotiles, dict):
            errors.append("'autotiles' must be an object")
        else:
            for name, spec in cast(dict[str, Any], autotiles).items():
                errors.extend(TilesetSchema.validate_autotile(str(name), spec))

        return errors
