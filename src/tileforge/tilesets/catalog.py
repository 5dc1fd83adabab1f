"""
Catalog of loaded tileset definitions.

Validates tileset documents and indexes them for O(1) lookups by tileset
id, by map-wide tile id and by terrain name. Registration is
all-or-nothing: a rejected document leaves the catalog untouched.
"""

import logging
from pathlib import Path
from typing import Any, Iterator

import orjson

from ..errors import ValidationError
from .models import AutotileSpec, Terrain, TileDef, TilesetDefinition
from .validation import TilesetSchema


class TilesetCatalog:
    """Registry of tileset definitions keyed by id.

    Three indices are maintained:
    - tilesets[id] -> TilesetDefinition
    - owners[gid] -> tileset id (map-wide tile id ownership)
    - autotile owners: terrain name -> tileset ids defining an AutotileSpec
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.tilesets: dict[str, TilesetDefinition] = {}
        self._owners: dict[int, str] = {}
        self._load_order: list[str] = []

    # -- loading ---------------------------------------------------------

    def load(self, definition: dict[str, Any] | TilesetDefinition) -> TilesetDefinition:
        """Validate and register a tileset.

        A tileset with an id that is already loaded replaces the old one
        wholesale.

        Args:
            definition: Raw tileset JSON dict or an already built definition

        Returns:
            The registered TilesetDefinition

        Raises:
            ValidationError: If the document violates the schema or its
                tile ids collide with another loaded tileset
        """
        if isinstance(definition, TilesetDefinition):
            tileset = definition
        else:
            source = definition.get("id") if isinstance(definition, dict) else None
            errors = TilesetSchema.validate_tileset(definition)
            if errors:
                self.logger.error(f"Rejected tileset {source!r}: {len(errors)} error(s)")
                raise ValidationError(errors, source=str(source) if source else None)
            tileset = TilesetDefinition.from_dict(definition)

        collisions = self._find_collisions(tileset)
        if collisions:
            shown = ", ".join(f"{gid} (owned by '{owner}')" for gid, owner in collisions[:10])
            raise ValidationError(
                [f"Tile ids already owned by another tileset: {shown}"], source=tileset.id
            )

        # Everything checked: swap in atomically
        if tileset.id in self.tilesets:
            self._drop_index(tileset.id)
            self.logger.info(f"Reloading tileset '{tileset.id}'")
        else:
            self._load_order.append(tileset.id)

        self.tilesets[tileset.id] = tileset
        for gid in tileset.global_ids():
            self._owners[gid] = tileset.id

        self.logger.info(
            f"Loaded tileset '{tileset.id}' ({len(tileset.tiles)} tiles, "
            f"{len(tileset.terrains)} terrains, {len(tileset.autotiles)} autotiles)"
        )
        return tileset

    def load_file(self, path: str | Path) -> TilesetDefinition:
        """Parse a tileset JSON file and register it.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the JSON is unparsable or invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Tileset file not found: {path}")

        self.logger.debug(f"Reading tileset from: {path}")
        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ValidationError([f"Failed to parse JSON: {e}"], source=str(path)) from e
        return self.load(data)

    def unload(self, tileset_id: str) -> bool:
        """Remove a tileset. Returns False if it was not loaded."""
        if tileset_id not in self.tilesets:
            return False
        self._drop_index(tileset_id)
        del self.tilesets[tileset_id]
        self._load_order.remove(tileset_id)
        self.logger.info(f"Unloaded tileset '{tileset_id}'")
        return True

    def _drop_index(self, tileset_id: str) -> None:
        self._owners = {gid: owner for gid, owner in self._owners.items() if owner != tileset_id}

    def _find_collisions(self, tileset: TilesetDefinition) -> list[tuple[int, str]]:
        collisions: list[tuple[int, str]] = []
        for gid in tileset.global_ids():
            owner = self._owners.get(gid)
            if owner is not None and owner != tileset.id:
                collisions.append((gid, owner))
        return collisions

    # -- lookups ---------------------------------------------------------

    def get(self, tileset_id: str) -> TilesetDefinition | None:
        """Return tileset by id if present."""
        return self.tilesets.get(tileset_id)

    def tileset_for(self, tile_id: int) -> TilesetDefinition | None:
        """Return the tileset owning a map-wide tile id, or None.

        None means "skip this tile"; it is never an error.
        """
        owner = self._owners.get(tile_id)
        if owner is None:
            return None
        return self.tilesets.get(owner)

    def tile_def(self, tile_id: int) -> TileDef | None:
        """Return the tile definition for a map-wide tile id, if any."""
        tileset = self.tileset_for(tile_id)
        if tileset is None:
            return None
        return tileset.tile(tileset.to_local(tile_id))

    def terrain(self, tileset_id: str, name: str) -> Terrain | None:
        """Return a terrain of a specific tileset."""
        tileset = self.tilesets.get(tileset_id)
        return tileset.terrain(name) if tileset else None

    def find_terrain(self, name: str) -> tuple[TilesetDefinition, Terrain] | None:
        """Return the first loaded tileset (in load order) defining a terrain."""
        for tileset_id in self._load_order:
            tileset = self.tilesets[tileset_id]
            terrain = tileset.terrain(name)
            if terrain is not None:
                return tileset, terrain
        return None

    def autotile_spec(self, terrain_name: str) -> tuple[TilesetDefinition, AutotileSpec] | None:
        """Return the first loaded tileset (in load order) with an autotile for a terrain."""
        for tileset_id in self._load_order:
            tileset = self.tilesets[tileset_id]
            spec = tileset.autotile(terrain_name)
            if spec is not None:
                return tileset, spec
        return None

    def ids(self) -> list[str]:
        """Tileset ids in load order."""
        return list(self._load_order)

    def __contains__(self, tileset_id: object) -> bool:
        return tileset_id in self.tilesets

    def __len__(self) -> int:
        return len(self.tilesets)

    def __iter__(self) -> Iterator[TilesetDefinition]:
        return (self.tilesets[tid] for tid in self._load_order)
