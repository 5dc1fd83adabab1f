"""
Data models for tileset definitions.

Contains the dataclasses and enums describing a tileset JSON document.
Each model is lightweight and immutable once built: no file-system, image
or registry logic lives here. Reloading a tileset produces new objects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, cast

from ..geometry import Rect, grid_capacity, index_rect


# =============================================================================
# Enumerations
# =============================================================================

class TileType(Enum):
    """Gameplay kind of a tile."""
    SOLID = "solid"
    PASSABLE = "passable"
    PLATFORM = "platform"
    WATER = "water"
    HAZARD = "hazard"


class AutotileType(Enum):
    """Autotiling convention used by a terrain."""
    TILE_47 = "47-tile"
    WANG = "wang"
    BLOB = "blob"
    CUSTOM = "custom"


VALID_TILE_SIZES = (16, 32, 48)

# Conventional keys of the open ``properties`` bag. Any other key is kept
# verbatim; these are only the ones other systems are known to read.
PROPERTY_COLLISION = "collision"
PROPERTY_FRICTION = "friction"
PROPERTY_DAMAGE = "damage"
PROPERTY_SOUND = "sound"


# =============================================================================
# Tile Models
# =============================================================================

@dataclass(frozen=True)
class TileSize:
    """Pixel size of one tile in the atlas."""
    width: int = 32
    height: int = 32

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TileSize":
        return cls(width=int(data.get("width", 32)), height=int(data.get("height", 32)))


@dataclass(frozen=True)
class TileAnimation:
    """Frame list of an animated tile.

    Frames are tileset-local tile ids; ``duration`` is milliseconds per frame.
    Animations loop unless ``loop`` is explicitly false.
    """
    frames: tuple[int, ...]
    duration: int
    loop: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TileAnimation":
        return cls(
            frames=tuple(int(f) for f in data.get("frames", [])),
            duration=int(data.get("duration", 100)),
            loop=data.get("loop") is not False,
        )

    @property
    def frame_count(self) -> int:
        return len(self.frames)


@dataclass(frozen=True)
class TileDef:
    """A single tile entry of a tileset.

    ``properties`` is an open string-to-value map. See the PROPERTY_*
    constants for the conventional keys.
    """
    id: int
    type: TileType = TileType.PASSABLE
    terrain: str | None = None
    properties: dict[str, Any] = field(default_factory=lambda: {})
    animation: TileAnimation | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], tile_id: int | None = None) -> "TileDef":
        """Create TileDef from JSON dict.

        Args:
            data: Raw tile object
            tile_id: Key the tile was stored under, used when ``id`` is absent

        Returns:
            TileDef instance
        """
        raw_id = data.get("id", tile_id)
        animation_data = data.get("animation")
        properties = data.get("properties") or {}
        return cls(
            id=int(cast(int, raw_id)),
            type=TileType(data.get("type", TileType.PASSABLE.value)),
            terrain=data.get("terrain") or None,
            properties=dict(cast(Mapping[str, Any], properties)),
            animation=TileAnimation.from_dict(animation_data) if animation_data else None,
        )

    @property
    def is_animated(self) -> bool:
        return self.animation is not None and self.animation.frame_count > 0

    def get_property(self, key: str, default: Any = None) -> Any:
        """Return a property value, or ``default`` when the key is absent."""
        return self.properties.get(key, default)


# =============================================================================
# Terrain Models
# =============================================================================

@dataclass(frozen=True)
class Terrain:
    """Named terrain with its transition table.

    ``transitions`` maps another terrain's name to the ordered candidate
    tiles used where this terrain meets it. The table is one-directional:
    grass->water says nothing about water->grass.
    """
    name: str
    color: str = "#000000"
    transitions: dict[str, tuple[int, ...]] = field(default_factory=lambda: {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Terrain":
        raw_transitions = cast(Mapping[str, Any], data.get("transitions") or {})
        return cls(
            name=str(data["name"]),
            color=str(data.get("color", "#000000")),
            transitions={
                str(other): tuple(int(t) for t in tiles)
                for other, tiles in raw_transitions.items()
            },
        )

    def transition_to(self, other: str) -> tuple[int, ...] | None:
        """Candidate tiles for the edge towards ``other``, or None if undefined."""
        candidates = self.transitions.get(other)
        return candidates if candidates else None


@dataclass(frozen=True)
class AutotileSpec:
    """Autotile configuration of one terrain.

    ``rules`` is only used by CUSTOM autotiles and maps a neighbor mask
    (decimal string, as JSON keys must be strings) to a tile offset.
    """
    type: AutotileType
    base_tile: int
    rules: dict[str, int] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AutotileSpec":
        raw_rules = data.get("rules")
        rules = None
        if isinstance(raw_rules, dict):
            rules = {str(k): int(v) for k, v in cast(dict[str, Any], raw_rules).items()}
        return cls(
            type=AutotileType(data["type"]),
            base_tile=int(data["baseTile"]),
            rules=rules,
        )


# =============================================================================
# Tileset Models
# =============================================================================

@dataclass(frozen=True)
class TilesetDefinition:
    """Complete tileset descriptor.

    Mirrors the tileset JSON document. ``first_gid`` shifts the tileset's
    local ids into the map-wide id space so several tilesets can be placed
    on one map; it defaults to 0.
    """
    id: str
    name: str
    image: str
    tile_size: TileSize
    tiles: dict[int, TileDef]
    columns: int | None = None
    margin: int = 0
    spacing: int = 0
    version: str = "1.0.0"
    author: str = ""
    license: str = ""
    terrains: tuple[Terrain, ...] = ()
    autotiles: dict[str, AutotileSpec] = field(default_factory=lambda: {})
    tags: tuple[str, ...] = ()
    first_gid: int = 0
    _terrain_index: dict[str, Terrain] = field(
        init=False, repr=False, compare=False, default_factory=lambda: {}
    )

    def __post_init__(self):
        object.__setattr__(self, "_terrain_index", {t.name: t for t in self.terrains})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TilesetDefinition":
        """Create TilesetDefinition from an already validated JSON dict.

        Args:
            data: Raw tileset JSON

        Returns:
            TilesetDefinition with properly typed fields
        """
        raw_tiles = cast(Mapping[str, Any], data.get("tiles") or {})
        tiles: dict[int, TileDef] = {}
        for key, tile_data in raw_tiles.items():
            tile = TileDef.from_dict(cast(Mapping[str, Any], tile_data), tile_id=int(key))
            tiles[tile.id] = tile

        raw_autotiles = cast(Mapping[str, Any], data.get("autotiles") or {})
        columns = data.get("columns")

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            image=str(data["image"]),
            tile_size=TileSize.from_dict(cast(Mapping[str, Any], data["tileSize"])),
            tiles=tiles,
            columns=int(columns) if columns is not None else None,
            margin=int(data.get("margin", 0) or 0),
            spacing=int(data.get("spacing", 0) or 0),
            version=str(data.get("version", "1.0.0")),
            author=str(data.get("author", "")),
            license=str(data.get("license", "")),
            terrains=tuple(
                Terrain.from_dict(cast(Mapping[str, Any], t))
                for t in data.get("terrains") or []
            ),
            autotiles={
                str(name): AutotileSpec.from_dict(cast(Mapping[str, Any], spec))
                for name, spec in raw_autotiles.items()
            },
            tags=tuple(str(t) for t in data.get("tags") or []),
            first_gid=int(data.get("firstGid", 0) or 0),
        )

    # -- lookups ---------------------------------------------------------

    def tile(self, local_id: int) -> TileDef | None:
        """Return tile definition by local id if present."""
        return self.tiles.get(local_id)

    def terrain(self, name: str) -> Terrain | None:
        """Return terrain by name if present."""
        return self._terrain_index.get(name)

    def autotile(self, terrain_name: str) -> AutotileSpec | None:
        """Return the autotile spec of a terrain if present."""
        return self.autotiles.get(terrain_name)

    def global_ids(self) -> list[int]:
        """Map-wide ids of every tile this tileset defines."""
        return [self.first_gid + local_id for local_id in self.tiles]

    def to_local(self, gid: int) -> int:
        return gid - self.first_gid

    # -- geometry --------------------------------------------------------

    def atlas_rect(self, local_id: int, columns: int | None = None) -> Rect:
        """Source rectangle of a tile inside the atlas image.

        Args:
            local_id: Tileset-local tile id
            columns: Column count to use when the definition omits it

        Raises:
            ValueError: If no column count is known
        """
        cols = self.columns if self.columns else columns
        if not cols:
            raise ValueError(f"Tileset '{self.id}' has no column count")
        return index_rect(
            local_id,
            cols,
            self.tile_size.width,
            self.tile_size.height,
            self.margin,
            self.spacing,
        )

    def columns_for_image(self, image_width: int) -> int:
        """Column count that fits in an atlas of the given width."""
        return grid_capacity(image_width, self.tile_size.width, self.margin, self.spacing)

    def tile_count(self, image_width: int, image_height: int) -> int:
        """Number of whole tiles the atlas image can hold."""
        cols = grid_capacity(image_width, self.tile_size.width, self.margin, self.spacing)
        rows = grid_capacity(image_height, self.tile_size.height, self.margin, self.spacing)
        return cols * rows
