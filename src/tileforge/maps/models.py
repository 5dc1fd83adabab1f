"""
Data models for maps supplied by the project storage.

Maps are consumed read-only: the render core never edits layers, it only
reads them and, for autotiling, produces new layers from terrain grids.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence, cast


class LayerType(Enum):
    """Kind of map layer."""
    TILE = "tile"
    OBJECT = "object"
    COLLISION = "collision"


@dataclass(frozen=True)
class PlacedTile:
    """A tile id placed at a grid cell."""
    x: int
    y: int
    tile_id: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlacedTile":
        return cls(x=int(data["x"]), y=int(data["y"]), tile_id=int(data["tileId"]))


@dataclass(frozen=True)
class MapLayer:
    """Ordered, independently visible list of placed tiles.

    Position of the layer in its map's ``layers`` list is its z-order.
    """
    id: str
    name: str = ""
    visible: bool = True
    opacity: float = 1.0
    type: LayerType = LayerType.TILE
    tiles: tuple[PlacedTile, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MapLayer":
        """Create MapLayer from JSON dict.

        Args:
            data: Raw layer object

        Returns:
            MapLayer instance
        """
        raw_tiles = cast(list[Any], data.get("tiles") or [])
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            visible=data.get("visible") is not False,
            opacity=float(data.get("opacity", 1.0)),
            type=LayerType(data.get("type", LayerType.TILE.value)),
            tiles=tuple(
                PlacedTile.from_dict(cast(Mapping[str, Any], t))
                for t in raw_tiles
                if isinstance(t, dict)
            ),
        )


@dataclass(frozen=True)
class GameMap:
    """A map as stored by the project collaborator."""
    id: str
    name: str = ""
    width: int = 0
    height: int = 0
    tile_size: int | None = None
    layers: tuple[MapLayer, ...] = ()
    properties: dict[str, Any] = field(default_factory=lambda: {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameMap":
        tile_size = data.get("tileSize")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
            tile_size=int(tile_size) if tile_size is not None else None,
            layers=tuple(
                MapLayer.from_dict(cast(Mapping[str, Any], layer))
                for layer in cast(list[Any], data.get("layers") or [])
            ),
            properties=dict(cast(Mapping[str, Any], data.get("properties") or {})),
        )


@dataclass
class TerrainGrid:
    """Terrain assignment per cell, addressed as ``grid.get(x, y)``.

    ``rows[y][x]`` holds a terrain name or None for cells without terrain.
    """

    rows: list[list[str | None]]

    def __post_init__(self):
        widths = {len(row) for row in self.rows}
        if len(widths) > 1:
            raise ValueError(f"Terrain grid rows have different widths: {sorted(widths)}")

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str | None]]) -> "TerrainGrid":
        return cls(rows=[list(row) for row in rows])

    @classmethod
    def filled(cls, width: int, height: int, terrain: str | None) -> "TerrainGrid":
        """Grid of the given size with every cell set to ``terrain``."""
        return cls(rows=[[terrain] * width for _ in range(height)])

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> str | None:
        """Terrain at (x, y); None when empty or out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self.rows[y][x]

    def set(self, x: int, y: int, terrain: str | None) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) outside {self.width}x{self.height} grid")
        self.rows[y][x] = terrain

    def cells(self) -> Iterator[tuple[int, int]]:
        """Row-major iteration over cell coordinates."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y
