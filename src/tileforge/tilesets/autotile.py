"""Terrain-aware autotiling.

Picks the concrete tile for a map cell from the terrains of its 8-connected
neighborhood. Resolution is a pure function of the 3x3 window around the
cell and the loaded tileset definitions: nothing random, nothing time
based, nothing outside the window.
"""

import logging
from typing import Iterable

from ..maps.models import LayerType, MapLayer, PlacedTile, TerrainGrid
from ..settings.types import EdgeMode
from .catalog import TilesetCatalog
from .models import AutotileSpec, AutotileType, TilesetDefinition

# -----------------------------------------------------------------------------
# 8-bit neighbor mask
# -----------------------------------------------------------------------------

N = 1
NE = 2
E = 4
SE = 8
S = 16
SW = 32
W = 64
NW = 128

ALL_NEIGHBORS = 0xFF

# bit -> (dx, dy); y grows downwards
NEIGHBOR_OFFSETS: dict[int, tuple[int, int]] = {
    N: (0, -1),
    NE: (1, -1),
    E: (1, 0),
    SE: (1, 1),
    S: (0, 1),
    SW: (-1, 1),
    W: (-1, 0),
    NW: (-1, -1),
}

# Edges examined for terrain transitions, first hit wins
TRANSITION_ORDER = (N, E, S, W, NE, SE, SW, NW)

# Spatial hash primes (Teschner et al.) for coordinate-stable picks
_HASH_PRIME_X = 73856093
_HASH_PRIME_Y = 19349663


def reduce_mask(raw: int) -> int:
    """Zero out diagonal bits when an adjacent cardinal is absent.

    A diagonal neighbor only changes the picture when both cardinals next
    to it match, which collapses the 256 raw masks to 47 canonical ones.
    """
    reduced = raw & ALL_NEIGHBORS
    if not (raw & N and raw & E):
        reduced &= ~NE
    if not (raw & S and raw & E):
        reduced &= ~SE
    if not (raw & S and raw & W):
        reduced &= ~SW
    if not (raw & N and raw & W):
        reduced &= ~NW
    return reduced


def _build_blob_table() -> dict[int, int]:
    canonical = sorted({reduce_mask(raw) for raw in range(256)}, reverse=True)
    if len(canonical) != 47:
        raise RuntimeError(f"Expected 47 canonical masks, got {len(canonical)}")
    return {mask: offset for offset, mask in enumerate(canonical)}


# canonical mask -> tile offset; descending mask order puts the fully
# surrounded mask (255) at offset 0 and the isolated mask (0) at 46
BLOB_OFFSETS: dict[int, int] = _build_blob_table()


def blob_offset(mask: int) -> int:
    """Offset of the blob-47 variant for a raw 8-bit mask."""
    return BLOB_OFFSETS[reduce_mask(mask)]


def wang_offset(mask: int) -> int:
    """Offset of the 16-tile cardinal (wang) variant for a raw 8-bit mask.

    Cardinals are packed as N=8, E=4, S=2, W=1; all four present is 0.
    """
    cardinal = (
        (8 if mask & N else 0)
        | (4 if mask & E else 0)
        | (2 if mask & S else 0)
        | (1 if mask & W else 0)
    )
    return 15 - cardinal


def custom_offset(mask: int, rules: dict[str, int] | None) -> int:
    """Offset from explicit rules: raw mask first, then canonical, else 0."""
    if not rules:
        return 0
    raw_key = str(mask & ALL_NEIGHBORS)
    if raw_key in rules:
        return rules[raw_key]
    return rules.get(str(reduce_mask(mask)), 0)


def spatial_hash(x: int, y: int) -> int:
    """Non-negative hash of cell coordinates, stable across runs."""
    return ((x * _HASH_PRIME_X) ^ (y * _HASH_PRIME_Y)) & 0x7FFFFFFF


def describe_mask(mask: int) -> str:
    """Human-readable description of a mask, e.g. ``N+E+NE``."""
    names = [
        name
        for name, bit in [
            ("N", N), ("NE", NE), ("E", E), ("SE", SE),
            ("S", S), ("SW", SW), ("W", W), ("NW", NW),
        ]
        if mask & bit
    ]
    return "+".join(names) if names else "isolated"


class AutotileResolver:
    """Resolves terrain grids into concrete map-wide tile ids.

    The autotile spec and transition table of a terrain come from the first
    loaded tileset that defines them. Results are offset by the owning
    tileset's ``first_gid`` so they can be placed directly on a map layer.
    """

    def __init__(self, catalog: TilesetCatalog, edge_mode: EdgeMode = EdgeMode.SAME):
        """Initialize the resolver.

        Args:
            catalog: Catalog providing terrains and autotile specs
            edge_mode: Whether out-of-bounds neighbors count as same terrain
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.catalog = catalog
        self.edge_mode = edge_mode
        self._reported_terrains: set[str] = set()

    def mask_at(self, grid: TerrainGrid, x: int, y: int) -> int:
        """8-bit mask of neighbors sharing the terrain of (x, y)."""
        terrain = grid.get(x, y)
        mask = 0
        for bit, (dx, dy) in NEIGHBOR_OFFSETS.items():
            nx, ny = x + dx, y + dy
            if not grid.in_bounds(nx, ny):
                if self.edge_mode is EdgeMode.SAME:
                    mask |= bit
                continue
            if grid.get(nx, ny) == terrain:
                mask |= bit
        return mask

    @staticmethod
    def offset_for_mask(spec: AutotileSpec, mask: int) -> int:
        """Tile offset for a mask under an autotile convention."""
        if spec.type in (AutotileType.TILE_47, AutotileType.BLOB):
            return blob_offset(mask)
        if spec.type is AutotileType.WANG:
            return wang_offset(mask)
        return custom_offset(mask, spec.rules)

    def resolve(self, grid: TerrainGrid, x: int, y: int) -> int | None:
        """Concrete map-wide tile id for cell (x, y).

        Returns None for cells without terrain or whose terrain has no
        autotile spec; such cells render empty.
        """
        terrain_name = grid.get(x, y)
        if terrain_name is None:
            return None

        transition = self._transition_tile(grid, x, y, terrain_name)
        if transition is not None:
            return transition

        found = self.catalog.autotile_spec(terrain_name)
        if found is None:
            self._report_missing(terrain_name)
            return None

        tileset, spec = found
        mask = self.mask_at(grid, x, y)
        return tileset.first_gid + spec.base_tile + self.offset_for_mask(spec, mask)

    def _transition_tile(
        self, grid: TerrainGrid, x: int, y: int, terrain_name: str
    ) -> int | None:
        """Tile from the transition table for the first differing known neighbor."""
        own = self.catalog.find_terrain(terrain_name)
        if own is None:
            return None
        tileset, terrain = own
        if not terrain.transitions:
            return None

        for bit in TRANSITION_ORDER:
            dx, dy = NEIGHBOR_OFFSETS[bit]
            neighbor = grid.get(x + dx, y + dy)
            if neighbor is None or neighbor == terrain_name:
                continue
            candidates = terrain.transition_to(neighbor)
            if candidates is None or self.catalog.find_terrain(neighbor) is None:
                continue
            return self._pick(tileset, candidates, x, y)
        return None

    @staticmethod
    def _pick(tileset: TilesetDefinition, candidates: tuple[int, ...], x: int, y: int) -> int:
        return tileset.first_gid + candidates[spatial_hash(x, y) % len(candidates)]

    def resolve_cells(
        self, grid: TerrainGrid, cells: Iterable[tuple[int, int]]
    ) -> dict[tuple[int, int], int | None]:
        """Resolve several cells, e.g. the 3x3 window around an edited cell."""
        return {(x, y): self.resolve(grid, x, y) for x, y in cells if grid.in_bounds(x, y)}

    def resolve_grid(
        self, grid: TerrainGrid, layer_id: str = "terrain", name: str = "Terrain"
    ) -> MapLayer:
        """Resolve every cell into a tile layer, row-major; empty cells are omitted."""
        placed: list[PlacedTile] = []
        for x, y in grid.cells():
            tile_id = self.resolve(grid, x, y)
            if tile_id is not None:
                placed.append(PlacedTile(x=x, y=y, tile_id=tile_id))
        self.logger.debug(
            f"Resolved {grid.width}x{grid.height} terrain grid into {len(placed)} tiles"
        )
        return MapLayer(id=layer_id, name=name, type=LayerType.TILE, tiles=tuple(placed))

    def _report_missing(self, terrain_name: str) -> None:
        if terrain_name in self._reported_terrains:
            return
        self._reported_terrains.add(terrain_name)
        self.logger.warning(f"No autotile spec for terrain '{terrain_name}', cells render empty")
