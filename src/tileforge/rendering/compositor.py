"""
Layer compositing.

Turns ordered map layers into an ordered list of draw commands. The
compositor never sorts by content: output order is input layer order
(filtered to visible layers), then tile order within each layer.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from ..animation.clock import AnimationClock
from ..geometry import Rect
from ..maps.models import GameMap, MapLayer
from ..sprites.registry import AtlasKey, SpriteSheetRegistry
from ..tilesets.catalog import TilesetCatalog
from ..tilesets.models import TilesetDefinition


@dataclass(frozen=True)
class DrawCommand:
    """One blit for the presentation layer.

    Attributes:
        atlas_ref: Registry key of the atlas to sample
        source_rect: Rectangle inside the atlas
        dest_rect: Rectangle on the map canvas
        z_order: Index of the source layer in the input list
        opacity: Layer opacity in [0, 1]
    """
    atlas_ref: AtlasKey
    source_rect: Rect
    dest_rect: Rect
    z_order: int
    opacity: float = 1.0


def atlas_key(tileset: TilesetDefinition) -> AtlasKey:
    """Registry key under which a tileset's atlas is cached."""
    return (tileset.id, tileset.image)


class LayerCompositor:
    """Resolves placed tiles into draw commands."""

    def __init__(
        self,
        catalog: TilesetCatalog,
        clock: AnimationClock | None = None,
        registry: SpriteSheetRegistry | None = None,
        tile_size: int | None = None,
    ):
        """Initialize the compositor.

        Args:
            catalog: Loaded tilesets
            clock: Clock selecting animated tile frames; None draws tiles as placed
            registry: Atlas cache, consulted for column counts a tileset omits
            tile_size: Map cell size in pixels; None uses each tileset's tile size
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.catalog = catalog
        self.clock = clock
        self.registry = registry
        self.tile_size = tile_size

    def render(self, layers: Sequence[MapLayer]) -> list[DrawCommand]:
        """Build draw commands for every visible layer, in layer order.

        Tiles without an owning tileset are skipped and logged once per
        tile id for this call.
        """
        return self._render(layers, self.tile_size)

    def render_map(self, game_map: GameMap) -> list[DrawCommand]:
        """Render a map's layers using the map's own tile size when it has one."""
        return self._render(game_map.layers, game_map.tile_size or self.tile_size)

    def _render(self, layers: Sequence[MapLayer], tile_size: int | None) -> list[DrawCommand]:
        commands: list[DrawCommand] = []
        missing: set[int] = set()
        unplaceable: set[str] = set()

        for z_order, layer in enumerate(layers):
            if not layer.visible:
                continue
            for placed in layer.tiles:
                tileset = self.catalog.tileset_for(placed.tile_id)
                if tileset is None:
                    if placed.tile_id not in missing:
                        missing.add(placed.tile_id)
                        self.logger.warning(
                            f"No tileset owns tile id {placed.tile_id} "
                            f"(layer '{layer.id}'), skipping"
                        )
                    continue

                source = self._source_rect(tileset, tileset.to_local(placed.tile_id))
                if source is None:
                    if tileset.id not in unplaceable:
                        unplaceable.add(tileset.id)
                        self.logger.warning(
                            f"Tileset '{tileset.id}' has no column count and no loaded atlas, "
                            f"skipping its tiles"
                        )
                    continue

                cell_w = tile_size or tileset.tile_size.width
                cell_h = tile_size or tileset.tile_size.height
                commands.append(
                    DrawCommand(
                        atlas_ref=atlas_key(tileset),
                        source_rect=source,
                        dest_rect=Rect(placed.x * cell_w, placed.y * cell_h, cell_w, cell_h),
                        z_order=z_order,
                        opacity=layer.opacity,
                    )
                )

        self.logger.debug(f"Composited {len(layers)} layers into {len(commands)} draw commands")
        return commands

    def _source_rect(self, tileset: TilesetDefinition, local_id: int) -> Rect | None:
        if self.clock is not None:
            local_id = self.clock.current_tile(tileset, local_id)

        columns = tileset.columns
        if not columns and self.registry is not None:
            atlas = self.registry.get(atlas_key(tileset))
            if atlas is not None:
                columns = tileset.columns_for_image(atlas.size[0])
        if not columns:
            return None
        return tileset.atlas_rect(local_id, columns)
