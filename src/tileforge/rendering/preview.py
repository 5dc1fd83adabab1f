"""Headless rasterizer for draw commands.

Executes a command list onto a Pillow canvas. Used for thumbnails, the
``preview`` command and tests; interactive front ends consume the
commands directly.
"""

import logging
from typing import Callable, Sequence

from PIL import Image

from ..sprites.registry import Atlas, AtlasKey, SpriteSheetRegistry
from .compositor import DrawCommand

AtlasLookup = Callable[[AtlasKey], Atlas | None]


def canvas_size(commands: Sequence[DrawCommand]) -> tuple[int, int]:
    """Smallest canvas covering every destination rectangle."""
    width = max((c.dest_rect.right for c in commands), default=0)
    height = max((c.dest_rect.bottom for c in commands), default=0)
    return width, height


class PreviewRasterizer:
    """Draws commands in order with alpha compositing.

    Crops are cached per (atlas, rect) so repeated tiles are cut once.
    """

    def __init__(self, atlases: SpriteSheetRegistry | AtlasLookup):
        """Initialize the rasterizer.

        Args:
            atlases: Registry (cached atlases only) or any key -> Atlas lookup
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._lookup: AtlasLookup = (
            atlases.get if isinstance(atlases, SpriteSheetRegistry) else atlases
        )
        self._crop_cache: dict[tuple[AtlasKey, tuple[int, int, int, int]], Image.Image] = {}

    def clear_cache(self) -> None:
        self._crop_cache.clear()

    def rasterize(
        self,
        commands: Sequence[DrawCommand],
        size: tuple[int, int] | None = None,
        background: tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> Image.Image:
        """Render commands onto a new RGBA image.

        Commands whose atlas is not loaded are skipped.
        """
        if size is None:
            size = canvas_size(commands)
        canvas = Image.new("RGBA", (max(size[0], 1), max(size[1], 1)), background)

        skipped: set[AtlasKey] = set()
        for command in commands:
            tile = self._crop(command)
            if tile is None:
                if command.atlas_ref not in skipped:
                    skipped.add(command.atlas_ref)
                    self.logger.warning(f"Atlas {command.atlas_ref!r} not loaded, skipping")
                continue

            dest = command.dest_rect
            if tile.size != (dest.width, dest.height):
                # Pixel art: scale without interpolation
                tile = tile.resize((dest.width, dest.height), Image.Resampling.NEAREST)
            if command.opacity < 1.0:
                tile = tile.copy()
                alpha = tile.getchannel("A").point(lambda a: int(a * command.opacity))
                tile.putalpha(alpha)
            canvas.alpha_composite(tile, dest=(dest.x, dest.y))

        return canvas

    def _crop(self, command: DrawCommand) -> Image.Image | None:
        box = command.source_rect.as_box()
        cache_key = (command.atlas_ref, box)
        cached = self._crop_cache.get(cache_key)
        if cached is not None:
            return cached

        atlas = self._lookup(command.atlas_ref)
        if atlas is None:
            return None
        tile = atlas.image.crop(box)
        self._crop_cache[cache_key] = tile
        return tile
