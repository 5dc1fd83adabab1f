"""
Tilesets package.

Provides tileset definition models, schema validation, the tileset catalog
and the terrain autotiler.
"""

from .models import (
    AutotileSpec, AutotileType, Terrain, TileAnimation, TileDef, TileSize,
    TileType, TilesetDefinition
)
from .validation import TilesetSchema
from .catalog import TilesetCatalog
from .autotile import AutotileResolver, BLOB_OFFSETS, blob_offset, reduce_mask

__all__ = [
    # Catalog and resolver
    'AutotileResolver',
    'TilesetCatalog',
    'TilesetSchema',

    # Data models
    'AutotileSpec',
    'AutotileType',
    'Terrain',
    'TileAnimation',
    'TileDef',
    'TileSize',
    'TileType',
    'TilesetDefinition',

    # Mask helpers
    'BLOB_OFFSETS',
    'blob_offset',
    'reduce_mask',
]
