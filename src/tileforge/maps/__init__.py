"""
Maps package.

Read-only map models supplied by the project storage, plus the terrain
grid consumed by the autotiler.
"""

from .models import GameMap, LayerType, MapLayer, PlacedTile, TerrainGrid
from .loader import MapLoader, MapSchema

__all__ = [
    "GameMap",
    "LayerType",
    "MapLayer",
    "MapLoader",
    "MapSchema",
    "PlacedTile",
    "TerrainGrid",
]
