"""
tileforge: deterministic tile and sprite frame resolution

Turns tileset and sprite sheet definitions, terrain grids and map layers
into ordered draw commands for a 2D tile renderer.
"""

__version__ = "0.1.0"
__author__ = "tileforge Contributors"

# Catalogs and resolvers
from .tilesets import TilesetCatalog, AutotileResolver
from .sprites import SpriteSheetCatalog, SpriteSheetRegistry
from .animation import AnimationClock, CharacterAnimationController, CharacterSprite
from .rendering import DrawCommand, LayerCompositor, PreviewRasterizer
from .utils.logging_config import setup_logging

# Errors
from .errors import AssetLoadError, TileforgeError, ValidationError

# Main data models
from .tilesets.models import TileDef, Terrain, AutotileSpec, TilesetDefinition
from .sprites.models import Animation, Direction, SpriteSheetDefinition
from .maps.models import GameMap, MapLayer, PlacedTile, TerrainGrid

__all__ = [
    # Catalogs and resolvers
    'TilesetCatalog',
    'AutotileResolver',
    'SpriteSheetCatalog',
    'SpriteSheetRegistry',
    'AnimationClock',
    'CharacterAnimationController',
    'CharacterSprite',
    'DrawCommand',
    'LayerCompositor',
    'PreviewRasterizer',

    # Logging
    'setup_logging',

    # Errors
    'AssetLoadError',
    'TileforgeError',
    'ValidationError',

    # Data models
    'TileDef',
    'Terrain',
    'AutotileSpec',
    'TilesetDefinition',
    'Animation',
    'Direction',
    'SpriteSheetDefinition',
    'GameMap',
    'MapLayer',
    'PlacedTile',
    'TerrainGrid',
]
