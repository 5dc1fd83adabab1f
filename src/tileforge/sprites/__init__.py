"""
Sprites package.

Provides sprite sheet models, schema validation, the sprite sheet catalog
and the shared atlas registry.
"""

from .models import (
    Animation, Direction, FrameSize, ResolvedAnimation, SpriteFrame,
    SpriteSheetDefinition
)
from .validation import SpriteSheetSchema
from .catalog import SpriteSheetCatalog, detect_frame_size
from .registry import Atlas, AtlasKey, FileFetcher, SpriteSheetRegistry, decode_atlas

__all__ = [
    # Catalog and registry
    'Atlas',
    'AtlasKey',
    'FileFetcher',
    'SpriteSheetCatalog',
    'SpriteSheetRegistry',
    'SpriteSheetSchema',

    # Data models
    'Animation',
    'Direction',
    'FrameSize',
    'ResolvedAnimation',
    'SpriteFrame',
    'SpriteSheetDefinition',

    # Helpers
    'decode_atlas',
    'detect_frame_size',
]
