"""
Rendering package.

Provides the layer compositor producing draw commands and a headless
Pillow rasterizer that executes them.
"""

from .compositor import DrawCommand, LayerCompositor, atlas_key
from .preview import PreviewRasterizer, canvas_size

__all__ = [
    "DrawCommand",
    "LayerCompositor",
    "PreviewRasterizer",
    "atlas_key",
    "canvas_size",
]
