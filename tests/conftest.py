"""Shared fixtures for tileforge tests."""

from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from tileforge.settings import AppSettings
from tileforge.tilesets import TilesetCatalog

GRASS_TRANSITIONS = [100, 101]


def make_tileset(tileset_id: str = "overworld", first_gid: int = 0) -> dict[str, Any]:
    """Tileset with a blob grass terrain, a wang water terrain and animated lava.

    Local ids: 0-46 grass variants, 47-62 water variants, 63 sand,
    100-101 grass->water transitions, 110-112 lava frames.
    """
    tiles: dict[str, Any] = {}
    for tile_id in range(47):
        tiles[str(tile_id)] = {"id": tile_id, "type": "passable", "terrain": "grass"}
    for tile_id in range(47, 63):
        tiles[str(tile_id)] = {"id": tile_id, "type": "water", "terrain": "water"}
    tiles["63"] = {"id": 63, "type": "passable", "terrain": "sand"}
    for tile_id in GRASS_TRANSITIONS:
        tiles[str(tile_id)] = {"id": tile_id, "type": "passable"}
    tiles["110"] = {
        "id": 110,
        "type": "hazard",
        "properties": {"damage": 5, "glow": True},
        "animation": {"frames": [110, 111, 112], "duration": 100},
    }
    tiles["111"] = {"id": 111, "type": "hazard"}
    tiles["112"] = {"id": 112, "type": "hazard"}

    return {
        "id": tileset_id,
        "name": "Overworld",
        "version": "1.0.0",
        "author": "tests",
        "license": "CC0",
        "image": f"{tileset_id}.png",
        "tileSize": {"width": 32, "height": 32},
        "margin": 0,
        "spacing": 0,
        "columns": 16,
        "firstGid": first_gid,
        "tiles": tiles,
        "terrains": [
            {"name": "grass", "color": "#22AA22", "transitions": {"water": GRASS_TRANSITIONS}},
            {"name": "water", "color": "#2244CC"},
            {"name": "sand", "color": "#DDCC88"},
        ],
        "autotiles": {
            "grass": {"type": "47-tile", "baseTile": 0},
            "water": {"type": "wang", "baseTile": 47},
        },
        "tags": ["outdoor"],
    }


def make_sprite_sheet(sheet_id: str = "hero") -> dict[str, Any]:
    """Sprite sheet with directional idle/walk/run animations."""
    return {
        "id": sheet_id,
        "name": "Hero",
        "image": f"{sheet_id}.png",
        "frameSize": {"width": 32, "height": 32},
        "margin": 0,
        "spacing": 0,
        "animations": {
            "idle-down": {"frames": [{"x": 0, "y": 0}, {"x": 1, "y": 0}], "duration": 200},
            "walk": {
                "frames": [
                    {"x": 0, "y": 1}, {"x": 1, "y": 1}, {"x": 2, "y": 1},
                    {"x": 0, "y": 2}, {"x": 1, "y": 2}, {"x": 2, "y": 2},
                ],
                "duration": 100,
                "directions": {"down": [0, 1, 2], "up": [3, 4, 5]},
            },
            "run-right": {
                "frames": [{"x": 0, "y": 3}, {"x": 1, "y": 3}, {"x": 2, "y": 3, "duration": 300}],
                "duration": 150,
            },
            "die-down": {
                "frames": [{"x": 0, "y": 4}, {"x": 1, "y": 4}, {"x": 2, "y": 4}],
                "duration": 100,
                "loop": False,
            },
        },
        "tags": ["character"],
        "compatibility": {"lpc": True, "rpgmaker": False},
    }


@pytest.fixture
def tileset_dict() -> dict[str, Any]:
    return make_tileset()


@pytest.fixture
def sprite_sheet_dict() -> dict[str, Any]:
    return make_sprite_sheet()


@pytest.fixture
def catalog(tileset_dict: dict[str, Any]) -> TilesetCatalog:
    catalog = TilesetCatalog()
    catalog.load(tileset_dict)
    return catalog


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    """Settings kept in a throwaway INI file."""
    return AppSettings(settings_file=tmp_path / "tileforge.ini")


@pytest.fixture
def atlas_png(tmp_path: Path) -> Path:
    """A 64x32 PNG: left half red, right half blue."""
    image = Image.new("RGBA", (64, 32), (255, 0, 0, 255))
    image.paste((0, 0, 255, 255), (32, 0, 64, 32))
    path = tmp_path / "atlas.png"
    image.save(path)
    return path
