"""Tests for map models and loading."""

from pathlib import Path
from typing import Any

import orjson
import pytest

from tileforge.maps import GameMap, LayerType, MapLoader, MapSchema, TerrainGrid


@pytest.fixture
def map_dict() -> dict[str, Any]:
    return {
        "id": "meadow",
        "name": "Meadow",
        "width": 3,
        "height": 2,
        "layers": [
            {
                "id": "ground",
                "name": "Ground",
                "tiles": [{"x": 0, "y": 0, "tileId": 5}, {"x": 2, "y": 1, "tileId": 7}],
            },
            {"id": "fog", "visible": False, "opacity": 0.5, "tiles": []},
            {"id": "walls", "type": "collision"},
        ],
        "properties": {"music": "calm"},
    }


class TestGameMap:
    """Test map parsing."""

    def test_from_dict(self, map_dict: dict[str, Any]) -> None:
        """Test layers keep their order and attributes."""
        game_map = GameMap.from_dict(map_dict)
        assert [layer.id for layer in game_map.layers] == ["ground", "fog", "walls"]
        assert game_map.tile_size is None
        assert game_map.properties == {"music": "calm"}

        ground, fog, walls = game_map.layers
        assert [(t.x, t.y, t.tile_id) for t in ground.tiles] == [(0, 0, 5), (2, 1, 7)]
        assert ground.visible and ground.opacity == 1.0
        assert not fog.visible and fog.opacity == 0.5
        assert walls.type is LayerType.COLLISION
        assert walls.tiles == ()


class TestMapSchema:
    """Test structural map checks."""

    def test_valid(self, map_dict: dict[str, Any]) -> None:
        """Test a well-formed map has no errors."""
        assert MapSchema.validate_map(map_dict) == []

    def test_errors(self, map_dict: dict[str, Any]) -> None:
        """Test bad layer types and incomplete tiles are reported."""
        map_dict["layers"][0]["tiles"].append({"x": 1})
        map_dict["layers"][1]["type"] = "parallax"
        errors = MapSchema.validate_map(map_dict)
        assert len(errors) == 2
        assert MapSchema.validate_map([]) == ["Map must be a JSON object"]


class TestMapLoader:
    """Test loading maps from disk."""

    def test_load_from_json(self, tmp_path: Path, map_dict: dict[str, Any]) -> None:
        """Test a JSON file becomes a GameMap."""
        path = tmp_path / "meadow.json"
        path.write_bytes(orjson.dumps(map_dict))
        assert MapLoader().load_from_json(path).id == "meadow"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            MapLoader().load_from_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test unparsable files raise ValueError."""
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(ValueError, match="Failed to parse JSON"):
            MapLoader().load_from_json(path)

    def test_invalid_document(self) -> None:
        """Test schema violations raise ValueError."""
        with pytest.raises(ValueError, match="'layers' must be an array"):
            MapLoader().load_from_dict({"id": "x"})


class TestTerrainGrid:
    """Test the terrain grid."""

    def test_access(self) -> None:
        """Test reads, writes and bounds."""
        grid = TerrainGrid.filled(3, 2, "grass")
        grid.set(1, 1, None)
        assert (grid.width, grid.height) == (3, 2)
        assert grid.get(0, 0) == "grass"
        assert grid.get(1, 1) is None
        assert grid.get(5, 0) is None
        assert list(grid.cells())[:4] == [(0, 0), (1, 0), (2, 0), (0, 1)]
        with pytest.raises(IndexError):
            grid.set(3, 0, "water")

    def test_ragged_rows(self) -> None:
        """Test rows of different widths are rejected."""
        with pytest.raises(ValueError):
            TerrainGrid.from_rows([["grass", "grass"], ["grass"]])
