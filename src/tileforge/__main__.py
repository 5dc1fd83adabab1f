"""
Command line entry point for tileforge.
Usage:
    python -m tileforge preview --tileset T.json --map M.json --out preview.png
    python -m tileforge validate FILE...
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import orjson

from . import __version__
from .animation import AnimationClock
from .errors import AssetLoadError, ValidationError
from .maps import MapLoader
from .rendering import LayerCompositor, PreviewRasterizer, atlas_key
from .settings import AppSettings
from .sprites import SpriteSheetRegistry, SpriteSheetSchema
from .tilesets import TilesetCatalog, TilesetSchema
from .utils.logging_config import setup_logging

logger = logging.getLogger(f"{__name__}.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tileforge", description="Tile and sprite frame resolution tools"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--settings", help="INI settings file (default: platform store)")
    parser.add_argument("--profile", default="default", help="Settings profile name")

    commands = parser.add_subparsers(dest="command", required=True)

    preview = commands.add_parser("preview", help="Composite a map into a PNG")
    preview.add_argument(
        "--tileset", action="append", required=True, help="Tileset JSON (repeatable)"
    )
    preview.add_argument("--map", required=True, help="Map JSON")
    preview.add_argument("--out", required=True, help="Output PNG path")
    preview.add_argument(
        "--elapsed", type=float, default=0.0, help="Animation time in milliseconds"
    )

    validate = commands.add_parser("validate", help="Validate tileset or sprite sheet JSON")
    validate.add_argument("files", nargs="+", help="JSON files to check")

    return parser


def load_tileset_file(catalog: TilesetCatalog, path: Path) -> None:
    """Load a tileset, anchoring a relative atlas path at the JSON file's folder."""
    tileset = catalog.load_file(path)
    image = Path(tileset.image)
    if not image.is_absolute():
        catalog.load(dataclasses.replace(tileset, image=str(path.parent / image)))


async def load_atlases(registry: SpriteSheetRegistry, catalog: TilesetCatalog) -> int:
    """Acquire every tileset atlas; returns the number of failures."""
    keys = [atlas_key(tileset) for tileset in catalog]
    results = await asyncio.gather(
        *(registry.acquire(key) for key in keys), return_exceptions=True
    )
    failures = 0
    for key, result in zip(keys, results):
        if isinstance(result, AssetLoadError):
            logger.error(f"Atlas {key[1]} unavailable: {result.reason}")
            failures += 1
        elif isinstance(result, BaseException):
            raise result
    return failures


def run_preview(args: argparse.Namespace, settings: AppSettings) -> int:
    catalog = TilesetCatalog()
    try:
        for tileset_path in args.tileset:
            load_tileset_file(catalog, Path(tileset_path))
        game_map = MapLoader().load_from_json(Path(args.map))
    except ValidationError as e:
        logger.error(f"Invalid tileset {e.source or ''}:")
        for error in e.errors:
            logger.error(f"  {error}")
        return 1
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    clock = AnimationClock()
    for tileset in catalog:
        clock.register_tileset(tileset)
    if args.elapsed:
        clock.advance(args.elapsed)

    registry = SpriteSheetRegistry()
    failures = asyncio.run(load_atlases(registry, catalog))
    if failures:
        logger.warning(f"{failures} atlas(es) failed to load, their tiles are left blank")

    compositor = LayerCompositor(
        catalog,
        clock=clock,
        registry=registry,
        tile_size=game_map.tile_size or settings.render.default_tile_size,
    )
    commands = compositor.render(game_map.layers)

    cell = compositor.tile_size or settings.render.default_tile_size
    size = (game_map.width * cell, game_map.height * cell) if game_map.width else None
    image = PreviewRasterizer(registry).rasterize(commands, size=size)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    image.save(out)
    logger.info(f"Wrote {image.width}x{image.height} preview with {len(commands)} tiles to {out}")
    return 0


def validate_document(data: Any) -> tuple[str, list[str]]:
    """Pick the schema from the document shape and validate against it."""
    if isinstance(data, dict) and "frameSize" in data:
        return "sprite sheet", SpriteSheetSchema.validate_sprite_sheet(data)
    return "tileset", TilesetSchema.validate_tileset(data)


def run_validate(files: Sequence[str]) -> int:
    failed = 0
    for name in files:
        path = Path(name)
        try:
            data = orjson.loads(path.read_bytes())
        except OSError as e:
            print(f"{path}: cannot read file: {e}")
            failed += 1
            continue
        except orjson.JSONDecodeError as e:
            print(f"{path}: invalid JSON: {e}")
            failed += 1
            continue

        kind, errors = validate_document(data)
        if errors:
            failed += 1
            print(f"{path}: invalid {kind} ({len(errors)} error(s))")
            for error in errors:
                print(f"  - {error}")
        else:
            print(f"{path}: valid {kind}")
    return 1 if failed else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main command line entry point."""
    args = build_parser().parse_args(argv)
    try:
        settings = AppSettings(profile=args.profile, settings_file=args.settings)
        setup_logging(settings)

        validation = settings.validate()
        for warning in validation.warnings:
            logger.warning(f"  {warning}")
        if not validation.is_valid:
            logger.error("Configuration validation failed:")
            for error in validation.errors:
                logger.error(f"  {error}")
            return 1

        if args.command == "preview":
            return run_preview(args, settings)
        return run_validate(args.files)

    except Exception:
        logger.exception("Unhandled exception in main")
        return 1


if __name__ == "__main__":
    sys.exit(main())
