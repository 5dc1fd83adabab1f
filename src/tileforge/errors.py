"""
Exception types raised by the tileforge render core.

Everything that is not recoverable locally (skip a cell, fall back to a
default animation) surfaces as one of these.
"""

from typing import Any, Iterable


class TileforgeError(Exception):
    """Base class for tileforge errors."""
    pass


class ValidationError(TileforgeError):
    """Raised when a tileset or sprite sheet definition is rejected.

    Attributes:
        errors: Every schema violation found, in discovery order
        source: Identifier of the rejected definition (id or path), if known
    """

    def __init__(self, errors: Iterable[str], source: str | None = None):
        self.errors = list(errors)
        self.source = source
        where = f" in {source}" if source else ""
        details = "\n  - ".join(self.errors) or "unknown error"
        super().__init__(f"Invalid definition{where}:\n  - {details}")


class AssetLoadError(TileforgeError):
    """Raised when an atlas image cannot be fetched or decoded.

    Attributes:
        key: Registry key of the failed asset
    """

    def __init__(self, key: Any, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to load asset {key!r}: {reason}")
