"""
Data models for sprite sheet definitions.

A sprite sheet is an atlas of equally sized frames laid out on a grid
with optional margin and spacing. Animations reference frames by grid
cell and may narrow their frame list per facing direction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, cast

from ..geometry import Rect, cell_rect

VALID_FRAME_SIZES = (16, 32, 48, 64)


class Direction(Enum):
    """Facing direction of a character."""
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"


@dataclass(frozen=True)
class FrameSize:
    """Pixel size of one animation frame."""
    width: int = 32
    height: int = 32

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FrameSize":
        return cls(width=int(data.get("width", 32)), height=int(data.get("height", 32)))


@dataclass(frozen=True)
class SpriteFrame:
    """A frame addressed by its grid cell; ``duration`` overrides the animation's."""
    x: int
    y: int
    duration: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpriteFrame":
        duration = data.get("duration")
        return cls(
            x=int(data["x"]),
            y=int(data["y"]),
            duration=int(duration) if duration is not None else None,
        )


@dataclass(frozen=True)
class ResolvedAnimation:
    """Frames of one animation narrowed to a single direction."""
    name: str
    frames: tuple[SpriteFrame, ...]
    durations: tuple[int, ...]
    loop: bool = True

    @property
    def frame_count(self) -> int:
        return len(self.frames)


@dataclass(frozen=True)
class Animation:
    """Named animation of a sprite sheet.

    ``directions`` maps a facing direction to indices into ``frames``;
    directions it does not list use every frame.
    """
    name: str
    frames: tuple[SpriteFrame, ...]
    duration: int = 100
    loop: bool = True
    directions: dict[Direction, tuple[int, ...]] | None = None

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "Animation":
        """Create Animation from JSON dict.

        Args:
            name: Key the animation is stored under
            data: Raw animation object

        Returns:
            Animation instance
        """
        raw_directions = data.get("directions")
        directions = None
        if isinstance(raw_directions, dict):
            directions = {
                Direction(key): tuple(int(i) for i in indices)
                for key, indices in cast(dict[str, Any], raw_directions).items()
            }
        return cls(
            name=name,
            frames=tuple(
                SpriteFrame.from_dict(cast(Mapping[str, Any], f))
                for f in cast(list[Any], data.get("frames") or [])
            ),
            duration=int(data.get("duration", 100)),
            loop=data.get("loop") is not False,
            directions=directions,
        )

    def frame_duration(self, frame: SpriteFrame) -> int:
        return frame.duration if frame.duration is not None else self.duration

    def has_direction(self, direction: Direction) -> bool:
        return self.directions is not None and direction in self.directions

    def for_direction(self, direction: Direction | None = None) -> ResolvedAnimation:
        """Frames for a facing direction (all frames when not narrowed)."""
        frames = self.frames
        if direction is not None and self.directions and direction in self.directions:
            frames = tuple(
                self.frames[i] for i in self.directions[direction] if 0 <= i < len(self.frames)
            )
        return ResolvedAnimation(
            name=self.name,
            frames=frames,
            durations=tuple(self.frame_duration(f) for f in frames),
            loop=self.loop,
        )


@dataclass(frozen=True)
class SpriteSheetDefinition:
    """Complete sprite sheet descriptor."""
    id: str
    name: str
    image: str
    frame_size: FrameSize
    animations: dict[str, Animation]
    margin: int = 0
    spacing: int = 0
    version: str = "1.0.0"
    author: str = ""
    license: str = ""
    tags: tuple[str, ...] = ()
    compatibility: dict[str, bool] = field(default_factory=lambda: {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpriteSheetDefinition":
        """Create SpriteSheetDefinition from an already validated JSON dict."""
        raw_animations = cast(Mapping[str, Any], data.get("animations") or {})
        raw_compat = cast(Mapping[str, Any], data.get("compatibility") or {})
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            image=str(data["image"]),
            frame_size=FrameSize.from_dict(cast(Mapping[str, Any], data["frameSize"])),
            animations={
                str(name): Animation.from_dict(str(name), cast(Mapping[str, Any], anim))
                for name, anim in raw_animations.items()
            },
            margin=int(data.get("margin", 0) or 0),
            spacing=int(data.get("spacing", 0) or 0),
            version=str(data.get("version", "1.0.0")),
            author=str(data.get("author", "")),
            license=str(data.get("license", "")),
            tags=tuple(str(t) for t in data.get("tags") or []),
            compatibility={str(k): bool(v) for k, v in raw_compat.items()},
        )

    def animation(self, name: str) -> Animation | None:
        return self.animations.get(name)

    def resolve(self, action: str, direction: Direction) -> ResolvedAnimation | None:
        """Find the animation for an action facing a direction.

        ``<action>-<direction>`` wins; otherwise an animation named
        ``<action>`` that lists the direction is narrowed to it.
        """
        exact = self.animations.get(f"{action}-{direction.value}")
        if exact is not None and exact.frames:
            return exact.for_direction(direction)

        generic = self.animations.get(action)
        if generic is not None and generic.has_direction(direction):
            resolved = generic.for_direction(direction)
            return resolved if resolved.frames else None
        return None

    def frame_rect(self, frame: SpriteFrame) -> Rect:
        """Source rectangle of a frame inside the atlas image."""
        return cell_rect(
            frame.x,
            frame.y,
            self.frame_size.width,
            self.frame_size.height,
            self.margin,
            self.spacing,
        )
