"""
Frame clock for animated tiles and characters.

The clock is an explicit context object: callers create one per
presentation context and feed it elapsed milliseconds. It owns no timer
and reads no wall clock, so identical delta sequences always yield
identical frame sequences.
"""

import logging
from dataclasses import dataclass
from typing import Hashable, Sequence

from ..tilesets.models import TileDef, TilesetDefinition


@dataclass
class AnimationTrack:
    """Frame index and accumulator of one animated entity.

    The accumulator stores elapsed time already scaled by ``speed`` so a
    frame advances once it reaches the frame's own duration. The remainder
    is kept across frames, so splitting a delta never changes the outcome.
    """
    frame_count: int
    durations: tuple[int, ...]
    loop: bool = True
    speed: float = 1.0
    frame: int = 0
    elapsed: float = 0.0
    finished: bool = False

    def __post_init__(self):
        if self.frame_count < 1:
            raise ValueError(f"frame_count must be at least 1, got {self.frame_count}")
        if len(self.durations) != self.frame_count:
            raise ValueError(
                f"Expected {self.frame_count} frame durations, got {len(self.durations)}"
            )
        if any(d <= 0 for d in self.durations):
            raise ValueError("Frame durations must be positive")
        if self.speed <= 0:
            raise ValueError(f"speed must be positive, got {self.speed}")

    def advance(self, delta_ms: float) -> int:
        """Advance by elapsed time and return the number of frame steps taken."""
        if self.finished or self.frame_count == 1:
            return 0

        self.elapsed += delta_ms * self.speed
        steps = 0
        while self.elapsed >= self.durations[self.frame]:
            self.elapsed -= self.durations[self.frame]
            steps += 1
            if self.frame + 1 < self.frame_count:
                self.frame += 1
            elif self.loop:
                self.frame = 0
            if not self.loop and self.frame == self.frame_count - 1:
                self.finished = True
                self.elapsed = 0.0
                break
        return steps

    def reset(self) -> None:
        self.frame = 0
        self.elapsed = 0.0
        self.finished = False


class AnimationClock:
    """Drives every registered track from explicit elapsed-time deltas.

    Attributes:
        tick: Total elapsed milliseconds fed to the clock
        tracks: Registered tracks by key
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.tick = 0.0
        self.tracks: dict[Hashable, AnimationTrack] = {}

    def register(
        self,
        key: Hashable,
        frame_count: int,
        duration: int,
        loop: bool = True,
        speed: float = 1.0,
        frame_durations: Sequence[int] | None = None,
    ) -> AnimationTrack:
        """Register (or replace) a track starting at frame 0.

        Args:
            key: Identity of the animated entity
            frame_count: Number of frames
            duration: Milliseconds per frame
            loop: Wrap after the last frame instead of freezing on it
            speed: Multiplier applied to elapsed time
            frame_durations: Per-frame durations overriding ``duration``

        Raises:
            ValueError: On an empty animation or non-positive timing values
        """
        if frame_durations is not None:
            durations = tuple(frame_durations)
        else:
            durations = (duration,) * frame_count
        track = AnimationTrack(
            frame_count=frame_count, durations=durations, loop=loop, speed=speed
        )
        self.tracks[key] = track
        self.logger.debug(f"Registered track {key!r}: {frame_count} frames, loop={loop}")
        return track

    def unregister(self, key: Hashable) -> bool:
        return self.tracks.pop(key, None) is not None

    def advance(self, delta_ms: float) -> None:
        """Feed elapsed milliseconds to every track.

        Raises:
            ValueError: If ``delta_ms`` is negative
        """
        if delta_ms < 0:
            raise ValueError(f"Elapsed time cannot be negative: {delta_ms}")
        self.tick += delta_ms
        for track in self.tracks.values():
            track.advance(delta_ms)

    def frame(self, key: Hashable) -> int:
        """Current frame index of a track; 0 for unknown keys."""
        track = self.tracks.get(key)
        return track.frame if track else 0

    def reset(self, key: Hashable) -> None:
        track = self.tracks.get(key)
        if track:
            track.reset()

    def clear(self) -> None:
        self.tracks.clear()
        self.tick = 0.0

    # -- tile animations -------------------------------------------------

    @staticmethod
    def tile_key(tileset: TilesetDefinition, local_id: int) -> tuple[str, str, int]:
        return ("tile", tileset.id, local_id)

    def register_tile_animation(self, tileset: TilesetDefinition, tile_def: TileDef) -> bool:
        """Register the animation of a tile; False when the tile is static."""
        animation = tile_def.animation
        if animation is None or not animation.frames:
            return False
        self.register(
            self.tile_key(tileset, tile_def.id),
            animation.frame_count,
            animation.duration,
            loop=animation.loop,
        )
        return True

    def register_tileset(self, tileset: TilesetDefinition) -> int:
        """Register every animated tile of a tileset. Returns the count."""
        count = sum(
            1 for tile_def in tileset.tiles.values()
            if self.register_tile_animation(tileset, tile_def)
        )
        if count:
            self.logger.debug(f"Registered {count} tile animations for '{tileset.id}'")
        return count

    def current_tile(self, tileset: TilesetDefinition, local_id: int) -> int:
        """Tileset-local id to draw for a tile at the current tick.

        Static tiles come back unchanged. An animated tile that was never
        registered shows its first frame.
        """
        tile_def = tileset.tile(local_id)
        if tile_def is None or tile_def.animation is None or not tile_def.animation.frames:
            return local_id
        frames = tile_def.animation.frames
        index = self.frame(self.tile_key(tileset, local_id))
        return frames[index % len(frames)]
