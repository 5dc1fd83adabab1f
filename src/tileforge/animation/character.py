"""
Per-character animation state machine and the sprite entity built on it.

States are named ``<action>-<direction>`` (``idle-down``, ``run-right``).
Requests for combinations the sprite sheet does not define fall back to a
configurable default state instead of failing.
"""

import logging
from dataclasses import dataclass

from PIL import Image

from ..errors import AssetLoadError
from ..geometry import Rect
from ..sprites.models import Direction, ResolvedAnimation, SpriteFrame, SpriteSheetDefinition
from ..sprites.registry import Atlas, SpriteSheetRegistry
from .clock import AnimationTrack

DEFAULT_FALLBACK = "idle-down"
DEFAULT_RUN_SPEED = 1.5


def split_state(name: str) -> tuple[str, Direction]:
    """Split ``<action>-<direction>`` into its parts.

    Raises:
        ValueError: If the name has no valid direction suffix
    """
    action, sep, direction = name.rpartition("-")
    if not sep or not action:
        raise ValueError(f"Animation state must be '<action>-<direction>', got {name!r}")
    return action, Direction(direction)


@dataclass
class CharacterAnimationState:
    """Snapshot of what a character is currently playing."""
    character_id: str
    animation: str | None = None
    action: str | None = None
    direction: Direction = Direction.DOWN
    frame: int = 0
    elapsed: float = 0.0
    speed: float = 1.0


class CharacterAnimationController:
    """Selects and advances the animation of one character."""

    def __init__(
        self,
        character_id: str,
        sheet: SpriteSheetDefinition,
        run_speed: float = DEFAULT_RUN_SPEED,
        fallback: str = DEFAULT_FALLBACK,
        speeds: dict[str, float] | None = None,
    ):
        """Initialize the controller in the fallback state.

        Args:
            character_id: Owning character
            sheet: Sprite sheet providing the animations
            run_speed: Speed multiplier of the ``run`` action
            fallback: State used when a request cannot be satisfied
            speeds: Extra per-action speed multipliers
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.sheet = sheet
        self.fallback = fallback
        self.speeds: dict[str, float] = {"run": run_speed}
        if speeds:
            self.speeds.update(speeds)

        self.state = CharacterAnimationState(character_id=character_id)
        self.fallbacks: list[str] = []
        self.destroyed = False
        self._requested: str | None = None
        self._resolved: ResolvedAnimation | None = None
        self._track: AnimationTrack | None = None

        action, direction = split_state(fallback)
        self.set_animation(action, direction)

    @property
    def character_id(self) -> str:
        return self.state.character_id

    @property
    def animation(self) -> str | None:
        return self.state.animation

    def speed_for(self, action: str) -> float:
        return self.speeds.get(action, 1.0)

    def set_animation(self, action: str, direction: Direction | str) -> str | None:
        """Request a state change.

        Repeating the current request is a no-op. A combination the sheet
        does not define is replaced by the fallback state and recorded in
        ``fallbacks``.

        Returns:
            Name of the state now playing (None if even the fallback is missing)
        """
        if self.destroyed:
            return self.state.animation
        if isinstance(direction, str):
            direction = Direction(direction)

        requested = f"{action}-{direction.value}"
        if requested == self._requested:
            return self.state.animation
        self._requested = requested

        resolved = self.sheet.resolve(action, direction)
        if resolved is None:
            action, direction = split_state(self.fallback)
            resolved = self.sheet.resolve(action, direction)
            self.fallbacks.append(requested)
            self.logger.warning(
                f"Character '{self.character_id}' has no animation '{requested}', "
                f"using '{self.fallback}'"
            )
            if resolved is None:
                self.logger.error(
                    f"Sprite sheet '{self.sheet.id}' lacks fallback animation '{self.fallback}'"
                )

        name = f"{action}-{direction.value}"
        if name == self.state.animation:
            return name

        self._switch(name, action, direction, resolved)
        return self.state.animation

    def _switch(
        self,
        name: str,
        action: str,
        direction: Direction,
        resolved: ResolvedAnimation | None,
    ) -> None:
        speed = self.speed_for(action)
        self._resolved = resolved
        self._track = None
        if resolved is not None:
            self._track = AnimationTrack(
                frame_count=resolved.frame_count,
                durations=resolved.durations,
                loop=resolved.loop,
                speed=speed,
            )
            self.state.animation = name
        else:
            self.state.animation = None
        self.state.action = action
        self.state.direction = direction
        self.state.frame = 0
        self.state.elapsed = 0.0
        self.state.speed = speed
        self.logger.debug(f"Character '{self.character_id}' now playing '{name}'")

    def tick(self, delta_ms: float) -> None:
        """Advance the current animation by elapsed milliseconds."""
        if self.destroyed or self._track is None:
            return
        self._track.advance(delta_ms)
        self.state.frame = self._track.frame
        self.state.elapsed = self._track.elapsed

    def current_frame(self) -> SpriteFrame | None:
        if self._resolved is None:
            return None
        return self._resolved.frames[self.state.frame]

    def current_rect(self) -> Rect | None:
        """Atlas rectangle of the frame to draw."""
        frame = self.current_frame()
        return self.sheet.frame_rect(frame) if frame is not None else None

    def destroy(self) -> None:
        self.destroyed = True
        self._track = None


class CharacterSprite:
    """A character bound to its atlas for one skin tone.

    Until the atlas arrives (or if it fails) the sprite shows a transparent
    placeholder of one frame's size.
    """

    def __init__(
        self,
        character_id: str,
        sheet: SpriteSheetDefinition,
        registry: SpriteSheetRegistry,
        skin_tone: str = "tan",
        run_speed: float = DEFAULT_RUN_SPEED,
        fallback: str = DEFAULT_FALLBACK,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.sheet = sheet
        self.registry = registry
        self.skin_tone = skin_tone
        self.controller = CharacterAnimationController(
            character_id, sheet, run_speed=run_speed, fallback=fallback
        )
        self.placeholder = Image.new(
            "RGBA", (sheet.frame_size.width, sheet.frame_size.height), (0, 0, 0, 0)
        )
        self.atlas: Atlas | None = None
        self.destroyed = False

    @property
    def atlas_key(self) -> tuple[str, str]:
        return (self.skin_tone, self.sheet.image)

    @property
    def texture(self) -> Image.Image:
        return self.atlas.image if self.atlas is not None else self.placeholder

    async def load_textures(self) -> bool:
        """Acquire the atlas through the registry.

        Returns:
            True if the atlas was assigned; False if loading failed or the
            sprite was destroyed while waiting
        """
        try:
            atlas = await self.registry.acquire(self.atlas_key)
        except AssetLoadError as e:
            self.logger.warning(
                f"Keeping placeholder for character '{self.controller.character_id}': {e}"
            )
            return False

        if self.destroyed:
            self.logger.debug(
                f"Character '{self.controller.character_id}' destroyed before atlas arrived"
            )
            return False
        self.atlas = atlas
        return True

    def set_animation(self, action: str, direction: Direction | str) -> str | None:
        return self.controller.set_animation(action, direction)

    def tick(self, delta_ms: float) -> None:
        if not self.destroyed:
            self.controller.tick(delta_ms)

    def frame_image(self) -> Image.Image:
        """Crop of the current frame, or the placeholder when unavailable."""
        rect = self.controller.current_rect()
        if self.atlas is None or rect is None:
            return self.placeholder
        return self.atlas.image.crop(rect.as_box())

    def destroy(self) -> None:
        self.destroyed = True
        self.controller.destroy()
