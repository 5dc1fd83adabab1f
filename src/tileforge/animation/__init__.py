"""
Animation package.

Provides the explicit frame clock and the per-character animation state
machine.
"""

from .clock import AnimationClock, AnimationTrack
from .character import (
    CharacterAnimationController, CharacterAnimationState, CharacterSprite,
    DEFAULT_FALLBACK, DEFAULT_RUN_SPEED, split_state
)

__all__ = [
    "AnimationClock",
    "AnimationTrack",
    "CharacterAnimationController",
    "CharacterAnimationState",
    "CharacterSprite",
    "DEFAULT_FALLBACK",
    "DEFAULT_RUN_SPEED",
    "split_state",
]
