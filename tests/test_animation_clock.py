"""Tests for the animation clock."""

import random
from typing import Any

import pytest

from tileforge.animation import AnimationClock, AnimationTrack
from tileforge.tilesets import TilesetCatalog


class TestAnimationTrack:
    """Test frame stepping of a single track."""

    def test_steps_on_duration(self) -> None:
        """Test one frame per duration."""
        track = AnimationTrack(frame_count=3, durations=(100, 100, 100))
        track.advance(99)
        assert track.frame == 0
        track.advance(1)
        assert track.frame == 1

    def test_large_delta_steps_several_frames(self) -> None:
        """Test a delta spanning several durations advances several frames."""
        track = AnimationTrack(frame_count=4, durations=(100,) * 4)
        assert track.advance(250) == 2
        assert track.frame == 2
        assert track.elapsed == pytest.approx(50)

    def test_wraps_after_full_cycle(self) -> None:
        """Test a looping track returns to frame 0 after frameCount * duration / speed."""
        track = AnimationTrack(frame_count=3, durations=(100,) * 3, speed=1.5)
        track.advance(200)
        assert track.frame == 0

    def test_frame_index_stays_in_range(self) -> None:
        """Test arbitrary delta sequences never leave [0, frameCount-1]."""
        rng = random.Random(3)
        track = AnimationTrack(frame_count=5, durations=(30, 70, 10, 55, 90), speed=1.3)
        for _ in range(500):
            track.advance(rng.uniform(0, 400))
            assert 0 <= track.frame <= 4

    def test_non_looping_freezes_on_last_frame(self) -> None:
        """Test loop=False stops at the final frame."""
        track = AnimationTrack(frame_count=3, durations=(100,) * 3, loop=False)
        track.advance(1000)
        assert track.frame == 2
        assert track.finished
        track.advance(1000)
        assert track.frame == 2

    def test_per_frame_durations(self) -> None:
        """Test each frame holds for its own duration."""
        track = AnimationTrack(frame_count=2, durations=(100, 300))
        track.advance(100)
        assert track.frame == 1
        track.advance(299)
        assert track.frame == 1
        track.advance(1)
        assert track.frame == 0

    def test_single_frame_never_moves(self) -> None:
        """Test single-frame animations stay on frame 0."""
        track = AnimationTrack(frame_count=1, durations=(100,))
        track.advance(10_000)
        assert track.frame == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"frame_count": 0, "durations": ()},
            {"frame_count": 2, "durations": (100,)},
            {"frame_count": 1, "durations": (0,)},
            {"frame_count": 1, "durations": (100,), "speed": 0},
        ],
    )
    def test_invalid_tracks(self, kwargs: dict[str, Any]) -> None:
        """Test malformed timings are rejected."""
        with pytest.raises(ValueError):
            AnimationTrack(**kwargs)


class TestAnimationClock:
    """Test the clock context."""

    def test_register_and_advance(self) -> None:
        """Test registered tracks advance together."""
        clock = AnimationClock()
        clock.register("a", 2, 100)
        clock.register("b", 4, 50)
        clock.advance(100)
        assert clock.frame("a") == 1
        assert clock.frame("b") == 2
        assert clock.tick == 100

    def test_split_deltas_match_single_delta(self) -> None:
        """Test splitting elapsed time does not change the frame."""
        whole = AnimationClock()
        split = AnimationClock()
        for clock in (whole, split):
            clock.register("walk", 6, 120, speed=1.5)
        whole.advance(1000)
        for _ in range(40):
            split.advance(25)
        assert whole.frame("walk") == split.frame("walk")

    def test_independent_clocks_are_deterministic(self) -> None:
        """Test two clocks fed the same deltas produce the same frames."""
        deltas = [16.0, 17.0, 16.0, 33.0, 8.0, 120.0, 5.0] * 20
        sequences = []
        for _ in range(2):
            clock = AnimationClock()
            clock.register("x", 4, 70, frame_durations=[70, 30, 90, 10])
            seq = []
            for delta in deltas:
                clock.advance(delta)
                seq.append(clock.frame("x"))
            sequences.append(seq)
        assert sequences[0] == sequences[1]

    def test_clocks_do_not_share_state(self) -> None:
        """Test separate clocks never interfere."""
        first = AnimationClock()
        second = AnimationClock()
        first.register("k", 3, 100)
        second.register("k", 3, 100)
        first.advance(100)
        assert first.frame("k") == 1
        assert second.frame("k") == 0

    def test_negative_delta_rejected(self) -> None:
        """Test time cannot run backwards."""
        with pytest.raises(ValueError):
            AnimationClock().advance(-1)

    def test_unknown_key_is_frame_zero(self) -> None:
        """Test frames of unknown keys default to 0."""
        assert AnimationClock().frame("missing") == 0

    def test_reset_unregister_clear(self) -> None:
        """Test track lifecycle helpers."""
        clock = AnimationClock()
        clock.register("k", 3, 100)
        clock.advance(150)
        clock.reset("k")
        assert clock.frame("k") == 0
        assert clock.unregister("k")
        assert not clock.unregister("k")
        clock.register("k", 3, 100)
        clock.advance(10)
        clock.clear()
        assert clock.tracks == {}
        assert clock.tick == 0

    def test_tile_animation_bridge(self, catalog: TilesetCatalog) -> None:
        """Test animated tiles substitute the current frame's tile id."""
        tileset = catalog.get("overworld")
        assert tileset is not None
        clock = AnimationClock()
        assert clock.register_tileset(tileset) == 1

        assert clock.current_tile(tileset, 110) == 110
        clock.advance(100)
        assert clock.current_tile(tileset, 110) == 111
        clock.advance(200)
        assert clock.current_tile(tileset, 110) == 110
        # Static tiles are untouched
        assert clock.current_tile(tileset, 5) == 5

    def test_unregistered_tile_shows_first_frame(self, catalog: TilesetCatalog) -> None:
        """Test an animated tile nobody registered draws frame 0."""
        tileset = catalog.get("overworld")
        assert tileset is not None
        clock = AnimationClock()
        clock.advance(500)
        assert clock.current_tile(tileset, 110) == 110

    def test_static_tile_registration(self, catalog: TilesetCatalog) -> None:
        """Test static tiles are not registered."""
        tileset = catalog.get("overworld")
        assert tileset is not None
        tile = tileset.tile(0)
        assert tile is not None
        assert not AnimationClock().register_tile_animation(tileset, tile)
