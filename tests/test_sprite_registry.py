"""Tests for the deduplicating atlas registry."""

import asyncio
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from tileforge.errors import AssetLoadError, TileforgeError
from tileforge.sprites import Atlas, FileFetcher, SpriteSheetRegistry, decode_atlas


def png_bytes(color: tuple[int, int, int, int] = (0, 128, 0, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (64, 32), color).save(buffer, format="PNG")
    return buffer.getvalue()


class CountingFetcher:
    """Fetcher that records calls and can be held open."""

    def __init__(self, data: bytes | None = None, error: Exception | None = None):
        self.data = data if data is not None else png_bytes()
        self.error = error
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.interrupted = False

    async def __call__(self, path: str) -> bytes:
        self.calls.append(path)
        if self.gate is not None:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.interrupted = True
                raise
        if self.error is not None:
            raise self.error
        return self.data


class TestDecodeAtlas:
    """Test image decoding."""

    def test_decodes_to_rgba(self) -> None:
        """Test decoded atlases are RGBA regardless of source mode."""
        buffer = BytesIO()
        Image.new("P", (16, 16)).save(buffer, format="PNG")
        image = decode_atlas(buffer.getvalue())
        assert image.mode == "RGBA"
        assert image.size == (16, 16)


class TestSpriteSheetRegistry:
    """Test acquisition, deduplication and failure handling."""

    def test_concurrent_acquires_share_one_fetch(self) -> None:
        """Test N concurrent acquires trigger one fetch and see the same atlas."""
        fetcher = CountingFetcher()

        async def scenario() -> tuple[list[Atlas], SpriteSheetRegistry]:
            registry = SpriteSheetRegistry(fetch=fetcher)
            futures = [registry.acquire(("tan", "body.png")) for _ in range(10)]
            assert registry.is_loading(("tan", "body.png"))
            return list(await asyncio.gather(*futures)), registry

        atlases, registry = asyncio.run(scenario())
        assert fetcher.calls == ["body.png"]
        assert registry.fetch_count == 1
        assert all(atlas is atlases[0] for atlas in atlases)
        assert atlases[0].size == (64, 32)
        assert not registry.is_loading(("tan", "body.png"))

    def test_cached_atlas_returned_immediately(self) -> None:
        """Test a cached key resolves without a new fetch."""
        fetcher = CountingFetcher()

        async def scenario() -> tuple[Atlas, bool, Atlas]:
            registry = SpriteSheetRegistry(fetch=fetcher)
            first = await registry.acquire(("tan", "body.png"))
            future = registry.acquire(("tan", "body.png"))
            done = future.done()
            return first, done, await future

        first, done, second = asyncio.run(scenario())
        assert done
        assert first is second
        assert len(fetcher.calls) == 1

    def test_keys_are_distinct(self) -> None:
        """Test different keys load independently."""
        fetcher = CountingFetcher()

        async def scenario() -> SpriteSheetRegistry:
            registry = SpriteSheetRegistry(fetch=fetcher)
            await asyncio.gather(
                registry.acquire(("tan", "body.png")),
                registry.acquire(("dark", "body.png")),
                registry.acquire(("overworld", "tiles.png")),
            )
            return registry

        registry = asyncio.run(scenario())
        assert registry.fetch_count == 3
        assert len(registry) == 3
        assert ("overworld", "tiles.png") in registry

    def test_failure_reaches_every_caller(self) -> None:
        """Test fetch failures surface as AssetLoadError and are not cached."""
        fetcher = CountingFetcher(error=OSError("connection reset"))

        async def scenario() -> tuple[list[object], SpriteSheetRegistry]:
            registry = SpriteSheetRegistry(fetch=fetcher)
            futures = [registry.acquire(("tan", "body.png")) for _ in range(3)]
            results = await asyncio.gather(*futures, return_exceptions=True)
            return list(results), registry

        results, registry = asyncio.run(scenario())
        assert len(fetcher.calls) == 1
        for result in results:
            assert isinstance(result, AssetLoadError)
            assert result.key == ("tan", "body.png")
            assert "connection reset" in result.reason
        assert registry.get(("tan", "body.png")) is None
        assert not registry.is_loading(("tan", "body.png"))

    def test_retry_after_failure(self) -> None:
        """Test a later acquire fetches again after a failure."""
        fetcher = CountingFetcher(error=OSError("flaky"))

        async def scenario() -> Atlas:
            registry = SpriteSheetRegistry(fetch=fetcher)
            with pytest.raises(AssetLoadError):
                await registry.acquire(("tan", "body.png"))
            fetcher.error = None
            return await registry.acquire(("tan", "body.png"))

        atlas = asyncio.run(scenario())
        assert atlas.size == (64, 32)
        assert len(fetcher.calls) == 2

    def test_undecodable_bytes(self) -> None:
        """Test garbage bytes become AssetLoadError."""
        fetcher = CountingFetcher(data=b"not an image")

        async def scenario() -> None:
            registry = SpriteSheetRegistry(fetch=fetcher)
            await registry.acquire(("tan", "body.png"))

        with pytest.raises(AssetLoadError):
            asyncio.run(scenario())

    def test_close_discards_pending_result(self) -> None:
        """Test a load completing after close is not cached."""
        fetcher = CountingFetcher()

        async def scenario() -> tuple[asyncio.Future[Atlas], SpriteSheetRegistry]:
            fetcher.gate = asyncio.Event()
            registry = SpriteSheetRegistry(fetch=fetcher)
            future = registry.acquire(("tan", "body.png"))
            await asyncio.sleep(0)
            registry.close()
            fetcher.gate.set()
            # Let the loader finish
            for _ in range(5):
                await asyncio.sleep(0.01)
            return future, registry

        future, registry = asyncio.run(scenario())
        assert future.cancelled()
        assert registry.get(("tan", "body.png")) is None
        assert len(registry) == 0

    def test_close_cancels_in_flight_fetch(self) -> None:
        """Test closing stops the running load instead of leaving it behind."""
        fetcher = CountingFetcher()

        async def scenario() -> None:
            fetcher.gate = asyncio.Event()
            registry = SpriteSheetRegistry(fetch=fetcher)
            registry.acquire(("tan", "body.png"))
            await asyncio.sleep(0)
            registry.close()
            await asyncio.sleep(0.01)

        asyncio.run(scenario())
        assert fetcher.interrupted

    def test_timed_out_waiter_does_not_break_load(self) -> None:
        """Test one caller giving up leaves the shared load intact."""
        fetcher = CountingFetcher()
        key = ("tan", "body.png")

        async def scenario() -> tuple[Atlas, bool, Atlas, SpriteSheetRegistry]:
            fetcher.gate = asyncio.Event()
            registry = SpriteSheetRegistry(fetch=fetcher)
            patient = registry.acquire(key)
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(registry.acquire(key), 0.01)
            fetcher.gate.set()
            atlas = await patient
            later = registry.acquire(key)
            return atlas, later.done(), await later, registry

        atlas, later_done, later_atlas, registry = asyncio.run(scenario())
        assert atlas.size == (64, 32)
        assert later_done
        assert later_atlas is atlas
        assert registry.fetch_count == 1
        assert not registry.is_loading(key)

    def test_cancelled_waiter_is_independent(self) -> None:
        """Test cancelling one returned future leaves other callers waiting."""
        fetcher = CountingFetcher()
        key = ("tan", "body.png")

        async def scenario() -> tuple[bool, Atlas]:
            registry = SpriteSheetRegistry(fetch=fetcher)
            first = registry.acquire(key)
            second = registry.acquire(key)
            first.cancel()
            return first.cancelled(), await second

        first_cancelled, atlas = asyncio.run(scenario())
        assert first_cancelled
        assert atlas.size == (64, 32)
        assert len(fetcher.calls) == 1

    def test_acquire_after_close(self) -> None:
        """Test a closed registry refuses new work."""
        async def scenario() -> None:
            registry = SpriteSheetRegistry(fetch=CountingFetcher())
            registry.close()
            registry.acquire(("tan", "body.png"))

        with pytest.raises(TileforgeError):
            asyncio.run(scenario())

    def test_default_file_fetcher(self, atlas_png: Path) -> None:
        """Test the default fetcher reads files relative to its base path."""
        async def scenario() -> Atlas:
            registry = SpriteSheetRegistry(fetch=FileFetcher(base_path=atlas_png.parent))
            return await registry.acquire(("overworld", atlas_png.name))

        atlas = asyncio.run(scenario())
        assert atlas.size == (64, 32)
        assert atlas.image.getpixel((40, 10)) == (0, 0, 255, 255)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file surfaces as AssetLoadError."""
        async def scenario() -> None:
            registry = SpriteSheetRegistry(fetch=FileFetcher(base_path=tmp_path))
            await registry.acquire(("overworld", "missing.png"))

        with pytest.raises(AssetLoadError):
            asyncio.run(scenario())
