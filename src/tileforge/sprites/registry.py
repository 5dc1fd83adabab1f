"""
Session cache of decoded texture atlases.

Atlases are keyed by resource identity: ``(owner, path)`` where owner is a
skin tone or a tileset id. Loading is the only suspension point of the
render core; concurrent requests for the same key share one in-flight
fetch and all requesters observe the same completion.
"""

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Awaitable, Callable

from PIL import Image

from ..errors import AssetLoadError, TileforgeError

AtlasKey = tuple[str, str]
Fetcher = Callable[[str], Awaitable[bytes]]


@dataclass(frozen=True)
class Atlas:
    """A decoded RGBA atlas image shared by every consumer of its key."""
    key: AtlasKey
    image: Image.Image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


def decode_atlas(data: bytes) -> Image.Image:
    """Decode image bytes into a fully loaded RGBA image."""
    with Image.open(BytesIO(data)) as image:
        return image.convert("RGBA")


class FileFetcher:
    """Default fetcher: reads atlas bytes from disk, relative to a base directory."""

    def __init__(self, base_path: str | Path | None = None, executor: Executor | None = None):
        self.base_path = Path(base_path) if base_path is not None else None
        self.executor = executor

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        if self.base_path is not None and not candidate.is_absolute():
            candidate = self.base_path / candidate
        return candidate

    async def __call__(self, path: str) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.resolve(path).read_bytes)


class SpriteSheetRegistry:
    """Deduplicating atlas cache.

    There is no eviction: an atlas stays cached for the lifetime of the
    registry. All bookkeeping happens on the event loop thread; only the
    image decode runs in the executor.

    Each key has at most one shared load future, which never leaves the
    registry. Callers get their own future relayed from it, so a caller
    that stops waiting cannot cancel the load for anyone else.
    """

    def __init__(self, fetch: Fetcher | None = None, executor: Executor | None = None):
        """Initialize the registry.

        Args:
            fetch: Async callable returning the raw bytes for a path;
                defaults to reading files from disk
            executor: Executor for decoding; None uses the loop default
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._fetch: Fetcher = fetch if fetch is not None else FileFetcher(executor=executor)
        self._executor = executor
        self._atlases: dict[AtlasKey, Atlas] = {}
        self._pending: dict[AtlasKey, asyncio.Future[Atlas]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self.fetch_count = 0
        self.closed = False

    def acquire(self, key: AtlasKey) -> "asyncio.Future[Atlas]":
        """Return a future for the atlas of ``key``.

        A cached atlas comes back as an already completed future; a key
        with a load in flight joins that load. Cancelling the returned
        future only affects this caller. Must be called from a running
        event loop.

        Raises:
            TileforgeError: If the registry has been closed
        """
        if self.closed:
            raise TileforgeError(f"Registry is closed, cannot acquire {key!r}")

        loop = asyncio.get_running_loop()
        cached = self._atlases.get(key)
        if cached is not None:
            done: asyncio.Future[Atlas] = loop.create_future()
            done.set_result(cached)
            return done

        shared = self._pending.get(key)
        if shared is not None:
            self.logger.debug(f"Joining in-flight load of {key!r}")
            return self._relay(loop, shared)

        shared = loop.create_future()
        self._pending[key] = shared
        self.fetch_count += 1
        self.logger.debug(f"Fetching atlas {key!r}")
        task = loop.create_task(self._load(key, shared))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return self._relay(loop, shared)

    @staticmethod
    def _relay(
        loop: asyncio.AbstractEventLoop, shared: "asyncio.Future[Atlas]"
    ) -> "asyncio.Future[Atlas]":
        """Per-caller future that settles with ``shared``."""
        view: asyncio.Future[Atlas] = loop.create_future()

        def settle(source: "asyncio.Future[Atlas]") -> None:
            if view.done():
                return
            if source.cancelled():
                view.cancel()
            elif source.exception() is not None:
                view.set_exception(source.exception())
            else:
                view.set_result(source.result())

        shared.add_done_callback(settle)
        return view

    async def _load(self, key: AtlasKey, shared: "asyncio.Future[Atlas]") -> None:
        _, path = key
        loop = asyncio.get_running_loop()
        try:
            data = await self._fetch(path)
            image = await loop.run_in_executor(self._executor, decode_atlas, data)
        except Exception as e:
            error = e if isinstance(e, AssetLoadError) else AssetLoadError(key, str(e))
            if error is not e:
                error.__cause__ = e
            self.logger.error(f"Failed to load atlas {key!r}: {e}")
            if not shared.done():
                shared.set_exception(error)
            return
        finally:
            if not self.closed and self._pending.get(key) is shared:
                del self._pending[key]

        if self.closed or shared.done():
            self.logger.debug(f"Discarding atlas {key!r}: registry closed during load")
            return

        atlas = Atlas(key=key, image=image)
        self._atlases[key] = atlas
        self.logger.info(f"Loaded atlas {key!r} ({image.width}x{image.height})")
        shared.set_result(atlas)

    def get(self, key: AtlasKey) -> Atlas | None:
        """Cached atlas for ``key``; never starts a load."""
        return self._atlases.get(key)

    def is_loading(self, key: AtlasKey) -> bool:
        return key in self._pending

    def keys(self) -> list[AtlasKey]:
        return list(self._atlases)

    def close(self) -> None:
        """Destroy the registry.

        Pending loads are cancelled; waiting callers see the cancellation
        and nothing more is cached.
        """
        if self.closed:
            return
        self.closed = True
        for shared in self._pending.values():
            shared.cancel()
        for task in self._tasks:
            task.cancel()
        self.logger.debug(
            f"Registry closed with {len(self._pending)} pending load(s), "
            f"{len(self._tasks)} task(s) cancelled"
        )
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._atlases)

    def __contains__(self, key: object) -> bool:
        return key in self._atlases
