"""
renderer/images.py — Puzzle picture loading for Shadow Pieces.

ImageCache turns an asset ref ("/aquarium/rare/koi.png") into a decoded
pygame.Surface. Pictures come from ASSET_ROOT on disk, or over HTTP from
ASSET_BASE_URL when that is set. Decoded surfaces are shared across
renders and never invalidated during a session; failures are not cached,
so the next session tries again.

ImagePump is the glue between the cache and core/engine.py. Once per
frame it looks at engine.image_request and keeps at most one decode in
flight for it. When the engine moves to another stage the in-flight task
is cancelled, and the engine itself discards any result whose generation
no longer matches.

Usage:
    cache = ImageCache()
    pump  = ImagePump(cache)

    # each frame, inside the running event loop:
    pump.pump(engine)
"""

from __future__ import annotations
import asyncio
import io
import logging
import os
from urllib.parse import unquote

import aiohttp
import pygame

from core.errors import ImageLoadError
from renderer.reveal import as_rgba
from settings import ASSET_BASE_URL, ASSET_ROOT, REQUEST_TIMEOUT_S

logger = logging.getLogger(__name__)


class ImageCache:
    """Decoded picture cache keyed by asset ref.

    Attributes:
        fetch_count: Number of reads that actually hit disk or network.
        _asset_root: Directory mirroring the public asset tree.
        _base_url:   HTTP base for assets. Empty to read from _asset_root.
        _surfaces:   ref → decoded 32-bit surface.
        _session:    Lazily created aiohttp session for HTTP assets.
    """

    def __init__(self, asset_root: str = ASSET_ROOT, base_url: str = ASSET_BASE_URL) -> None:
        self._asset_root = asset_root
        self._base_url = base_url.rstrip("/")
        self._surfaces: dict[str, pygame.Surface] = {}
        self._session: aiohttp.ClientSession | None = None
        self.fetch_count = 0

    def get(self, ref: str) -> pygame.Surface | None:
        return self._surfaces.get(ref)

    async def load(self, ref: str) -> pygame.Surface:
        """Return the decoded picture for ref, reading it on first use.

        Raises:
            ImageLoadError: If the asset is missing or cannot be decoded.
        """
        cached = self._surfaces.get(ref)
        if cached is not None:
            return cached

        self.fetch_count += 1
        data = await (self._read_http(ref) if self._base_url else self._read_file(ref))
        try:
            surface = pygame.image.load(io.BytesIO(data), os.path.basename(ref))
        except pygame.error as exc:
            raise ImageLoadError(ref, str(exc)) from exc

        surface = as_rgba(surface)
        self._surfaces[ref] = surface
        return surface

    async def _read_file(self, ref: str) -> bytes:
        path = os.path.join(self._asset_root, *unquote(ref).lstrip("/").split("/"))
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            raise ImageLoadError(ref, exc.strerror or str(exc)) from exc

    async def _read_http(self, ref: str) -> bytes:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_S),
            )
        url = f"{self._base_url}{ref}"
        try:
            async with self._session.get(url) as response:
                if response.status != 200:
                    raise ImageLoadError(ref, f"HTTP {response.status}")
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ImageLoadError(ref, str(exc)) from exc

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()


class ImagePump:
    """Keeps the engine's current picture request serviced.

    Attributes:
        _cache:      Shared ImageCache.
        _task:       In-flight decode task, or None.
        _generation: Generation id the in-flight task was started for.
    """

    def __init__(self, cache: ImageCache) -> None:
        self._cache = cache
        self._task: asyncio.Task | None = None
        self._generation: int | None = None

    def pump(self, engine) -> None:
        """Start, keep or cancel the decode for engine.image_request.

        Must be called from inside a running event loop.
        """
        request = engine.image_request
        if request is None:
            self.cancel()
            return

        generation, ref = request
        if generation == self._generation and self._task is not None:
            return
        self.cancel()
        self._generation = generation

        cached = self._cache.get(ref)
        if cached is not None:
            engine.deliver_image(generation, cached)
            return
        self._task = asyncio.ensure_future(self._load(engine, generation, ref))

    async def _load(self, engine, generation: int, ref: str) -> None:
        try:
            surface = await self._cache.load(ref)
        except ImageLoadError as exc:
            engine.image_failed(generation, exc)
            return
        engine.deliver_image(generation, surface)

    def cancel(self) -> None:
        """Drop the in-flight decode, if any. Its result will never be applied."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._generation = None
