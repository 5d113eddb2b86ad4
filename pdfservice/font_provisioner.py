"""
Font Provisioner

Makes a Unicode-capable TrueType font available for rendering. The font is
downloaded once, cached on disk, and memoized in memory for the lifetime of
the process.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from typing import Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from core import config

logger = logging.getLogger(__name__)


class FontUnavailableError(RuntimeError):
    """Raised when no cached font exists and the download failed."""


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write_atomically(path: str, data: bytes) -> None:
    """Write to a temp file next to `path`, then rename it into place."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".font-", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class FontProvisioner:
    """Single-flight, memoized access to the rendering font.

    Concurrent first callers queue on one lock; the first one in reads the
    cache or downloads the font, the rest get the memoized bytes.
    """

    def __init__(
        self,
        cache_path: str,
        font_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cache_path = cache_path
        self.font_url = font_url
        self._timeout = timeout
        self._transport = transport
        self._font_bytes: Optional[bytes] = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._font_bytes is not None

    async def ensure_font(self) -> bytes:
        """
        Returns the font bytes, downloading and caching them on first use.

        Raises:
            FontUnavailableError: If the font is not cached and cannot be downloaded.
        """
        if self._font_bytes is not None:
            return self._font_bytes

        async with self._lock:
            if self._font_bytes is None:
                self._font_bytes = await self._load_or_download()
        return self._font_bytes

    async def _load_or_download(self) -> bytes:
        if os.path.exists(self.cache_path):
            logger.info("Font already cached at %s", self.cache_path)
            return await run_in_threadpool(_read_bytes, self.cache_path)

        logger.info("Downloading font from %s", self.font_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(self.font_url)
                response.raise_for_status()
                font_bytes = response.content
        except httpx.HTTPError as exc:
            logger.error("Failed to download font: %s", exc)
            raise FontUnavailableError("Failed to download the rendering font") from exc

        if not font_bytes:
            raise FontUnavailableError("Downloaded font file was empty")

        try:
            await run_in_threadpool(_write_atomically, self.cache_path, font_bytes)
            logger.info("Font downloaded and saved to %s", self.cache_path)
        except OSError as exc:
            # The bytes are usable even if the cache write failed.
            logger.warning("Could not cache font at %s: %s", self.cache_path, exc)

        return font_bytes


_provisioner: Optional[FontProvisioner] = None


def get_font_provisioner() -> FontProvisioner:
    """Return the process-wide font provisioner."""
    global _provisioner
    if _provisioner is None:
        _provisioner = FontProvisioner(
            cache_path=config.FONT_CACHE_PATH,
            font_url=config.FONT_URL,
            timeout=config.FONT_DOWNLOAD_TIMEOUT_SECONDS,
        )
    return _provisioner


def reset_font_provisioner_for_tests() -> None:
    """Drop the process-wide provisioner so the next call builds a fresh one."""
    global _provisioner
    _provisioner = None
