"""
Unit Tests for Font Provisioner

Tests cache hits, single-flight download and failure handling.
"""

# Standard library
import asyncio
import os

# Third-party
import httpx
import pytest

# Local application
from pdfservice.font_provisioner import (
    FontProvisioner,
    FontUnavailableError,
    get_font_provisioner,
    reset_font_provisioner_for_tests,
)

FONT_URL = "https://fonts.example.test/NotoSansJP.ttf"
FONT_BYTES = b"\x00\x01\x00\x00fake-truetype-bytes"


def _counting_transport(content: bytes = FONT_BYTES, status_code: int = 200):
    """MockTransport that counts requests and answers with fixed content."""
    calls = {"count": 0}

    async def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        # Yield so concurrent callers get a chance to race
        await asyncio.sleep(0.01)
        return httpx.Response(status_code, content=content)

    return httpx.MockTransport(handler), calls


class TestFontProvisioner:
    """Tests for FontProvisioner.ensure_font."""

    @pytest.mark.asyncio
    async def test_cached_file_used_without_download(self, tmp_path) -> None:
        cache_path = tmp_path / "fonts" / "font.ttf"
        cache_path.parent.mkdir()
        cache_path.write_bytes(b"cached-font")
        transport, calls = _counting_transport()

        provisioner = FontProvisioner(str(cache_path), FONT_URL, transport=transport)

        assert await provisioner.ensure_font() == b"cached-font"
        assert calls["count"] == 0
        assert provisioner.is_loaded is True

    @pytest.mark.asyncio
    async def test_download_writes_cache_file(self, tmp_path) -> None:
        cache_path = tmp_path / "fonts" / "font.ttf"
        transport, calls = _counting_transport()

        provisioner = FontProvisioner(str(cache_path), FONT_URL, transport=transport)
        font = await provisioner.ensure_font()

        assert font == FONT_BYTES
        assert calls["count"] == 1
        assert cache_path.read_bytes() == FONT_BYTES
        # No partial temp files left beside the cache
        assert os.listdir(cache_path.parent) == ["font.ttf"]

    @pytest.mark.asyncio
    async def test_concurrent_first_use_downloads_once(self, tmp_path) -> None:
        """Ten simultaneous callers trigger exactly one download."""
        cache_path = tmp_path / "font.ttf"
        transport, calls = _counting_transport()
        provisioner = FontProvisioner(str(cache_path), FONT_URL, transport=transport)

        results = await asyncio.gather(*(provisioner.ensure_font() for _ in range(10)))

        assert calls["count"] == 1
        assert all(result == FONT_BYTES for result in results)

    @pytest.mark.asyncio
    async def test_memoized_after_first_load(self, tmp_path) -> None:
        cache_path = tmp_path / "font.ttf"
        transport, calls = _counting_transport()
        provisioner = FontProvisioner(str(cache_path), FONT_URL, transport=transport)

        await provisioner.ensure_font()
        cache_path.unlink()
        await provisioner.ensure_font()

        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_http_error_raises_font_unavailable(self, tmp_path) -> None:
        cache_path = tmp_path / "font.ttf"
        transport, _ = _counting_transport(content=b"not found", status_code=404)
        provisioner = FontProvisioner(str(cache_path), FONT_URL, transport=transport)

        with pytest.raises(FontUnavailableError):
            await provisioner.ensure_font()

        assert not cache_path.exists()
        assert provisioner.is_loaded is False

    @pytest.mark.asyncio
    async def test_failed_download_is_retried_on_next_call(self, tmp_path) -> None:
        """A failure is not memoized; the next job tries again."""
        cache_path = tmp_path / "font.ttf"
        responses = [httpx.Response(503), httpx.Response(200, content=FONT_BYTES)]

        async def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        provisioner = FontProvisioner(
            str(cache_path), FONT_URL, transport=httpx.MockTransport(handler)
        )

        with pytest.raises(FontUnavailableError):
            await provisioner.ensure_font()
        assert await provisioner.ensure_font() == FONT_BYTES

    @pytest.mark.asyncio
    async def test_empty_download_rejected(self, tmp_path) -> None:
        transport, _ = _counting_transport(content=b"")
        provisioner = FontProvisioner(
            str(tmp_path / "font.ttf"), FONT_URL, transport=transport
        )

        with pytest.raises(FontUnavailableError):
            await provisioner.ensure_font()


def test_process_wide_provisioner_is_shared() -> None:
    reset_font_provisioner_for_tests()
    try:
        assert get_font_provisioner() is get_font_provisioner()
    finally:
        reset_font_provisioner_for_tests()
