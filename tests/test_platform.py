"""Tests for _platform -- path openers and the fetch helper."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest
import respx

from inputfile import (
    AiofilesOpener,
    InputFile,
    PathOpener,
    ResponseError,
    fetch,
    get_default_opener,
    set_default_opener,
)
from inputfile._platform import decode_data_url, has_body


class _RecordingOpener:
    def __init__(self) -> None:
        self.paths: list[str] = []

    async def open(self, path: str, chunk_size: int = 65536) -> AsyncIterator[bytes]:
        self.paths.append(path)
        yield b"recorded"


class TestOpeners:
    def test_default_is_aiofiles(self) -> None:
        opener = get_default_opener()
        assert isinstance(opener, AiofilesOpener)
        assert get_default_opener() is opener

    def test_protocol(self) -> None:
        assert isinstance(AiofilesOpener(), PathOpener)
        assert isinstance(_RecordingOpener(), PathOpener)

    def test_set_default_rejects_non_opener(self) -> None:
        with pytest.raises(TypeError, match="does not implement PathOpener"):
            set_default_opener(object())  # type: ignore[arg-type]

    async def test_default_opener_used_for_paths(self) -> None:
        opener = _RecordingOpener()
        set_default_opener(opener)

        assert await InputFile({"path": "/srv/a.txt"}).read() == b"recorded"
        assert await InputFile({"url": "file:///srv/b.txt"}).read() == b"recorded"
        assert opener.paths == ["/srv/a.txt", "/srv/b.txt"]

    async def test_instance_opener_overrides_default(self) -> None:
        default, own = _RecordingOpener(), _RecordingOpener()
        set_default_opener(default)

        await InputFile({"path": "/srv/a.txt"}, opener=own).read()
        assert own.paths == ["/srv/a.txt"]
        assert default.paths == []

    def test_reset_restores_aiofiles(self) -> None:
        set_default_opener(_RecordingOpener())
        set_default_opener(None)
        assert isinstance(get_default_opener(), AiofilesOpener)

    async def test_aiofiles_opener_closes_on_early_stop(self, tmp_text_file: str) -> None:
        chunks = AiofilesOpener().open(tmp_text_file, chunk_size=4)
        assert await chunks.__anext__() == b"Hell"
        await chunks.aclose()
        with pytest.raises(StopAsyncIteration):
            await chunks.__anext__()


class TestFetch:
    @respx.mock
    async def test_streams_body(self) -> None:
        url = httpx.URL("https://example.com/blob")
        respx.get(str(url)).mock(return_value=httpx.Response(200, content=b"0123456789"))

        chunks = [chunk async for chunk in fetch(url, chunk_size=4)]
        assert chunks == [b"0123", b"4567", b"89"]

    @respx.mock
    async def test_error_status(self) -> None:
        url = httpx.URL("https://example.com/broken")
        respx.get(str(url)).mock(return_value=httpx.Response(500, content=b"oops"))

        with pytest.raises(ResponseError) as exc_info:
            async for _ in fetch(url):
                pass
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "Internal Server Error from https://example.com/broken"

    @respx.mock
    async def test_bodiless_success(self) -> None:
        url = httpx.URL("https://example.com/nothing")
        respx.get(str(url)).mock(return_value=httpx.Response(204))

        with pytest.raises(ResponseError) as exc_info:
            async for _ in fetch(url):
                pass
        assert exc_info.value.status_code == 204
        assert str(exc_info.value) == "No response body from https://example.com/nothing"


class TestHasBody:
    def test_buffered(self) -> None:
        assert has_body(httpx.Response(200, content=b"x"))
        assert has_body(httpx.Response(200, content=b""))

    def test_bodiless_statuses(self) -> None:
        assert not has_body(httpx.Response(204))
        assert not has_body(httpx.Response(205))
        assert not has_body(httpx.Response(304))

    def test_head(self) -> None:
        request = httpx.Request("HEAD", "https://example.com/")
        assert not has_body(httpx.Response(200, request=request))

    def test_unread_stream(self) -> None:
        assert has_body(httpx.Response(200, stream=httpx.ByteStream(b"x")))


class TestDecodeDataUrl:
    def test_base64(self) -> None:
        assert decode_data_url("data:;base64,aGVsbG8=") == b"hello"

    def test_media_type_and_case(self) -> None:
        assert decode_data_url("data:text/plain;BASE64,aGVsbG8") == b"hello"

    def test_percent_encoded(self) -> None:
        assert decode_data_url("data:,a%20b") == b"a b"

    def test_missing_separator(self) -> None:
        with pytest.raises(ValueError, match="Malformed data URL"):
            decode_data_url("data:;base64")

    def test_invalid_base64(self) -> None:
        with pytest.raises(ValueError):
            decode_data_url("data:;base64,aGV-sbG8=")
