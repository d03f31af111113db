"""Platform capabilities used by the stream producer: opening local paths and fetching URLs."""

from __future__ import annotations

import base64
import logging
from contextlib import aclosing
from typing import AsyncIterator, Protocol, runtime_checkable
from urllib.parse import unquote_to_bytes

import aiofiles
import httpx

from ._errors import ResponseError, response_request

logger = logging.getLogger("inputfile")

DEFAULT_CHUNK_SIZE = 65536


@runtime_checkable
class PathOpener(Protocol):
    """Opens a local path for reading as an async sequence of byte chunks.

    Implementations must release the underlying handle when the returned
    iterator is exhausted or closed early.
    """

    def open(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]: ...


class AiofilesOpener:
    """Reads local files through ``aiofiles`` without blocking the event loop."""

    async def open(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        logger.debug("Opening local file %s", path)
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def __repr__(self) -> str:
        return "AiofilesOpener()"


_default_opener: PathOpener | None = None


def get_default_opener() -> PathOpener:
    """Return the process-wide opener, selecting ``AiofilesOpener`` on first use."""
    global _default_opener
    if _default_opener is None:
        _default_opener = AiofilesOpener()
    return _default_opener


def set_default_opener(opener: PathOpener | None) -> None:
    """Replace the process-wide opener. ``None`` restores the default on next use."""
    global _default_opener
    if opener is not None and not isinstance(opener, PathOpener):
        raise TypeError(f"{type(opener).__name__} does not implement PathOpener")
    _default_opener = opener


async def fetch(
    url: httpx.URL,
    *,
    client: httpx.AsyncClient | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Stream the body of a GET request to ``url``.

    Args:
        url: The URL to fetch.
        client: Client to send the request with. When omitted, a client is
            created for this fetch and closed with it.
        chunk_size: Size of the yielded chunks.

    Raises:
        ResponseError: If the server answers with a non-success status.
    """
    if client is None:
        async with httpx.AsyncClient(follow_redirects=True) as own_client:
            async with aclosing(_stream(own_client, url, chunk_size)) as chunks:
                async for chunk in chunks:
                    yield chunk
    else:
        async with aclosing(_stream(client, url, chunk_size)) as chunks:
            async for chunk in chunks:
                yield chunk


async def _stream(client: httpx.AsyncClient, url: httpx.URL, chunk_size: int) -> AsyncIterator[bytes]:
    logger.debug("Fetching %s", url)
    async with client.stream("GET", url) as response:
        if not response.is_success:
            raise ResponseError(response)
        if not has_body(response):
            raise ResponseError(response, has_body=False)
        async for chunk in response.aiter_bytes(chunk_size):
            yield chunk


# Statuses that never carry a body.
_BODYLESS_STATUSES = frozenset({204, 205, 304})
_ASCII_WHITESPACE = b"\t\n\f\r "


def buffered_content(response: httpx.Response) -> bytes | None:
    """Return the already-read body of ``response``, or ``None`` if it was not read."""
    try:
        return response.content
    except httpx.ResponseNotRead:
        return None


def has_body(response: httpx.Response) -> bool:
    """Whether ``response`` has a body that is buffered or can still be streamed.

    Bodiless statuses, answers to ``HEAD`` and unread ``Content-Length: 0``
    responses have none, and neither does a stream that was already consumed
    or closed without being buffered.
    """
    if response.status_code in _BODYLESS_STATUSES:
        return False
    request = response_request(response)
    if request is not None and request.method == "HEAD":
        return False
    if buffered_content(response) is not None:
        return True
    if response.is_stream_consumed or response.is_closed:
        return False
    return response.headers.get("content-length", "").strip() != "0"


def decode_data_url(url: str) -> bytes:
    """Decode the payload of a ``data:`` URL.

    The payload is percent-decoded, then base64-decoded when the media type
    ends in ``;base64``. Base64 text may omit its padding and may contain
    ASCII whitespace; any other character outside the alphabet is an error.

    Raises:
        ValueError: If ``url`` has no ``,`` separator or its base64 payload is malformed.

    Examples:
        >>> decode_data_url("data:;base64,aGVsbG8")
        b'hello'
        >>> decode_data_url("data:text/plain,hi%21")
        b'hi!'
    """
    header, sep, payload = url.partition(",")
    if not sep:
        raise ValueError(f"Malformed data URL: {url[:40]!r}")

    data = unquote_to_bytes(payload)
    if not header.lower().rstrip().endswith(";base64"):
        return data

    data = data.translate(None, _ASCII_WHITESPACE)
    data += b"=" * (-len(data) % 4)
    return base64.b64decode(data, validate=True)
