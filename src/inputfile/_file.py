"""Main InputFile class -- one lazily-read byte stream over many kinds of file input."""

from __future__ import annotations

import inspect
import logging
import threading
from contextlib import aclosing
from enum import Enum
from typing import Any, AsyncIterator

import httpx

from ._detection import mime_from_bytes, mime_from_name
from ._errors import ResponseError, ReuseError, assert_never
from ._naming import guess_filename
from ._platform import (
    DEFAULT_CHUNK_SIZE,
    PathOpener,
    buffered_content,
    decode_data_url,
    fetch,
    get_default_opener,
    has_body,
)
from ._source import (
    BytesSource,
    DataUrlSource,
    FileInput,
    IterableSource,
    LazySource,
    LocalPathSource,
    ReadableSource,
    RemoteUrlSource,
    ResponseSource,
    Source,
    SourceKind,
    normalize,
)

logger = logging.getLogger("inputfile")


class ReadState(str, Enum):
    """Read state of an ``InputFile``. The only transition is ``FRESH -> CONSUMED``."""

    FRESH = "Fresh"
    CONSUMED = "Consumed"


class InputFile:
    """A file to be sent somewhere, read lazily as an async stream of bytes.

    The input is classified once, at construction; nothing is opened or
    fetched until the instance is iterated. Sources that cannot be re-read
    (open handles, responses, plain iterables) may be iterated once only;
    all others re-open their resource on every read.

    Examples:
        Send bytes::

            file = InputFile(b"hello", "hello.txt")

        Send a local file (named ``report.csv``)::

            file = InputFile({"path": "exports/report.csv"})

        Send whatever a URL serves::

            file = InputFile({"url": "https://example.com/data/x.bin"})

        Recreate the data on every attempt::

            file = InputFile(lambda: produce_chunks(), "generated.bin")

        Consume::

            async for chunk in file:
                await transport.send(chunk)
    """

    # ------------------------------------------------------------------
    # Private state
    # ------------------------------------------------------------------
    _source: Source
    _name: str | None
    _state: ReadState

    def __init__(
        self,
        file: FileInput,
        filename: str | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client: httpx.AsyncClient | None = None,
        opener: PathOpener | None = None,
    ) -> None:
        """Create an ``InputFile``.

        Args:
            file: Raw bytes, ``{"path": ...}``, ``{"url": ...}``, an ``httpx.URL``,
                a binary file object, an ``httpx.Response``, a zero-argument
                function returning a byte iterable, ``{"readable": ...}``,
                ``{"base64": ...}``, or an async byte iterable.
            filename: Explicit file name; inferred from ``file`` when omitted.
            chunk_size: Read size for local files, data URLs and response bodies.
            client: ``httpx.AsyncClient`` used to fetch remote URLs. It is not
                closed by ``InputFile``.
            opener: Opener for local paths; defaults to the process-wide one.

        Raises:
            TypeError: If ``file`` is not a supported input.
            ValueError: If ``chunk_size`` is not positive.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self._source = normalize(file)
        self._name = filename if filename is not None else guess_filename(self._source)
        self._chunk_size = chunk_size
        self._client = client
        self._opener = opener
        self._state = ReadState.FRESH
        self._state_lock = threading.Lock()
        logger.info("InputFile created: kind=%s name=%s", self._source.kind.value, self._name)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def name(self) -> str | None:
        return self._name

    @property
    def source(self) -> Source:
        return self._source

    @property
    def kind(self) -> SourceKind:
        return self._source.kind

    @property
    def state(self) -> ReadState:
        return self._state

    @property
    def consumed(self) -> bool:
        return self._state is ReadState.CONSUMED

    @property
    def mime_type(self) -> str | None:
        """MIME type guessed from the name, or from the magic bytes of an in-memory buffer."""
        mime_type = mime_from_name(self._name)
        if mime_type is None and isinstance(self._source, BytesSource):
            mime_type = mime_from_bytes(self._source.data)
        return mime_type

    # ------------------------------------------------------------------
    # Single-use guard
    # ------------------------------------------------------------------
    def _claim(self) -> None:
        with self._state_lock:
            if self._state is ReadState.CONSUMED:
                raise ReuseError()
            self._state = ReadState.CONSUMED
        logger.debug("Claimed single-use %s source", self._source.kind.value)

    # ------------------------------------------------------------------
    # Stream production
    # ------------------------------------------------------------------
    async def __aiter__(self) -> AsyncIterator[bytes]:
        # Everything up to the first await runs in the same step as the
        # state check, so single-use sources are claimed before any I/O.
        source = self._source
        if self._state is ReadState.CONSUMED:
            raise ReuseError()

        if isinstance(source, LazySource):
            iterable = source.factory()
            if inspect.isawaitable(iterable):
                iterable = await iterable
            async with aclosing(_drain(iterable)) as chunks:
                async for chunk in chunks:
                    yield chunk
        elif isinstance(source, BytesSource):
            yield source.data
        elif isinstance(source, DataUrlSource):
            for chunk in self._slices(decode_data_url(source.url)):
                yield chunk
        elif isinstance(source, ReadableSource):
            self._claim()
            async with aclosing(_drain_readable(source.readable, self._chunk_size)) as chunks:
                async for chunk in chunks:
                    yield chunk
        elif isinstance(source, IterableSource):
            self._claim()
            async with aclosing(_drain(source.iterable)) as chunks:
                async for chunk in chunks:
                    yield chunk
        elif isinstance(source, LocalPathSource):
            async with aclosing(_drain(self._open(source.path))) as chunks:
                async for chunk in chunks:
                    yield chunk
        elif isinstance(source, ResponseSource):
            response = source.response
            if not has_body(response):
                raise ResponseError(response, has_body=False)
            content = buffered_content(response)
            self._claim()
            if content is not None:
                yield content
            else:
                try:
                    async for chunk in response.aiter_bytes(self._chunk_size):
                        yield chunk
                finally:
                    await response.aclose()
        elif isinstance(source, RemoteUrlSource):
            if source.url.scheme == "data":
                for chunk in self._slices(decode_data_url(str(source.url))):
                    yield chunk
                return
            if source.url.scheme == "file":
                chunks_iter = self._open(source.url.path)
            else:
                chunks_iter = fetch(source.url, client=self._client, chunk_size=self._chunk_size)
            async with aclosing(_drain(chunks_iter)) as chunks:
                async for chunk in chunks:
                    yield chunk
        else:
            assert_never(source)

    def _open(self, path: str) -> AsyncIterator[bytes]:
        opener = self._opener if self._opener is not None else get_default_opener()
        return opener.open(path, self._chunk_size)

    def _slices(self, data: bytes) -> list[bytes]:
        # At least one chunk, even for an empty payload.
        return [data[offset : offset + self._chunk_size] for offset in range(0, len(data) or 1, self._chunk_size)]

    async def read(self) -> bytes:
        """Read the whole stream into memory.

        Follows the same single-use rules as iterating the instance.

        Returns:
            The concatenated chunks.
        """
        chunks: list[bytes] = []
        async for chunk in self:
            chunks.append(chunk)
        return b"".join(chunks)

    def __repr__(self) -> str:
        return f"InputFile(kind={self._source.kind.value!r}, name={self._name!r}, state={self._state.value!r})"


# ------------------------------------------------------------------
# Module-private helpers
# ------------------------------------------------------------------


async def _drain(iterable: Any) -> AsyncIterator[bytes]:
    """Yield from a sync or async byte iterable, closing it when done."""
    if hasattr(iterable, "__aiter__"):
        iterator = iterable.__aiter__()
        try:
            while True:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                yield chunk
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
    else:
        for chunk in iterable:
            yield chunk


async def _drain_readable(readable: Any, chunk_size: int) -> AsyncIterator[bytes]:
    """Yield from an open handle: ``read()`` it when file-like, else iterate it."""
    if not hasattr(readable, "read"):
        async with aclosing(_drain(readable)) as chunks:
            async for chunk in chunks:
                yield chunk
        return

    while True:
        chunk = readable.read(chunk_size)
        if inspect.isawaitable(chunk):
            chunk = await chunk
        if not chunk:
            break
        yield chunk
