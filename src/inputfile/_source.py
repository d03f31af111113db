"""Canonical source variants and the normalizer that classifies constructor input."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any, AsyncIterable, Awaitable, Callable, ClassVar, Iterable, Union

import httpx

logger = logging.getLogger("inputfile")

ByteIterable = Union[AsyncIterable[bytes], Iterable[bytes]]
ByteIterableFactory = Callable[[], Union[ByteIterable, Awaitable[ByteIterable]]]


class SourceKind(str, Enum):
    """Enumeration of canonical source representations.

    Examples:
        >>> SourceKind.BYTES.value
        'Bytes'
        >>> SourceKind.REMOTE_URL.single_use
        False
    """

    BYTES = "Bytes"
    DATA_URL = "DataUrl"
    READABLE = "ReadableHandle"
    RESPONSE = "NetworkResponse"
    REMOTE_URL = "RemoteUrl"
    LOCAL_PATH = "LocalPath"
    LAZY = "Lazy"
    ITERABLE = "Iterable"

    @property
    def single_use(self) -> bool:
        return self in _SINGLE_USE


_SINGLE_USE = frozenset({SourceKind.READABLE, SourceKind.RESPONSE, SourceKind.ITERABLE})


@dataclass(frozen=True)
class Source:
    """Base class of the canonical representations.

    Exactly one subclass describes an ``InputFile``; it is chosen once by
    :func:`normalize` and never changes afterwards.
    """

    kind: ClassVar[SourceKind]


@dataclass(frozen=True)
class BytesSource(Source):
    kind: ClassVar[SourceKind] = SourceKind.BYTES
    data: bytes


@dataclass(frozen=True)
class DataUrlSource(Source):
    """A ``data:;base64,...`` URL wrapping caller-supplied base64 text."""

    kind: ClassVar[SourceKind] = SourceKind.DATA_URL
    url: str

    @property
    def payload(self) -> str:
        return self.url.split(",", 1)[1]


@dataclass(frozen=True)
class ReadableSource(Source):
    """An already-open handle: an async byte iterable or a binary file-like object."""

    kind: ClassVar[SourceKind] = SourceKind.READABLE
    readable: Any


@dataclass(frozen=True)
class ResponseSource(Source):
    kind: ClassVar[SourceKind] = SourceKind.RESPONSE
    response: httpx.Response


@dataclass(frozen=True)
class RemoteUrlSource(Source):
    kind: ClassVar[SourceKind] = SourceKind.REMOTE_URL
    url: httpx.URL


@dataclass(frozen=True)
class LocalPathSource(Source):
    kind: ClassVar[SourceKind] = SourceKind.LOCAL_PATH
    path: str


@dataclass(frozen=True)
class LazySource(Source):
    """A zero-argument factory, invoked fresh on every read."""

    kind: ClassVar[SourceKind] = SourceKind.LAZY
    factory: ByteIterableFactory


@dataclass(frozen=True)
class IterableSource(Source):
    kind: ClassVar[SourceKind] = SourceKind.ITERABLE
    iterable: ByteIterable


# Everything ``InputFile`` accepts as its first argument.
FileInput = Union[
    bytes,
    bytearray,
    memoryview,
    "os.PathLike[str]",
    httpx.URL,
    httpx.Response,
    Mapping[str, Any],
    ByteIterable,
    ByteIterableFactory,
    IO[bytes],
]


def normalize(file: FileInput) -> Source:
    """Classify constructor input into its canonical representation.

    The first matching rule wins. ``base64`` and ``readable`` mappings are
    recognised before responses and ``url`` mappings; the remaining shapes
    are told apart here rather than at read time.

    Args:
        file: Any supported file input.

    Returns:
        The canonical ``Source`` for ``file``.

    Raises:
        TypeError: If ``file`` has none of the supported shapes.
    """
    source = _classify(file)
    logger.debug("Classified %s as %s", type(file).__name__, source.kind.value)
    return source


def _classify(file: FileInput) -> Source:
    if isinstance(file, Mapping):
        if "base64" in file:
            return DataUrlSource(f"data:;base64,{file['base64']}")
        if "readable" in file:
            return ReadableSource(file["readable"])
    if isinstance(file, httpx.Response):
        return ResponseSource(file)
    if isinstance(file, Mapping):
        if "url" in file:
            return RemoteUrlSource(_absolute_url(httpx.URL(str(file["url"]))))
        if "path" in file:
            return LocalPathSource(os.fspath(file["path"]))
        raise TypeError(f"Unsupported file mapping with keys {sorted(file)!r}")

    if isinstance(file, (bytes, bytearray, memoryview)):
        return BytesSource(bytes(file))
    if isinstance(file, os.PathLike):
        return LocalPathSource(os.fspath(file))
    if isinstance(file, httpx.URL):
        return RemoteUrlSource(_absolute_url(file))
    if hasattr(file, "read"):
        return ReadableSource(file)
    if callable(file):
        return LazySource(file)
    if hasattr(file, "__aiter__"):
        return IterableSource(file)
    if hasattr(file, "__iter__") and not isinstance(file, str):
        return IterableSource(file)

    if isinstance(file, str):
        raise TypeError('Pass local paths as {"path": ...} and URLs as {"url": ...}, not as bare strings')
    raise TypeError(f"Unsupported file input: {type(file).__name__}")


def _absolute_url(url: httpx.URL) -> httpx.URL:
    # data: and file: URLs carry no host.
    if not url.scheme or (url.scheme in ("http", "https") and not url.host):
        raise TypeError(f"Invalid URL: {str(url)!r}")
    return url
