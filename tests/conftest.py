"""Shared fixtures for inputfile tests."""

from __future__ import annotations

import os
import struct
import tempfile
from typing import AsyncIterator

import pytest

import inputfile

# ---------------------------------------------------------------------------
# Byte fixtures
# ---------------------------------------------------------------------------

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _make_png_bytes() -> bytes:
    """Build a minimal valid 1x1 PNG."""
    import zlib

    def _chunk(chunk_type: bytes, data: bytes) -> bytes:
        raw = chunk_type + data
        crc = struct.pack(">I", zlib.crc32(raw) & 0xFFFFFFFF)
        length = struct.pack(">I", len(data))
        return length + raw + crc

    ihdr_data = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)  # 1x1, 8-bit RGB
    compressed = zlib.compress(b"\x00\xff\x00\x00")

    return PNG_SIGNATURE + _chunk(b"IHDR", ihdr_data) + _chunk(b"IDAT", compressed) + _chunk(b"IEND", b"")


@pytest.fixture()
def png_bytes() -> bytes:
    return _make_png_bytes()


@pytest.fixture()
def text_bytes() -> bytes:
    return b"Hello, world! This is a plain text file for testing."


# ---------------------------------------------------------------------------
# Temporary file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture()
def tmp_text_file(tmp_dir: str, text_bytes: bytes) -> str:
    """Write text_bytes to a temp file and return its path."""
    p = os.path.join(tmp_dir, "example.txt")
    with open(p, "wb") as f:
        f.write(text_bytes)
    return p


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def collect(file: inputfile.InputFile) -> list[bytes]:
    """Drain one read of ``file`` into a list of chunks."""
    return [chunk async for chunk in file]


async def agen(*chunks: bytes) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


@pytest.fixture(autouse=True)
def _reset_default_opener():
    yield
    inputfile.set_default_opener(None)
