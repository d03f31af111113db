"""MIME type guessing for ``InputFile.mime_type``, using mimetypes and puremagic."""

from __future__ import annotations

import mimetypes

import puremagic

# puremagic only needs the leading signature bytes.
_SNIFF_SIZE = 2048


def mime_from_name(filename: str | None) -> str | None:
    """Guess a MIME type from a filename's extension.

    Examples:
        >>> mime_from_name("report.csv")
        'text/csv'
    """
    if not filename:
        return None
    mime_type, _ = mimetypes.guess_type(filename, strict=False)
    return mime_type


def mime_from_bytes(data: bytes) -> str | None:
    """Guess a MIME type from magic-number signatures at the start of ``data``."""
    if not data:
        return None

    try:
        matches = puremagic.magic_string(data[:_SNIFF_SIZE])
    except puremagic.PureError:
        return None
    for match in matches:
        if match.mime_type:
            return match.mime_type
    return None
