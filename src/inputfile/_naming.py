"""Best-effort filename inference from a canonical source."""

from __future__ import annotations

import os
import posixpath

import httpx

from ._errors import response_request
from ._source import LocalPathSource, ReadableSource, RemoteUrlSource, ResponseSource, Source


def guess_filename(source: Source) -> str | None:
    """Guess a filename for ``source``.

    Local paths win, then named file objects, then the last segment of a URL
    path. A root or trailing-slash URL falls back to its host. Data URLs,
    whether built from ``{"base64": ...}`` or passed as ``{"url": "data:..."}``,
    never yield a name: their path is the encoded payload, not a file name.

    Examples:
        >>> guess_filename(LocalPathSource("a/b/report.csv"))
        'report.csv'
        >>> guess_filename(RemoteUrlSource(httpx.URL("https://example.com/")))
        'example.com'
    """
    if isinstance(source, LocalPathSource):
        return os.path.basename(source.path)

    target: object = source
    if isinstance(source, RemoteUrlSource):
        target = source.url
    elif isinstance(source, ResponseSource):
        request = response_request(source.response)
        target = request.url if request is not None else source.response
    elif isinstance(source, ReadableSource):
        target = source.readable

    name = getattr(target, "name", None)
    if isinstance(name, str) and name:
        return os.path.basename(name)

    if not isinstance(target, httpx.URL) or target.scheme == "data":
        return None

    if target.path != "/":
        filename = posixpath.basename(target.path)
        if filename:
            return filename
    return target.host or None
