"""inputfile - one lazily-read byte stream for every way of describing a file.

Wraps raw bytes, local paths, URLs, base64 text, open handles, factories,
HTTP responses and async byte iterables behind a single async iterable with
a best-effort file name.
"""

__version__ = "0.1.0"

from ._errors import InputFileError, ResponseError, ReuseError, UnexpectedSourceError, assert_never
from ._file import InputFile, ReadState
from ._naming import guess_filename
from ._platform import (
    DEFAULT_CHUNK_SIZE,
    AiofilesOpener,
    PathOpener,
    fetch,
    get_default_opener,
    set_default_opener,
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

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "AiofilesOpener",
    "BytesSource",
    "DataUrlSource",
    "FileInput",
    "InputFile",
    "InputFileError",
    "IterableSource",
    "LazySource",
    "LocalPathSource",
    "PathOpener",
    "ReadState",
    "ReadableSource",
    "RemoteUrlSource",
    "ResponseError",
    "ResponseSource",
    "ReuseError",
    "Source",
    "SourceKind",
    "UnexpectedSourceError",
    "assert_never",
    "fetch",
    "get_default_opener",
    "guess_filename",
    "normalize",
    "set_default_opener",
]
