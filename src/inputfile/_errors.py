"""Exceptions raised while producing an ``InputFile`` stream."""

from __future__ import annotations

from typing import NoReturn

import httpx


class InputFileError(Exception):
    """Base exception for all errors raised by ``inputfile``."""


class ResponseError(InputFileError):
    """Raised when a fetched or supplied response has no usable body.

    Attributes:
        status_code: HTTP status code of the response.
        message: The reason phrase, or ``"No response body"``, plus the URL when known.
        response: The originating ``httpx.Response``.
    """

    def __init__(self, response: httpx.Response, *, has_body: bool = True) -> None:
        message = response.reason_phrase if has_body else "No response body"
        request = response_request(response)
        if request is not None:
            message += f" from {request.url}"
        self.status_code = response.status_code
        self.message = message
        self.response = response
        super().__init__(message)


class ReuseError(InputFileError, TypeError):
    """Raised when a single-use source is read a second time."""

    def __init__(self) -> None:
        super().__init__("Cannot reuse InputFile data source!")


class UnexpectedSourceError(InputFileError, TypeError):
    """Raised when dispatch meets a representation outside the known variants."""


def assert_never(value: object) -> NoReturn:
    raise UnexpectedSourceError(f"Unexpected {type(value).__name__}!")


def response_request(response: httpx.Response) -> httpx.Request | None:
    """Return the request that produced ``response``, or ``None`` for hand-built responses."""
    try:
        return response.request
    except RuntimeError:
        return None
