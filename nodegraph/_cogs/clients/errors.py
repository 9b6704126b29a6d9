"""
Graph API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code of the library.
Hence, we have our own hierarchy of exceptions for the graph API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
etc, are escalated from the client library as is, since they are related not
to the domain of the graph API, but rather to the networking and encryption.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

Unlike the underlying client library's errors, the graph API errors contain more
information about the reasons -- as provided by the server in its response bodies
(the ``{"error": {...}}`` envelope), not guessed only by HTTP statuses alone.

The object model never wraps these errors: they reach the callers as raised here.
"""
import collections.abc
import json
from typing import Optional

import aiohttp
from typing_extensions import TypedDict


class RawErrorDetails(TypedDict, total=False):
    message: str
    type: str
    code: int
    error_subcode: int
    fbtrace_id: str


class RawError(TypedDict):
    error: RawErrorDetails


class GraphAPIError(Exception):

    def __init__(
            self,
            payload: Optional[RawError],
            *,
            status: int,
    ) -> None:
        details = payload.get('error') if payload else None
        message = details.get('message') if details else None
        super().__init__(message, payload)
        self._status = status
        self._details = details

    @property
    def status(self) -> int:
        return self._status

    @property
    def message(self) -> Optional[str]:
        return self._details.get('message') if self._details else None

    @property
    def type(self) -> Optional[str]:
        return self._details.get('type') if self._details else None

    @property
    def code(self) -> Optional[int]:
        return self._details.get('code') if self._details else None

    @property
    def subcode(self) -> Optional[int]:
        return self._details.get('error_subcode') if self._details else None

    @property
    def trace_id(self) -> Optional[str]:
        return self._details.get('fbtrace_id') if self._details else None


class GraphUnauthorizedError(GraphAPIError):
    pass


class GraphForbiddenError(GraphAPIError):
    pass


class GraphNotFoundError(GraphAPIError):
    pass


class GraphServerError(GraphAPIError):
    pass


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for specialised graph API errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        payload: Optional[RawError]
        try:
            payload = await response.json()
        except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
            payload = None

        # Only the known error envelopes are kept: who knows what else can be dumped there.
        if not isinstance(payload, collections.abc.Mapping):
            payload = None
        elif not isinstance(payload.get('error'), collections.abc.Mapping):
            payload = None

        cls = (
            GraphUnauthorizedError if response.status == 401 else
            GraphForbiddenError if response.status == 403 else
            GraphNotFoundError if response.status == 404 else
            GraphServerError if response.status >= 500 else
            GraphAPIError
        )

        # Raise the library-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload, status=response.status) from e

