"""
All configuration flags, options, settings to fine-tune the graph API client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

In this library, they are called *"settings"* (plural).
Combined, they form a *"configuration"* (singular).

Some of the settings are scalars, some are optional, some are not
(but all of them have reasonable defaults). There is no loading of the settings
from files or environment variables: they are set in code by the callers.
"""
import dataclasses
from typing import Iterable, Optional, Union


@dataclasses.dataclass
class APISettings:

    server: str = 'https://graph.facebook.com'
    """
    The root URL of the graph API server, without the version.

    All relative request paths are resolved against it. The absolute URLs
    (e.g. server-issued pagination links) are used as is.
    """

    version: Optional[str] = 'v2.8'
    """
    The version segment of the API, put between the server and the path.

    Set to ``None`` for unversioned APIs: the segment is omitted then.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for each request to the graph API, in seconds.
    ``None`` disables the timeout (on your own risk).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing a connection to the server, in seconds.
    If not set, only the overall request timeout applies.
    """

    error_backoffs: Union[float, Iterable[float]] = (1, 1, 2, 3, 5, 8)
    """
    Backoffs (in seconds) between retries of the failed requests.

    Only the server-side errors (HTTP 5xx), connection errors and timeouts
    are retried. All other errors (e.g. HTTP 4xx) are escalated immediately.

    The number of backoffs defines the number of retries: once they are over,
    the last error is escalated to the caller. An empty sequence means
    no retries at all; a single number means one retry after that delay.
    """


@dataclasses.dataclass
class GraphSettings:
    api: APISettings = dataclasses.field(default_factory=APISettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
