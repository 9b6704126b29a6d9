import asyncio
import collections.abc
import itertools
import json
import logging
import urllib.parse
from typing import Any, Dict, Mapping, Optional, Type

import aiohttp

from nodegraph._cogs.clients import errors
from nodegraph._cogs.configs import configuration
from nodegraph._cogs.helpers import typedefs, versions


async def request(
        method: str,
        url: str,
        *,
        session: aiohttp.ClientSession,
        settings: configuration.GraphSettings,
        params: Optional[Mapping[str, str]] = None,
        payload: Optional[object] = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    timeout = aiohttp.ClientTimeout(
        total=settings.networking.request_timeout,
        sock_connect=settings.networking.connect_timeout,
    )

    backoffs = settings.networking.error_backoffs
    backoffs = backoffs if isinstance(backoffs, collections.abc.Iterable) else [backoffs]
    count = len(backoffs) + 1 if isinstance(backoffs, collections.abc.Sized) else None
    backoff: Optional[float]
    for retry, backoff in enumerate(itertools.chain(backoffs, [None]), start=1):
        idx = f"#{retry}/{count}" if count is not None else f"#{retry}"
        what = f"{method.upper()} {redact_url(url)}"
        try:
            if retry > 1:
                logger.debug(f"Request attempt {idx}: {what}")

            response = await session.request(
                method=method,
                url=url,
                params=params,
                json=payload,
                timeout=timeout,
            )
            await errors.check_response(response)  # but do not parse it!

        except (aiohttp.ClientConnectionError, errors.GraphServerError, asyncio.TimeoutError) as e:
            if backoff is None:  # i.e. the last or the only attempt.
                logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e!r}")
                raise
            else:
                logger.error(f"Request attempt {idx} failed; will retry: {what} -> {e!r}")
                await asyncio.sleep(backoff)  # non-awakable! but still cancellable.
        else:
            if retry > 1:
                logger.debug(f"Request attempt {idx} succeeded: {what}")
            return response

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


def redact_url(url: str) -> str:
    """
    Hide the credentials in the URL, so that it can be logged.

    The server-issued paging URLs carry the access token in the query string.
    """
    parts = urllib.parse.urlsplit(url)
    if not parts.query:
        return url
    pairs = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
    query = '&'.join(
        f'{key}=***' if key == 'access_token' else urllib.parse.urlencode([(key, value)])
        for key, value in pairs
    )
    return parts._replace(query=query).geturl()


def encode_params(params: Optional[typedefs.Params]) -> Dict[str, str]:
    """
    Render the parameters as the query-string values.

    Strings and numbers go as is, booleans as ``true``/``false``,
    ``None`` values are skipped, everything else is JSON-encoded
    (e.g. lists and dicts of filters or targeting specs).
    """
    result: Dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        elif isinstance(value, bool):
            result[key] = 'true' if value else 'false'
        elif isinstance(value, (str, int, float)):
            result[key] = str(value)
        else:
            result[key] = json.dumps(value)
    return result


class GraphAPI:
    """
    A transport for the graph API: an aiohttp session plus the connection info.

    This is the only place where the object model meets the network.
    The objects and cursors only use :meth:`call` and never mutate the client,
    so one client can be shared by many objects and cursors.

    The session is created lazily on the first call, so that it belongs
    to the event loop that actually runs the requests. A pre-made session
    can be provided instead; it is then not closed by the client.
    """

    def __init__(
            self,
            access_token: Optional[str] = None,
            *,
            settings: Optional[configuration.GraphSettings] = None,
            session: Optional[aiohttp.ClientSession] = None,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.access_token = access_token
        self.settings = settings if settings is not None else configuration.GraphSettings()
        self.logger: typedefs.Logger = logger if logger is not None else logging.getLogger(__name__)
        self._session = session
        self._own_session = session is None

    @classmethod
    def init(
            cls: Type["GraphAPI"],
            access_token: Optional[str] = None,
            *,
            settings: Optional[configuration.GraphSettings] = None,
            session: Optional[aiohttp.ClientSession] = None,
    ) -> "GraphAPI":
        """
        Create a client and make it the default one for all objects without a client.
        """
        api = cls(access_token, settings=settings, session=session)
        set_default_api(api)
        return api

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.base_url}>'

    async def __aenter__(self) -> "GraphAPI":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        parts = [self.settings.api.server.rstrip('/'), self.settings.api.version]
        return '/'.join([part for part in parts if part])

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()

        # It is a good practice to self-identify a bit, even with a user-provided session.
        if self._session.headers.get('User-Agent') is None:
            self._session.headers['User-Agent'] = f'nodegraph/{versions.version or "unknown"}'
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._own_session:
            await self._session.close()
            self._session = None

    def build_url(self, path: typedefs.Path) -> str:
        """
        Build an absolute URL of a request.

        The absolute URLs (as issued by the server in the pagination links)
        are used as is. The paths, either as strings or as sequences of segments,
        are put under the server's root and the API version.
        """
        if isinstance(path, str) and '://' in path:
            return path
        segments = [path] if isinstance(path, str) else [str(segment) for segment in path]
        return '/'.join([self.base_url] + [segment.strip('/') for segment in segments])

    async def call(
            self,
            method: str,
            path: typedefs.Path,
            params: Optional[typedefs.Params] = None,
    ) -> Any:
        """
        Perform a request and return the parsed JSON of the response.

        For GETs and DELETEs, the params go to the query string.
        For other methods, they go to the JSON body.
        The access token always goes to the query string (unless already there).
        """
        method = method.upper()
        url = self.build_url(path)

        query: Dict[str, str] = {}
        payload: Optional[Dict[str, Any]] = None
        if method in ['GET', 'DELETE']:
            query.update(encode_params(params))
        else:
            payload = dict(params or {})

        existing = urllib.parse.parse_qs(urllib.parse.urlsplit(url).query)
        if self.access_token is not None and 'access_token' not in existing:
            query['access_token'] = self.access_token

        response = await request(
            method=method,
            url=url,
            params=query or None,
            payload=payload,
            session=self.session,
            settings=self.settings,
            logger=self.logger,
        )
        async with response:
            return await response.json(content_type=None)


_default_api: Optional[GraphAPI] = None


def get_default_api() -> Optional[GraphAPI]:
    """
    Get the default client to be used by the objects unless the explicit one is provided.
    """
    return _default_api


def set_default_api(api: Optional[GraphAPI]) -> None:
    """
    Set the default client to be used by the objects unless the explicit one is provided.
    """
    global _default_api
    _default_api = api
