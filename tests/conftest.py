import dataclasses
import io
import json
import logging
import re
import sys
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, Mock

import aiohttp.test_utils
import aiohttp.web
import pytest

from nodegraph._cogs.clients.api import GraphAPI, get_default_api, set_default_api
from nodegraph._cogs.configs.configuration import GraphSettings
from nodegraph._core.actions.loggers import ObjectPrefixingTextFormatter, configure


@pytest.fixture()
def settings():
    return GraphSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('nodegraph.tests')


#
# Mocks for the library's internal but global variables.
#

@pytest.fixture(autouse=True)
def default_api():
    """
    Ensure that the tests have no global default API client unless they set one.
    """
    old_api = get_default_api()
    set_default_api(None)
    yield
    set_default_api(old_api)


#
# Mocks for the API clients. Reasons:
# 1. We do not test the clients in the object model, we test the layers on top of them,
#    so everything low-level should be mocked and assumed to be functional.
# 2. No external calls must be made under any circumstances.
#    The unit-tests must be fully isolated from the environment.
#

@pytest.fixture()
def fake_api():
    """
    A stub transport: its ``call`` is an async mock returning the configured responses.

    Sample usage::

        def test_me(fake_api):
            fake_api.call.return_value = {'id': '123'}
            fake_api.call.side_effect = [{'data': []}, {'data': []}]
    """
    return Mock(spec_set=['call'], call=AsyncMock(return_value={}))


@dataclasses.dataclass(frozen=True)
class RecordedRequest:
    method: str
    path: str
    query: Dict[str, str]
    data: Any
    headers: Dict[str, str]


class FakeGraphServer:
    """
    A local HTTP server with the pre-configured responses in the order of requests.

    Every request is recorded for later assertions. If there are no responses
    left, an empty JSON object is returned.
    """

    def __init__(self) -> None:
        super().__init__()
        self.url: str = ''
        self.requests: List[RecordedRequest] = []
        self.responses: List[Tuple[int, Any]] = []

    def add(self, body: Any = None, *, status: int = 200) -> "FakeGraphServer":
        self.responses.append((status, body if body is not None else {}))
        return self

    async def handle(self, request: aiohttp.web.Request) -> aiohttp.web.StreamResponse:
        data: Optional[Any] = None
        if request.can_read_body:
            text = await request.text()
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                data = text
        self.requests.append(RecordedRequest(
            method=request.method,
            path=request.path,
            query=dict(request.query),
            data=data,
            headers=dict(request.headers),
        ))

        status, body = self.responses.pop(0) if self.responses else (200, {})
        if isinstance(body, str):
            return aiohttp.web.Response(status=status, text=body)
        if isinstance(body, bytes):
            return aiohttp.web.Response(status=status, body=body)
        return aiohttp.web.json_response(body, status=status)


@pytest.fixture()
async def graph_server():
    server = FakeGraphServer()
    app = aiohttp.web.Application()
    app.router.add_route('*', '/{tail:.*}', server.handle)
    test_server = aiohttp.test_utils.TestServer(app)
    await test_server.start_server(access_log=None)
    server.url = str(test_server.make_url('/'))
    try:
        yield server
    finally:
        await test_server.close()


@pytest.fixture()
async def graph_api(graph_server, settings):
    """ A real API client against the local fake server, with no retries by default. """
    settings.api.server = graph_server.url
    settings.networking.error_backoffs = []
    api = GraphAPI('fake-token', settings=settings)
    try:
        yield api
    finally:
        await api.close()


#
# Helpers for the logging checks.
#

@pytest.fixture()
def logstream(caplog):
    """ Prefixing is done at the final output. We have to intercept it. """

    logger = logging.getLogger()
    handlers = list(logger.handlers)

    # Setup all log levels of sub-libraries. A side-effect: the handlers are also added.
    configure(verbose=True)

    # Remove any stream handlers added in the step above. But keep the caplog's handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            logger.removeHandler(handler)

    # Inject our stream-intercepting handler.
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    formatter = ObjectPrefixingTextFormatter('prefix %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        logger.removeHandler(handler)
        logger.handlers[:] = handlers  # undo `configure()`


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
