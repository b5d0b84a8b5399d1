# Make the top-level packages importable when pytest runs from any directory.
import os
import sys

import httpx
import pytest

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from core.config import Config  # noqa: E402


class RecordingLogger:
    """RequestLogger that keeps every call in memory."""

    def __init__(self):
        self.requests = []
        self.responses = []
        self.preflights = []
        self.errors = []

    def log_request(self, method, target, headers, *, mode):
        self.requests.append((method, target, headers, mode))

    def log_response(self, method, target, status):
        self.responses.append((method, target, status))

    def log_preflight(self, full):
        self.preflights.append(full)

    def log_error(self, kind, status, message):
        self.errors.append((kind, status, message))


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def upstream_calls():
    """Requests seen by the mock upstream, in order."""
    return []


class _Replay(httpx.AsyncByteStream):
    """Unread async body stream, so streamed relays can consume it once."""

    def __init__(self, content: bytes):
        self._content = content

    async def __aiter__(self):
        yield self._content


@pytest.fixture
def mock_transport(upstream_calls):
    """Build an httpx.MockTransport from a handler, recording each request."""

    def _create(handler):
        def _record(request: httpx.Request) -> httpx.Response:
            request.read()
            upstream_calls.append(request)
            response = handler(request)
            if isinstance(response.stream, httpx.ByteStream):
                # httpx pre-reads ByteStream bodies; hand them back unread.
                return httpx.Response(
                    response.status_code,
                    headers=response.headers,
                    stream=_Replay(response.content),
                )
            return response

        return httpx.MockTransport(_record)

    return _create
