"""Shared fixtures: a recording logger and a stub upstream behind the proxy."""

from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.forwards: list[tuple[str, str, str]] = []
        self.rejections: list[tuple[str, str]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_forward(self, method: str, path: str, target_url: str) -> None:
        self.forwards.append((method, path, target_url))

    def log_rejected(self, method: str, path: str) -> None:
        self.rejections.append((method, path))

    def log_error(self, route: str, status: int, message: str) -> None:
        self.errors.append((route, status, message))


def stub_response(status_code: int = 200, body: bytes = b"", headers=None) -> httpx.Response:
    """Response with a not-yet-read body, like one arriving over the network."""
    raw_headers = [(b"content-length", str(len(body)).encode())] if body else []
    if isinstance(headers, dict):
        headers = list(headers.items())
    raw_headers.extend(headers or [])
    return httpx.Response(status_code, headers=raw_headers, stream=httpx.ByteStream(body))


class StubUpstream:
    """Upstream served through httpx.MockTransport, counting the calls it gets."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: stub_response(
            200,
            b"upstream body",
            {"content-type": "text/plain"},
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def make_client(logger, upstream):
    """Build a TestClient around the proxy for a given Config."""
    clients: list[TestClient] = []

    def _make(config: Config) -> TestClient:
        app = create_app(config, logger, transport=httpx.MockTransport(upstream))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, config):
    return make_client(config)
