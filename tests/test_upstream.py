"""Tests for UpstreamClient used directly, without the ASGI test client."""

import asyncio

import httpx

from conftest import stub_response
from core.headers import HeaderBuilder
from core.request_types import PreparedRequest
from services.upstream import UpstreamClient


def _forward(upstream, logger, prepared, body=None):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
            relayed = await UpstreamClient(client, HeaderBuilder()).forward(
                prepared, body, logger, f"{prepared.method} /iip"
            )
            chunks = []
            if hasattr(relayed, "body_iterator"):
                chunks = [chunk async for chunk in relayed.body_iterator]
                await relayed.background()
            return relayed, b"".join(chunks)

    return asyncio.run(run())


def test_non_ascii_response_header_bytes_are_preserved(upstream, logger):
    disposition = 'attachment; filename="日本.tif"'.encode()
    upstream.responder = lambda request: stub_response(
        200,
        b"tif",
        [(b"Content-Disposition", disposition), (b"X-Name", "café".encode())],
    )

    relayed, body = _forward(upstream, logger, PreparedRequest("GET", "http://localhost/download", []))

    assert relayed.status_code == 200
    assert body == b"tif"
    assert (b"content-disposition", disposition) in relayed.raw_headers
    assert (b"x-name", "café".encode()) in relayed.raw_headers


def test_streamed_body_reaches_upstream(upstream, logger):
    async def body():
        yield b"first,"
        yield b"second"

    prepared = PreparedRequest("POST", "http://localhost/upload", [(b"content-length", b"12")])

    relayed, _ = _forward(upstream, logger, prepared, body())

    forwarded = upstream.requests[0]
    assert relayed.status_code == 200
    assert forwarded.content == b"first,second"
    assert forwarded.headers["content-length"] == "12"
    assert "transfer-encoding" not in forwarded.headers


def test_failure_returns_json_error(upstream, logger):
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    upstream.responder = refuse

    relayed, _ = _forward(upstream, logger, PreparedRequest("GET", "http://localhost/x", []))

    assert relayed.status_code == 502
    assert relayed.body == b'{"error":"Upstream connection error: Connection refused"}'
    assert logger.errors == [("GET /iip", 502, "Upstream connection error: Connection refused")]
