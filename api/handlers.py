"""FastAPI route handlers."""

from collections.abc import AsyncIterator

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from core.config import Config
from core.gate import MISSING_AUTH_ERROR
from core.protocols import RequestLogger
from ui.log_utils import write_incoming_log

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _original_path(request: Request) -> str:
    """Inbound path as sent by the client, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return request.url.path


async def handle_proxy(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response | StreamingResponse:
    """Gate, rewrite and forward any request to the upstream."""
    method = request.method
    path = _original_path(request)
    if config.proxy.debug:
        write_incoming_log(method, path, dict(request.headers))

    gateway = request.app.state.gateway_service
    if not gateway.authorize(method, path, request.headers):
        return JSONResponse({"error": MISSING_AUTH_ERROR}, status_code=401)

    prepared = gateway.prepare(method, path, request.url.query, request.headers.raw)
    upstream = request.app.state.upstream_client

    return await upstream.forward(prepared, _inbound_body(request), logger, f"{method} {path}")


def _inbound_body(request: Request) -> AsyncIterator[bytes] | None:
    """Stream the body through only when the client announced one."""
    if "content-length" in request.headers or "transfer-encoding" in request.headers:
        return request.stream()
    return None
