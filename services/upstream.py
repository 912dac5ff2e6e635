"""HTTP proxying utilities for upstream requests."""

from collections.abc import AsyncIterator

import httpx
from fastapi import Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import (
    UpstreamConnectionError,
    UpstreamError,
    UpstreamProtocolError,
    UpstreamTimeoutError,
)
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest


class UpstreamClient:
    """Forward requests to the upstream and relay its responses verbatim."""

    def __init__(self, client: httpx.AsyncClient, header_builder: HeaderBuilder) -> None:
        self._client = client
        self._headers = header_builder

    async def forward(
        self,
        prepared: PreparedRequest,
        body: AsyncIterator[bytes] | None,
        logger: RequestLogger,
        route_name: str,
    ) -> Response | StreamingResponse:
        """Send the prepared request and stream the upstream answer back."""
        try:
            response = await self._send(prepared, body)
        except UpstreamError as e:
            logger.log_error(route_name, e.status_code, str(e))
            return JSONResponse({"error": str(e)}, status_code=e.status_code)

        if response.status_code >= 400:
            logger.log_error(route_name, response.status_code, f"upstream answered {prepared.target_url}")

        relayed = StreamingResponse(
            response.aiter_raw(),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        # Raw bytes are relayed undecoded, so content-encoding and content-length stay valid
        relayed.raw_headers = self._headers.build_response_headers(response.headers.raw)
        return relayed

    async def _send(
        self,
        prepared: PreparedRequest,
        body: AsyncIterator[bytes] | None,
    ) -> httpx.Response:
        """Issue the upstream request, translating httpx failures."""
        target = prepared.target_url
        try:
            req = self._client.build_request(
                prepared.method,
                target,
                headers=prepared.headers,
                content=body,
            )
            return await self._client.send(req, stream=True, follow_redirects=False)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError("Upstream timeout", target=target) from e
        except httpx.ConnectError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}", target=target) from e
        except httpx.ProtocolError as e:
            raise UpstreamProtocolError(f"Malformed upstream response: {e}", target=target) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise UpstreamError(f"Upstream request failed: {e}", target=target) from e

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()
