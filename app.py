"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import PROXY_METHODS, handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.gateway_service import GatewayService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the upstream client,
    which lets tests put a stub upstream behind the proxy.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        timeout = httpx.Timeout(
            config.upstream.timeout,
            connect=config.upstream.connect_timeout,
            pool=config.limits.pool_timeout,
        )
        upstream_client = httpx.AsyncClient(
            timeout=timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport,
        )
        header_builder = HeaderBuilder()
        app.state.upstream_client = UpstreamClient(upstream_client, header_builder)
        app.state.gateway_service = GatewayService(
            config=config,
            logger=logger,
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await upstream_client.aclose()

    # Every path belongs to the upstream, so no docs routes
    app = FastAPI(
        title="IIP Auth Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=PROXY_METHODS)
    async def proxy(request: Request):
        return await handle_proxy(request, config, logger)

    return app
