"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_proxy
from core.config import Config
from core.cors import CorsPolicy
from core.headers import HeaderBuilder
from core.models import SUPPORTED_METHODS
from core.protocols import RequestLogger
from services.proxy_service import ProxyService
from services.upstream import UpstreamClient, build_http_client


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    policy = CorsPolicy.from_settings(config.cors)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = build_http_client(config, transport=transport)
        app.state.proxy_service = ProxyService(
            upstream=UpstreamClient(client),
            policy=policy,
            header_builder=HeaderBuilder(config.headers),
            logger=logger,
            max_body_size=config.limits.max_body_size,
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="CORS Relay", version="0.1.0", lifespan=lifespan)

    @app.api_route("/", methods=list(SUPPORTED_METHODS))
    async def proxy(request: Request):
        return await handle_proxy(request, logger)

    return app
