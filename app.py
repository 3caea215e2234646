"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_browse, handle_options
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.rewriter import PROXY_PATH, HtmlRewriter
from services.browse_service import BrowseService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the outbound client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.fetch.max_connections,
            max_keepalive_connections=config.fetch.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.fetch.timeout,
            limits=limits,
            follow_redirects=True,
            transport=transport,
        )
        app.state.browse_service = BrowseService(
            upstream=UpstreamClient(client, config.fetch.timeout),
            header_builder=HeaderBuilder(config.fetch.user_agents),
            rewriter=HtmlRewriter(),
            logger=logger,
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Proxy Browser", version="0.1.0", lifespan=lifespan)

    @app.get(PROXY_PATH)
    async def browse_get(request: Request):
        return await handle_browse(request, config, logger)

    @app.post(PROXY_PATH)
    async def browse_post(request: Request):
        return await handle_browse(request, config, logger)

    @app.options(PROXY_PATH)
    async def browse_options():
        return await handle_options()

    return app
