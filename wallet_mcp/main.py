from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import health, mcp
from .config import Settings, settings as default_settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .providers import build_chain_client, build_price_provider
from .providers.base import ChainClient, PriceProvider
from .server import MCPServer

logger = structlog.stdlib.get_logger(__name__)

DESCRIPTION = "Read-only Ethereum wallet tools (balances, prices, swap quotes) over MCP JSON-RPC"


def create_app(
    settings: Optional[Settings] = None,
    chain_client: Optional[ChainClient] = None,
    price_provider: Optional[PriceProvider] = None,
) -> FastAPI:
    """Build the application.

    Clients passed in are used as-is and left open on shutdown; otherwise the
    lifespan validates configuration, builds the pooled clients and closes
    them when the server stops.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "mcp_server", None) is not None:
            yield
            return

        settings.validate_startup()
        chain = chain_client or build_chain_client(settings)
        prices = price_provider or build_price_provider(settings)
        app.state.mcp_server = MCPServer.build(chain, prices, settings)
        logger.info(
            "server_started",
            host=settings.host,
            port=settings.port,
            price_provider=prices.name,
        )
        try:
            yield
        finally:
            if chain_client is None:
                await chain.aclose()
            if price_provider is None:
                await prices.aclose()
            logger.info("server_stopped")

    app = FastAPI(
        title="Wallet MCP Server",
        description=DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if chain_client is not None and price_provider is not None:
        app.state.mcp_server = MCPServer.build(chain_client, price_provider, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(mcp.router, tags=["MCP"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "Wallet MCP Server",
            "version": __version__,
            "description": DESCRIPTION,
            "mcp": "/mcp",
            "health": "/health",
            "docs": "/docs",
        }

    return app


def run() -> None:
    setup_logging()
    import uvicorn
    uvicorn.run(
        "wallet_mcp.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
        log_config=None,
    )


app = create_app()


if __name__ == "__main__":
    run()
