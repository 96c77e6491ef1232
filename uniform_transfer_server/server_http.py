"""HTTP entry point: transfer REST endpoints plus the MCP streamable-http app."""

from __future__ import annotations

import logging
import os

from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .controller import TransferController
from .service import TransferService
from .utils.logging import setup_logging

setup_logging()

logger = logging.getLogger("uniform_transfer_server.server_http")


async def health(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({
        "status": "ok",
        "service": "uniform-transfers",
        "mcp": request.app.state.mcp_enabled,
    })


def create_app(controller: TransferController, mcp_server=None) -> Starlette:
    """Create ASGI app with CORS middleware.

    When mcp_server is given its streamable-http app is mounted at the root,
    behind the transfer routes.
    """
    routes = [
        Route("/health", health, methods=["GET"]),
        *controller.routes(),
    ]

    lifespan = None
    if mcp_server is not None:
        mcp_app = mcp_server.http_app()
        routes.append(Mount("/", app=mcp_app))
        # FastMCP's session manager starts in the mounted app's lifespan
        lifespan = mcp_app.lifespan

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.mcp_enabled = mcp_server is not None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    return app


def main() -> None:
    """Run the transfer API and MCP server over HTTP."""
    import uvicorn

    from .server import server as mcp_server

    service = TransferService.from_env()
    app = create_app(TransferController(service, service.directory), mcp_server=mcp_server)

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info("Starting uniform transfer server on %s:%s", host, port)
    logger.info("ERP gateway: %s", service.client.base_url)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
