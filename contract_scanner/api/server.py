"""API server — runs uvicorn inside the current asyncio event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


async def run_api_server(host: str | None = None, port: int | None = None) -> None:
    """Serve the FastAPI app until cancelled."""
    from contract_scanner.api.app import create_app

    host = host or settings.api_host
    port = port or settings.api_port

    app = create_app()
    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_level="warning",
        loop="none",  # use the existing event loop
    )
    server = uvicorn.Server(config)
    logger.info(f"Scanner API starting on http://{host}:{port}")
    await server.serve()
