"""
Smart Filter Server

FastAPI application entrypoint.

Run:
    cd backend
    python main.py
    # or: uvicorn main:create_app --factory --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smart_filter import FilterConfig, FilterRelay, router
from smart_filter.composer import CATEGORY_HEADER, STATUS_HEADER

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    config: Optional[FilterConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application around an explicit config.

    Args:
        config: Relay configuration; read from the environment if omitted
        transport: Optional httpx transport shared by the outbound clients
    """
    config = config or FilterConfig.from_env()
    relay = FilterRelay(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"[SmartFilter] Running on port {config.port}")
        logger.info(f"[SmartFilter] Classifier: {config.classify_url}")
        yield
        await relay.close()

    app = FastAPI(title=config.service_name, lifespan=lifespan)
    app.state.relay = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[STATUS_HEADER, CATEGORY_HEADER],
    )
    app.include_router(router)
    return app


if __name__ == "__main__":
    settings = FilterConfig.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
