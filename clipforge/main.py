"""FastAPI application entry point.

This module creates and configures the FastAPI application instance that
serves the provider proxy.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clipforge.api import proxy_router
from clipforge.core.config import get_config
from clipforge.core.container import container
from clipforge.core.database import check_db_connection, close_db
from clipforge.core.logging import get_logger, setup_logging

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Schema is managed by migrations; startup only logs. Shutdown releases
    the shared HTTP client and the database engine.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    config = get_config()
    logger.info("Starting ClipForge application", env=config.app_env)

    yield

    logger.info("Shutting down ClipForge application")
    await container.http_client().close()
    await close_db()
    logger.info("Cleanup complete")


# Create FastAPI application
_config = get_config()
app = FastAPI(
    title=_config.app_name,
    description="Provider asset proxy for the short-video production pipeline",
    version="0.1.0",
    docs_url="/docs" if _config.is_development else None,
    redoc_url="/redoc" if _config.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_config.cors_origins,
    allow_credentials=_config.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(proxy_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    The proxy serves without the database as long as callers supply
    credentials, so an unreachable database degrades instead of failing.
    """
    cfg = get_config()
    database_ok = await check_db_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unavailable",
        "app": cfg.app_name,
        "env": cfg.app_env,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "ClipForge API",
        "version": "0.1.0",
        "docs": "/docs" if get_config().is_development else "disabled",
    }


def serve() -> None:
    """Run the API with uvicorn using the configured host and port."""
    import uvicorn

    cfg = get_config()
    uvicorn.run(
        "clipforge.main:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=cfg.is_development,
        log_config=None,
    )
