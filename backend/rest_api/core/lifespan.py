"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine
from shared.config.settings import settings
from shared.config.logging import setup_logging, rest_api_logger as logger
from rest_api.models import Base
from ws_gateway.components.connection.monitor import run_connection_monitor


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Initialize logging
    setup_logging()

    # Validate production secrets before startup
    secret_errors = settings.validate_production_secrets()
    if secret_errors:
        for error in secret_errors:
            logger.error("Configuration error: %s", error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(secret_errors)}. "
                "Server will not start with insecure configuration."
            )
        else:
            logger.warning(
                "Running with insecure defaults (acceptable for development only)"
            )

    # Startup
    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    monitor_task = asyncio.create_task(
        run_connection_monitor(app.state.registry, settings.ws_monitor_interval),
        name="ws_connection_monitor",
    )

    yield

    # Shutdown
    logger.info("Shutting down REST API")

    monitor_task.cancel()
    try:
        await monitor_task
    except asyncio.CancelledError:
        pass
    logger.info("Connection monitor stopped", **app.state.registry.stats())
