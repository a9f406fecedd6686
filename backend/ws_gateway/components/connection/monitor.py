"""
Connection monitor.

Background task that logs registry counts at a fixed interval. Started and
cancelled by the application lifespan.
"""

from __future__ import annotations

import asyncio

from shared.config.logging import ws_gateway_logger as logger
from ws_gateway.components.connection.registry import ConnectionRegistry


async def run_connection_monitor(registry: ConnectionRegistry, interval: float) -> None:
    """Log connection stats every `interval` seconds until cancelled."""
    logger.info("Connection monitor started", interval=interval)
    try:
        while True:
            await asyncio.sleep(interval)
            logger.info("WebSocket connections", **registry.stats())
    except asyncio.CancelledError:
        logger.info("Connection monitor stopped")
        raise
