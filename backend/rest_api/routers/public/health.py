"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its database.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.config.logging import rest_api_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db_context


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check(request: Request):
    """
    Health of the database and the WebSocket gateway.

    Returns 503 Service Unavailable if the database is unreachable.
    """
    database = {"status": "healthy"}
    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        database = {"status": "unhealthy", "error": "database unreachable"}

    gateway = request.app.state.gateway
    overall = "healthy" if database["status"] == "healthy" else "unhealthy"
    body = {
        "status": overall,
        "service": "rest-api",
        "environment": settings.environment,
        "dependencies": {
            "database": database,
            "websocket": {"status": "healthy", **gateway.stats()},
        },
    }
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body)
    return body
