"""
REST API main application.
Entry point for the FastAPI server: HTTP routers and the /ws WebSocket
gateway run in the same process.
"""

from fastapi import FastAPI

from shared.infrastructure.correlation import CorrelationIdMiddleware
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.applications import router as applications_router
from rest_api.routers.chat import router as chat_router
from rest_api.routers.forum import router as forum_router
from rest_api.routers.notifications import router as notifications_router
from rest_api.routers.public import health_router
from ws_gateway.components.auth.strategies import JWTTokenVerifier, TokenVerifier
from ws_gateway.components.connection.registry import ConnectionRegistry
from ws_gateway.components.events.handlers import WebSocketEventHandlers
from ws_gateway.gateway import RealtimeGateway
from ws_gateway.main import router as ws_router


def create_app(verifier: TokenVerifier | None = None) -> FastAPI:
    """
    Build the application.

    The connection registry, gateway and event handlers are created here
    and shared through app.state; routers reach them via dependencies.
    """
    app = FastAPI(
        title="Study Abroad API",
        description="Forum, counselor chat, notifications and real-time updates",
        version="0.1.0",
        lifespan=lifespan,
    )

    registry = ConnectionRegistry()
    gateway = RealtimeGateway(registry, verifier or JWTTokenVerifier())
    app.state.registry = registry
    app.state.gateway = gateway
    app.state.event_handlers = WebSocketEventHandlers(gateway)

    register_middlewares(app)
    configure_cors(app)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health_router)
    app.include_router(forum_router)
    app.include_router(admin_router)
    app.include_router(chat_router)
    app.include_router(notifications_router)
    app.include_router(applications_router)
    app.include_router(ws_router)

    return app


app = create_app()
