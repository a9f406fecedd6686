"""
CORS for the study-abroad web client.

The REST API and the /ws gateway are served from the same app, so these
origins also govern which pages may open the WebSocket from a browser.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings


# Web client dev servers
DEV_ORIGINS = ("http://localhost:3000", "http://localhost:5173")

# Routers only use GET, POST and PATCH
API_METHODS = ["GET", "POST", "PATCH", "OPTIONS"]
API_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]


def get_cors_origins() -> list[str]:
    """ALLOWED_ORIGINS (comma-separated) when set, else the dev servers."""
    configured = [o.strip().rstrip("/") for o in settings.allowed_origins.split(",") if o.strip()]
    return configured or list(DEV_ORIGINS)


def configure_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=API_METHODS,
        allow_headers=API_HEADERS,
        # Chat clients read Retry-After on 429
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=0 if settings.debug else 600,
    )
