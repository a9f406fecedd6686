"""
Security middlewares for the FastAPI application.
Implements security headers and content-type validation.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.settings import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all HTTP responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy: strict-origin-when-cross-origin
    - Content-Security-Policy: API responses are never rendered as pages
    - Strict-Transport-Security: production only
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class ContentTypeValidationMiddleware(BaseHTTPMiddleware):
    """
    Validate Content-Type for requests with body.

    Returns 415 Unsupported Media Type unless the body is JSON.
    """

    METHODS_WITH_BODY = {"POST", "PUT", "PATCH"}

    async def dispatch(self, request: Request, call_next):
        if request.method in self.METHODS_WITH_BODY:
            content_type = request.headers.get("content-type", "")
            # Bodyless POSTs (like toggles) send no content type
            if content_type and not content_type.startswith("application/json"):
                return JSONResponse(
                    status_code=415,
                    content={"detail": "Unsupported Media Type. Use application/json"},
                )
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    """
    Register all security middlewares on the FastAPI application.

    Middlewares execute in reverse order of registration:
    ContentTypeValidation runs first, then SecurityHeaders.
    """
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ContentTypeValidationMiddleware)
