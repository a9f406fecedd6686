"""
Centralized structured logging for the backend.
Uses Python's standard logging with JSON formatting for production.

Every record carries the request correlation ID when one is set.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs logs in a format easily parseable by log aggregation tools.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id and request_id != "-":
            log_data["request_id"] = request_id

        if getattr(record, "extra_data", None):
            log_data["data"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable, coloured formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now().strftime("%H:%M:%S")

        request_id = getattr(record, "request_id", None)
        if request_id and request_id != "-":
            request_id_str = f"{self.DIM}[{request_id[:8]}]{self.RESET} "
        else:
            request_id_str = ""

        message = (
            f"{color}[{timestamp}] {record.levelname:8}{self.RESET} "
            f"{request_id_str}{record.name}: {record.getMessage()}"
        )

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            data_str = " | ".join(f"{k}={v}" for k, v in extra_data.items())
            message += f" ({data_str})"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


class StructuredLogger(logging.Logger):
    """
    Logger whose keyword arguments become structured fields.

        logger.info("Post reported", post_id=post.id, report_count=3)
    """

    def _log_with_data(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        extra: dict | None = None,
        **kwargs: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        if extra is None:
            extra = {}
        extra["extra_data"] = kwargs if kwargs else None
        super()._log(level, msg, args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._log_with_data(logging.ERROR, msg, args, exc_info=exc_info, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._log_with_data(logging.CRITICAL, msg, args, exc_info=exc_info, **kwargs)


# Set custom logger class
logging.setLoggerClass(StructuredLogger)


def _resolve_level() -> int:
    """LOG_LEVEL wins; otherwise DEBUG when debug is on, INFO when off."""
    if settings.log_level:
        level = logging.getLevelName(settings.log_level.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.debug else logging.INFO


def _use_json() -> bool:
    """LOG_FORMAT=json|text; unset means JSON in production only."""
    if settings.log_format:
        return settings.log_format.lower() == "json"
    return settings.environment == "production"


def setup_logging() -> None:
    """
    Configure logging for the application.
    Call this once at application startup.
    """
    # Import here to avoid circular imports
    from shared.infrastructure.correlation import CorrelationIdFilter

    log_level = _resolve_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(StructuredFormatter() if _use_json() else DevelopmentFormatter())

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance with the given name.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Message sent", message_id=msg.id, recipient_id=counselor_id)
        logger.error("Broadcast failed", post_id=post_id, exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


# Pre-configured loggers for common modules
rest_api_logger = get_logger("rest_api")
ws_gateway_logger = get_logger("ws_gateway")
forum_logger = get_logger("rest_api.forum")
chat_logger = get_logger("rest_api.chat")

# Dedicated security audit logger
security_audit_logger = get_logger("security.audit")


# =============================================================================
# Security Audit Logging
# =============================================================================


def audit_ws_connection(
    event_type: str,
    connection_id: str,
    user_id: str | None = None,
    origin: str | None = None,
    reason: str | None = None,
    **extra: Any,
) -> None:
    """
    Log WebSocket connection security events.

    Args:
        event_type: CONNECT, AUTHENTICATED, AUTH_FAILED, DISCONNECT
        connection_id: Registry connection ID
        user_id: User ID (for authenticated connections)
        origin: Origin header value
        reason: Reason for the event (especially for failures)
        **extra: Additional context data
    """
    level = logging.WARNING if event_type == "AUTH_FAILED" else logging.INFO
    security_audit_logger._log_with_data(
        level,
        f"WS_AUDIT: {event_type}",
        args=(),
        event_type=event_type,
        connection_id=connection_id,
        user_id=user_id,
        origin=origin,
        reason=reason,
        **extra,
    )


def audit_moderation_event(
    event_type: str,
    post_id: str,
    actor_id: str | None = None,
    **extra: Any,
) -> None:
    """
    Log forum moderation events (auto-hide, restore, permanent moderation).

    Args:
        event_type: AUTO_HIDDEN, RESTORED, MODERATED
        post_id: Affected forum post
        actor_id: Admin who acted, None for automatic transitions
        **extra: Additional context data
    """
    security_audit_logger.info(
        f"MODERATION_AUDIT: {event_type}",
        event_type=event_type,
        post_id=post_id,
        actor_id=actor_id,
        **extra,
    )
