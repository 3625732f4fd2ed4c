"""Structured logging for the WhatsApp bot.

Provides structured logging for:
- Inbound messages and webhook requests
- Negotiation stage transitions and business outcomes (deals, rejections)
- Errors, including persistence failures

Supports:
- Console logging (development)
- File logging with rotation (development and production)
- JSON output for log aggregation (production)
"""

import logging
import os
import sys
from contextvars import ContextVar
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

# Request context for correlating logs
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


class EventCategory(str, Enum):
    """Categories of logged events."""
    INBOUND = "inbound"
    CONVERSATION = "conversation"
    NEGOTIATION = "negotiation"
    SYSTEM = "system"
    ERROR = "error"


class LogConfig:
    """Logging configuration from environment variables."""

    # Environment: development, staging, production
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Log level: DEBUG, INFO, WARNING, ERROR
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Log format: json or text
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json" if ENVIRONMENT == "production" else "text")

    # File logging
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "false").lower() == "true"
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "logs"))
    LOG_FILE_MAX_BYTES: int = int(os.getenv("LOG_FILE_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    LOG_FILE_BACKUP_COUNT: int = int(os.getenv("LOG_FILE_BACKUP_COUNT", 5))


def _rotating_handler(filename: str, level: int) -> logging.Handler:
    LogConfig.LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        LogConfig.LOG_DIR / filename,
        maxBytes=LogConfig.LOG_FILE_MAX_BYTES,
        backupCount=LogConfig.LOG_FILE_BACKUP_COUNT,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    return handler


def configure_production_logging() -> None:
    """Configure structured logging for all environments."""
    level = getattr(logging, LogConfig.LOG_LEVEL)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    # Console handler (always enabled)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if LogConfig.LOG_TO_FILE:
        root_logger.addHandler(_rotating_handler("app.log", level))
        root_logger.addHandler(_rotating_handler("error.log", logging.ERROR))

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_request_context,
        add_environment_context,
    ]

    # Use JSON renderer for production, colored console for dev
    if LogConfig.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).info(
        "logging_configured",
        environment=LogConfig.ENVIRONMENT,
        log_level=LogConfig.LOG_LEVEL,
        log_format=LogConfig.LOG_FORMAT,
        file_logging=LogConfig.LOG_TO_FILE,
    )


def add_request_context(logger, method_name, event_dict):
    """Add request context to log events."""
    request_id = _request_id.get()
    user_id = _user_id.get()

    if request_id:
        event_dict["request_id"] = request_id
    if user_id:
        event_dict["user_id"] = user_id

    return event_dict


def add_environment_context(logger, method_name, event_dict):
    """Add environment info to log events."""
    event_dict["env"] = LogConfig.ENVIRONMENT
    return event_dict


def set_request_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
):
    """Set request context for correlation."""
    if request_id:
        _request_id.set(request_id)
    if user_id:
        _user_id.set(mask_user_id(user_id))


def clear_request_context():
    """Clear request context."""
    _request_id.set(None)
    _user_id.set(None)


def mask_user_id(user_id: str) -> str:
    """Mask a phone-number style identifier for privacy in logs."""
    return user_id[:4] + "****" + user_id[-2:] if len(user_id) > 6 else "***"


logger = structlog.get_logger(__name__)


def log_api_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    error: Optional[str] = None,
):
    """Log an HTTP request handled by the webhook server."""
    level = "info" if status_code < 400 else "warning" if status_code < 500 else "error"
    getattr(logger, level)(
        "api_request",
        category=EventCategory.SYSTEM.value,
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
        error=error,
    )


def log_inbound_message(user_id: str, text: str, command: str):
    """Log a classified inbound message.

    Args:
        user_id: Channel identifier of the sender (masked before logging)
        text: Normalized message text
        command: Command token the message was classified as
    """
    logger.info(
        "inbound_message",
        category=EventCategory.INBOUND.value,
        user=mask_user_id(user_id),
        text=text[:100],
        command=command,
    )


def log_transition(user_id: str, from_state: str, to_state: str, outcome: str):
    """Log a negotiation state machine transition."""
    logger.info(
        "negotiation_transition",
        category=EventCategory.CONVERSATION.value,
        user=mask_user_id(user_id),
        from_state=from_state,
        to_state=to_state,
        outcome=outcome,
    )


def log_business_event(event: str, data: dict):
    """Log a business event.

    Args:
        event: Event name (e.g., "deal_accepted", "offer_rejected")
        data: Event data
    """
    logger.info(
        "business_event",
        category=EventCategory.NEGOTIATION.value,
        business_event=event,
        data=data,
    )


def log_error(
    error_type: str,
    message: str,
    context: Optional[dict] = None,
):
    """Log an error that is reported back to the channel adapter."""
    logger.error(
        "error",
        category=EventCategory.ERROR.value,
        error_type=error_type,
        message=message,
        context=context or {},
    )
