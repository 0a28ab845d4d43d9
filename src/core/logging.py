"""Structured logging configuration for the document analysis function.

This module provides structured logging with Cloud Logging integration,
secret and document data masking, and consistent event naming.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any

import structlog

# Standard log level values
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# Secrets are masked in every environment
SECRET_FIELDS = {
    "key",
    "api_key",
    "apikey",
    "authorization",
    "gemini_api_key",
    "supabase_key",
}

# Document contents are masked in production only
SENSITIVE_FIELDS = {
    "issuer_name",
    "key_figures",
    "summary",
    "raw_text",
}


class EventType(str, Enum):
    """Standardized event names for log correlation."""

    # Request handling
    REQUEST_RECEIVED = "request_received"
    PREFLIGHT_HANDLED = "preflight_handled"
    UNEXPECTED_ERROR = "unexpected_error"

    # Analysis lifecycle
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_FAILED = "analysis_failed"
    PROMPT_STARTED = "prompt_started"

    # Storage operations
    DOWNLOAD_STARTED = "download_started"
    DOWNLOAD_COMPLETED = "download_completed"
    DOWNLOAD_FAILED = "download_failed"

    # Gemini operations
    GEMINI_REQUEST = "gemini_request"
    GEMINI_RESPONSE = "gemini_response"
    GEMINI_FAILED = "gemini_failed"
    COMPLETION_PARSE_FAILED = "completion_parse_failed"

    # Database operations
    ANALYSIS_SAVED = "analysis_saved"
    ANALYSIS_SAVE_FAILED = "analysis_save_failed"


def mask_value(value: Any, field_name: str = "") -> Any:
    """Mask a sensitive value for logging.

    Args:
        value: The value to potentially mask.
        field_name: The field name for context-aware masking.

    Returns:
        Masked value or original if not sensitive.
    """
    if value is None:
        return None

    field_lower = field_name.lower()
    if field_lower in SECRET_FIELDS:
        return "***"

    if field_lower in SENSITIVE_FIELDS:
        if isinstance(value, str):
            if len(value) <= 4:
                return "***"
            return f"{value[:2]}***{value[-2:]}"
        if isinstance(value, dict):
            return {k: "***" for k in value}
        return "***"

    return value


def mask_dict(data: dict[str, Any], secrets_only: bool = False) -> dict[str, Any]:
    """Recursively mask sensitive data in a dictionary.

    Args:
        data: Dictionary to mask.
        secrets_only: Only mask credentials, leave document data untouched.

    Returns:
        New dictionary with sensitive values masked.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if secrets_only and key.lower() not in SECRET_FIELDS:
            result[key] = mask_dict(value, secrets_only) if isinstance(value, dict) else value
        elif isinstance(value, dict) and key.lower() not in SENSITIVE_FIELDS | SECRET_FIELDS:
            result[key] = mask_dict(value, secrets_only)
        else:
            result[key] = mask_value(value, key)
    return result


def add_cloud_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add Cloud Function context to log events."""
    event_dict["execution_id"] = os.environ.get(
        "FUNCTION_EXECUTION_ID", os.environ.get("K_REVISION", "local")
    )
    event_dict["function_name"] = os.environ.get(
        "FUNCTION_NAME", os.environ.get("K_SERVICE", "unknown")
    )
    event_dict["environment"] = os.environ.get("ENVIRONMENT", "development")

    return event_dict


def mask_sensitive_data(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor to mask secrets always and document data in production."""
    production = os.environ.get("ENVIRONMENT") == "production"
    return mask_dict(event_dict, secrets_only=not production)


def add_severity_for_cloud_logging(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add severity field for Cloud Logging integration.

    Cloud Logging expects a 'severity' field with uppercase level names.
    """
    level = event_dict.get("level", "info").upper()
    event_dict["severity"] = level if level in LOG_LEVELS else "DEFAULT"

    return event_dict


def configure_logging(
    json_logs: bool | None = None,
    log_level: str = "INFO",
) -> None:
    """Configure structured logging for the function.

    Args:
        json_logs: Whether to output JSON logs. Defaults to True in production.
        log_level: Minimum log level to output.
    """
    if json_logs is None:
        json_logs = os.environ.get("ENVIRONMENT") == "production"

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_cloud_context,
        mask_sensitive_data,
        add_severity_for_cloud_logging,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    level_value = LOG_LEVELS.get(log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LogContext:
    """Context manager for adding temporary logging context.

    Example:
        with LogContext(document_id=42):
            logger.info(EventType.ANALYSIS_STARTED.value)
    """

    def __init__(self, **context: Any) -> None:
        self.context = context

    def __enter__(self) -> LogContext:
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
