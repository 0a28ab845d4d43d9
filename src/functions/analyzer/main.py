"""
Document Analyzer Cloud Function Entry Point.

Receives a storage insert webhook (or a direct prompt), runs the analysis
pipeline, and answers with JSON. Every response carries permissive CORS
headers so the function can be called from the browser.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

import functions_framework
import structlog

from src.core.config import get_settings
from src.core.database import AnalysisRepository, create_supabase_client
from src.core.exceptions import AnalysisError, PersistenceError
from src.core.gemini import GeminiClient
from src.core.logging import EventType, configure_logging
from src.core.pipeline import Services, analyze_document, annotate_prompt
from src.core.schemas import PromptRequest, parse_trigger
from src.core.storage import SupabaseStorage

logger = structlog.get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

INTERNAL_ERROR_MESSAGE = "Internal server error"

ResponseTuple = tuple[Any, int, dict[str, str]]


@lru_cache
def get_services() -> Services:
    """Build the collaborators once per process (cached)."""
    settings = get_settings()
    client = create_supabase_client(settings)
    return Services(
        storage=SupabaseStorage(
            client,
            bucket=settings.storage_bucket,
            default_mime_type=settings.default_mime_type,
        ),
        gemini=GeminiClient(api_key=settings.gemini_api_key, api_url=settings.gemini_api_url),
        repository=AnalysisRepository(client),
    )


def _json_response(body: dict[str, Any], status: int) -> ResponseTuple:
    return body, status, {**CORS_HEADERS, "Content-Type": "application/json"}


@functions_framework.http
def handle_document_upload(request: Any) -> ResponseTuple:
    """
    Cloud Function entry point for document analysis.

    Accepts either a storage webhook ``{"record": {"id", "client_id", "file_path"}}``
    or a direct ``{"prompt": ...}`` body.

    Args:
        request: Flask request object

    Returns:
        Tuple of (response body, HTTP status code, headers)
    """
    if request.method == "OPTIONS":
        logger.debug(EventType.PREFLIGHT_HANDLED.value)
        return "ok", 200, dict(CORS_HEADERS)

    logger.info(EventType.REQUEST_RECEIVED.value, method=request.method)

    try:
        trigger = parse_trigger(request.get_json(force=True, silent=True))
        services = get_services()

        if isinstance(trigger, PromptRequest):
            completion = annotate_prompt(trigger, services)
            return _json_response({"success": True, "analysis": completion}, 200)

        result = analyze_document(trigger, services)
        return _json_response(
            {"success": True, "analysis": result.model_dump(exclude_none=True)},
            200,
        )

    except PersistenceError as e:
        # The analysis was computed; return it alongside the failure
        logger.error(
            EventType.ANALYSIS_FAILED.value,
            error=str(e),
            error_type=type(e).__name__,
            document_id=e.document_id,
        )
        return _json_response({"error": e.public_message, "analysis": e.analysis}, e.status_code)

    except AnalysisError as e:
        logger.error(
            EventType.ANALYSIS_FAILED.value,
            error=str(e),
            error_type=type(e).__name__,
            status_code=e.status_code,
        )
        return _json_response({"error": e.public_message}, e.status_code)

    except Exception as e:
        logger.exception(
            EventType.UNEXPECTED_ERROR.value,
            error=str(e),
            error_type=type(e).__name__,
        )
        return _json_response({"error": INTERNAL_ERROR_MESSAGE}, 500)


# Initialize logging on module import if running in Cloud Functions
if os.environ.get("FUNCTION_TARGET") or os.environ.get("K_SERVICE"):
    configure_logging(json_logs=True, log_level=os.environ.get("LOG_LEVEL", "INFO"))
