"""
Document analysis pipeline.

Runs the sequential chain for one trigger:
1. Download the document from storage
2. Build the Gemini request with the fixed analysis prompt
3. Call Gemini and parse the completion
4. Persist the analysis row

Each step is awaited before the next; a failure stops the chain and
nothing after it runs.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.core.database import AnalysisRepository
from src.core.gemini import GeminiClient
from src.core.logging import EventType, LogContext
from src.core.prompts import build_annotation_request, build_prompt_request
from src.core.schemas import AnnotationResult, IngestionEvent, PromptRequest
from src.core.storage import SupabaseStorage

logger = structlog.get_logger(__name__)


@dataclass
class Services:
    """Collaborators used by one invocation."""

    storage: SupabaseStorage
    gemini: GeminiClient
    repository: AnalysisRepository


def analyze_document(event: IngestionEvent, services: Services) -> AnnotationResult:
    """
    Analyze an uploaded document and persist the result.

    Args:
        event: Storage insert notification
        services: Storage, Gemini and database collaborators

    Returns:
        The validated analysis

    Raises:
        StorageError: If the document cannot be downloaded
        ServiceError: If the Gemini call fails
        ParseError: If the completion is not a valid analysis
        PersistenceError: If the row cannot be written
    """
    with LogContext(document_id=event.record_id, client_id=event.client_id):
        logger.info(EventType.ANALYSIS_STARTED.value, storage_path=event.storage_path)

        document = services.storage.download(event.storage_path)
        request = build_annotation_request(document)
        result = services.gemini.analyze(request)
        services.repository.insert_analysis(event.record_id, result)

        logger.info(
            EventType.ANALYSIS_COMPLETED.value,
            document_type=result.document_type,
            tax_year=result.tax_year,
        )
        return result


def annotate_prompt(request: PromptRequest, services: Services) -> str:
    """
    Run a text-only prompt and return the raw completion.

    Nothing is downloaded or persisted.

    Raises:
        ServiceError: If the Gemini call fails
        ParseError: If the response has no completion
    """
    logger.info(EventType.PROMPT_STARTED.value, prompt_length=len(request.prompt))
    return services.gemini.complete(build_prompt_request(request.prompt))
