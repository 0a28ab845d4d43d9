"""
Database Client for Supabase.

Persists one document_analyses row per analyzed document.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from postgrest.exceptions import APIError

from src.core.config import ANALYSIS_TABLE
from src.core.exceptions import PersistenceError
from src.core.logging import EventType
from src.core.schemas import AnnotationResult, build_analysis_row

if TYPE_CHECKING:
    from supabase import Client

    from src.core.config import Settings

logger = structlog.get_logger(__name__)


def create_supabase_client(settings: Settings) -> Client:
    """Create a Supabase client from function settings."""
    from supabase import create_client

    return create_client(settings.supabase_url, settings.supabase_key)


class AnalysisRepository:
    """Writes analysis results to the document_analyses table."""

    def __init__(self, client: Client, table: str = ANALYSIS_TABLE) -> None:
        """
        Initialize repository.

        Args:
            client: Supabase client
            table: Target table name
        """
        self._client = client
        self.table = table

    def insert_analysis(self, document_id: int, result: AnnotationResult) -> dict[str, Any]:
        """
        Insert a completed analysis row.

        Plain insert, no upsert: a re-delivered trigger adds another row.

        Args:
            document_id: Id of the uploaded document record
            result: Validated analysis

        Returns:
            The row that was inserted

        Raises:
            PersistenceError: If the insert fails; carries the analysis
        """
        row = build_analysis_row(document_id, result)

        try:
            self._client.table(self.table).insert(row).execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(
                EventType.ANALYSIS_SAVE_FAILED.value,
                document_id=document_id,
                table=self.table,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(
                document_id,
                str(e),
                analysis=result.model_dump(exclude_none=True),
            ) from e

        logger.info(EventType.ANALYSIS_SAVED.value, document_id=document_id, table=self.table)
        return row
