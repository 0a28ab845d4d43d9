"""Trigger payload and analysis schemas.

Defines the inbound webhook shapes, the structured analysis returned by
Gemini, and the row persisted for each analyzed document.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import ParseError, ValidationError

# ============================================================
# Trigger Payloads
# ============================================================


class IngestionEvent(BaseModel):
    """Storage insert notification for one uploaded document.

    Parsed from the ``record`` object of a database webhook:
    ``{"record": {"id": 42, "client_id": 7, "file_path": "docs/w2.pdf"}}``
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_id: StrictInt = Field(..., alias="id")
    client_id: StrictInt | None = None
    storage_path: str = Field(..., alias="file_path")

    @field_validator("storage_path")
    @classmethod
    def _storage_path_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("file_path must not be empty")
        return value


class PromptRequest(BaseModel):
    """Direct invocation with a free-form prompt and no attachment."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., min_length=1)


class _WebhookPayload(BaseModel):
    record: IngestionEvent


def parse_trigger(body: Any) -> IngestionEvent | PromptRequest:
    """Parse an inbound request body into a trigger.

    Args:
        body: Decoded JSON body (None when the body was not JSON)

    Returns:
        IngestionEvent for webhook bodies, PromptRequest for prompt bodies

    Raises:
        ValidationError: If the body is missing, not an object, or lacks
            both ``record.file_path`` and ``prompt``

    Examples:
        >>> parse_trigger({"record": {"id": 42, "file_path": "docs/w2.pdf"}})
        IngestionEvent(record_id=42, client_id=None, storage_path='docs/w2.pdf')
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    if body.get("record") is not None:
        try:
            return _WebhookPayload.model_validate(body).record
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in e.errors())
            raise ValidationError(f"Invalid webhook record: {fields}") from e

    prompt = body.get("prompt")
    if isinstance(prompt, str) and prompt.strip():
        return PromptRequest(prompt=prompt)

    raise ValidationError("'record.file_path' or 'prompt' is required")


# ============================================================
# Analysis Result
# ============================================================


class AnalysisStatus(str, Enum):
    """Status values stored in the document_analyses table."""

    COMPLETED = "completed"
    FAILED = "failed"


class AnnotationResult(BaseModel):
    """Structured analysis extracted from a document.

    Gemini is asked to answer with Spanish keys; the English field names
    are accepted as well.
    """

    model_config = ConfigDict(frozen=True)

    document_type: str = Field(
        ...,
        validation_alias=AliasChoices("tipo_de_documento", "document_type"),
        description="Tipo de documento (W-2, 1099, ...)",
    )
    tax_year: int | str = Field(
        ...,
        validation_alias=AliasChoices("año_fiscal", "tax_year"),
        description="Año fiscal",
    )
    issuer_name: str = Field(
        ...,
        validation_alias=AliasChoices("nombre_del_emisor", "issuer_name"),
        description="Nombre del emisor",
    )
    key_figures: dict[str, int | float | str] = Field(
        ...,
        validation_alias=AliasChoices("cifras_clave", "key_figures"),
        description="Cifras clave",
    )
    summary: str | None = Field(
        None,
        validation_alias=AliasChoices("resumen", "summary"),
        description="Resumen",
    )


def parse_annotation(data: dict[str, Any]) -> AnnotationResult:
    """Validate parsed completion JSON against the AnnotationResult shape.

    Args:
        data: Decoded JSON object from the completion

    Returns:
        Validated AnnotationResult

    Raises:
        ParseError: If required fields are missing or have the wrong type
    """
    try:
        return AnnotationResult.model_validate(data)
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ParseError(f"Analysis is missing or has invalid fields: {', '.join(fields)}") from e


def build_analysis_row(document_id: int, result: AnnotationResult) -> dict[str, Any]:
    """Build the document_analyses row for a completed analysis.

    Args:
        document_id: Id of the uploaded document record
        result: Validated analysis

    Returns:
        Row dictionary; ``summary`` is omitted when Gemini gave none
    """
    return {
        "document_id": document_id,
        "status": AnalysisStatus.COMPLETED.value,
        **result.model_dump(exclude_none=True),
    }
