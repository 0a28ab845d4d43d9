"""Gemini prompt templates and request builders.

The analysis prompt is fixed; the document travels inline as base64 in the
same request.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from src.core.storage import RetrievedFile

# ============================================================
# Prompts
# ============================================================

DOCUMENT_ANALYSIS_PROMPT = """
Eres un asistente experto en documentos fiscales. Analiza el documento adjunto
y extrae la siguiente información:

- tipo_de_documento: el tipo de documento (por ejemplo W-2, 1099-NEC, 1098)
- año_fiscal: el año fiscal al que corresponde el documento
- nombre_del_emisor: el nombre de la empresa o entidad que emite el documento
- cifras_clave: un objeto con las cifras más importantes (nombre -> valor numérico)
- resumen: un resumen breve del documento en una o dos oraciones

Responde únicamente con un objeto JSON válido que contenga exactamente esas
claves. No incluyas explicaciones ni texto adicional.
""".strip()


# ============================================================
# Request
# ============================================================


@dataclass(frozen=True)
class AnnotationRequest:
    """A single generateContent request.

    Attributes:
        instruction_text: Prompt text sent as the first part
        attachment: Optional document sent as inline data
    """

    instruction_text: str
    attachment: RetrievedFile | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the generateContent request body.

        Returns:
            ``{"contents": [{"parts": [...]}]}`` with a text part and, when an
            attachment is present, an ``inlineData`` part

        Examples:
            >>> AnnotationRequest("Hola").to_payload()
            {'contents': [{'parts': [{'text': 'Hola'}]}]}
        """
        parts: list[dict[str, Any]] = [{"text": self.instruction_text}]
        if self.attachment is not None:
            parts.append(
                {
                    "inlineData": {
                        "mimeType": self.attachment.mime_type,
                        "data": base64.b64encode(self.attachment.data).decode("ascii"),
                    }
                }
            )
        return {"contents": [{"parts": parts}]}


def build_annotation_request(document: RetrievedFile) -> AnnotationRequest:
    """Build the fixed analysis request for a downloaded document."""
    return AnnotationRequest(instruction_text=DOCUMENT_ANALYSIS_PROMPT, attachment=document)


def build_prompt_request(prompt: str) -> AnnotationRequest:
    """Build a text-only request from a caller supplied prompt."""
    return AnnotationRequest(instruction_text=prompt)
