"""Gemini API Client.

Sends a single generateContent request over HTTPS and turns the response
envelope into a validated analysis:
- One attempt per invocation, no retries
- API key passed as the ``key`` query parameter and never logged
- Markdown code fences stripped from the completion before JSON parsing
"""

from __future__ import annotations

import json
from typing import Any

import requests
import structlog

from src.core.config import DEFAULT_GEMINI_API_URL
from src.core.exceptions import ParseError, ServiceError
from src.core.logging import EventType
from src.core.prompts import AnnotationRequest
from src.core.schemas import AnnotationResult, parse_annotation

logger = structlog.get_logger(__name__)


# ============================================================
# Response Parsing
# ============================================================


def extract_completion_text(envelope: dict[str, Any]) -> str:
    """Extract the completion text from a generateContent response.

    Args:
        envelope: ``{"candidates": [{"content": {"parts": [{"text": ...}]}}]}``

    Returns:
        Text of the first candidate, parts concatenated

    Raises:
        ParseError: If the envelope has no candidate text
    """
    try:
        parts = envelope["candidates"][0]["content"]["parts"]
        texts = [part["text"] for part in parts if isinstance(part.get("text"), str)]
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ParseError("Gemini response did not contain a completion") from e

    if not texts:
        raise ParseError("Gemini response did not contain a completion")

    return "".join(texts)


def parse_json_response(response: str) -> Any:
    """Parse JSON from a Gemini completion.

    Handles common formatting issues:
    - Removes markdown code fences (```json, ```)
    - Strips whitespace

    Args:
        response: Raw completion text

    Returns:
        Decoded JSON value

    Raises:
        ParseError: If the text is not valid JSON

    Examples:
        >>> parse_json_response('{"id": "123"}')
        {'id': '123'}
        >>> parse_json_response('```json\\n{"id": "123"}\\n```')
        {'id': '123'}
    """
    text = response.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    try:
        return json.loads(text.strip())
    except json.JSONDecodeError as e:
        logger.error(EventType.COMPLETION_PARSE_FAILED.value, error=str(e), raw_text=response[:200])
        raise ParseError(f"Gemini returned invalid JSON: {e.msg}") from e


def parse_analysis(completion: str) -> AnnotationResult:
    """Parse a completion into a validated AnnotationResult.

    Raises:
        ParseError: If the text is not a JSON object with the required fields
    """
    data = parse_json_response(completion)
    if not isinstance(data, dict):
        raise ParseError("Gemini returned JSON that is not an object")
    return parse_annotation(data)


# ============================================================
# Gemini Client
# ============================================================


class GeminiClient:
    """Client for the Gemini generateContent REST endpoint.

    Examples:
        >>> client = GeminiClient(api_key="your-api-key")
        >>> envelope = client.generate(AnnotationRequest("Hola"))
        >>> extract_completion_text(envelope)
        '¡Hola! ...'
    """

    def __init__(self, api_key: str, api_url: str = DEFAULT_GEMINI_API_URL) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Google API key for Gemini
            api_url: generateContent endpoint URL
        """
        self.api_key = api_key
        self.api_url = api_url

    def generate(self, request: AnnotationRequest) -> dict[str, Any]:
        """Send one generateContent request.

        Args:
            request: Prompt and optional inline attachment

        Returns:
            Decoded response envelope

        Raises:
            ServiceError: On network failure, non-success status, or a
                non-JSON response body
        """
        has_attachment = request.attachment is not None
        logger.info(
            EventType.GEMINI_REQUEST.value,
            has_attachment=has_attachment,
            mime_type=request.attachment.mime_type if has_attachment else None,
        )

        try:
            response = requests.post(  # noqa: S113
                self.api_url,
                params={"key": self.api_key},
                json=request.to_payload(),
                headers={"Content-Type": "application/json"},
            )
        except requests.RequestException as e:
            # str(e) can include the request URL with the key
            logger.error(EventType.GEMINI_FAILED.value, error_type=type(e).__name__)
            raise ServiceError(f"Gemini API request failed: {type(e).__name__}") from e

        if not response.ok:
            logger.error(
                EventType.GEMINI_FAILED.value,
                status_code=response.status_code,
                reason=response.reason,
            )
            raise ServiceError(
                f"Gemini API error: {response.status_code} {response.reason}",
                upstream_status=response.status_code,
            )

        try:
            envelope = response.json()
        except ValueError as e:
            logger.error(
                EventType.GEMINI_FAILED.value,
                status_code=response.status_code,
                error="invalid_json",
            )
            raise ServiceError("Gemini API returned a non-JSON response") from e

        logger.info(EventType.GEMINI_RESPONSE.value, status_code=response.status_code)
        return envelope

    def analyze(self, request: AnnotationRequest) -> AnnotationResult:
        """Send a request and parse the completion into an analysis.

        Raises:
            ServiceError: If the API call fails
            ParseError: If the completion is not a valid analysis
        """
        envelope = self.generate(request)
        return parse_analysis(extract_completion_text(envelope))

    def complete(self, request: AnnotationRequest) -> str:
        """Send a request and return the raw completion text.

        Raises:
            ServiceError: If the API call fails
            ParseError: If the envelope has no completion
        """
        return extract_completion_text(self.generate(request))
