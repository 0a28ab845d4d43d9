"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from src.core.config import Settings

# ============================================================
# Mock Clients
# ============================================================


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing.

    Returns:
        Mock client with storage.from_().download() and
        table().insert().execute() chains
    """
    mock_client = MagicMock()
    mock_bucket = MagicMock()
    mock_query = MagicMock()

    # Setup chain: client.storage.from_(bucket).download(path)
    mock_client.storage.from_.return_value = mock_bucket
    mock_bucket.download.return_value = b"%PDF-1.4 fake pdf content"

    # Setup chain: client.table(name).insert(row).execute()
    mock_client.table.return_value = mock_query
    mock_query.insert.return_value = mock_query

    return mock_client


@pytest.fixture
def settings() -> Settings:
    """Settings with fake credentials."""
    return Settings(
        gemini_api_key="test-gemini-key",
        supabase_url="https://project.supabase.co",
        supabase_key="test-service-key",
    )


# ============================================================
# Sample Data
# ============================================================


@pytest.fixture
def sample_analysis_json():
    """Sample Gemini analysis (Spanish keys, as requested by the prompt).

    Returns:
        Dictionary simulating the completion JSON for a W-2
    """
    return {
        "tipo_de_documento": "W-2",
        "año_fiscal": 2023,
        "nombre_del_emisor": "Acme Corp",
        "cifras_clave": {"wages": 50000},
    }


@pytest.fixture
def make_envelope():
    """Factory fixture for generateContent response envelopes.

    Returns:
        Function that wraps completion text in the candidates envelope
    """

    def _create(text: str) -> dict:
        return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}

    return _create


@pytest.fixture
def make_http_response():
    """Factory fixture for mocked requests.Response objects.

    Returns:
        Function that creates configured mock responses
    """

    def _create(status_code: int = 200, body: dict | None = None, reason: str = "OK"):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        response.reason = reason
        if body is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = body
            response.text = json.dumps(body)
        return response

    return _create
