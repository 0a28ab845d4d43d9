"""
Unit tests for Supabase Storage operations.
"""

from __future__ import annotations

import httpx
import pytest
from storage3.utils import StorageException

from src.core.exceptions import StorageError
from src.core.storage import RetrievedFile, SupabaseStorage, guess_mime_type


class TestGuessMimeType:
    """Tests for guess_mime_type function."""

    def test_pdf(self) -> None:
        """Test PDF extension."""
        assert guess_mime_type("docs/w2.pdf") == "application/pdf"

    def test_image(self) -> None:
        """Test image extensions."""
        assert guess_mime_type("scans/1099.png") == "image/png"
        assert guess_mime_type("scans/1099.jpg") == "image/jpeg"

    def test_unknown_extension_uses_default(self) -> None:
        """Test that unknown paths fall back to the default."""
        assert guess_mime_type("uploads/document") == "application/pdf"

    def test_custom_default(self) -> None:
        """Test a configured default."""
        assert guess_mime_type("uploads/document", default="image/jpeg") == "image/jpeg"


class TestRetrievedFile:
    """Tests for RetrievedFile dataclass."""

    def test_size(self) -> None:
        """Test size property."""
        document = RetrievedFile(data=b"12345", mime_type="application/pdf")

        assert document.size == 5

    def test_repr_hides_content(self) -> None:
        """Test that file bytes are not included in repr."""
        document = RetrievedFile(data=b"secret content", mime_type="application/pdf")

        assert "secret content" not in repr(document)


class TestSupabaseStorageDownload:
    """Tests for SupabaseStorage.download."""

    def test_download_success(self, mock_supabase_client) -> None:
        """Test downloading an existing object."""
        storage = SupabaseStorage(mock_supabase_client)

        document = storage.download("docs/w2.pdf")

        assert document.data == b"%PDF-1.4 fake pdf content"
        assert document.mime_type == "application/pdf"
        mock_supabase_client.storage.from_.assert_called_once_with("documents")
        mock_supabase_client.storage.from_.return_value.download.assert_called_once_with(
            "docs/w2.pdf"
        )

    def test_download_uses_configured_bucket(self, mock_supabase_client) -> None:
        """Test bucket override."""
        storage = SupabaseStorage(mock_supabase_client, bucket="tax-docs")

        storage.download("docs/w2.pdf")

        mock_supabase_client.storage.from_.assert_called_once_with("tax-docs")

    def test_download_default_mime_type(self, mock_supabase_client) -> None:
        """Test MIME type fallback for paths without extension."""
        storage = SupabaseStorage(mock_supabase_client, default_mime_type="image/png")

        document = storage.download("uploads/42")

        assert document.mime_type == "image/png"

    def test_not_found_raises_storage_error(self, mock_supabase_client) -> None:
        """Test that a missing object raises StorageError."""
        mock_supabase_client.storage.from_.return_value.download.side_effect = StorageException(
            {"statusCode": 404, "error": "not_found", "message": "Object not found"}
        )
        storage = SupabaseStorage(mock_supabase_client)

        with pytest.raises(StorageError) as exc_info:
            storage.download("docs/missing.pdf")

        assert exc_info.value.path == "docs/missing.pdf"
        assert "docs/missing.pdf" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, StorageException)

    def test_transport_error_raises_storage_error(self, mock_supabase_client) -> None:
        """Test that network failures raise StorageError."""
        mock_supabase_client.storage.from_.return_value.download.side_effect = (
            httpx.ConnectError("connection refused")
        )
        storage = SupabaseStorage(mock_supabase_client)

        with pytest.raises(StorageError):
            storage.download("docs/w2.pdf")

    def test_single_attempt(self, mock_supabase_client) -> None:
        """Test that a failed download is not retried."""
        download = mock_supabase_client.storage.from_.return_value.download
        download.side_effect = httpx.ReadTimeout("timed out")
        storage = SupabaseStorage(mock_supabase_client)

        with pytest.raises(StorageError):
            storage.download("docs/w2.pdf")

        assert download.call_count == 1

    def test_empty_content_raises(self, mock_supabase_client) -> None:
        """Test that an empty download is an error."""
        mock_supabase_client.storage.from_.return_value.download.return_value = b""
        storage = SupabaseStorage(mock_supabase_client)

        with pytest.raises(StorageError) as exc_info:
            storage.download("docs/w2.pdf")

        assert "empty response" in str(exc_info.value)
