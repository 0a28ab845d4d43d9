"""Function configuration.

Settings are read from the environment once per process and passed to the
pipeline explicitly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache

from src.core.exceptions import ConfigurationError

DEFAULT_GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
)
DEFAULT_STORAGE_BUCKET = "documents"
DEFAULT_MIME_TYPE = "application/pdf"
ANALYSIS_TABLE = "document_analyses"


@dataclass(frozen=True)
class Settings:
    """Function settings.

    Attributes:
        gemini_api_key: Pre-shared key for the Gemini API
        supabase_url: Supabase project URL
        supabase_key: Service role key (or anon key as a fallback)
        gemini_api_url: generateContent endpoint
        storage_bucket: Bucket holding uploaded documents
        default_mime_type: MIME type used when storage cannot report one
    """

    gemini_api_key: str = field(repr=False)
    supabase_url: str
    supabase_key: str = field(repr=False)
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    storage_bucket: str = DEFAULT_STORAGE_BUCKET
    default_mime_type: str = DEFAULT_MIME_TYPE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If any required variable is missing or empty
        """
        env = os.environ if environ is None else environ

        gemini_api_key = env.get("GEMINI_API_KEY", "")
        supabase_url = env.get("SUPABASE_URL", "")
        supabase_key = env.get("SUPABASE_SERVICE_KEY") or env.get("SUPABASE_ANON_KEY", "")

        missing = []
        if not gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not supabase_url:
            missing.append("SUPABASE_URL")
        if not supabase_key:
            missing.append("SUPABASE_SERVICE_KEY")
        if missing:
            raise ConfigurationError(missing)

        return cls(
            gemini_api_key=gemini_api_key,
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            gemini_api_url=env.get("GEMINI_API_URL") or DEFAULT_GEMINI_API_URL,
            storage_bucket=env.get("STORAGE_BUCKET") or DEFAULT_STORAGE_BUCKET,
            default_mime_type=env.get("DEFAULT_MIME_TYPE") or DEFAULT_MIME_TYPE,
        )


@lru_cache
def get_settings() -> Settings:
    """Get function settings from environment (cached)."""
    return Settings.from_env()
