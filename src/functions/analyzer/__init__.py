"""
Document Analyzer Cloud Function.

HTTP entry point that analyzes documents uploaded to Supabase Storage.
"""

from src.functions.analyzer.main import handle_document_upload

__all__ = ["handle_document_upload"]
