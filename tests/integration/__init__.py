"""Integration tests for the document analyzer.

The HTTP entry point is exercised with a real Flask request while Supabase
and the Gemini endpoint are mocked at the client boundary.

Run with: pytest tests/integration
"""
