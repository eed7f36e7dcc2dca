"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Custom storage backend (S3/MinIO) exposing object-store primitives
- Key, prefix and file-type helpers

Keep infrastructure concerns separate from business logic.
"""
