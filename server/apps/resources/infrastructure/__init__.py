"""Infrastructure layer for resources app.

This package contains integrations with external systems:
- Custom storage backend (S3/MinIO/R2)
- Metadata extraction (MIME type)

Keep infrastructure concerns separate from business logic.
"""
