"""Infrastructure layer of the resource tree client.

This package contains integrations with external systems:
- HTTP client of the listing and mutation service

Keep transport concerns separate from browser logic.
"""
