"""Business logic layer for resources app.

This package contains all business logic of the resource tree service:
- Project lookup and access policy
- Listing with derived display access and breadcrumbs
- Folder creation, upload, edit, move, access change and delete
- Download URLs

All business logic should be implemented here, separate from
models (data layer), views (HTTP) and infrastructure (external systems).
"""
