"""Business logic layer for files app.

This package contains all business logic for bucket operations:
- Folder listing and creation
- Delete, bulk delete, rename and folder move
- Folder archive download, usage analytics, tags and presigned URLs

All business logic should be implemented here, separate from
views (HTTP layer) and infrastructure (external systems).
"""
