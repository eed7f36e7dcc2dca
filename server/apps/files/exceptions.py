"""Exceptions for files app.

Input problems are reported with Django's ``ValidationError``; everything
below describes a failure of the bucket or of a composite operation.
"""

from typing import Any


class FileBrowserError(Exception):
    """Base class for failures reported back to API callers."""

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize FileBrowserError.

        Args:
            message: Human-readable summary of the failure.
            details: Diagnostic detail from the underlying store, if any.
        """
        super().__init__(message)
        self.message = message
        self.details = details


class StorageOperationError(FileBrowserError):
    """Raised when a single object store call fails."""


class FolderNotFoundError(FileBrowserError):
    """Raised when a folder prefix has no objects under it."""

    def __init__(self, prefix: str) -> None:
        """Initialize FolderNotFoundError.

        Args:
            prefix: Folder prefix that matched nothing.
        """
        self.prefix = prefix
        super().__init__(f'Folder not found or empty: {prefix}')


class BulkDeleteError(FileBrowserError):
    """Raised when the store reports per-key errors for a batch delete."""

    def __init__(
        self,
        errors: list[dict[str, Any]],
        requested: int,
    ) -> None:
        """Initialize BulkDeleteError.

        Args:
            errors: Per-key errors (``key``, ``code``, ``message``).
            requested: Number of keys the caller asked to delete.
        """
        self.errors = errors
        self.requested = requested
        super().__init__(
            f'Failed to delete {len(errors)} of {requested} objects',
            details='; '.join(
                '{key}: {message}'.format(**error) for error in errors
            ),
        )


class FolderMoveError(FileBrowserError):
    """Raised when one or more copies of a folder move failed.

    Nothing has been deleted when this is raised, but the copies that did
    succeed are left in place at the destination.
    """

    def __init__(
        self,
        old_prefix: str,
        new_prefix: str,
        errors: list[dict[str, Any]],
        copied: int,
    ) -> None:
        """Initialize FolderMoveError.

        Args:
            old_prefix: Source folder prefix.
            new_prefix: Destination folder prefix.
            errors: Failed copies (``key``, ``message``).
            copied: Number of objects copied before the move was abandoned.
        """
        self.old_prefix = old_prefix
        self.new_prefix = new_prefix
        self.errors = errors
        self.copied = copied
        super().__init__(
            f'Failed to move {old_prefix} to {new_prefix}: '
            f'{len(errors)} copies failed, {copied} copied objects left '
            'in place',
            details='; '.join(
                '{key}: {message}'.format(**error) for error in errors
            ),
        )


class DuplicateObjectError(FileBrowserError):
    """Raised when a rename copied the object but could not delete the source.

    The object now exists under both keys.
    """

    def __init__(
        self,
        old_key: str,
        new_key: str,
        details: str | None = None,
    ) -> None:
        """Initialize DuplicateObjectError.

        Args:
            old_key: Source key that could not be deleted.
            new_key: Destination key that now holds the copy.
            details: Diagnostic detail from the failed delete.
        """
        self.old_key = old_key
        self.new_key = new_key
        super().__init__(
            f'Copied {old_key} to {new_key} but failed to delete the '
            'original, the object now exists at both keys',
            details=details,
        )
