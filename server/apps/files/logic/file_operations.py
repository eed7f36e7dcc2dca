"""Business logic for delete, rename and move operations.

Folders do not exist in the bucket, so every folder-level operation is a
composition of per-object calls with no atomicity across them. Failures
are reported, never rolled back.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from django.conf import settings
from django.core.exceptions import ValidationError

from server.apps.files.exceptions import (
    BulkDeleteError,
    FolderMoveError,
    FolderNotFoundError,
    StorageOperationError,
)
from server.apps.files.infrastructure.metadata import (
    normalize_prefix,
    strip_prefix,
    validate_key,
)
from server.apps.files.logic._storage import get_storage

logger = logging.getLogger(__name__)


def delete_file(key: str) -> None:
    """Delete exactly one object.

    Deleting a key that does not exist is not an error.

    Args:
        key: Key of the object to delete.

    Raises:
        ValidationError: If the key is invalid.
        StorageOperationError: If the store rejects the delete.
    """
    validate_key(key)
    get_storage().delete_object(key)


def bulk_delete(keys: list[str]) -> int:
    """Delete a set of objects with batched requests.

    Keys are de-duplicated (first occurrence wins) and split into chunks
    of at most the store batch limit. Errors from all chunks are
    aggregated; nothing is retried.

    Args:
        keys: Non-empty list of keys.

    Returns:
        Number of distinct keys deleted.

    Raises:
        ValidationError: If the list is empty or holds an invalid key.
        BulkDeleteError: If the store reported per-key errors.
        StorageOperationError: If a batch request failed outright.
    """
    if not isinstance(keys, list) or not keys:
        raise ValidationError('keys must be a non-empty list')
    for key in keys:
        validate_key(key, 'keys[]')

    unique_keys = list(dict.fromkeys(keys))
    logger.info('Bulk deleting %d objects', len(unique_keys))

    errors = get_storage().delete_objects(unique_keys)
    if errors:
        logger.error(
            'Bulk delete reported %d errors out of %d keys',
            len(errors),
            len(unique_keys),
        )
        raise BulkDeleteError(errors, requested=len(unique_keys))

    logger.info('Bulk deleted %d objects', len(unique_keys))
    return len(unique_keys)


def rename_file(old_key: str, new_key: str) -> None:
    """Rename/move a single object with a server-side copy and a delete.

    The copy must succeed before the source is deleted, so a failed copy
    leaves the source untouched. A failed delete leaves the object under
    both keys and is reported as ``DuplicateObjectError``.

    Args:
        old_key: Current key.
        new_key: New key, overwritten if it exists.

    Raises:
        ValidationError: If either key is invalid or they are equal.
        StorageOperationError: If the copy fails.
        DuplicateObjectError: If the source could not be deleted.
    """
    validate_key(old_key, 'oldKey')
    validate_key(new_key, 'newKey')
    if old_key == new_key:
        raise ValidationError('oldKey and newKey are the same')

    get_storage().move_object(old_key, new_key)


def move_folder(old_prefix: str, new_prefix: str) -> int:
    """Move/rename a folder by copying and deleting every object under it.

    1. List all objects under ``old_prefix`` (every page).
    2. Fail with ``FolderNotFoundError`` if there are none.
    3. Copy each object to ``new_prefix`` + its relative key, in parallel
       with at most ``FILE_BROWSER_COPY_CONCURRENCY`` copies in flight.
    4. Once every copy succeeded, bulk delete the originals.

    If any copy fails nothing is deleted and the successful copies stay at
    the destination. Existing objects at colliding destination keys are
    overwritten.

    Args:
        old_prefix: Current folder prefix.
        new_prefix: New folder prefix.

    Returns:
        Number of objects moved.

    Raises:
        ValidationError: If the prefixes are invalid or nested.
        FolderNotFoundError: If nothing exists under ``old_prefix``.
        FolderMoveError: If one or more copies failed.
        BulkDeleteError: If deleting the originals reported errors.
        StorageOperationError: If listing or a delete request failed.
    """
    validate_key(old_prefix, 'oldKey')
    validate_key(new_prefix, 'newKey')
    old_prefix_normalized = normalize_prefix(old_prefix)
    new_prefix_normalized = normalize_prefix(new_prefix)
    if new_prefix_normalized.startswith(old_prefix_normalized):
        raise ValidationError('A folder cannot be moved into itself')

    logger.info(
        'Moving folder from %s to %s',
        old_prefix_normalized,
        new_prefix_normalized,
    )

    storage = get_storage()
    source_keys = [
        summary['Key']
        for summary in storage.list_objects(old_prefix_normalized)
    ]
    if not source_keys:
        logger.warning('Nothing to move under %s', old_prefix_normalized)
        raise FolderNotFoundError(old_prefix_normalized)

    copy_plan = {
        source_key: new_prefix_normalized + strip_prefix(
            source_key,
            old_prefix_normalized,
        )
        for source_key in source_keys
    }
    _copy_all(copy_plan, old_prefix_normalized, new_prefix_normalized)

    errors = storage.delete_objects(source_keys)
    if errors:
        logger.error(
            'Folder %s copied but %d originals could not be deleted',
            old_prefix_normalized,
            len(errors),
        )
        raise BulkDeleteError(errors, requested=len(source_keys))

    logger.info(
        'Moved %d objects from %s to %s',
        len(source_keys),
        old_prefix_normalized,
        new_prefix_normalized,
    )
    return len(source_keys)


def rename(old_key: str, new_key: str, *, is_folder: bool) -> int:
    """Rename a file or a folder.

    Args:
        old_key: Current key or folder prefix.
        new_key: New key or folder prefix.
        is_folder: Treat both keys as folder prefixes.

    Returns:
        Number of objects moved.
    """
    if is_folder:
        return move_folder(old_key, new_key)
    rename_file(old_key, new_key)
    return 1


def _copy_all(
    copy_plan: dict[str, str],
    old_prefix: str,
    new_prefix: str,
) -> None:
    """Run every copy of a folder move and wait for all of them.

    Args:
        copy_plan: Mapping of source key to destination key.
        old_prefix: Source folder prefix, for reporting.
        new_prefix: Destination folder prefix, for reporting.

    Raises:
        FolderMoveError: If any copy failed.
    """
    storage = get_storage()
    max_workers = max(1, settings.FILE_BROWSER_COPY_CONCURRENCY)
    errors: list[dict[str, str]] = []
    copied = 0

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(storage.copy_object, source, destination): source
            for source, destination in copy_plan.items()
        }
        for future in as_completed(futures):
            try:
                future.result()
            except StorageOperationError as error:
                errors.append({
                    'key': futures[future],
                    'message': error.details or error.message,
                })
            else:
                copied += 1

    if errors:
        logger.error(
            'Folder move %s -> %s failed: %d of %d copies failed',
            old_prefix,
            new_prefix,
            len(errors),
            len(copy_plan),
        )
        errors.sort(key=lambda error: error['key'])
        raise FolderMoveError(old_prefix, new_prefix, errors, copied)
