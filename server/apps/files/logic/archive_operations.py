"""Business logic for downloading a folder as a zip archive.

The archive is produced incrementally with zipstream: one object is fetched
and compressed at a time, and bytes are handed to the caller as soon as
they are produced. If a fetch fails mid-stream the generator raises
and the response ends without a central directory, leaving a truncated
archive. There is no resume.
"""

import logging
from collections.abc import Iterator
from typing import Any

import zipstream
from django.conf import settings

from server.apps.files.exceptions import FolderNotFoundError
from server.apps.files.infrastructure.metadata import (
    extract_filename,
    is_folder_marker,
    normalize_prefix,
    strip_prefix,
    validate_key,
)
from server.apps.files.logic._storage import get_storage

logger = logging.getLogger(__name__)


def archive_name(prefix: str) -> str:
    """Filename offered to the browser for a folder archive.

    Args:
        prefix: Folder prefix.

    Returns:
        '<folder>.zip', or 'bucket.zip' for the root.
    """
    return '{0}.zip'.format(extract_filename(prefix) or 'bucket')


def collect_archive_entries(prefix: str) -> list[dict[str, Any]]:
    """List every object that belongs in the archive of a folder.

    Runs before any byte is streamed, so listing failures can still be
    reported as a normal error response.

    Args:
        prefix: Folder prefix to archive.

    Returns:
        Object summaries under the prefix, folder markers excluded.

    Raises:
        ValidationError: If the prefix is invalid.
        FolderNotFoundError: If no object exists under the prefix.
        StorageOperationError: If the listing fails.
    """
    if prefix:
        validate_key(prefix, 'prefix')
    folder_prefix = normalize_prefix(prefix)

    summaries = get_storage().list_objects(folder_prefix)
    if not summaries:
        raise FolderNotFoundError(folder_prefix)

    entries = [
        summary for summary in summaries
        if not is_folder_marker(summary['Key'])
    ]
    logger.info(
        'Archiving %s: %d objects (%d markers skipped)',
        folder_prefix,
        len(entries),
        len(summaries) - len(entries),
    )
    return entries


def stream_archive(
    prefix: str,
    entries: list[dict[str, Any]],
) -> Iterator[bytes]:
    """Generate a zip archive of the given objects chunk by chunk.

    Entry names are the object keys relative to the folder prefix, so
    nested folders are preserved inside the archive. Objects are fetched
    lazily, one at a time, while the archive is being consumed.

    Args:
        prefix: Folder prefix the entries were listed under.
        entries: Object summaries from ``collect_archive_entries``.

    Yields:
        Consecutive pieces of the zip file.

    Raises:
        StorageOperationError: If an object cannot be fetched.
    """
    folder_prefix = normalize_prefix(prefix)
    archive = zipstream.ZipFile(
        mode='w',
        compression=zipstream.ZIP_DEFLATED,
        allowZip64=True,
    )
    for summary in entries:
        key = summary['Key']
        archive.write_iter(
            strip_prefix(key, folder_prefix),
            _object_chunks(key, folder_prefix),
        )

    yield from archive
    logger.info('Archive of %s completed: %d entries', folder_prefix, len(entries))


def _object_chunks(key: str, folder_prefix: str) -> Iterator[bytes]:
    """Read one object in ``FILE_BROWSER_ARCHIVE_CHUNK_SIZE`` pieces."""
    body = None
    try:
        body = get_storage().open_object(key)
        yield from body.iter_chunks(settings.FILE_BROWSER_ARCHIVE_CHUNK_SIZE)
    except Exception:
        logger.exception('Archive of %s aborted at %s', folder_prefix, key)
        raise
    finally:
        if body is not None:
            body.close()
