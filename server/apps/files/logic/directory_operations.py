"""Business logic for folder listing and creation."""

import logging

from server.apps.files.entries import DirectoryListing, FileEntry, FolderEntry
from server.apps.files.infrastructure.metadata import (
    PATH_SEPARATOR,
    normalize_prefix,
    strip_prefix,
    validate_folder_name,
    validate_key,
)
from server.apps.files.logic._storage import get_storage

logger = logging.getLogger(__name__)


def list_directory(prefix: str = '') -> DirectoryListing:
    """List the immediate sub-folders and files of a folder.

    Uses a delimiter listing, so the store partitions keys into common
    prefixes (folders) and objects (files). Every page is read before
    returning. The folder's own marker object is never reported as a file.

    Args:
        prefix: Folder prefix, empty string for the bucket root.

    Returns:
        DirectoryListing of the folder.

    Raises:
        StorageOperationError: If the bucket cannot be listed.
    """
    folder_prefix = normalize_prefix(prefix)
    logger.debug('Listing directory: "%s"', folder_prefix)

    common_prefixes, objects = get_storage().list_children(folder_prefix)

    folders = [
        FolderEntry(
            name=strip_prefix(child, folder_prefix).removesuffix(
                PATH_SEPARATOR,
            ),
            prefix=child,
        )
        for child in common_prefixes
    ]
    files = [
        FileEntry.from_summary(summary, folder_prefix)
        for summary in objects
        if summary['Key'] != folder_prefix
    ]

    logger.info(
        'Listed "%s": %d folders, %d files',
        folder_prefix,
        len(folders),
        len(files),
    )
    return DirectoryListing(prefix=folder_prefix, folders=folders, files=files)


def create_folder(parent_prefix: str, folder_name: str) -> str:
    """Create an empty folder by writing its marker object.

    Args:
        parent_prefix: Prefix of the parent folder, empty for the root.
        folder_name: Simple name of the new folder.

    Returns:
        Key of the created marker (``parent/name/``).

    Raises:
        ValidationError: If the folder name is invalid.
        StorageOperationError: If the marker cannot be written.
    """
    validate_folder_name(folder_name)
    if parent_prefix:
        validate_key(parent_prefix, 'prefix')
    marker_key = f'{normalize_prefix(parent_prefix)}{folder_name}/'

    get_storage().put_empty_object(marker_key)
    logger.info('Folder created: %s', marker_key)
    return marker_key
