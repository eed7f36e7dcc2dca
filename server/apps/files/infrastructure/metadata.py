"""Key, prefix and file-type helpers for bucket objects."""

import mimetypes
from pathlib import PurePosixPath
from typing import Final

from django.core.exceptions import ValidationError

# Character used to split keys into folders
PATH_SEPARATOR: Final = '/'

# Fallback bucket for unknown or missing extensions
OTHER_CATEGORY: Final = 'Other'

# Ordered: the first matching category wins
FILE_CATEGORIES: Final[dict[str, frozenset[str]]] = {
    'Images': frozenset((
        'jpg', 'jpeg', 'png', 'gif', 'bmp', 'svg', 'webp', 'tif', 'tiff',
        'ico', 'heic',
    )),
    'Documents': frozenset((
        'pdf', 'doc', 'docx', 'xls', 'xlsx', 'ppt', 'pptx', 'txt', 'csv',
        'md', 'rtf', 'odt', 'ods', 'odp', 'epub',
    )),
    'Videos': frozenset((
        'mp4', 'mov', 'avi', 'mkv', 'webm', 'flv', 'wmv', 'm4v', 'mpeg',
    )),
    'Audio': frozenset((
        'mp3', 'wav', 'ogg', 'flac', 'm4a', 'aac', 'wma', 'opus',
    )),
    'Archives': frozenset((
        'zip', 'rar', '7z', 'tar', 'gz', 'tgz', 'bz2', 'xz',
    )),
    'Code': frozenset((
        'py', 'js', 'ts', 'tsx', 'jsx', 'html', 'css', 'json', 'xml',
        'yaml', 'yml', 'sh', 'java', 'c', 'cpp', 'h', 'go', 'rs', 'rb',
        'php', 'sql', 'toml', 'ini',
    )),
}


def normalize_prefix(prefix: str | None) -> str:
    """Normalize a folder prefix so it ends with the separator.

    Keys are opaque strings, so leading and repeated separators are part
    of the folder identity (``a//`` is a child of ``a/``, ``/`` is a child
    of the root) and are kept as they are.

    Args:
        prefix: Folder prefix as sent by the caller, may be empty.

    Returns:
        Empty string for the bucket root, otherwise the prefix with a
        trailing separator appended when missing.
    """
    if not prefix:
        return ''
    if prefix.endswith(PATH_SEPARATOR):
        return prefix
    return prefix + PATH_SEPARATOR


def is_folder_marker(key: str) -> bool:
    """Check whether a key is a directory marker.

    Args:
        key: Object key.

    Returns:
        True for keys ending with the path separator.
    """
    return key.endswith(PATH_SEPARATOR)


def strip_prefix(key: str, prefix: str) -> str:
    """Remove a folder prefix from the start of a key.

    Args:
        key: Object key (e.g., 'docs/reports/q1.pdf').
        prefix: Folder prefix (e.g., 'docs/').

    Returns:
        Key relative to the prefix (e.g., 'reports/q1.pdf').
    """
    if prefix and key.startswith(prefix):
        return key[len(prefix):]
    return key


def extract_filename(key: str) -> str:
    """Extract the last path component of a key.

    Args:
        key: Object key (e.g., 'docs/file.pdf' or 'docs/photos/').

    Returns:
        Filename or folder name (e.g., 'file.pdf' or 'photos').
    """
    return PurePosixPath(key.rstrip(PATH_SEPARATOR)).name


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.PDF').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = PurePosixPath(filename).suffix
    return extension.lstrip('.').lower()


def categorize(key: str) -> str:
    """Classify an object into a file category by its extension.

    Args:
        key: Object key.

    Returns:
        One of the ``FILE_CATEGORIES`` names, or ``OTHER_CATEGORY``.
    """
    extension = get_file_extension(extract_filename(key))
    for category, extensions in FILE_CATEGORIES.items():
        if extension in extensions:
            return category
    return OTHER_CATEGORY


def detect_mime_type(filename: str) -> str:
    """Guess MIME type from a filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string, 'application/octet-stream' when unknown.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return 'application/octet-stream'
    return mime_type


def build_copy_source(bucket_name: str, key: str) -> dict[str, str]:
    """Build the ``CopySource`` reference for a server-side copy.

    The key must reach botocore unencoded in the dict form: botocore
    percent-encodes it exactly once. A pre-encoded string would be encoded
    a second time, and a plain string is split on a literal
    ``?versionId=``, so either resolves a different source object.

    Args:
        bucket_name: Source bucket.
        key: Source key, unencoded.

    Returns:
        ``{'Bucket': ..., 'Key': ...}`` copy source.
    """
    return {'Bucket': bucket_name, 'Key': key}


def validate_key(key: object, field_name: str = 'key') -> str:
    """Validate an object key received from a caller.

    Keys are passed to the store verbatim, so only values the store
    cannot hold are rejected.

    Args:
        key: Value to validate.
        field_name: Request field name used in the error message.

    Returns:
        The key, unchanged.

    Raises:
        ValidationError: If the key is missing, empty or holds a null byte.
    """
    if not isinstance(key, str) or not key:
        raise ValidationError(f'{field_name} is required')
    if '\x00' in key:
        raise ValidationError(f'{field_name} contains a null byte')
    return key


def validate_folder_name(name: object) -> str:
    """Validate a simple folder name (one path segment).

    Args:
        name: Proposed folder name.

    Returns:
        The folder name, unchanged.

    Raises:
        ValidationError: If the name is empty or not a single segment.
    """
    if not isinstance(name, str) or not name:
        raise ValidationError('Folder name is required')
    if PATH_SEPARATOR in name:
        raise ValidationError(
            f'Folder name must not contain "{PATH_SEPARATOR}"',
        )
    if name in {'.', '..'}:
        raise ValidationError(f'"{name}" is not a valid folder name')
    if '\x00' in name:
        raise ValidationError('Folder name contains a null byte')
    return name
