"""Business logic for presigned upload, download and share URLs.

Bytes never pass through this service: the caller talks to the bucket
directly with the signed URL.
"""

import logging
from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError

from server.apps.files.infrastructure.metadata import (
    PATH_SEPARATOR,
    detect_mime_type,
    extract_filename,
    normalize_prefix,
    validate_key,
)
from server.apps.files.logic._storage import get_storage

logger = logging.getLogger(__name__)


def upload_url(
    file_name: str,
    file_type: str | None = None,
    prefix: str = '',
) -> tuple[str, str]:
    """Sign a PUT URL for uploading one file into a folder.

    Args:
        file_name: Name of the file, a single path segment.
        file_type: Content type the client will send; guessed if empty.
        prefix: Target folder prefix.

    Returns:
        Tuple of (url, key).

    Raises:
        ValidationError: If the name or prefix is invalid.
    """
    validate_key(file_name, 'fileName')
    if PATH_SEPARATOR in file_name:
        raise ValidationError(f'fileName must not contain "{PATH_SEPARATOR}"')
    if prefix:
        validate_key(prefix, 'prefix')

    key = normalize_prefix(prefix) + file_name
    content_type = file_type or detect_mime_type(file_name)
    url = get_storage().presigned_url(
        'put_object',
        key,
        settings.FILE_BROWSER_UPLOAD_URL_EXPIRY,
        ContentType=content_type,
    )
    logger.info('Issued upload URL for %s (%s)', key, content_type)
    return url, key


def view_url(key: str, *, download: bool = False) -> str:
    """Sign a GET URL for viewing or downloading one file.

    Args:
        key: Object key.
        download: Ask the browser to save the file instead of showing it.

    Returns:
        The presigned URL.
    """
    validate_key(key)
    params: dict[str, Any] = {}
    if download:
        params['ResponseContentDisposition'] = (
            'attachment; filename="{0}"'.format(extract_filename(key))
        )
    return get_storage().presigned_url(
        'get_object',
        key,
        settings.FILE_BROWSER_VIEW_URL_EXPIRY,
        **params,
    )


def share_url(key: str, expires_in: Any = None) -> tuple[str, int]:
    """Sign a GET URL meant to be shared with others.

    Args:
        key: Object key.
        expires_in: Lifetime in seconds; defaults to the view URL expiry.

    Returns:
        Tuple of (url, expiry in seconds).

    Raises:
        ValidationError: If the expiry is not a positive integer within
            the store's limit.
    """
    validate_key(key)
    if expires_in is None:
        expires_in = settings.FILE_BROWSER_VIEW_URL_EXPIRY
    if isinstance(expires_in, bool) or not isinstance(expires_in, int | str):
        raise ValidationError('expiresIn must be a number of seconds')
    try:
        expiry = int(expires_in)
    except ValueError as error:
        raise ValidationError('expiresIn must be a number of seconds') from error

    max_expiry = settings.FILE_BROWSER_MAX_SHARE_EXPIRY
    if not 0 < expiry <= max_expiry:
        raise ValidationError(
            f'expiresIn must be between 1 and {max_expiry} seconds',
        )

    url = get_storage().presigned_url('get_object', key, expiry)
    logger.info('Issued share URL for %s valid %d seconds', key, expiry)
    return url, expiry
