"""Custom storage backend for S3-compatible storage."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Final, final

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from storages.backends.s3 import S3Storage

from server.apps.files.exceptions import (
    DuplicateObjectError,
    StorageOperationError,
)
from server.apps.files.infrastructure.metadata import (
    PATH_SEPARATOR,
    build_copy_source,
)

# Hard limit of a single DeleteObjects request
MAX_DELETE_BATCH: Final = 1000

# Error codes meaning "object has no tags" on some S3-compatible stores
_NO_TAGS_CODES: Final = frozenset(('NoSuchTagSet', 'NoSuchTagSetError'))

logger = logging.getLogger(__name__)


def _error_details(error: Exception) -> str:
    """Pull a readable diagnostic out of a botocore exception."""
    if isinstance(error, ClientError):
        error_info = error.response.get('Error', {})
        code = error_info.get('Code', 'Unknown')
        message = error_info.get('Message') or str(error)
        return f'{code}: {message}'
    return str(error)


@contextmanager
def _storage_errors(message: str) -> Iterator[None]:
    """Translate botocore failures into ``StorageOperationError``.

    Args:
        message: Summary reported to the caller if the block fails.

    Raises:
        StorageOperationError: If the block raises a botocore error.
    """
    try:
        yield
    except (BotoCoreError, ClientError) as error:
        logger.exception(message)
        raise StorageOperationError(
            message,
            details=_error_details(error),
        ) from error


@final
class FileStorage(S3Storage):
    """S3 storage backend exposing the primitives of the file browser.

    Extends django-storages S3Storage with:
    - Paginated prefix/delimiter listing
    - Server-side copy with an encoded copy source
    - Batched delete with per-key error reporting
    - Object tagging and presigned URLs
    - Enhanced error logging

    All keys are used verbatim; no name cleaning or location prefix is
    applied, since keys come straight from listings of the same bucket.
    """

    @property
    def client(self) -> Any:
        """Low-level boto3 S3 client of this thread's connection."""
        return self.connection.meta.client

    def iter_pages(
        self,
        prefix: str = '',
        delimiter: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield raw ListObjectsV2 pages until the listing is exhausted.

        Continuation tokens are followed by the boto3 paginator, so a
        truncated page is never the last one yielded.

        Args:
            prefix: Key prefix to list.
            delimiter: Optional delimiter grouping keys into common prefixes.

        Yields:
            ListObjectsV2 response pages.

        Raises:
            StorageOperationError: If any page request fails.
        """
        params: dict[str, Any] = {
            'Bucket': self.bucket_name,
            'Prefix': prefix,
            'PaginationConfig': {
                'PageSize': settings.FILE_BROWSER_LIST_PAGE_SIZE,
            },
        }
        if delimiter:
            params['Delimiter'] = delimiter

        paginator = self.client.get_paginator('list_objects_v2')
        with _storage_errors(f'Failed to list objects under "{prefix}"'):
            for page_number, page in enumerate(paginator.paginate(**params)):
                logger.debug(
                    'Listed page %d under "%s": %d objects',
                    page_number,
                    prefix,
                    page.get('KeyCount', 0),
                )
                yield page

    def list_objects(self, prefix: str = '') -> list[dict[str, Any]]:
        """List every object under a prefix, recursively.

        Args:
            prefix: Key prefix, empty for the whole bucket.

        Returns:
            Object summaries (``Key``, ``Size``, ``LastModified``, ...)
            in listing order.
        """
        objects: list[dict[str, Any]] = []
        for page in self.iter_pages(prefix):
            objects.extend(page.get('Contents', []))
        return objects

    def list_children(
        self,
        prefix: str = '',
    ) -> tuple[list[str], list[dict[str, Any]]]:
        """List the immediate children of a folder prefix.

        Args:
            prefix: Folder prefix ending with the separator, or empty.

        Returns:
            Tuple of (common prefixes, object summaries).
        """
        common_prefixes: list[str] = []
        objects: list[dict[str, Any]] = []
        for page in self.iter_pages(prefix, delimiter=PATH_SEPARATOR):
            common_prefixes.extend(
                entry['Prefix'] for entry in page.get('CommonPrefixes', [])
            )
            objects.extend(page.get('Contents', []))
        return common_prefixes, objects

    def open_object(self, key: str) -> Any:
        """Start a download of an object.

        Args:
            key: Object key.

        Returns:
            botocore ``StreamingBody`` with the object content.

        Raises:
            StorageOperationError: If the object cannot be fetched.
        """
        with _storage_errors(f'Failed to fetch object "{key}"'):
            response = self.client.get_object(
                Bucket=self.bucket_name,
                Key=key,
            )
        return response['Body']

    def put_empty_object(self, key: str) -> None:
        """Write a zero-byte object, used for folder markers.

        Args:
            key: Key of the new object.

        Raises:
            StorageOperationError: If the write fails.
        """
        with _storage_errors(f'Failed to create object "{key}"'):
            logger.info('Creating empty object: %s', key)
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=b'',
            )

    def copy_object(self, source: str, destination: str) -> None:
        """Server-side copy of one object, content and metadata.

        Args:
            source: Source key.
            destination: Destination key, overwritten if it exists.

        Raises:
            StorageOperationError: If the copy fails.
        """
        with _storage_errors(f'Failed to copy "{source}" to "{destination}"'):
            logger.debug('Copying object: %s -> %s', source, destination)
            self.client.copy_object(
                Bucket=self.bucket_name,
                Key=destination,
                CopySource=build_copy_source(self.bucket_name, source),
            )

    def delete_object(self, key: str) -> None:
        """Delete one object. Deleting an absent key succeeds.

        Args:
            key: Key of the object to delete.

        Raises:
            StorageOperationError: If the delete fails.
        """
        with _storage_errors(f'Failed to delete object "{key}"'):
            logger.info('Deleting object from storage: %s', key)
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info('Successfully deleted object: %s', key)

    def move_object(self, source: str, destination: str) -> None:
        """Move/rename an object in S3 storage.

        S3 doesn't support native rename, so this performs a server-side
        copy followed by deletion of the source.

        Note: This operation is not atomic. If the copy fails the source
        is untouched. If copy succeeds but delete fails, both objects
        exist and ``DuplicateObjectError`` is raised.

        Args:
            source: Source key.
            destination: Destination key.

        Raises:
            StorageOperationError: If the copy fails.
            DuplicateObjectError: If the source could not be deleted.
        """
        logger.info('Moving object: %s -> %s', source, destination)
        self.copy_object(source, destination)
        try:
            self.delete_object(source)
        except StorageOperationError as error:
            raise DuplicateObjectError(
                source,
                destination,
                details=error.details,
            ) from error
        logger.info('Moved object: %s -> %s', source, destination)

    def delete_objects(self, keys: list[str]) -> list[dict[str, str]]:
        """Delete many objects with as few batch requests as possible.

        Keys are split into chunks no larger than the store's batch limit;
        every chunk is sent even if an earlier one reported errors.

        Args:
            keys: Keys to delete.

        Returns:
            Per-key errors aggregated across all chunks
            (``key``, ``code``, ``message``), empty on full success.

        Raises:
            StorageOperationError: If a batch request itself fails.
        """
        batch_size = min(
            settings.FILE_BROWSER_DELETE_BATCH_SIZE,
            MAX_DELETE_BATCH,
        )
        errors: list[dict[str, str]] = []
        for start in range(0, len(keys), batch_size):
            errors.extend(self._delete_batch(keys[start:start + batch_size]))
        return errors

    def get_tags(self, key: str) -> list[dict[str, str]]:
        """Read the whole tag set of an object.

        Args:
            key: Object key.

        Returns:
            Tags as ``{'Key': ..., 'Value': ...}`` dicts, empty if none.

        Raises:
            StorageOperationError: If the request fails.
        """
        try:
            response = self.client.get_object_tagging(
                Bucket=self.bucket_name,
                Key=key,
            )
        except ClientError as error:
            if error.response.get('Error', {}).get('Code') in _NO_TAGS_CODES:
                return []
            logger.exception('Failed to read tags of "%s"', key)
            raise StorageOperationError(
                f'Failed to read tags of "{key}"',
                details=_error_details(error),
            ) from error
        except BotoCoreError as error:
            logger.exception('Failed to read tags of "%s"', key)
            raise StorageOperationError(
                f'Failed to read tags of "{key}"',
                details=_error_details(error),
            ) from error
        return response.get('TagSet', [])

    def put_tags(self, key: str, tags: list[dict[str, str]]) -> None:
        """Replace the whole tag set of an object.

        Args:
            key: Object key.
            tags: New tag set, ``{'Key': ..., 'Value': ...}`` dicts.

        Raises:
            StorageOperationError: If the request fails.
        """
        with _storage_errors(f'Failed to write tags of "{key}"'):
            logger.info('Writing %d tags to %s', len(tags), key)
            self.client.put_object_tagging(
                Bucket=self.bucket_name,
                Key=key,
                Tagging={'TagSet': tags},
            )

    def presigned_url(
        self,
        client_method: str,
        key: str,
        expires_in: int,
        **params: Any,
    ) -> str:
        """Sign a time-limited URL for one object.

        Args:
            client_method: S3 operation to sign ('get_object', 'put_object').
            key: Object key.
            expires_in: Lifetime of the URL in seconds.
            params: Extra request parameters (e.g. ``ContentType``).

        Returns:
            The presigned URL.

        Raises:
            StorageOperationError: If signing fails.
        """
        with _storage_errors(f'Failed to sign {client_method} URL for "{key}"'):
            return self.client.generate_presigned_url(
                client_method,
                Params={'Bucket': self.bucket_name, 'Key': key, **params},
                ExpiresIn=expires_in,
            )

    def _delete_batch(self, keys: list[str]) -> list[dict[str, str]]:
        """Send one DeleteObjects request.

        Args:
            keys: At most ``MAX_DELETE_BATCH`` keys.

        Returns:
            Per-key errors reported by the store.
        """
        with _storage_errors(f'Failed to delete a batch of {len(keys)} objects'):
            logger.info('Deleting batch of %d objects', len(keys))
            response = self.client.delete_objects(
                Bucket=self.bucket_name,
                Delete={
                    'Objects': [{'Key': key} for key in keys],
                    'Quiet': True,
                },
            )
        return [
            {
                'key': error.get('Key', ''),
                'code': error.get('Code', ''),
                'message': error.get('Message', ''),
            }
            for error in response.get('Errors', [])
        ]
