"""Shared fixtures for files app tests."""

from collections.abc import Callable
from typing import Final

import boto3
import pytest
from moto import mock_aws

_TEST_BUCKET: Final = 'file-browser'


@pytest.fixture(autouse=True)
def _browser_settings(settings):
    """Pin the bucket and limits the tests rely on."""
    settings.STORAGES = {
        **settings.STORAGES,
        'default': {
            **settings.STORAGES['default'],
            'OPTIONS': {
                **settings.STORAGES['default']['OPTIONS'],
                'bucket_name': _TEST_BUCKET,
                'endpoint_url': None,
                'region_name': 'us-east-1',
            },
        },
    }
    settings.FILE_BROWSER_LIST_PAGE_SIZE = 1000
    settings.FILE_BROWSER_DELETE_BATCH_SIZE = 1000
    settings.FILE_BROWSER_COPY_CONCURRENCY = 4


@pytest.fixture
def mock_s3():
    """Mock S3 service with file-browser bucket.

    Yields:
        boto3 S3 resource with file-browser bucket created.
    """
    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket=_TEST_BUCKET)

        yield conn


@pytest.fixture
def bucket(mock_s3):
    """The mocked bucket browsed by the app.

    Returns:
        boto3 Bucket resource.
    """
    return mock_s3.Bucket(_TEST_BUCKET)


@pytest.fixture
def put_objects(bucket) -> Callable[..., None]:
    """Factory writing objects into the mocked bucket.

    Returns:
        Function taking keys and an optional body.
    """
    def factory(*keys: str, body: bytes = b'test file content') -> None:
        for key in keys:
            bucket.put_object(Key=key, Body=body)

    return factory


@pytest.fixture
def bucket_keys(bucket) -> Callable[[], set[str]]:
    """Snapshot of every key currently in the mocked bucket.

    Returns:
        Function returning the set of keys.
    """
    def snapshot() -> set[str]:
        return {obj.key for obj in bucket.objects.all()}

    return snapshot
