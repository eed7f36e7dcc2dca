"""Tests for bucket usage analytics."""

from datetime import UTC, datetime
from unittest import mock

import pytest

from server.apps.files.exceptions import StorageOperationError
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.analytics_operations import compute_bucket_usage


def _summary(key: str, size: int, year: int = 2024, month: int = 1) -> dict:
    return {
        'Key': key,
        'Size': size,
        'LastModified': datetime(year, month, 15, 12, 0, tzinfo=UTC),
        'StorageClass': 'STANDARD',
    }


@pytest.fixture
def listed_objects():
    """Patch the full-bucket listing with the given summaries."""
    def factory(*summaries: dict):
        return mock.patch.object(
            FileStorage,
            'list_objects',
            return_value=list(summaries),
        )

    return factory


def test_usage_totals(listed_objects):
    """Test object count and byte total cover the whole bucket."""
    with listed_objects(
        _summary('a.jpg', 100),
        _summary('docs/b.pdf', 250),
        _summary('docs/', 0),
    ):
        usage = compute_bucket_usage()

    assert usage.total_files == 3
    assert usage.total_size == 350


def test_usage_of_empty_bucket(mock_s3):
    """Test an empty bucket yields zero totals and empty lists."""
    usage = compute_bucket_usage()

    assert usage.as_json() == {
        'totalFiles': 0,
        'totalSize': 0,
        'topLargestFiles': [],
        'uploadTrend': [],
        'fileTypeDistribution': [],
    }


def test_top_largest_files(listed_objects):
    """Test at most ten objects are reported, largest first."""
    summaries = [_summary(f'file{index:02d}.bin', index * 10) for index in range(15)]

    with listed_objects(*summaries):
        usage = compute_bucket_usage()

    sizes = [entry.size for entry in usage.top_largest_files]
    assert sizes == [140, 130, 120, 110, 100, 90, 80, 70, 60, 50]


def test_top_largest_files_keeps_ties_in_listing_order(listed_objects):
    """Test equal sizes keep the order the store listed them in."""
    with listed_objects(
        _summary('b.txt', 5),
        _summary('a.txt', 5),
        _summary('c.txt', 9),
    ):
        usage = compute_bucket_usage(top_limit=3)

    assert [entry.key for entry in usage.top_largest_files] == [
        'c.txt',
        'b.txt',
        'a.txt',
    ]


def test_upload_trend_by_month(listed_objects):
    """Test uploads are counted per month in ascending order."""
    with listed_objects(
        _summary('a.txt', 1, 2024, 3),
        _summary('b.txt', 1, 2023, 12),
        _summary('c.txt', 1, 2024, 3),
        _summary('d.txt', 1, 2024, 1),
    ):
        usage = compute_bucket_usage()

    assert usage.as_json()['uploadTrend'] == [
        {'date': '2023-12', 'count': 1},
        {'date': '2024-01', 'count': 1},
        {'date': '2024-03', 'count': 2},
    ]


def test_file_type_distribution(listed_objects):
    """Test categories cover every object, unknown types under Other."""
    with listed_objects(
        _summary('photo.JPG', 1),
        _summary('scan.png', 1),
        _summary('report.pdf', 1),
        _summary('song.mp3', 1),
        _summary('script.py', 1),
        _summary('README', 1),
        _summary('docs/', 0),
    ):
        usage = compute_bucket_usage()

    distribution = usage.as_json()['fileTypeDistribution']
    assert distribution == [
        {'name': 'Images', 'value': 2},
        {'name': 'Documents', 'value': 1},
        {'name': 'Audio', 'value': 1},
        {'name': 'Code', 'value': 1},
        {'name': 'Other', 'value': 2},
    ]
    assert sum(item['value'] for item in distribution) == usage.total_files


def test_usage_from_bucket(put_objects):
    """Test the real listing is aggregated end to end."""
    put_objects('a.txt', 'docs/b.csv', body=b'12345')

    payload = compute_bucket_usage().as_json()

    assert payload['totalFiles'] == 2
    assert payload['totalSize'] == 10
    assert {item['key'] for item in payload['topLargestFiles']} == {
        'a.txt',
        'docs/b.csv',
    }
    assert payload['fileTypeDistribution'] == [
        {'name': 'Documents', 'value': 2},
    ]


def test_usage_listing_failure(mock_s3):
    """Test listing failures propagate as storage errors."""
    failure = StorageOperationError('Failed to list', details='AccessDenied')

    with mock.patch.object(FileStorage, 'list_objects', side_effect=failure):
        with pytest.raises(StorageOperationError):
            compute_bucket_usage()
