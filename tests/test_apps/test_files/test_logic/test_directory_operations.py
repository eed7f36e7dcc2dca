"""Tests for folder listing and creation."""

from unittest import mock

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.exceptions import StorageOperationError
from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.directory_operations import (
    create_folder,
    list_directory,
)


def test_list_directory_root(put_objects):
    """Test root listing partitions files and folders."""
    put_objects('readme.txt', 'docs/a.txt', 'docs/sub/b.txt', 'photos/')

    listing = list_directory('')

    assert [folder.name for folder in listing.folders] == ['docs', 'photos']
    assert [folder.prefix for folder in listing.folders] == ['docs/', 'photos/']
    assert [file_entry.key for file_entry in listing.files] == ['readme.txt']


def test_list_directory_subfolder(put_objects):
    """Test each immediate child appears exactly once, nothing deeper."""
    put_objects(
        'docs/',
        'docs/a.txt',
        'docs/b.txt',
        'docs/sub/c.txt',
        'docs/sub/deeper/d.txt',
        'docs/other/',
        'docsx/e.txt',
    )

    listing = list_directory('docs/')

    assert [folder.name for folder in listing.folders] == ['other', 'sub']
    assert [folder.prefix for folder in listing.folders] == [
        'docs/other/',
        'docs/sub/',
    ]
    assert [file_entry.name for file_entry in listing.files] == ['a.txt', 'b.txt']


def test_list_directory_excludes_own_marker(put_objects):
    """Test the marker of the listed folder is not a file."""
    put_objects('empty/')

    listing = list_directory('empty/')

    assert listing.files == []
    assert listing.folders == []


def test_list_directory_normalizes_prefix(put_objects):
    """Test a prefix without trailing slash lists the folder."""
    put_objects('docs/a.txt', 'docsx/b.txt')

    listing = list_directory('docs')

    assert listing.prefix == 'docs/'
    assert [file_entry.key for file_entry in listing.files] == ['docs/a.txt']


def test_list_directory_file_fields(put_objects):
    """Test file entries carry the object metadata."""
    put_objects('docs/a.txt', body=b'12345')

    file_entry = list_directory('docs/').files[0]

    assert file_entry.key == 'docs/a.txt'
    assert file_entry.name == 'a.txt'
    assert file_entry.size == 5
    assert file_entry.storage_class == 'STANDARD'
    assert file_entry.last_modified is not None


def test_list_directory_paginates(settings, put_objects):
    """Test listings larger than one page are complete."""
    settings.FILE_BROWSER_LIST_PAGE_SIZE = 3
    keys = [f'docs/{index:02d}.txt' for index in range(10)]
    put_objects(*keys, 'docs/sub1/x.txt', 'docs/sub2/y.txt')

    listing = list_directory('docs/')

    assert [file_entry.key for file_entry in listing.files] == keys
    assert [folder.name for folder in listing.folders] == ['sub1', 'sub2']


def test_list_directory_store_failure(mock_s3):
    """Test listing failures propagate as storage errors."""
    failure = StorageOperationError('Failed to list', details='Timeout')

    with mock.patch.object(FileStorage, 'list_children', side_effect=failure):
        with pytest.raises(StorageOperationError, match='Failed to list'):
            list_directory('docs/')


def test_create_folder(bucket, bucket_keys, mock_s3):
    """Test folder creation writes a zero-byte marker."""
    key = create_folder('docs/', 'reports')

    assert key == 'docs/reports/'
    assert bucket_keys() == {'docs/reports/'}
    assert bucket.Object('docs/reports/').content_length == 0


def test_create_folder_at_root(bucket_keys, mock_s3):
    """Test folders can be created at the bucket root."""
    assert create_folder('', 'photos') == 'photos/'
    assert bucket_keys() == {'photos/'}


def test_created_folder_is_listed(mock_s3):
    """Test an empty created folder shows up in its parent."""
    create_folder('', 'photos')

    listing = list_directory('')

    assert [folder.name for folder in listing.folders] == ['photos']
    assert listing.files == []


@pytest.mark.parametrize('name', ['', 'a/b', '..'])
def test_create_folder_invalid_name(bucket_keys, mock_s3, name):
    """Test invalid names are rejected before any store call."""
    with mock.patch.object(FileStorage, 'put_empty_object') as put_empty:
        with pytest.raises(ValidationError):
            create_folder('docs/', name)

    put_empty.assert_not_called()
    assert bucket_keys() == set()


def test_list_doubled_separator_folder(put_objects):
    """Test a folder named by a doubled separator is listed and opened."""
    put_objects('a/top.txt', 'a//inner.txt')

    parent = list_directory('a/')
    child = list_directory(parent.folders[0].prefix)

    assert [folder.as_json() for folder in parent.folders] == [
        {'name': '', 'prefix': 'a//'},
    ]
    assert [file_entry.key for file_entry in parent.files] == ['a/top.txt']
    assert [file_entry.key for file_entry in child.files] == ['a//inner.txt']
    assert child.folders == []


def test_list_leading_separator_folder(put_objects):
    """Test keys starting with a slash live in the '/' folder, not the root."""
    put_objects('plain.txt', '/x.txt')

    root = list_directory('')
    child = list_directory('/')

    assert [folder.prefix for folder in root.folders] == ['/']
    assert [file_entry.key for file_entry in root.files] == ['plain.txt']
    assert [file_entry.key for file_entry in child.files] == ['/x.txt']
    assert child.files[0].name == 'x.txt'


def test_create_folder_keeps_parent_prefix(bucket_keys, mock_s3):
    """Test the parent prefix is used verbatim."""
    assert create_folder('a//', 'new') == 'a//new/'
    assert bucket_keys() == {'a//new/'}
