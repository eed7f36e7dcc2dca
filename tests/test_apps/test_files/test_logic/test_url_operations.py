"""Tests for presigned URL logic."""

from unittest import mock
from urllib.parse import parse_qs, urlsplit

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.infrastructure.storage import FileStorage
from server.apps.files.logic.url_operations import (
    share_url,
    upload_url,
    view_url,
)


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


@pytest.fixture
def presign():
    """Patch URL signing, recording what was signed."""
    with mock.patch.object(
        FileStorage,
        'presigned_url',
        return_value='https://signed.example/url',
    ) as presigned_url:
        yield presigned_url


def test_upload_url_places_file_in_folder(settings, mock_s3):
    """Test the upload key is the folder prefix plus the file name."""
    url, key = upload_url('report.pdf', 'application/pdf', 'docs')

    assert key == 'docs/report.pdf'
    assert 'docs/report.pdf' in urlsplit(url).path
    assert _query(url)['X-Amz-Expires'] == [
        str(settings.FILE_BROWSER_UPLOAD_URL_EXPIRY),
    ]


def test_upload_url_signs_content_type(settings, presign):
    """Test the given content type is part of the signed request."""
    upload_url('photo.jpg', 'image/jpeg')

    presign.assert_called_once_with(
        'put_object',
        'photo.jpg',
        settings.FILE_BROWSER_UPLOAD_URL_EXPIRY,
        ContentType='image/jpeg',
    )


def test_upload_url_guesses_content_type(presign):
    """Test a missing content type is guessed from the extension."""
    upload_url('notes.txt')

    assert presign.call_args.kwargs == {'ContentType': 'text/plain'}


@pytest.mark.parametrize(('file_name', 'prefix'), [
    ('', ''),
    ('nested/file.txt', ''),
    ('file.txt', 'up\x00'),
])
def test_upload_url_validation(presign, file_name, prefix):
    """Test unsafe names are rejected before signing."""
    with pytest.raises(ValidationError):
        upload_url(file_name, None, prefix)

    presign.assert_not_called()


def test_view_url(settings, mock_s3):
    """Test view URLs sign a plain GET with the view expiry."""
    url = view_url('docs/a.txt')

    query = _query(url)
    assert 'docs/a.txt' in urlsplit(url).path
    assert query['X-Amz-Expires'] == [str(settings.FILE_BROWSER_VIEW_URL_EXPIRY)]
    assert 'response-content-disposition' not in query


def test_view_url_for_download(mock_s3):
    """Test download URLs ask for an attachment named like the file."""
    url = view_url('docs/a.txt', download=True)

    assert _query(url)['response-content-disposition'] == [
        'attachment; filename="a.txt"',
    ]


def test_share_url_default_expiry(settings, presign):
    """Test the share expiry falls back to the view expiry."""
    url, expires_in = share_url('a.txt')

    assert url == 'https://signed.example/url'
    assert expires_in == settings.FILE_BROWSER_VIEW_URL_EXPIRY


@pytest.mark.parametrize('expires_in', [60, '60'])
def test_share_url_custom_expiry(presign, expires_in):
    """Test numeric expiries, as numbers or strings, are accepted."""
    _url, expiry = share_url('a.txt', expires_in)

    assert expiry == 60
    presign.assert_called_once_with('get_object', 'a.txt', 60)


@pytest.mark.parametrize('expires_in', [
    0,
    -5,
    604801,
    True,
    1.5,
    'soon',
    [60],
])
def test_share_url_rejects_invalid_expiry(presign, expires_in):
    """Test out-of-range or non-integer expiries are rejected."""
    with pytest.raises(ValidationError):
        share_url('a.txt', expires_in)

    presign.assert_not_called()


def test_upload_url_keeps_prefix_verbatim(presign):
    """Test doubled and leading separators in the prefix are kept."""
    _url, doubled = upload_url('a.txt', 'text/plain', 'a//')
    _url, leading = upload_url('a.txt', 'text/plain', '/docs')

    assert doubled == 'a//a.txt'
    assert leading == '/docs/a.txt'
