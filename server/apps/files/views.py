"""JSON API over the bucket file browser.

Views only parse requests and serialize results. Every failure raised by
the logic layer is turned into ``{"error": ..., "details": ...}`` here, so
nothing escapes as an unhandled exception.
"""

import functools
import json
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse, StreamingHttpResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from server.apps.files.exceptions import (
    BulkDeleteError,
    FileBrowserError,
    FolderMoveError,
    FolderNotFoundError,
    StorageOperationError,
)
from server.apps.files.logic import (
    analytics_operations,
    archive_operations,
    directory_operations,
    file_operations,
    tag_operations,
    url_operations,
)

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponse]


def api_error(
    message: str,
    status: int,
    details: str | None = None,
    **extra: Any,
) -> JsonResponse:
    """Return a JSON error response in a consistent format."""
    payload: dict[str, Any] = {'error': message, 'details': details, **extra}
    return JsonResponse(payload, status=status)


def json_api(view: _View) -> _View:
    """Translate validation and storage failures into JSON errors.

    Args:
        view: View function raising logic-layer exceptions.

    Returns:
        Wrapped view that always answers with a response.
    """
    @functools.wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except ValidationError as error:
            message = '; '.join(error.messages)
            logger.info('Rejected %s %s: %s', request.method, request.path, message)
            return api_error(message, HTTPStatus.BAD_REQUEST)
        except FolderNotFoundError as error:
            return api_error(error.message, HTTPStatus.NOT_FOUND)
        except (BulkDeleteError, FolderMoveError) as error:
            return api_error(
                error.message,
                HTTPStatus.INTERNAL_SERVER_ERROR,
                error.details,
                errors=error.errors,
            )
        except StorageOperationError as error:
            return api_error(error.message, HTTPStatus.BAD_GATEWAY, error.details)
        except FileBrowserError as error:
            return api_error(
                error.message,
                HTTPStatus.INTERNAL_SERVER_ERROR,
                error.details,
            )
    return wrapper


def _json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode the JSON object sent as request body.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ValidationError('Request body must be valid JSON') from error
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body


def _required(body: dict[str, Any], field: str) -> Any:
    value = body.get(field)
    if value is None or value == '':
        raise ValidationError(f'{field} is required')
    return value


@require_http_methods(['GET', 'DELETE'])
@json_api
def files(request: HttpRequest) -> HttpResponse:
    """List a folder (GET) or delete one object (DELETE)."""
    if request.method == 'DELETE':
        key = _json_body(request).get('key') or request.GET.get('key')
        file_operations.delete_file(key)
        return JsonResponse({'message': 'File deleted successfully'})

    listing = directory_operations.list_directory(request.GET.get('prefix', ''))
    return JsonResponse(listing.as_json())


@require_http_methods(['DELETE'])
@json_api
def files_bulk(request: HttpRequest) -> HttpResponse:
    """Delete many objects."""
    deleted = file_operations.bulk_delete(_json_body(request).get('keys'))
    return JsonResponse({
        'message': f'{deleted} files deleted successfully',
        'deleted': deleted,
    })


@require_POST
@json_api
def folders(request: HttpRequest) -> HttpResponse:
    """Create an empty folder."""
    body = _json_body(request)
    key = directory_operations.create_folder(
        body.get('prefix') or '',
        body.get('folderName'),
    )
    return JsonResponse({'key': key}, status=HTTPStatus.CREATED)


@require_POST
@json_api
def rename(request: HttpRequest) -> HttpResponse:
    """Rename or move a file or a folder."""
    body = _json_body(request)
    moved = file_operations.rename(
        _required(body, 'oldKey'),
        _required(body, 'newKey'),
        is_folder=bool(body.get('isFolder')),
    )
    return JsonResponse({'message': 'Renamed successfully', 'moved': moved})


@require_POST
@json_api
def upload_presigned_url(request: HttpRequest) -> HttpResponse:
    """Issue a presigned PUT URL for a direct upload."""
    body = _json_body(request)
    url, key = url_operations.upload_url(
        _required(body, 'fileName'),
        body.get('fileType'),
        body.get('prefix') or '',
    )
    return JsonResponse({'url': url, 'key': key})


@require_POST
@json_api
def file_presigned_url(request: HttpRequest) -> HttpResponse:
    """Issue a presigned GET URL to view or download a file."""
    body = _json_body(request)
    url = url_operations.view_url(
        _required(body, 'key'),
        download=bool(body.get('download')),
    )
    return JsonResponse({'url': url})


@require_POST
@json_api
def share_presigned_url(request: HttpRequest) -> HttpResponse:
    """Issue a shareable presigned GET URL with a chosen lifetime."""
    body = _json_body(request)
    url, expires_in = url_operations.share_url(
        _required(body, 'key'),
        body.get('expiresIn'),
    )
    return JsonResponse({'url': url, 'expiresIn': expires_in})


@require_POST
@json_api
def download_folder(request: HttpRequest) -> HttpResponse:
    """Stream a folder as a zip archive."""
    prefix = _json_body(request).get('prefix') or ''
    entries = archive_operations.collect_archive_entries(prefix)

    response = StreamingHttpResponse(
        archive_operations.stream_archive(prefix, entries),
        content_type='application/zip',
    )
    response['Content-Disposition'] = 'attachment; filename="{0}"'.format(
        archive_operations.archive_name(prefix),
    )
    return response


@require_GET
@json_api
def analytics(request: HttpRequest) -> HttpResponse:
    """Aggregate usage statistics of the whole bucket."""
    usage = analytics_operations.compute_bucket_usage()
    return JsonResponse(usage.as_json())


@require_http_methods(['GET', 'POST'])
@json_api
def files_metadata(request: HttpRequest) -> HttpResponse:
    """Read (GET) or replace (POST) the tags of one object."""
    if request.method == 'POST':
        body = _json_body(request)
        tag_operations.set_tags(_required(body, 'key'), body.get('tags', []))
        return JsonResponse({'message': 'Tags updated successfully'})

    tags = tag_operations.get_tags(request.GET.get('key'))
    return JsonResponse(tags, safe=False)
