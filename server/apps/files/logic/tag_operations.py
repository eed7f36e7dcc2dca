"""Business logic for object tags."""

import logging
from typing import Any, Final

from django.core.exceptions import ValidationError

from server.apps.files.infrastructure.metadata import validate_key
from server.apps.files.logic._storage import get_storage

# S3 object tagging limits
MAX_TAGS: Final = 10
_MAX_TAG_KEY_LENGTH: Final = 128
_MAX_TAG_VALUE_LENGTH: Final = 256

logger = logging.getLogger(__name__)


def get_tags(key: str) -> list[dict[str, str]]:
    """Read the tag set of an object.

    Args:
        key: Object key.

    Returns:
        Tags as ``{'Key': ..., 'Value': ...}``; empty if none were set.
    """
    validate_key(key)
    return get_storage().get_tags(key)


def set_tags(key: str, tags: Any) -> list[dict[str, str]]:
    """Replace the whole tag set of an object (last write wins).

    Args:
        key: Object key.
        tags: New tags, a list of ``{'Key': ..., 'Value': ...}``.

    Returns:
        The tag set written.

    Raises:
        ValidationError: If the tags are malformed.
        StorageOperationError: If the write fails.
    """
    validate_key(key)
    tag_set = _clean_tags(tags)
    get_storage().put_tags(key, tag_set)
    logger.info('Replaced tags of %s with %d tags', key, len(tag_set))
    return tag_set


def _clean_tags(tags: Any) -> list[dict[str, str]]:
    if not isinstance(tags, list):
        raise ValidationError('tags must be a list')
    if len(tags) > MAX_TAGS:
        raise ValidationError(f'At most {MAX_TAGS} tags are allowed')

    tag_set: list[dict[str, str]] = []
    seen: set[str] = set()
    for tag in tags:
        if not isinstance(tag, dict):
            raise ValidationError('Each tag must be an object with Key and Value')
        tag_key = tag.get('Key')
        tag_value = tag.get('Value', '')
        if not isinstance(tag_key, str) or not tag_key:
            raise ValidationError('Tag Key is required')
        if not isinstance(tag_value, str):
            raise ValidationError(f'Tag "{tag_key}" must have a string Value')
        if len(tag_key) > _MAX_TAG_KEY_LENGTH:
            raise ValidationError(f'Tag Key "{tag_key}" is too long')
        if len(tag_value) > _MAX_TAG_VALUE_LENGTH:
            raise ValidationError(f'Value of tag "{tag_key}" is too long')
        if tag_key in seen:
            raise ValidationError(f'Duplicate tag Key "{tag_key}"')
        seen.add(tag_key)
        tag_set.append({'Key': tag_key, 'Value': tag_value})
    return tag_set
