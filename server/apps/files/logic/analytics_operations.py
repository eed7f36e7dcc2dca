"""Business logic for bucket usage analytics.

Every call scans the whole bucket. Nothing is cached between requests,
so the cost grows linearly with the number of objects.
"""

import logging
from collections import Counter
from typing import Final

from server.apps.files.entries import BucketUsage, FileEntry
from server.apps.files.infrastructure.metadata import (
    FILE_CATEGORIES,
    OTHER_CATEGORY,
    categorize,
)
from server.apps.files.logic._storage import get_storage

TOP_FILES_LIMIT: Final = 10

_CATEGORY_ORDER: Final = (*FILE_CATEGORIES, OTHER_CATEGORY)

logger = logging.getLogger(__name__)


def compute_bucket_usage(top_limit: int = TOP_FILES_LIMIT) -> BucketUsage:
    """Scan every object in the bucket and aggregate usage statistics.

    Args:
        top_limit: How many of the largest objects to report.

    Returns:
        BucketUsage with totals, the largest objects (descending by size,
        ties kept in listing order), uploads per ``YYYY-MM`` (ascending)
        and object counts per file category.

    Raises:
        StorageOperationError: If the bucket cannot be listed.
    """
    objects = [
        FileEntry.from_summary(summary, '')
        for summary in get_storage().list_objects()
    ]

    # sorted() is stable, so equal sizes keep their listing order
    largest = sorted(objects, key=lambda entry: entry.size, reverse=True)

    uploads_per_month = Counter(
        entry.last_modified.strftime('%Y-%m') for entry in objects
    )
    categories = Counter(categorize(entry.key) for entry in objects)

    usage = BucketUsage(
        total_files=len(objects),
        total_size=sum(entry.size for entry in objects),
        top_largest_files=largest[:top_limit],
        upload_trend=sorted(uploads_per_month.items()),
        file_type_distribution=[
            (category, categories[category])
            for category in _CATEGORY_ORDER
            if categories[category]
        ],
    )
    logger.info(
        'Bucket usage computed: %d objects, %d bytes',
        usage.total_files,
        usage.total_size,
    )
    return usage
