"""File browser settings: batching, fan-out and presigned URL lifetimes."""

from server.settings.components import config

# Listing page size requested from the store (S3 caps it at 1000)
FILE_BROWSER_LIST_PAGE_SIZE = config(
    'FILE_BROWSER_LIST_PAGE_SIZE',
    cast=int,
    default=1000,
)

# Keys per DeleteObjects call (S3 rejects more than 1000)
FILE_BROWSER_DELETE_BATCH_SIZE = config(
    'FILE_BROWSER_DELETE_BATCH_SIZE',
    cast=int,
    default=1000,
)

# Parallel server-side copies while moving a folder
FILE_BROWSER_COPY_CONCURRENCY = config(
    'FILE_BROWSER_COPY_CONCURRENCY',
    cast=int,
    default=16,
)

# Bytes read from the store per archive write
FILE_BROWSER_ARCHIVE_CHUNK_SIZE = config(
    'FILE_BROWSER_ARCHIVE_CHUNK_SIZE',
    cast=int,
    default=64 * 1024,
)

# Presigned URL lifetimes, in seconds
FILE_BROWSER_UPLOAD_URL_EXPIRY = config(
    'FILE_BROWSER_UPLOAD_URL_EXPIRY',
    cast=int,
    default=300,
)
FILE_BROWSER_VIEW_URL_EXPIRY = config(
    'FILE_BROWSER_VIEW_URL_EXPIRY',
    cast=int,
    default=3600,
)
FILE_BROWSER_MAX_SHARE_EXPIRY = config(
    'FILE_BROWSER_MAX_SHARE_EXPIRY',
    cast=int,
    default=7 * 24 * 60 * 60,  # SigV4 limit
)

# Built-in HTTP server (``manage.py run_file_server``)
FILE_SERVER_HOST = config('FILE_SERVER_HOST', default='0.0.0.0')  # noqa: S104
FILE_SERVER_PORT = config('FILE_SERVER_PORT', cast=int, default=5002)
FILE_SERVER_THREADS = config('FILE_SERVER_THREADS', cast=int, default=10)
