"""Read-only projections of bucket listings.

Nothing here is stored: every entry is rebuilt from a fresh listing on
each request. ``as_json`` produces the camelCase shapes of the HTTP API.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, final


@final
@dataclass(frozen=True, slots=True)
class FileEntry:
    """One object directly inside a listed folder."""

    key: str
    name: str
    size: int
    last_modified: datetime
    storage_class: str

    @classmethod
    def from_summary(cls, summary: dict[str, Any], prefix: str) -> 'FileEntry':
        """Build an entry from a ListObjectsV2 ``Contents`` item.

        Args:
            summary: Object summary returned by the store.
            prefix: Folder prefix being listed.

        Returns:
            FileEntry with ``name`` relative to the prefix.
        """
        key = summary['Key']
        return cls(
            key=key,
            name=key[len(prefix):],
            size=summary.get('Size', 0),
            last_modified=summary['LastModified'],
            storage_class=summary.get('StorageClass', 'STANDARD'),
        )

    def as_json(self) -> dict[str, Any]:
        """Serialize for the API."""
        return {
            'key': self.key,
            'name': self.name,
            'size': self.size,
            'lastModified': self.last_modified.isoformat(),
            'storageClass': self.storage_class,
        }


@final
@dataclass(frozen=True, slots=True)
class FolderEntry:
    """One immediate sub-folder of a listed folder."""

    name: str
    prefix: str

    def as_json(self) -> dict[str, str]:
        """Serialize for the API."""
        return {'name': self.name, 'prefix': self.prefix}


@final
@dataclass(frozen=True, slots=True)
class DirectoryListing:
    """Immediate children of one folder prefix."""

    prefix: str
    folders: list[FolderEntry] = field(default_factory=list)
    files: list[FileEntry] = field(default_factory=list)

    def as_json(self) -> dict[str, list[dict[str, Any]]]:
        """Serialize for the API."""
        return {
            'folders': [folder.as_json() for folder in self.folders],
            'files': [file_entry.as_json() for file_entry in self.files],
        }


@final
@dataclass(frozen=True, slots=True)
class BucketUsage:
    """Aggregate statistics of a full bucket scan."""

    total_files: int
    total_size: int
    top_largest_files: list[FileEntry]
    upload_trend: list[tuple[str, int]]
    file_type_distribution: list[tuple[str, int]]

    def as_json(self) -> dict[str, Any]:
        """Serialize for the API."""
        return {
            'totalFiles': self.total_files,
            'totalSize': self.total_size,
            'topLargestFiles': [
                {
                    'key': file_entry.key,
                    'size': file_entry.size,
                    'lastModified': file_entry.last_modified.isoformat(),
                }
                for file_entry in self.top_largest_files
            ],
            'uploadTrend': [
                {'date': month, 'count': count}
                for month, count in self.upload_trend
            ],
            'fileTypeDistribution': [
                {'name': category, 'value': count}
                for category, count in self.file_type_distribution
            ],
        }
