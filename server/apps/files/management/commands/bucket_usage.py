"""Management command to print bucket usage analytics."""

import json
from typing import Any, final, override

from django.core.management.base import BaseCommand, CommandError
from django.template.defaultfilters import filesizeformat

from server.apps.files.exceptions import StorageOperationError
from server.apps.files.logic.analytics_operations import (
    TOP_FILES_LIMIT,
    compute_bucket_usage,
)


@final
class Command(BaseCommand):
    """Scan the whole bucket and report usage statistics."""

    help = 'Print object count, size, largest files and type breakdown'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--json',
            action='store_true',
            help='Print the report as JSON (same shape as /api/analytics)',
        )
        parser.add_argument(
            '--top',
            type=int,
            default=TOP_FILES_LIMIT,
            help=f'Number of largest files to list (default: {TOP_FILES_LIMIT})',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the usage report.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        try:
            usage = compute_bucket_usage(top_limit=options['top'])
        except StorageOperationError as error:
            raise CommandError(f'{error.message}: {error.details}') from error

        if options['json']:
            self.stdout.write(json.dumps(usage.as_json(), indent=2))
            return

        self.stdout.write(
            f'Objects: {usage.total_files}, '
            f'total size: {filesizeformat(usage.total_size)} '
            f'({usage.total_size} bytes)',
        )

        self.stdout.write('Largest files:')
        for file_entry in usage.top_largest_files:
            self.stdout.write(f'  {file_entry.size:>12}  {file_entry.key}')

        self.stdout.write('Uploads per month:')
        for month, count in usage.upload_trend:
            self.stdout.write(f'  {month}  {count}')

        self.stdout.write('File types:')
        for category, count in usage.file_type_distribution:
            self.stdout.write(f'  {category:<10} {count}')

        self.stdout.write(self.style.SUCCESS('Done'))
