"""Django management command to serve the file browser API."""

import logging
from typing import Any, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand
from django.core.wsgi import get_wsgi_application

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Run the file browser API using cheroot WSGI server."""

    help = 'Run the file browser HTTP API'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: from settings)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: from settings)',
        )
        parser.add_argument(
            '--threads',
            type=int,
            default=None,
            help='Worker threads (default: from settings)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        host = options['host'] or settings.FILE_SERVER_HOST
        port = options['port'] or settings.FILE_SERVER_PORT
        threads = options['threads'] or settings.FILE_SERVER_THREADS

        self.stdout.write(
            self.style.SUCCESS(
                f'Starting file browser API on {host}:{port}',
            ),
        )

        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=get_wsgi_application(),
            numthreads=threads,
        )
        server.server_name = 'BucketFileBrowser'

        try:
            logger.info(
                'File browser API starting on %s:%d with %d threads',
                host,
                port,
                threads,
            )
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            server.stop()
            self.stdout.write(self.style.SUCCESS('File browser API stopped'))
