"""
management command: cleanup_expired_locks

Deletes SlotLocks whose TTL has passed. Expired locks are already ignored by
every availability and lock check; this only keeps the table small.

Run via OS cron every 5 minutes:
  */5 * * * *  /path/to/venv/bin/python manage.py cleanup_expired_locks
"""
import logging

from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.bookings.models import SlotLock

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Delete expired slot locks'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only count expired locks, do not delete them',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        expired = SlotLock.objects.filter(expires_at__lte=now)

        if options['dry_run']:
            self.stdout.write(f'cleanup_expired_locks: {expired.count()} expired locks (dry run)')
            return

        deleted, _ = expired.delete()
        logger.info('Deleted %d expired slot locks', deleted)
        self.stdout.write(
            self.style.SUCCESS(f'cleanup_expired_locks: deleted {deleted} locks')
        )
