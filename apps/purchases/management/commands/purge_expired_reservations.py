"""
Management command to delete expired purchase reservations.

Expired reservations already count as absent everywhere they are read;
this only keeps the table small.

Usage:
    python manage.py purge_expired_reservations [--dry-run]
"""

from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.purchases.models import PurchaseReservation


class Command(BaseCommand):
    help = 'Delete purchase reservations whose TTL has passed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        expired = PurchaseReservation.objects.expired(timezone.now()).select_related('item', 'user')
        count = expired.count()

        if count == 0:
            self.stdout.write(
                self.style.SUCCESS('No expired reservations. All good!')
            )
            return

        self.stdout.write(f'\nFound {count} expired reservation(s):\n')

        for reservation in expired:
            self.stdout.write(
                f'  - {reservation.item.title} | Reserved by: {reservation.user.email} | Expired: {reservation.expires_at}'
            )

        if dry_run:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        deleted, _ = PurchaseReservation.objects.filter(id__in=[r.id for r in expired]).delete()

        self.stdout.write(
            self.style.SUCCESS(f'\nDeleted {deleted} expired reservation(s).')
        )
