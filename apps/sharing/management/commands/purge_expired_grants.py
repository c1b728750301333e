"""
Management command to delete expired shares and invite codes.

Expired grants are already ignored by access checks and invite
redemption; this only removes the dead rows.

Usage:
    python manage.py purge_expired_grants [--dry-run]
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from apps.sharing.models import InviteCode, Share


class Command(BaseCommand):
    help = 'Delete shares and invite codes past their expiry'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        now = timezone.now()

        shares = Share.objects.expired(now)
        invites = InviteCode.objects.expired(now)
        share_count = shares.count()
        invite_count = invites.count()

        if share_count == 0 and invite_count == 0:
            self.stdout.write(
                self.style.SUCCESS('No expired shares or invite codes. All good!')
            )
            return

        self.stdout.write(f'\nFound {share_count} expired share(s) and {invite_count} expired invite code(s).')

        if dry_run:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        with transaction.atomic():
            deleted_shares, _ = shares.delete()
            deleted_invites, _ = invites.delete()

        self.stdout.write(
            self.style.SUCCESS(
                f'\nDeleted {deleted_shares} share(s) and {deleted_invites} invite code(s).'
            )
        )
