# Report Stale Rentals Management Command
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from rentals.models import PRE_PAYMENT_STATUSES, RentalTransaction


class Command(BaseCommand):
    help = (
        'Lists unpaid DRAFT / PENDING_PAYMENT rentals older than a threshold. '
        'Report only: rentals are never expired automatically.'
    )

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours',
            type=int,
            default=None,
            help='Age threshold in hours (defaults to RENTALS_STALE_AFTER_HOURS).',
        )
        parser.add_argument(
            '--status',
            action='append',
            choices=sorted(PRE_PAYMENT_STATUSES),
            help='Restrict to one status; may be given more than once.',
        )

    def handle(self, *args, **options):
        hours = options['hours']
        if hours is None:
            hours = settings.RENTALS_STALE_AFTER_HOURS
        if hours < 0:
            raise CommandError('--hours must not be negative.')

        statuses = options['status'] or sorted(PRE_PAYMENT_STATUSES)
        cutoff = timezone.now() - timedelta(hours=hours)

        stale = RentalTransaction.objects.filter(
            status__in=statuses,
            created_at__lt=cutoff,
        ).select_related('item', 'renter').order_by('created_at')

        count = 0
        for rental in stale.iterator(chunk_size=500):
            count += 1
            self.stdout.write(
                f'{rental.pk}  {rental.status:<15}  {rental.item.title}  '
                f'{rental.start_date.isoformat()}..{rental.end_date.isoformat()}  '
                f'renter={rental.renter.email}  created={rental.created_at.isoformat()}'
            )

        if count:
            self.stdout.write(self.style.WARNING(
                f'{count} unpaid rental(s) older than {hours} hours.'
            ))
        else:
            self.stdout.write(self.style.SUCCESS(
                f'No unpaid rentals older than {hours} hours.'
            ))
