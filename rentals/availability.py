"""
Availability checks for an item's reservation timeline.

Two inclusive windows [s1, e1] and [s2, e2] conflict iff s1 <= e2 and
s2 <= e1. Cancelled rentals never block; callers decide whether drafts do.
"""

from django.utils import timezone

from .models import RentalStatus, RentalTransaction
from .pricing import parse_date

# Always excluded from conflict checks.
BLOCKING_EXCLUSIONS = frozenset({RentalStatus.CANCELLED})

# Excluded when checking a window that is about to be held or paid for.
NON_BINDING_STATUSES = frozenset({RentalStatus.CANCELLED, RentalStatus.DRAFT})

# Statuses that mark an item as currently out with a renter (or about to be).
OCCUPYING_STATUSES = frozenset({
    RentalStatus.PENDING_PAYMENT,
    RentalStatus.IN_REVIEW,
    RentalStatus.CONFIRMED,
    RentalStatus.IN_PROGRESS,
})


def overlapping(item_id, start_date, end_date, exclude_statuses=(), exclude_ids=()):
    """
    Return a queryset of rentals of the item whose window overlaps
    [start_date, end_date].
    """
    excluded = set(BLOCKING_EXCLUSIONS) | set(exclude_statuses)
    qs = RentalTransaction.objects.filter(
        item_id=item_id,
        start_date__lte=end_date,
        end_date__gte=start_date,
    ).exclude(status__in=excluded)
    if exclude_ids:
        qs = qs.exclude(pk__in=list(exclude_ids))
    return qs


def find_conflict(item_id, start_date, end_date, exclude_statuses=(), exclude_ids=()):
    """
    Find a reservation that blocks the requested window.

    Args:
        item_id: Item primary key
        start_date: First requested day (inclusive)
        end_date: Last requested day (inclusive)
        exclude_statuses: Extra statuses to ignore; CANCELLED is always ignored
        exclude_ids: Rental ids to ignore (e.g. the rental being settled)

    Returns:
        RentalTransaction or None: The earliest conflicting rental
    """
    return overlapping(
        item_id, start_date, end_date, exclude_statuses, exclude_ids
    ).order_by('start_date', 'created_at').first()


def has_conflict(item_id, start_date, end_date, exclude_statuses=(), exclude_ids=()):
    return overlapping(item_id, start_date, end_date, exclude_statuses, exclude_ids).exists()


def windows_overlap(start_a, end_a, start_b, end_b):
    return start_a <= end_b and start_b <= end_a


def booked_windows(item_id, start=None, end=None):
    """
    List the binding reservation windows of an item for a calendar view.

    Drafts are advisory and are not reported. ``start``/``end`` optionally
    restrict the result to windows overlapping that range.
    """
    qs = RentalTransaction.objects.filter(item_id=item_id).exclude(
        status__in=NON_BINDING_STATUSES
    )
    if start is not None:
        qs = qs.filter(end_date__gte=parse_date(start, 'start'))
    if end is not None:
        qs = qs.filter(start_date__lte=parse_date(end, 'end'))
    return list(
        qs.order_by('start_date', 'end_date').values('id', 'start_date', 'end_date', 'status')
    )


def is_rented_on(item_id, day=None):
    """Whether an occupying rental covers ``day`` (today by default)."""
    day = parse_date(day, 'day') if day is not None else timezone.localdate()
    return RentalTransaction.objects.filter(
        item_id=item_id,
        status__in=OCCUPYING_STATUSES,
        start_date__lte=day,
        end_date__gte=day,
    ).exists()
