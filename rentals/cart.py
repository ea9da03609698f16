"""
Read-side projections over a user's rentals.

All listings are ordered newest first (``-created_at``, then ``-id`` as a
tie-breaker), which is stable across calls.
"""

from dataclasses import dataclass
from decimal import Decimal

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

from .models import RentalStatus, RentalTransaction

ORDERING = ('-created_at', '-id')


@dataclass(frozen=True)
class Cart:
    rentals: tuple
    total: Decimal

    @property
    def count(self):
        return len(self.rentals)


def _for_renter(renter):
    return RentalTransaction.objects.filter(renter=renter).select_related('item')


def list_draft_rentals(renter):
    """DRAFT rentals of the renter, newest first."""
    return _for_renter(renter).filter(status=RentalStatus.DRAFT).order_by(*ORDERING)


def list_active_rentals(renter):
    """Every non-DRAFT rental of the renter, newest first."""
    return _for_renter(renter).exclude(status=RentalStatus.DRAFT).order_by(*ORDERING)


def cart_total(renter):
    """Sum of the locked-in totals of the renter's drafts."""
    return list_draft_rentals(renter).aggregate(
        total=Coalesce(
            Sum('total_price'),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=12, decimal_places=2),
        )
    )['total']


def get_cart(renter):
    """
    Return the renter's cart.

    The total is summed over exactly the rentals returned, using their
    stored total_price; current item pricing is never consulted.
    """
    rentals = tuple(list_draft_rentals(renter))
    total = sum((rental.total_price for rental in rentals), Decimal('0.00'))
    return Cart(rentals=rentals, total=total)


def list_owner_rentals(owner, status=None):
    """
    Rentals of items owned by ``owner``, newest first.

    Drafts are cart placeholders and are never shown to owners.
    """
    qs = RentalTransaction.objects.filter(owner=owner).exclude(
        status=RentalStatus.DRAFT
    ).select_related('item', 'renter')
    if status is not None:
        qs = qs.filter(status=status)
    return qs.order_by(*ORDERING)
