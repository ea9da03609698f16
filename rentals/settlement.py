"""
Payment settlement for one or many rentals.

The gateway charges a single combined amount for the whole batch and hands
back an opaque token. Settlement then moves every named rental to
IN_REVIEW with that token, or none of them.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from .availability import NON_BINDING_STATUSES, find_conflict, windows_overlap
from .exceptions import (
    AvailabilityConflictError,
    EmptyBatchError,
    IllegalTransitionError,
    InvalidPaymentTokenError,
    OwnershipError,
    StaleStateError,
)
from .models import PRE_PAYMENT_STATUSES, RentalStatus, RentalTransaction
from .registry import DjangoItemRegistry
from .signals import PaymentConfirmedEvent, payment_confirmed, publish_on_commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementResult:
    rentals: tuple
    payment_token: str
    total_amount: Decimal

    @property
    def count(self):
        return len(self.rentals)


def _normalize_ids(rental_ids):
    """Return the distinct ids as UUIDs, keeping their order."""
    seen = []
    for rental_id in rental_ids or ():
        try:
            key = rental_id if isinstance(rental_id, uuid.UUID) else uuid.UUID(str(rental_id))
        except ValueError:
            raise OwnershipError('Some rentals are invalid or do not belong to you.') from None
        if key not in seen:
            seen.append(key)
    return seen


def _check_availability(rentals):
    """
    Re-check every rental against binding reservations and against the
    other rentals of the batch. Drafts in the batch are about to become
    binding, so two overlapping ones for the same item cannot both settle.
    """
    batch_ids = [rental.pk for rental in rentals]
    accepted = []
    for rental in sorted(rentals, key=lambda r: (r.created_at, str(r.pk))):
        conflict = find_conflict(
            rental.item_id,
            rental.start_date,
            rental.end_date,
            exclude_statuses=NON_BINDING_STATUSES,
            exclude_ids=batch_ids,
        )
        if conflict is None:
            conflict = next(
                (
                    other for other in accepted
                    if other.item_id == rental.item_id and windows_overlap(
                        rental.start_date, rental.end_date, other.start_date, other.end_date
                    )
                ),
                None,
            )
        if conflict is not None:
            raise AvailabilityConflictError(
                conflict,
                rental_id=rental.pk,
                detail=(
                    f'Rental {rental.pk} can no longer be paid: the item is already '
                    f'reserved from {conflict.start_date.isoformat()} to '
                    f'{conflict.end_date.isoformat()}.'
                ),
            )
        accepted.append(rental)


def settle(rental_ids, payment_token, payer, registry=None):
    """
    Settle a confirmed payment against one or more rentals.

    Args:
        rental_ids: Iterable of rental ids paid for by this charge
        payment_token: Opaque gateway confirmation token
        payer: User who paid; must be the renter of every rental

    Returns:
        SettlementResult: The settled rentals, token and combined amount

    Raises:
        EmptyBatchError: If no rental ids were given
        InvalidPaymentTokenError: If the token is blank
        OwnershipError: If any rental is unknown or rented by someone else
        IllegalTransitionError: If any rental is not awaiting payment
        AvailabilityConflictError: If a rental's window has since been taken
        StaleStateError: If a rental changed while the batch was applied
    """
    ids = _normalize_ids(rental_ids)
    if not ids:
        raise EmptyBatchError()
    if not isinstance(payment_token, str) or not payment_token.strip():
        raise InvalidPaymentTokenError()
    registry = registry or DjangoItemRegistry()

    with transaction.atomic():
        rentals = list(
            RentalTransaction.objects.select_for_update().filter(pk__in=ids).order_by('pk')
        )

        found = {rental.pk for rental in rentals}
        if len(found) != len(ids) or any(rental.renter_id != payer.pk for rental in rentals):
            logger.warning(
                f"Settlement rejected, rentals not owned by payer. "
                f"Payer ID: {payer.pk}, "
                f"Requested: {len(ids)}, "
                f"Found: {len(found)}"
            )
            raise OwnershipError('Some rentals are invalid or do not belong to you.')

        for rental in rentals:
            if rental.status not in PRE_PAYMENT_STATUSES:
                raise IllegalTransitionError(
                    rental.status, RentalStatus.IN_REVIEW,
                    detail=f'Rental {rental.pk} is {rental.status} and cannot be paid.'
                )

        registry.lock_many({rental.item_id for rental in rentals})
        _check_availability(rentals)

        updated = RentalTransaction.objects.filter(
            pk__in=[rental.pk for rental in rentals],
            renter=payer,
            status__in=PRE_PAYMENT_STATUSES,
            payment_token__isnull=True,
        ).update(
            status=RentalStatus.IN_REVIEW,
            payment_token=payment_token,
            updated_at=timezone.now(),
        )
        if updated != len(rentals):
            # Rolls back the rows already updated by this statement.
            raise StaleStateError()

        settled = tuple(
            RentalTransaction.objects.filter(pk__in=[rental.pk for rental in rentals]).order_by('-created_at', '-id')
        )
        for rental in settled:
            publish_on_commit(payment_confirmed, RentalTransaction, PaymentConfirmedEvent(
                rental_id=rental.pk,
                status=rental.status,
                amount=rental.total_price,
                payment_token=payment_token,
            ))

    total = sum((rental.total_price for rental in settled), Decimal('0.00'))
    logger.info(
        f"Payment settled. "
        f"Payer ID: {payer.pk}, "
        f"Rentals: {len(settled)}, "
        f"Total: {total}"
    )
    return SettlementResult(rentals=settled, payment_token=payment_token, total_amount=total)


def settle_single(rental_id, payment_token, payer, registry=None):
    """Settle a single rental through the same path as a cart checkout."""
    return settle([rental_id], payment_token, payer, registry=registry)
