"""
Rental state machine operations.

Every operation takes the acting user explicitly and either returns the
updated RentalTransaction or raises a RentalError subclass. Writes are
conditional on the status that was read, so concurrent callers cannot
both apply a transition from the same state.
"""

import logging

from django.db import transaction
from django.utils import timezone

from .availability import find_conflict
from .exceptions import (
    AvailabilityConflictError,
    IllegalTransitionError,
    OwnershipError,
    SelfRentalError,
    StaleStateError,
)
from .models import (
    Party,
    RentalStatus,
    RentalTransaction,
    TRANSITIONS,
)
from .pricing import compute_quote, parse_date
from .registry import DjangoItemRegistry
from .signals import RentalRejectedEvent, publish_on_commit, rental_rejected

logger = logging.getLogger(__name__)


class ReservationIntent:
    DRAFT = 'DRAFT'
    CHECKOUT = 'CHECKOUT'

    choices = [
        (DRAFT, 'Add to cart'),
        (CHECKOUT, 'Proceed to checkout'),
    ]


_INITIAL_STATUS = {
    ReservationIntent.DRAFT: RentalStatus.DRAFT,
    ReservationIntent.CHECKOUT: RentalStatus.PENDING_PAYMENT,
}


def create_reservation(item_id, renter, start_date, end_date,
                       intent=ReservationIntent.CHECKOUT, registry=None):
    """
    Create a reservation request for an item.

    Steps:
    1. Lock the item so concurrent reservations for it are serialized
    2. Price the range (locks in the grand total)
    3. Check the window against non-draft, non-cancelled rentals
    4. Insert the rental as DRAFT (cart) or PENDING_PAYMENT (checkout)

    Raises:
        InvalidRangeError: If the date range is malformed or inverted
        SelfRentalError: If the renter owns the item
        AvailabilityConflictError: If a binding reservation overlaps
        Item.DoesNotExist: If the item does not exist
    """
    if intent not in _INITIAL_STATUS:
        raise ValueError(f'Unknown reservation intent: {intent!r}')
    registry = registry or DjangoItemRegistry()

    with transaction.atomic():
        registry.lock(item_id)

        quote = compute_quote(registry.get_daily_rate(item_id), start_date, end_date)
        start = parse_date(start_date, 'start_date')
        end = parse_date(end_date, 'end_date')

        owner_id = registry.get_owner_id(item_id)
        if owner_id == renter.pk:
            raise SelfRentalError()

        conflict = find_conflict(
            item_id, start, end, exclude_statuses={RentalStatus.DRAFT}
        )
        if conflict is not None:
            raise AvailabilityConflictError(conflict)

        rental = RentalTransaction.objects.create(
            item_id=item_id,
            renter=renter,
            owner_id=owner_id,
            start_date=start,
            end_date=end,
            total_price=quote.grand_total,
            status=_INITIAL_STATUS[intent],
        )

    logger.info(
        f"Rental created. "
        f"Rental ID: {rental.pk}, "
        f"Item ID: {item_id}, "
        f"Renter ID: {renter.pk}, "
        f"Window: {start.isoformat()}..{end.isoformat()}, "
        f"Status: {rental.status}, "
        f"Total: {rental.total_price}"
    )
    return rental


def apply_transition(rental, target, actor, allowed_parties=None):
    """
    Move ``rental`` from the status it was read with to ``target``.

    The write only succeeds if the row still has the status held by
    ``rental``; otherwise StaleStateError is raised and nothing changes.

    Args:
        rental: RentalTransaction as read by the caller
        target: Target RentalStatus
        actor: User requesting the change
        allowed_parties: Optional further restriction on who may trigger it

    Returns:
        RentalTransaction: The refreshed rental

    Raises:
        OwnershipError: Actor is not a party, or not allowed for this move
        IllegalTransitionError: (status, target) is not a legal transition
        StaleStateError: The status changed since ``rental`` was read
    """
    party = rental.party_of(actor)
    if party is None:
        raise OwnershipError()

    current = RentalStatus(rental.status)
    target = RentalStatus(target)
    parties = TRANSITIONS.get((current, target))
    if parties is None:
        raise IllegalTransitionError(current, target)
    if target == RentalStatus.IN_REVIEW:
        raise IllegalTransitionError(
            current, target,
            detail='Rentals move to IN_REVIEW only through payment settlement.'
        )

    if allowed_parties is not None:
        parties = parties & frozenset(allowed_parties)
    if party not in parties:
        raise OwnershipError(
            f'The {party.label.lower()} cannot move this rental from {current} to {target}.'
        )

    with transaction.atomic():
        updated = RentalTransaction.objects.filter(
            pk=rental.pk, status=current
        ).update(status=target, updated_at=timezone.now())
        if updated != 1:
            raise StaleStateError()

        if (current == RentalStatus.IN_REVIEW and target == RentalStatus.CANCELLED
                and party == Party.OWNER):
            publish_on_commit(rental_rejected, RentalTransaction, RentalRejectedEvent(
                rental_id=rental.pk,
                amount=rental.total_price,
                payment_token=rental.payment_token,
            ))

    rental.refresh_from_db()
    logger.info(
        f"Rental status updated. "
        f"Rental ID: {rental.pk}, "
        f"Old Status: {current}, "
        f"New Status: {target}, "
        f"Actor ID: {actor.pk} ({party})"
    )
    return rental


def transition(rental_id, target, actor, allowed_parties=None):
    """
    Load a rental and apply a transition to it.

    Raises RentalTransaction.DoesNotExist for unknown ids.
    """
    rental = RentalTransaction.objects.get(pk=rental_id)
    return apply_transition(rental, target, actor, allowed_parties)


def cancel(rental_id, actor):
    """Cancel a rental; renter or owner, depending on the current status."""
    return transition(rental_id, RentalStatus.CANCELLED, actor)


def confirm(rental_id, actor):
    """Owner accepts a paid rental request."""
    return transition(rental_id, RentalStatus.CONFIRMED, actor, {Party.OWNER})


def reject(rental_id, actor):
    """Owner rejects a paid rental request; publishes rental_rejected."""
    rental = RentalTransaction.objects.get(pk=rental_id)
    if rental.party_of(actor) is None:
        raise OwnershipError()
    if rental.status != RentalStatus.IN_REVIEW:
        raise IllegalTransitionError(
            rental.status, RentalStatus.CANCELLED,
            detail=f'Only rentals in review can be rejected (current status: {rental.status}).'
        )
    return apply_transition(rental, RentalStatus.CANCELLED, actor, {Party.OWNER})


def start_fulfillment(rental_id, actor):
    """Owner marks the item as handed over."""
    return transition(rental_id, RentalStatus.IN_PROGRESS, actor, {Party.OWNER})


def complete(rental_id, actor):
    """Owner marks the item as returned."""
    return transition(rental_id, RentalStatus.COMPLETED, actor, {Party.OWNER})
