"""
Events published by the rental booking engine.

Notification and refund tooling subscribe to these signals. They are sent
with ``send_robust`` after the booking change has committed, so a failing
receiver can never undo or block a booking state change.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentConfirmedEvent:
    rental_id: object
    status: str
    amount: Decimal
    payment_token: str


@dataclass(frozen=True)
class RentalRejectedEvent:
    rental_id: object
    amount: Decimal
    payment_token: str


# Sent once per settled rental; receivers get ``event=PaymentConfirmedEvent``.
payment_confirmed = Signal()

# Sent when an owner rejects a paid rental; receivers get
# ``event=RentalRejectedEvent`` and are expected to issue the refund.
rental_rejected = Signal()


def _dispatch(signal, sender, event):
    for handler, result in signal.send_robust(sender=sender, event=event):
        if isinstance(result, Exception):
            logger.error(
                f"Rental event receiver failed. "
                f"Receiver: {getattr(handler, '__name__', handler)}, "
                f"Rental ID: {event.rental_id}, "
                f"Error: {result!r}"
            )


def publish_on_commit(signal, sender, event):
    """Send ``signal`` once the surrounding transaction has committed."""
    transaction.on_commit(lambda: _dispatch(signal, sender, event))


@receiver(payment_confirmed)
def log_payment_confirmed(sender, event, **kwargs):
    logger.info(
        f"Payment confirmed. "
        f"Rental ID: {event.rental_id}, "
        f"Status: {event.status}, "
        f"Amount: {event.amount}"
    )


@receiver(rental_rejected)
def log_rental_rejected(sender, event, **kwargs):
    logger.info(
        f"Rental rejected by owner, refund required. "
        f"Rental ID: {event.rental_id}, "
        f"Amount: {event.amount}"
    )
