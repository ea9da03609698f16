"""
Typed errors raised by the rental booking engine.

Every error is an expected outcome of a public operation and maps to a
specific HTTP status code. Storage failures are not wrapped here; they
propagate as ``django.db.DatabaseError``.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class RentalError(APIException):
    """Base class for rental domain errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The rental operation could not be completed.'
    default_code = 'rental_error'

    def as_payload(self):
        """Return the JSON body used for error responses."""
        return {'detail': str(self.detail), 'code': self.default_code}


class InvalidRangeError(RentalError):
    default_detail = 'The rental date range is invalid.'
    default_code = 'invalid_range'


class AmountOutOfRangeError(RentalError):
    default_detail = 'The rental total is too large to be booked.'
    default_code = 'amount_out_of_range'


class SelfRentalError(RentalError):
    default_detail = 'You cannot rent your own item.'
    default_code = 'self_rental'


class InvalidPaymentTokenError(RentalError):
    default_detail = 'A payment confirmation token is required.'
    default_code = 'invalid_payment_token'


class EmptyBatchError(RentalError):
    default_detail = 'No rentals were provided for settlement.'
    default_code = 'empty_batch'


class OwnershipError(RentalError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to modify this rental.'
    default_code = 'not_owner'


class AvailabilityConflictError(RentalError):
    """
    The requested window overlaps an existing reservation.

    ``conflict`` is the blocking RentalTransaction. ``rental_id`` is set when
    the failure belongs to a specific rental of a settlement batch.
    """

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The item is not available for the selected dates.'
    default_code = 'availability_conflict'

    def __init__(self, conflict, rental_id=None, detail=None):
        self.conflict = conflict
        self.rental_id = rental_id
        if detail is None:
            detail = (
                f'The item is not available for the selected dates. '
                f'It is already reserved from {conflict.start_date.isoformat()} '
                f'to {conflict.end_date.isoformat()}.'
            )
        super().__init__(detail)

    def as_payload(self):
        payload = super().as_payload()
        payload['conflict'] = {
            'rental_id': str(self.conflict.pk),
            'start_date': self.conflict.start_date.isoformat(),
            'end_date': self.conflict.end_date.isoformat(),
        }
        if self.rental_id is not None:
            payload['rental_id'] = str(self.rental_id)
        return payload


class IllegalTransitionError(RentalError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This status transition is not allowed.'
    default_code = 'illegal_transition'

    def __init__(self, from_status, to_status, detail=None):
        self.from_status = from_status
        self.to_status = to_status
        if detail is None:
            detail = f'Cannot transition a rental from {from_status} to {to_status}.'
        super().__init__(detail)

    def as_payload(self):
        payload = super().as_payload()
        payload['from_status'] = str(self.from_status)
        payload['to_status'] = str(self.to_status)
        return payload


class StaleStateError(RentalError):
    """The rental changed between read and write. Re-read and retry."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The rental was modified by another request. Reload it and try again.'
    default_code = 'stale_state'
