"""
Models for the equipment rental marketplace booking engine.
"""

import uuid
from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Marketplace account.

    Additional fields:
    - email: Required, unique email address
    - role: Either 'RENTER' or 'OWNER'; selects the default rentals view
    - created_at: Account creation timestamp
    - updated_at: Last update timestamp
    """

    class Role(models.TextChoices):
        RENTER = 'RENTER', _('Renter')
        OWNER = 'OWNER', _('Owner')

    email = models.EmailField(
        _('email address'),
        unique=True,
        blank=False,
        null=False,
        error_messages={
            'unique': _('A user with that email already exists.'),
        },
        help_text=_('Required. Enter a valid email address.')
    )

    role = models.CharField(
        _('role'),
        max_length=10,
        choices=Role.choices,
        default=Role.RENTER,
        help_text=_('Whether the account mainly rents or lists equipment.')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role'], name='user_role_idx'),
        ]

    def __str__(self):
        return self.email or self.username

    def is_owner(self):
        return self.role == self.Role.OWNER

    def save(self, *args, **kwargs):
        # Normalize email to lowercase for case-insensitive uniqueness
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)


class Item(models.Model):
    """
    Listed piece of equipment.

    Listing management lives outside the booking engine; this model only
    carries what reservations read: the owner, the daily rate and whether
    the listing currently accepts reservations.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='items',
        help_text=_('User who lists the item')
    )

    title = models.CharField(_('title'), max_length=200)

    price_per_day = models.DecimalField(
        _('price per day'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text=_('Daily rental rate')
    )

    available = models.BooleanField(
        _('available'),
        default=True,
        help_text=_('Whether the listing accepts new reservations')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('item')
        verbose_name_plural = _('items')
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_day__gt=0),
                name='item_price_per_day_positive',
            ),
        ]

    def __str__(self):
        return self.title


class RentalStatus(models.TextChoices):
    DRAFT = 'DRAFT', _('Draft')
    PENDING_PAYMENT = 'PENDING_PAYMENT', _('Pending payment')
    IN_REVIEW = 'IN_REVIEW', _('In review')
    CONFIRMED = 'CONFIRMED', _('Confirmed')
    IN_PROGRESS = 'IN_PROGRESS', _('In progress')
    COMPLETED = 'COMPLETED', _('Completed')
    CANCELLED = 'CANCELLED', _('Cancelled')


TERMINAL_STATUSES = frozenset({RentalStatus.COMPLETED, RentalStatus.CANCELLED})

# Statuses a rental can be settled from.
PRE_PAYMENT_STATUSES = frozenset({RentalStatus.DRAFT, RentalStatus.PENDING_PAYMENT})


class Party(models.TextChoices):
    RENTER = 'RENTER', _('Renter')
    OWNER = 'OWNER', _('Owner')


# Legal (from, to) pairs and the parties allowed to trigger each one.
# Anything missing from this table is an illegal transition.
# Only rejections (owner moving IN_REVIEW to CANCELLED) publish rental_rejected
# for refunds. Cancelling a CONFIRMED rental publishes no event.
TRANSITIONS = {
    (RentalStatus.DRAFT, RentalStatus.CANCELLED): frozenset({Party.RENTER}),
    (RentalStatus.DRAFT, RentalStatus.IN_REVIEW): frozenset({Party.RENTER}),
    (RentalStatus.PENDING_PAYMENT, RentalStatus.CANCELLED): frozenset({Party.RENTER}),
    (RentalStatus.PENDING_PAYMENT, RentalStatus.IN_REVIEW): frozenset({Party.RENTER}),
    (RentalStatus.IN_REVIEW, RentalStatus.CONFIRMED): frozenset({Party.OWNER}),
    (RentalStatus.IN_REVIEW, RentalStatus.CANCELLED): frozenset({Party.RENTER, Party.OWNER}),
    (RentalStatus.CONFIRMED, RentalStatus.IN_PROGRESS): frozenset({Party.OWNER}),
    (RentalStatus.CONFIRMED, RentalStatus.CANCELLED): frozenset({Party.RENTER, Party.OWNER}),
    (RentalStatus.IN_PROGRESS, RentalStatus.COMPLETED): frozenset({Party.OWNER}),
}


def is_legal_transition(from_status, to_status):
    return (from_status, to_status) in TRANSITIONS


class RentalTransaction(models.Model):
    """
    One reservation of one item for an inclusive date range.

    Fields:
    - item: Reserved item
    - renter: User making the reservation
    - owner: Item owner at creation time
    - start_date / end_date: Inclusive calendar range
    - total_price: Grand total locked in at creation (includes fee and insurance)
    - status: Lifecycle status, changed only through the rental services
    - payment_token: Gateway confirmation token, written once on settlement
    - created_at / updated_at: Timestamps

    Rows are never deleted; cancellation is a terminal status.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    item = models.ForeignKey(
        Item,
        on_delete=models.PROTECT,
        related_name='rentals',
        help_text=_('Item being rented')
    )

    renter = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='rentals_as_renter',
        help_text=_('User renting the item')
    )

    owner = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='rentals_as_owner',
        help_text=_('Owner of the item when the rental was created')
    )

    start_date = models.DateField(_('start date'))
    end_date = models.DateField(_('end date'))

    total_price = models.DecimalField(
        _('total price'),
        max_digits=10,
        decimal_places=2,
        help_text=_('Grand total locked in when the rental was created')
    )

    status = models.CharField(
        _('status'),
        max_length=20,
        choices=RentalStatus.choices,
        default=RentalStatus.PENDING_PAYMENT,
        help_text=_('Current lifecycle status')
    )

    payment_token = models.CharField(
        _('payment token'),
        max_length=255,
        blank=True,
        null=True,
        help_text=_('Opaque payment confirmation token')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('rental transaction')
        verbose_name_plural = _('rental transactions')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['item', 'status'], name='rental_item_status_idx'),
            models.Index(fields=['renter', 'status'], name='rental_renter_status_idx'),
            models.Index(fields=['owner', 'status'], name='rental_owner_status_idx'),
            models.Index(fields=['start_date', 'end_date'], name='rental_window_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F('end_date')),
                name='rental_start_not_after_end',
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gt=0),
                name='rental_total_price_positive',
            ),
        ]

    def __str__(self):
        return f'Rental {self.pk} of {self.item_id} ({self.status})'

    def clean(self):
        super().clean()

        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({
                'end_date': _('End date cannot be before start date.')
            })

        if self.total_price is not None and self.total_price <= 0:
            raise ValidationError({
                'total_price': _('Total price must be greater than 0.')
            })

        if self.renter_id and self.renter_id == self.owner_id:
            raise ValidationError({
                'renter': _('Owners cannot rent their own items.')
            })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def party_of(self, user):
        """
        Return the Party the user plays in this rental, or None.
        """
        if user is None or user.pk is None:
            return None
        if user.pk == self.renter_id:
            return Party.RENTER
        if user.pk == self.owner_id:
            return Party.OWNER
        return None

    def can_transition_to(self, new_status, party=None):
        """
        Check a transition against the transition table.

        Args:
            new_status: Target status
            party: Optional Party to check authorization for

        Returns:
            bool: True if the pair is legal (and allowed for the party)
        """
        allowed = TRANSITIONS.get((self.status, new_status))
        if allowed is None:
            return False
        return party is None or party in allowed
