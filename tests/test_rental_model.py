"""
Test suite for the User, Item and RentalTransaction models.

Tests cover:
- Field defaults and UUID primary keys
- Model-level validation (date order, positive price, self-rental)
- Database constraints
- Party resolution and the transition table
"""

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase

from rentals.models import (
    Item,
    Party,
    RentalStatus,
    RentalTransaction,
    TERMINAL_STATUSES,
    TRANSITIONS,
    is_legal_transition,
)

User = get_user_model()


class UserModelTests(TestCase):
    """Test marketplace accounts."""

    def test_default_role_is_renter(self):
        user = User.objects.create_user(
            username='someone', email='someone@test.com', password='testpass123'
        )

        self.assertEqual(user.role, User.Role.RENTER)
        self.assertFalse(user.is_owner())

    def test_email_is_lowercased(self):
        user = User.objects.create_user(
            username='mixed', email='Mixed.Case@Test.COM', password='testpass123'
        )

        self.assertEqual(user.email, 'mixed.case@test.com')

    def test_owner_role(self):
        user = User.objects.create_user(
            username='lister', email='lister@test.com', password='testpass123',
            role=User.Role.OWNER,
        )

        self.assertTrue(user.is_owner())


class RentalModelTests(TestCase):
    """Test RentalTransaction creation and validation."""

    def setUp(self):
        self.owner = User.objects.create_user(
            username='owner1', email='owner1@test.com', password='testpass123',
            role=User.Role.OWNER,
        )
        self.renter = User.objects.create_user(
            username='renter1', email='renter1@test.com', password='testpass123',
        )
        self.item = Item.objects.create(
            owner=self.owner, title='Pressure Washer', price_per_day=Decimal('60.00')
        )

    def build_rental(self, **overrides):
        fields = {
            'item': self.item,
            'renter': self.renter,
            'owner': self.owner,
            'start_date': date(2030, 6, 1),
            'end_date': date(2030, 6, 3),
            'total_price': Decimal('204.00'),
        }
        fields.update(overrides)
        return RentalTransaction(**fields)

    def test_rental_creation_defaults(self):
        rental = self.build_rental()
        rental.save()

        self.assertIsNotNone(rental.pk)
        self.assertEqual(rental.status, RentalStatus.PENDING_PAYMENT)
        self.assertIsNone(rental.payment_token)
        self.assertIsNotNone(rental.created_at)
        self.assertIsNotNone(rental.updated_at)

    def test_primary_keys_are_uuids(self):
        rental = self.build_rental()
        rental.save()

        self.assertEqual(len(str(rental.pk)), 36)
        self.assertEqual(len(str(self.item.pk)), 36)

    def test_end_before_start_rejected(self):
        rental = self.build_rental(start_date=date(2030, 6, 3), end_date=date(2030, 6, 1))

        with self.assertRaises(ValidationError) as ctx:
            rental.save()

        self.assertIn('end_date', ctx.exception.message_dict)

    def test_same_day_rental_allowed(self):
        rental = self.build_rental(start_date=date(2030, 6, 1), end_date=date(2030, 6, 1))
        rental.save()

        self.assertEqual(rental.start_date, rental.end_date)

    def test_non_positive_total_rejected(self):
        rental = self.build_rental(total_price=Decimal('0.00'))

        with self.assertRaises(ValidationError) as ctx:
            rental.save()

        self.assertIn('total_price', ctx.exception.message_dict)

    def test_self_rental_rejected(self):
        rental = self.build_rental(renter=self.owner)

        with self.assertRaises(ValidationError) as ctx:
            rental.save()

        self.assertIn('renter', ctx.exception.message_dict)

    def test_date_order_enforced_by_database(self):
        rental = self.build_rental()
        rental.save()

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                RentalTransaction.objects.filter(pk=rental.pk).update(
                    start_date=date(2030, 7, 1)
                )

    def test_item_price_constraint(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Item.objects.filter(pk=self.item.pk).update(price_per_day=Decimal('0.00'))

    def test_party_of(self):
        rental = self.build_rental()
        rental.save()
        stranger = User.objects.create_user(
            username='stranger', email='stranger@test.com', password='testpass123'
        )

        self.assertEqual(rental.party_of(self.renter), Party.RENTER)
        self.assertEqual(rental.party_of(self.owner), Party.OWNER)
        self.assertIsNone(rental.party_of(stranger))
        self.assertIsNone(rental.party_of(None))

    def test_is_terminal(self):
        rental = self.build_rental(status=RentalStatus.COMPLETED)

        self.assertTrue(rental.is_terminal)
        rental.status = RentalStatus.CONFIRMED
        self.assertFalse(rental.is_terminal)

    def test_can_transition_to(self):
        rental = self.build_rental(status=RentalStatus.IN_REVIEW)

        self.assertTrue(rental.can_transition_to(RentalStatus.CONFIRMED))
        self.assertTrue(rental.can_transition_to(RentalStatus.CONFIRMED, Party.OWNER))
        self.assertFalse(rental.can_transition_to(RentalStatus.CONFIRMED, Party.RENTER))
        self.assertFalse(rental.can_transition_to(RentalStatus.COMPLETED))

    def test_protected_item_cannot_be_deleted_with_rentals(self):
        self.build_rental().save()

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                self.item.delete()


class TransitionTableTests(TestCase):
    """Test the static transition table."""

    def test_terminal_statuses_have_no_exits(self):
        for (from_status, _to_status) in TRANSITIONS:
            self.assertNotIn(from_status, TERMINAL_STATUSES)

    def test_in_progress_cannot_be_cancelled(self):
        self.assertFalse(is_legal_transition(RentalStatus.IN_PROGRESS, RentalStatus.CANCELLED))

    def test_no_self_loops(self):
        for (from_status, to_status) in TRANSITIONS:
            self.assertNotEqual(from_status, to_status)

    def test_owner_only_forward_moves(self):
        self.assertEqual(
            TRANSITIONS[(RentalStatus.IN_REVIEW, RentalStatus.CONFIRMED)], {Party.OWNER}
        )
        self.assertEqual(
            TRANSITIONS[(RentalStatus.CONFIRMED, RentalStatus.IN_PROGRESS)], {Party.OWNER}
        )
        self.assertEqual(
            TRANSITIONS[(RentalStatus.IN_PROGRESS, RentalStatus.COMPLETED)], {Party.OWNER}
        )

    def test_draft_cannot_skip_payment(self):
        self.assertFalse(is_legal_transition(RentalStatus.DRAFT, RentalStatus.CONFIRMED))
        self.assertFalse(is_legal_transition(RentalStatus.PENDING_PAYMENT, RentalStatus.CONFIRMED))
