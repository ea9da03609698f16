"""
Shared fixtures for the rentals test suite.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from rentals.models import Item, RentalStatus, RentalTransaction
from rentals.pricing import compute_quote

User = get_user_model()


@pytest.fixture
def api_client():
    """Return API client for testing."""
    return APIClient()


@pytest.fixture
def owner_user(db):
    """Create an owner listing equipment."""
    return User.objects.create_user(
        username='owner',
        email='owner@test.com',
        password='TestPass123!',
        role=User.Role.OWNER,
    )


@pytest.fixture
def renter_user(db):
    """Create a renter."""
    return User.objects.create_user(
        username='renter',
        email='renter@test.com',
        password='TestPass123!',
        role=User.Role.RENTER,
    )


@pytest.fixture
def other_renter(db):
    """Create a second renter."""
    return User.objects.create_user(
        username='renter2',
        email='renter2@test.com',
        password='TestPass123!',
        role=User.Role.RENTER,
    )


@pytest.fixture
def item(owner_user):
    """Create an item priced at 100.00 per day."""
    return Item.objects.create(
        owner=owner_user,
        title='Cordless Drill',
        price_per_day=Decimal('100.00'),
    )


@pytest.fixture
def second_item(owner_user):
    """Create a second item priced at 40.00 per day."""
    return Item.objects.create(
        owner=owner_user,
        title='Tile Saw',
        price_per_day=Decimal('40.00'),
    )


def token_for(user):
    return str(RefreshToken.for_user(user).access_token)


@pytest.fixture
def authenticate(api_client):
    """Return a function that logs the API client in as a user."""
    def _authenticate(user):
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token_for(user)}')
        return api_client
    return _authenticate


@pytest.fixture
def make_rental(db):
    """
    Insert a rental row directly, bypassing the availability check.

    Useful for arranging states that the services would refuse to create.
    """
    def _make_rental(item, renter, start, end, status=RentalStatus.PENDING_PAYMENT,
                     payment_token=None):
        quote = compute_quote(item.price_per_day, start, end)
        return RentalTransaction.objects.create(
            item=item,
            renter=renter,
            owner=item.owner,
            start_date=start,
            end_date=end,
            total_price=quote.grand_total,
            status=status,
            payment_token=payment_token,
        )
    return _make_rental
