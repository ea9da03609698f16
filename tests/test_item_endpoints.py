"""
Tests for the public item quote and availability endpoints.
"""

import uuid
from datetime import date

import pytest
from django.utils import timezone
from rest_framework import status

from rentals.models import RentalStatus


@pytest.mark.django_db
class TestQuoteEndpoint:
    """Test GET /api/items/<id>/quote/."""

    def url(self, item_id):
        return f'/api/items/{item_id}/quote/'

    def test_quote(self, api_client, item):
        response = api_client.get(
            self.url(item.pk), {'start_date': '2030-05-20', 'end_date': '2030-05-22'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'days': 3,
            'subtotal': '300.00',
            'service_fee': '15.00',
            'insurance': '15.00',
            'grand_total': '330.00',
        }

    def test_quote_matches_created_rental(self, authenticate, item, renter_user):
        client = authenticate(renter_user)
        params = {'start_date': '2030-05-20', 'end_date': '2030-05-24'}

        quote = client.get(self.url(item.pk), params)
        created = client.post('/api/rentals/', {'item': str(item.pk), **params}, format='json')

        assert created.status_code == status.HTTP_201_CREATED
        assert created.data['total_price'] == quote.data['grand_total']

    def test_inverted_range(self, api_client, item):
        response = api_client.get(
            self.url(item.pk), {'start_date': '2030-05-22', 'end_date': '2030-05-20'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_range'

    def test_missing_parameters(self, api_client, item):
        response = api_client.get(self.url(item.pk))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'start_date' in response.data

    def test_unknown_item(self, api_client):
        response = api_client.get(
            self.url(uuid.uuid4()), {'start_date': '2030-05-20', 'end_date': '2030-05-22'}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestAvailabilityEndpoint:
    """Test GET /api/items/<id>/availability/."""

    def url(self, item_id):
        return f'/api/items/{item_id}/availability/'

    def test_lists_binding_windows(self, api_client, item, renter_user, other_renter, make_rental):
        make_rental(item, renter_user, date(2030, 6, 1), date(2030, 6, 2), status=RentalStatus.DRAFT)
        booked = make_rental(item, other_renter, date(2030, 6, 10), date(2030, 6, 12))

        response = api_client.get(self.url(item.pk))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item'] == str(item.pk)
        assert response.data['rented_today'] is False
        assert response.data['booked'] == [{
            'rental_id': str(booked.pk),
            'start_date': '2030-06-10',
            'end_date': '2030-06-12',
            'status': 'PENDING_PAYMENT',
        }]

    def test_range_filter(self, api_client, item, renter_user, make_rental):
        make_rental(item, renter_user, date(2030, 6, 10), date(2030, 6, 12))

        response = api_client.get(self.url(item.pk), {'start': '2030-07-01', 'end': '2030-07-31'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booked'] == []

    def test_invalid_range_parameter(self, api_client, item):
        response = api_client.get(self.url(item.pk), {'start': 'soon'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_range'

    def test_rented_today(self, api_client, item, renter_user, make_rental):
        today = timezone.localdate()
        make_rental(item, renter_user, today, today, status=RentalStatus.IN_PROGRESS)

        response = api_client.get(self.url(item.pk))

        assert response.data['rented_today'] is True

    def test_unknown_item(self, api_client):
        response = api_client.get(self.url(uuid.uuid4()))

        assert response.status_code == status.HTTP_404_NOT_FOUND
