"""
Serializers for the rentals API.

Date fields on input are accepted as plain strings and parsed by the
pricing calculator, so malformed dates surface as ``invalid_range``
errors exactly like inverted ranges do.
"""

from rest_framework import serializers

from .models import RentalStatus, RentalTransaction
from .services import ReservationIntent


class RentalTransactionSerializer(serializers.ModelSerializer):
    """
    Read serializer for rentals.

    The payment token itself is never exposed; ``is_paid`` reports whether
    one has been recorded.
    """

    item_title = serializers.CharField(source='item.title', read_only=True)
    is_paid = serializers.SerializerMethodField()

    class Meta:
        model = RentalTransaction
        fields = [
            'id',
            'item',
            'item_title',
            'renter',
            'owner',
            'start_date',
            'end_date',
            'total_price',
            'status',
            'is_paid',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id', 'item', 'renter', 'owner', 'start_date', 'end_date',
            'total_price', 'status', 'created_at', 'updated_at',
        ]

    def get_is_paid(self, obj):
        return bool(obj.payment_token)


class RentalCreateSerializer(serializers.Serializer):
    """
    Input for creating a reservation.

    Fields:
    - item: Required, UUID of the item
    - start_date / end_date: Required, YYYY-MM-DD
    - intent: 'DRAFT' (add to cart) or 'CHECKOUT' (default)
    """

    item = serializers.UUIDField()
    start_date = serializers.CharField(max_length=40)
    end_date = serializers.CharField(max_length=40)
    intent = serializers.ChoiceField(
        choices=ReservationIntent.choices,
        default=ReservationIntent.CHECKOUT,
    )


class SettlementSerializer(serializers.Serializer):
    """Input for bulk settlement. An empty list is left to the service to reject."""

    rental_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=True,
    )
    payment_token = serializers.CharField(max_length=255, allow_blank=True, trim_whitespace=True)


class SinglePaymentSerializer(serializers.Serializer):
    payment_token = serializers.CharField(max_length=255, allow_blank=True, trim_whitespace=True)


class RentalStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RentalStatus.choices)


class QuoteQuerySerializer(serializers.Serializer):
    start_date = serializers.CharField(max_length=40)
    end_date = serializers.CharField(max_length=40)


class AvailabilityQuerySerializer(serializers.Serializer):
    start = serializers.CharField(max_length=40, required=False)
    end = serializers.CharField(max_length=40, required=False)


class CartSerializer(serializers.Serializer):
    rentals = RentalTransactionSerializer(many=True, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    count = serializers.IntegerField(read_only=True)
