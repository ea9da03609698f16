"""
API views for the rental booking engine.
"""

import logging

from rest_framework import status
from rest_framework.generics import RetrieveAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import cart, services, settlement
from .availability import booked_windows, is_rented_on
from .exceptions import RentalError
from .models import Item, RentalStatus, RentalTransaction, User
from .permissions import IsRentalParticipant
from .pricing import compute_quote
from .serializers import (
    AvailabilityQuerySerializer,
    CartSerializer,
    QuoteQuerySerializer,
    RentalCreateSerializer,
    RentalStatusUpdateSerializer,
    RentalTransactionSerializer,
    SettlementSerializer,
    SinglePaymentSerializer,
)

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def rental_error_response(request, exc, action):
    """Log a rejected rental operation and render its typed error."""
    logger.warning(
        f"Rental {action} rejected. "
        f"Code: {exc.default_code}, "
        f"Detail: {exc.detail}, "
        f"User ID: {request.user.pk}, "
        f"IP: {get_client_ip(request)}"
    )
    return Response(exc.as_payload(), status=exc.status_code)


def not_found_response(kind, pk):
    return Response(
        {'detail': f'{kind} with ID {pk} does not exist.', 'code': 'not_found'},
        status=status.HTTP_404_NOT_FOUND
    )


# ============================================================================
# Reservation creation
# ============================================================================

class RentalCreateView(APIView):
    """
    API endpoint for creating reservations.

    POST /api/rentals/
    Headers: Authorization: Bearer <access_token>
    Request body: {
        "item": "<item uuid>",
        "start_date": "2024-06-01",
        "end_date": "2024-06-05",
        "intent": "CHECKOUT"          # or "DRAFT" to add to cart
    }

    Success response (201): the created rental, with total_price locked in.

    Error responses:
    - 401: Missing, invalid, or expired JWT token
    - 400: Invalid data, invalid date range, self-rental
    - 404: Item not found
    - 409: Item already reserved for an overlapping window
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = RentalCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        item_id = data['item']
        try:
            item = Item.objects.get(pk=item_id)
        except Item.DoesNotExist:
            return not_found_response('Item', item_id)

        if not item.available:
            return Response(
                {'item': ['This item is currently unavailable for rental.']},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            rental = services.create_reservation(
                item.pk,
                request.user,
                data['start_date'],
                data['end_date'],
                intent=data['intent'],
            )
        except Item.DoesNotExist:
            return not_found_response('Item', item_id)
        except RentalError as exc:
            return rental_error_response(request, exc, 'creation')

        logger.info(
            f"Reservation request accepted. "
            f"Rental ID: {rental.pk}, "
            f"User ID: {request.user.pk}, "
            f"IP: {get_client_ip(request)}"
        )
        return Response(
            RentalTransactionSerializer(rental).data,
            status=status.HTTP_201_CREATED
        )


# ============================================================================
# Listings
# ============================================================================

class RentalDetailView(RetrieveAPIView):
    """
    GET /api/rentals/<id>/

    Returns the current state of a rental to its renter or owner. Clients
    re-read through this endpoint after a stale_state error.
    """
    permission_classes = [IsAuthenticated, IsRentalParticipant]
    serializer_class = RentalTransactionSerializer
    queryset = RentalTransaction.objects.select_related('item')


class MyRentalsView(APIView):
    """
    GET /api/rentals/my-rentals/

    Renters get their non-draft rentals. Owners get the pipeline of rentals
    on their items and may filter it with ?status=<STATUS>.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        user = request.user
        if user.role == User.Role.OWNER:
            status_filter = request.query_params.get('status')
            if status_filter and status_filter not in RentalStatus.values:
                return Response(
                    {'status': [f'Invalid status. Must be one of: {", ".join(RentalStatus.values)}.']},
                    status=status.HTTP_400_BAD_REQUEST
                )
            rentals = cart.list_owner_rentals(user, status=status_filter or None)
        else:
            rentals = cart.list_active_rentals(user)

        data = RentalTransactionSerializer(rentals, many=True).data
        logger.info(f"Found {len(data)} rentals for user {user.pk}")
        return Response(data, status=status.HTTP_200_OK)


class CartView(APIView):
    """
    GET /api/rentals/cart/

    Response (200): {"rentals": [...], "total": "240.00", "count": 2}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        current = cart.get_cart(request.user)
        return Response(CartSerializer(current).data, status=status.HTTP_200_OK)


# ============================================================================
# Payment settlement
# ============================================================================

class BulkPaymentView(APIView):
    """
    POST /api/rentals/payment-bulk/
    Request body: {"rental_ids": ["<uuid>", ...], "payment_token": "<token>"}

    Settles every listed rental or none of them.

    Error responses:
    - 400: Empty batch, blank token
    - 403: A rental is unknown or belongs to another renter
    - 409: A rental is not awaiting payment or its window was taken
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = SettlementSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = settlement.settle(
                serializer.validated_data['rental_ids'],
                serializer.validated_data['payment_token'],
                request.user,
            )
        except RentalError as exc:
            return rental_error_response(request, exc, 'bulk payment')

        logger.info(
            f"Bulk payment processed. "
            f"User ID: {request.user.pk}, "
            f"Rentals: {result.count}, "
            f"IP: {get_client_ip(request)}"
        )
        return Response(
            {
                'count': result.count,
                'total_amount': str(result.total_amount),
                'rentals': RentalTransactionSerializer(result.rentals, many=True).data,
            },
            status=status.HTTP_200_OK
        )


class SinglePaymentView(APIView):
    """
    POST /api/rentals/<id>/payment/
    Request body: {"payment_token": "<token>"}

    Same semantics as the bulk endpoint with a single rental.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = SinglePaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        rental_id = kwargs['pk']
        try:
            result = settlement.settle_single(
                rental_id,
                serializer.validated_data['payment_token'],
                request.user,
            )
        except RentalError as exc:
            return rental_error_response(request, exc, 'payment')

        return Response(
            RentalTransactionSerializer(result.rentals[0]).data,
            status=status.HTTP_200_OK
        )


# ============================================================================
# Status transitions
# ============================================================================

class RentalStatusUpdateView(APIView):
    """
    PUT /api/rentals/<id>/status/
    Request body: {"status": "CONFIRMED"}

    Applies a transition from the rental's current status. Who may request
    which status follows the transition table; IN_REVIEW is reachable only
    through the payment endpoints.

    Error responses:
    - 400: Unknown status value
    - 403: User is not the renter/owner, or not allowed for this transition
    - 404: Rental not found
    - 409: Illegal transition, or the rental changed concurrently
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        serializer = RentalStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        rental_id = kwargs['pk']
        try:
            rental = services.transition(
                rental_id, serializer.validated_data['status'], request.user
            )
        except RentalTransaction.DoesNotExist:
            return not_found_response('Rental', rental_id)
        except RentalError as exc:
            return rental_error_response(request, exc, 'status update')

        return Response(RentalTransactionSerializer(rental).data, status=status.HTTP_200_OK)


class RentalActionView(APIView):
    """
    POST /api/rentals/<id>/<action>/

    Named lifecycle operations:
    - cancel: renter or owner, depending on the current status
    - confirm: owner accepts a paid request
    - reject: owner rejects a paid request (refund is triggered downstream)
    - start: owner hands the item over
    - complete: owner receives the item back
    """
    permission_classes = [IsAuthenticated]

    actions = {
        'cancel': services.cancel,
        'confirm': services.confirm,
        'reject': services.reject,
        'start': services.start_fulfillment,
        'complete': services.complete,
    }

    def post(self, request, *args, **kwargs):
        rental_id = kwargs['pk']
        action = kwargs['action']
        operation = self.actions.get(action)
        if operation is None:
            return Response(
                {'detail': f'Unknown rental action "{action}".', 'code': 'not_found'},
                status=status.HTTP_404_NOT_FOUND
            )

        try:
            rental = operation(rental_id, request.user)
        except RentalTransaction.DoesNotExist:
            return not_found_response('Rental', rental_id)
        except RentalError as exc:
            return rental_error_response(request, exc, action)

        return Response(RentalTransactionSerializer(rental).data, status=status.HTTP_200_OK)


# ============================================================================
# Item read endpoints
# ============================================================================

class ItemQuoteView(APIView):
    """
    GET /api/items/<id>/quote/?start_date=2024-05-20&end_date=2024-05-22

    Price preview computed by the same calculator reservations use.
    Response (200): {"days": 3, "subtotal": "300.00", "service_fee": "15.00",
                     "insurance": "15.00", "grand_total": "330.00"}
    """
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        query = QuoteQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            item = Item.objects.get(pk=kwargs['pk'])
        except Item.DoesNotExist:
            return not_found_response('Item', kwargs['pk'])

        try:
            quote = compute_quote(
                item.price_per_day,
                query.validated_data['start_date'],
                query.validated_data['end_date'],
            )
        except RentalError as exc:
            return Response(exc.as_payload(), status=exc.status_code)

        return Response(quote.as_dict(), status=status.HTTP_200_OK)


class ItemAvailabilityView(APIView):
    """
    GET /api/items/<id>/availability/?start=2024-06-01&end=2024-06-30

    Lists the item's binding reservation windows (drafts are advisory and
    omitted) and whether it is rented today.
    """
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        query = AvailabilityQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        item_id = kwargs['pk']
        if not Item.objects.filter(pk=item_id).exists():
            return not_found_response('Item', item_id)

        try:
            windows = booked_windows(
                item_id,
                start=query.validated_data.get('start'),
                end=query.validated_data.get('end'),
            )
        except RentalError as exc:
            return Response(exc.as_payload(), status=exc.status_code)

        return Response(
            {
                'item': str(item_id),
                'rented_today': is_rented_on(item_id),
                'booked': [
                    {
                        'rental_id': str(window['id']),
                        'start_date': window['start_date'].isoformat(),
                        'end_date': window['end_date'].isoformat(),
                        'status': window['status'],
                    }
                    for window in windows
                ],
            },
            status=status.HTTP_200_OK
        )
