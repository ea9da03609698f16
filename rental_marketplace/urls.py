"""
URL configuration for rental_marketplace project.
"""
from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)
from rentals.views import (
    BulkPaymentView,
    CartView,
    ItemAvailabilityView,
    ItemQuoteView,
    MyRentalsView,
    RentalActionView,
    RentalCreateView,
    RentalDetailView,
    RentalStatusUpdateView,
    SinglePaymentView,
)


urlpatterns = [
    path('admin/', admin.site.urls),

    # JWT Authentication endpoints
    path('api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # Rental endpoints
    path('api/rentals/', RentalCreateView.as_view(), name='rental_create'),
    path('api/rentals/my-rentals/', MyRentalsView.as_view(), name='rental_my_rentals'),
    path('api/rentals/cart/', CartView.as_view(), name='rental_cart'),
    path('api/rentals/payment-bulk/', BulkPaymentView.as_view(), name='rental_payment_bulk'),
    path('api/rentals/<uuid:pk>/', RentalDetailView.as_view(), name='rental_detail'),
    path('api/rentals/<uuid:pk>/payment/', SinglePaymentView.as_view(), name='rental_payment'),
    path('api/rentals/<uuid:pk>/status/', RentalStatusUpdateView.as_view(), name='rental_status'),
    path('api/rentals/<uuid:pk>/<slug:action>/', RentalActionView.as_view(), name='rental_action'),

    # Item read endpoints
    path('api/items/<uuid:pk>/quote/', ItemQuoteView.as_view(), name='item_quote'),
    path('api/items/<uuid:pk>/availability/', ItemAvailabilityView.as_view(), name='item_availability'),
]
