"""
Django admin configuration for the rentals app.

Rentals are read-only here: status, price and payment token change only
through the booking services, which enforce the transition table.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Item, RentalTransaction, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for marketplace accounts."""

    list_display = ['email', 'username', 'role', 'is_staff', 'is_active', 'created_at']
    list_filter = ['role', 'is_staff', 'is_superuser', 'is_active']
    search_fields = ['email', 'username', 'first_name', 'last_name']
    ordering = ['-created_at']

    fieldsets = BaseUserAdmin.fieldsets + (
        (_('Marketplace'), {
            'fields': ('role', 'created_at', 'updated_at'),
        }),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'email', 'role', 'password1', 'password2'),
        }),
    )
    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['title', 'owner', 'price_per_day', 'available', 'created_at']
    list_filter = ['available', 'created_at']
    search_fields = ['title', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
    list_per_page = 25


@admin.register(RentalTransaction)
class RentalTransactionAdmin(admin.ModelAdmin):
    """Admin interface for rentals. No add, change or delete."""

    list_display = [
        'id',
        'item',
        'renter',
        'owner',
        'start_date',
        'end_date',
        'total_price',
        'status',
        'created_at',
    ]
    list_filter = ['status', 'start_date', 'created_at']
    search_fields = ['item__title', 'renter__email', 'owner__email']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    list_per_page = 25

    fieldsets = (
        (None, {
            'fields': ('item', 'renter', 'owner')
        }),
        (_('Reservation'), {
            'fields': ('start_date', 'end_date', 'total_price', 'status', 'payment_token')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
