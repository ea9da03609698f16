"""
Custom permission classes for the rentals API.
"""

from rest_framework import permissions


class IsRentalParticipant(permissions.BasePermission):
    """
    Object-level permission limiting a rental to its renter and item owner.

    Usage:
        class RentalDetailView(RetrieveAPIView):
            permission_classes = [IsAuthenticated, IsRentalParticipant]
    """

    message = 'You do not have permission to view this rental.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        """
        Check the user is the renter or the owner of the rental.

        Args:
            request: HTTP request object
            view: View being accessed
            obj: RentalTransaction instance

        Returns:
            bool: True if the user takes part in the rental
        """
        return obj.party_of(request.user) is not None
