"""
Permission classes for the backoffice.

Usage:
    from apps.backoffice.permissions import IsBackofficeAdmin

    @api_view(['GET'])
    @permission_classes([IsAuthenticated, IsBackofficeAdmin])
    def dashboard(request):
        ...
"""

from rest_framework.permissions import BasePermission


class IsBackofficeAdmin(BasePermission):
    """
    Allows access to staff users only.

    Non-staff users get a 403, anonymous users a 401 (via IsAuthenticated).
    """

    message = 'Admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)
