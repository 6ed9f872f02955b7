from rest_framework import permissions


class IsAdminRole(permissions.BasePermission):
    """
    Permission to only allow canteen admins
    """
    message = 'Admin access required'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_admin
        )


class IsStudent(permissions.BasePermission):
    """
    Permission to only allow student accounts
    """
    message = 'Student access required'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.role == 'student'
        )


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Object-level permission: the object's ``user`` must be the caller,
    unless the caller is an admin
    """
    message = 'Not authorized to access this resource'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.user.is_admin:
            return True
        return getattr(obj, 'user_id', None) == request.user.pk
