# -*- coding: utf-8 -*-
from rest_framework.permissions import BasePermission

FORBIDDEN_MESSAGE = "Anda tidak memiliki akses untuk melakukan aksi ini"
MEMBER_ONLY_MESSAGE = "Anda harus menjadi anggota terverifikasi untuk mengakses fitur ini"


class IsAuthenticatedUser(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class IsVerifiedMember(IsAuthenticatedUser):
    message = MEMBER_ONLY_MESSAGE

    def has_permission(self, request, view):
        return super().has_permission(request, view) and bool(request.user.member_verified)


def HasRole(*roles: str):
    """Permission class factory: the user must hold at least one of `roles`."""

    class _HasRole(IsAuthenticatedUser):
        message = FORBIDDEN_MESSAGE

        def has_permission(self, request, view):
            return super().has_permission(request, view) and request.user.has_role(*roles)

    _HasRole.__name__ = "HasRole_" + "_".join(roles)
    return _HasRole
