# -*- coding: utf-8 -*-
"""
JWT access/refresh tokens carried in httpOnly cookies.
"""
from __future__ import annotations
import time
from typing import Dict, Optional, Tuple

import jwt
from django.conf import settings
from drf_spectacular.extensions import OpenApiAuthenticationExtension
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication

from kopkar.models import User

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


# ===== Tokens =====
def _encode(user: User, kind: str, ttl_seconds: int, secret: str) -> str:
    now = int(time.time())
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "type": kind,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGO)


def issue_tokens(user: User) -> Tuple[str, str]:
    access = _encode(user, "access", settings.JWT_ACCESS_TTL_MINUTES * 60, settings.JWT_SECRET)
    refresh = _encode(user, "refresh", settings.JWT_REFRESH_TTL_DAYS * 86400, settings.JWT_REFRESH_SECRET)
    return access, refresh


def decode_token(token: str, kind: str = "access") -> Dict:
    secret = settings.JWT_SECRET if kind == "access" else settings.JWT_REFRESH_SECRET
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise exceptions.AuthenticationFailed("Token kedaluwarsa")
    except jwt.InvalidTokenError:
        raise exceptions.AuthenticationFailed("Token tidak valid")
    if payload.get("type") != kind:
        raise exceptions.AuthenticationFailed("Token tidak valid")
    return payload


def user_from_payload(payload: Dict) -> User:
    user = User.objects.filter(id=payload.get("sub"), is_active=True).first()
    if not user:
        raise exceptions.AuthenticationFailed("Pengguna tidak ditemukan atau nonaktif")
    return user


# ===== Cookies =====
def set_auth_cookies(response, access: str, refresh: str) -> None:
    common = {
        "httponly": True,
        "secure": settings.AUTH_COOKIE_SECURE,
        "samesite": settings.AUTH_COOKIE_SAMESITE,
    }
    response.set_cookie(ACCESS_COOKIE, access, max_age=settings.JWT_ACCESS_TTL_MINUTES * 60, **common)
    response.set_cookie(REFRESH_COOKIE, refresh, max_age=settings.JWT_REFRESH_TTL_DAYS * 86400, **common)


def clear_auth_cookies(response) -> None:
    response.delete_cookie(ACCESS_COOKIE, samesite=settings.AUTH_COOKIE_SAMESITE)
    response.delete_cookie(REFRESH_COOKIE, samesite=settings.AUTH_COOKIE_SAMESITE)


# ===== DRF authentication =====
class CookieJWTAuthentication(BaseAuthentication):
    """Reads the access token from the cookie, falling back to `Authorization: Bearer`."""

    def _get_token(self, request) -> Optional[str]:
        token = request.COOKIES.get(ACCESS_COOKIE)
        if token:
            return token
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if header.lower().startswith("bearer "):
            return header[7:].strip() or None
        return None

    def authenticate(self, request):
        token = self._get_token(request)
        if not token:
            return None
        payload = decode_token(token, "access")
        return user_from_payload(payload), payload

    def authenticate_header(self, request):
        return 'Bearer realm="api"'


class CookieJWTScheme(OpenApiAuthenticationExtension):
    target_class = "kopkar.utils.auth.CookieJWTAuthentication"
    name = "cookieAuth"

    def get_security_definition(self, auto_schema):
        return {"type": "apiKey", "in": "cookie", "name": ACCESS_COOKIE}
