# -*- coding: utf-8 -*-
"""
Auth + profile. Access/refresh token nằm trong cookie httpOnly;
login/refresh ghi cookie, logout xoá cookie.
"""
from __future__ import annotations
import logging

from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from kopkar.serializers.admin_serializer import UserReadSerializer
from kopkar.serializers.auth_serializer import (
    ChangePasswordSerializer, ForgotPasswordSerializer, LoginSerializer, ProfileUpdateSerializer,
    RegisterSerializer, ResetPasswordSerializer, TokenSerializer,
)
from kopkar.services import auth_service
from kopkar.utils.auth import REFRESH_COOKIE, CookieJWTAuthentication, clear_auth_cookies, set_auth_cookies
from kopkar.utils.permissions import IsAuthenticatedUser
from .utils import CONFLICT, OpenApiExample, extend_schema, inline_serializer, q_str, std_errors

logger = logging.getLogger(__name__)

MessageSerializer = inline_serializer(name="Message", fields={"message": serializers.CharField()})
LoginResponseSerializer = inline_serializer(
    name="LoginResponse",
    fields={"message": serializers.CharField(), "user": UserReadSerializer()},
)


class _PublicView(APIView):
    # an expired access cookie must not block login/refresh
    authentication_classes: list = []
    permission_classes = [AllowAny]

    def get_authenticate_header(self, request):
        # keeps failed logins at 401 instead of DRF's 403 fallback
        return CookieJWTAuthentication().authenticate_header(request)


class _PrivateView(APIView):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticatedUser]


class RegisterView(_PublicView):
    @extend_schema(
        tags=["Auth"],
        summary="Registrasi akun (link verifikasi dikirim via email)",
        request=RegisterSerializer,
        responses={201: UserReadSerializer, **std_errors(CONFLICT)},
        examples=[
            OpenApiExample(
                "Register",
                value={"name": "Budi Santoso", "email": "budi@example.com", "employee_number": "EMP001",
                       "password": "Rahasia123", "conf_password": "Rahasia123"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        ser = RegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = auth_service.register(**ser.validated_data)
        return Response(UserReadSerializer(user).data, status=status.HTTP_201_CREATED)


class VerifyEmailView(_PublicView):
    @extend_schema(
        tags=["Auth"],
        summary="Verifikasi email",
        parameters=[q_str("token", "Token verifikasi", required=True)],
        responses={200: MessageSerializer, **std_errors()},
    )
    def get(self, request):
        auth_service.verify_email(request.query_params.get("token") or "")
        return Response({"message": "Email berhasil diverifikasi. Silakan login."})

    @extend_schema(tags=["Auth"], summary="Verifikasi email (body)", request=TokenSerializer,
                   responses={200: MessageSerializer, **std_errors()})
    def post(self, request):
        ser = TokenSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        auth_service.verify_email(ser.validated_data["token"])
        return Response({"message": "Email berhasil diverifikasi. Silakan login."})


class LoginView(_PublicView):
    @extend_schema(
        tags=["Auth"],
        summary="Login dengan email atau NIK",
        request=LoginSerializer,
        responses={200: LoginResponseSerializer, **std_errors()},
    )
    def post(self, request):
        ser = LoginSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user, access, refresh = auth_service.login(
            identifier=ser.validated_data["email_or_nik"], password=ser.validated_data["password"],
        )
        resp = Response({"message": "Login berhasil", "user": UserReadSerializer(user).data})
        set_auth_cookies(resp, access, refresh)
        logger.info("[auth] login user=%s", user.id)
        return resp


class RefreshView(_PublicView):
    @extend_schema(
        tags=["Auth"],
        summary="Perbarui access token dari refresh cookie",
        request=None,
        responses={200: LoginResponseSerializer, **std_errors()},
    )
    def post(self, request):
        token = request.COOKIES.get(REFRESH_COOKIE) or request.data.get("refresh_token", "")
        user, access, refresh = auth_service.refresh(token)
        resp = Response({"message": "Token diperbarui", "user": UserReadSerializer(user).data})
        set_auth_cookies(resp, access, refresh)
        return resp


class LogoutView(_PublicView):
    @extend_schema(tags=["Auth"], summary="Logout (hapus cookie)", request=None, responses={200: MessageSerializer})
    def post(self, request):
        resp = Response({"message": "Logout berhasil"})
        clear_auth_cookies(resp)
        return resp


class ForgotPasswordView(_PublicView):
    @extend_schema(
        tags=["Auth"],
        summary="Kirim link reset password",
        description="Selalu mengembalikan pesan yang sama walau email tidak terdaftar.",
        request=ForgotPasswordSerializer,
        responses={200: MessageSerializer, **std_errors()},
    )
    def post(self, request):
        ser = ForgotPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        auth_service.forgot_password(ser.validated_data["email"])
        return Response({"message": "Jika email terdaftar, link reset password telah dikirim."})


class ResetPasswordView(_PublicView):
    @extend_schema(
        tags=["Auth"],
        summary="Atur ulang password dengan token",
        request=ResetPasswordSerializer,
        responses={200: MessageSerializer, **std_errors()},
    )
    def post(self, request):
        ser = ResetPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        auth_service.reset_password(**ser.validated_data)
        return Response({"message": "Password berhasil diubah. Silakan login."})


class MeView(_PrivateView):
    @extend_schema(tags=["Auth"], summary="User yang sedang login", responses={200: UserReadSerializer, **std_errors()})
    def get(self, request):
        return Response(UserReadSerializer(request.user).data)


class ProfileView(_PrivateView):
    @extend_schema(tags=["Profile"], summary="Profil saya", responses={200: UserReadSerializer, **std_errors()})
    def get(self, request):
        return Response(UserReadSerializer(request.user).data)

    @extend_schema(
        tags=["Profile"],
        summary="Ubah profil",
        request=ProfileUpdateSerializer,
        responses={200: UserReadSerializer, **std_errors()},
    )
    def patch(self, request):
        ser = ProfileUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        user = auth_service.update_profile(request.user, ser.validated_data)
        return Response(UserReadSerializer(user).data)


class ChangePasswordView(_PrivateView):
    @extend_schema(
        tags=["Profile"],
        summary="Ganti password",
        request=ChangePasswordSerializer,
        responses={200: MessageSerializer, **std_errors()},
    )
    def post(self, request):
        ser = ChangePasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        auth_service.change_password(request.user, **ser.validated_data)
        return Response({"message": "Password berhasil diubah"})
