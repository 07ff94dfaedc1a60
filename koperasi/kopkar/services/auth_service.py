# -*- coding: utf-8 -*-
"""
Auth: register (NIK karyawan), verifikasi email, login (email/NIK),
refresh, lupa/reset password, profil.
"""
from __future__ import annotations
import logging
import re
import secrets
from datetime import timedelta
from typing import Any, Dict, Tuple

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import AuthenticationFailed

from kopkar.models import User
from kopkar.repositories import employee_repository, level_repository, user_repository
from kopkar.repositories.base import save_fields
from kopkar.services import audit_service
from kopkar.utils import roles
from kopkar.utils.auth import decode_token, issue_tokens, user_from_payload
from kopkar.utils.exceptions import Conflict
from kopkar.utils.notify import send_email_notification

logger = logging.getLogger(__name__)

PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*(\d|\W)).{8,}$")
BAD_LOGIN = "Email/NIK atau password salah"


def validate_password(password: str, confirmation: str, field: str = "password") -> None:
    if not PASSWORD_RE.match(password or ""):
        raise ValidationError({field: [
            "Password minimal 8 karakter dan harus mengandung huruf besar, huruf kecil, dan angka atau karakter khusus"
        ]})
    if password != confirmation:
        raise ValidationError({"conf_password": ["Password dan konfirmasi password tidak cocok"]})


def _token() -> str:
    return secrets.token_hex(32)

def _link(path: str, token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/{path}?token={token}"


# ====== Register / verify ======
def register(*, name: str, email: str, password: str, conf_password: str, employee_number: str) -> User:
    validate_password(password, conf_password)
    employee = employee_repository.get_by_number(employee_number)
    if employee is None:
        raise ValidationError({"employee_number": ["Nomor Induk Karyawan tidak ditemukan di sistem. Hubungi HR/Admin."]})
    if not employee.is_active:
        raise ValidationError({"employee_number": ["Nomor Induk Karyawan tidak aktif. Hubungi HR/Admin."]})
    if user_repository.employee_linked(employee.id):
        raise Conflict("Nomor Induk Karyawan sudah terdaftar oleh user lain.")
    if user_repository.email_taken(email):
        raise Conflict("Email sudah terdaftar")

    token = _token()
    with transaction.atomic():
        user = user_repository.create({
            "name": name,
            "email": email.lower(),
            "employee": employee,
            "bank_account_number": employee.bank_account_number,
            "verification_token": token,
            "verification_token_expires_at": timezone.now() + timedelta(hours=settings.EMAIL_VERIFICATION_TTL_HOURS),
        }, password)
        anggota = level_repository.get_by_names([roles.ANGGOTA])
        if anggota:
            user_repository.add_level(user, anggota[0])

        sent = send_email_notification(
            subject="Verifikasi email",
            text_body=(
                f"Halo {user.name},\n\nSilakan verifikasi email Anda melalui tautan berikut:\n"
                f"{_link('auth/verify-email', token)}\n"
            ),
            to_emails=[user.email], object_type="user", object_id=str(user.id), to_user=user.id,
        )
        if not sent:
            # rolls back the new account
            raise ValidationError("Gagal mengirim email verifikasi. Pastikan email Anda valid dan dapat menerima email.")
    logger.info("[auth] registered user=%s employee=%s", user.id, employee.employee_number)
    return user

def verify_email(token: str) -> User:
    if not token:
        raise ValidationError("Token verifikasi tidak valid")
    user = user_repository.get_by_token("verification_token", token)
    if user is None:
        raise ObjectDoesNotExist("Token verifikasi tidak ditemukan atau sudah digunakan")
    if user.email_verified_at:
        raise ValidationError("Email sudah terverifikasi sebelumnya")
    if user.verification_token_expires_at and user.verification_token_expires_at < timezone.now():
        raise ValidationError("Token verifikasi sudah kedaluwarsa")
    return save_fields(user, {
        "email_verified_at": timezone.now(), "verification_token": "", "verification_token_expires_at": None,
    })


# ====== Login / tokens ======
def login(*, identifier: str, password: str) -> Tuple[User, str, str]:
    user = user_repository.get_by_login((identifier or "").strip())
    if user is None or not user.is_active:
        raise AuthenticationFailed(BAD_LOGIN)
    if not user.email_verified_at:
        raise AuthenticationFailed("Email belum diverifikasi. Silakan cek email Anda untuk verifikasi.")
    if not user.check_password(password):
        raise AuthenticationFailed(BAD_LOGIN)
    save_fields(user, {"last_login_at": timezone.now()})
    access, refresh = issue_tokens(user)
    return user, access, refresh

def refresh(token: str) -> Tuple[User, str, str]:
    if not token:
        raise AuthenticationFailed("Refresh token tidak ditemukan")
    user = user_from_payload(decode_token(token, "refresh"))
    access, new_refresh = issue_tokens(user)
    return user, access, new_refresh


# ====== Password ======
def forgot_password(email: str) -> None:
    user = user_repository.get_by_email(email or "")
    if user is None:
        return
    if not user.email_verified_at:
        raise ValidationError("Email belum diverifikasi. Silakan verifikasi email Anda terlebih dahulu.")
    token = _token()
    with transaction.atomic():
        save_fields(user, {
            "reset_token": token,
            "reset_token_expires_at": timezone.now() + timedelta(hours=settings.PASSWORD_RESET_TTL_HOURS),
        })
        sent = send_email_notification(
            subject="Reset password",
            text_body=(
                f"Halo {user.name},\n\nGunakan tautan berikut untuk mengatur ulang password Anda:\n"
                f"{_link('auth/reset-password', token)}\n\nAbaikan email ini jika Anda tidak memintanya.\n"
            ),
            to_emails=[user.email], object_type="user", object_id=str(user.id), to_user=user.id,
        )
        if not sent:
            raise ValidationError("Gagal mengirim email reset password. Pastikan email Anda valid dan dapat menerima email.")

def reset_password(*, token: str, password: str, conf_password: str) -> User:
    validate_password(password, conf_password)
    user = user_repository.get_by_token("reset_token", token)
    if user is None or not user.reset_token_expires_at or user.reset_token_expires_at < timezone.now():
        raise ValidationError("Token reset password tidak valid atau sudah kadaluarsa")
    with transaction.atomic():
        user.set_password(password)
        save_fields(user, {"password": user.password, "reset_token": "", "reset_token_expires_at": None})
        audit_service.log_action(actor=user.id, action="PASSWORD_RESET", object_type="user", object_id=user.id)
    return user

def change_password(user: User, *, current_password: str, new_password: str, confirm_password: str) -> User:
    validate_password(new_password, confirm_password, field="new_password")
    if not user.check_password(current_password):
        raise ValidationError({"current_password": ["Password lama tidak valid"]})
    with transaction.atomic():
        user.set_password(new_password)
        save_fields(user, {"password": user.password})
        audit_service.log_action(actor=user.id, action="PASSWORD_CHANGED", object_type="user", object_id=user.id)
    return user


# ====== Profile ======
PROFILE_FIELDS = ("name", "date_of_birth", "birth_place", "bank_account_number")

def update_profile(user: User, data: Dict[str, Any]) -> User:
    patch = {k: v for k, v in data.items() if k in PROFILE_FIELDS and v not in (None, "")}
    return save_fields(user, patch)
