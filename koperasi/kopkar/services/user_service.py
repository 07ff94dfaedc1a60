# -*- coding: utf-8 -*-
"""
User admin: tạo (email tự xác minh), sửa, xoá (chỉ ketua), gán role.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import User
from kopkar.repositories import level_repository, user_repository as repo
from kopkar.repositories.base import save_fields
from kopkar.services import audit_service
from kopkar.utils import roles
from kopkar.utils.exceptions import Conflict

logger = logging.getLogger(__name__)

EDITABLE = {
    "name", "email", "nik", "npwp", "date_of_birth", "birth_place",
    "bank_account_number", "employee", "is_active",
}


def _check_unique(data: Dict[str, Any], exclude_id=None) -> None:
    if data.get("email") and repo.email_taken(data["email"], exclude_id):
        raise Conflict("Email sudah terdaftar")
    if data.get("nik") and repo.nik_taken(data["nik"], exclude_id):
        raise Conflict("NIK sudah terdaftar")
    if data.get("employee") and repo.employee_linked(data["employee"].id, exclude_id):
        raise Conflict("Karyawan sudah terhubung dengan user lain")

def create_user(data: Dict[str, Any], *, actor: User) -> User:
    data = dict(data)
    password = data.pop("password")
    level_names = data.pop("roles", None) or [roles.ANGGOTA]
    _check_unique(data)
    with transaction.atomic():
        user = repo.create({**data, "email_verified_at": timezone.now()}, password)
        repo.set_levels(user, _levels(level_names))
        audit_service.log_action(actor=actor.id, action="CREATED", object_type="user", object_id=user.id,
                                 after={"email": user.email, "roles": level_names})
    return user

def update_user(user: User, data: Dict[str, Any], *, actor: User) -> User:
    _check_unique(data, exclude_id=user.id)
    before = {k: str(getattr(user, k)) for k in data if k in EDITABLE}
    with transaction.atomic():
        save_fields(user, data, allowed=EDITABLE)
        audit_service.log_action(actor=actor.id, action="UPDATED", object_type="user", object_id=user.id,
                                 before=before, after={k: str(getattr(user, k)) for k in before})
    return user

def delete_user(user: User, *, actor: User) -> None:
    if not actor.has_role(roles.KETUA):
        raise PermissionDenied("Hanya ketua yang dapat menghapus user")
    if user.id == actor.id:
        raise ValidationError("Tidak dapat menghapus akun sendiri")
    repo.delete(user)
    logger.info("[user] user=%s deleted by %s", user.id, actor.id)

def _levels(names: Iterable[str]):
    names = list(dict.fromkeys(names))
    levels = level_repository.get_by_names(names)
    if len(levels) != len(names):
        raise ValidationError({"roles": ["Beberapa level tidak valid"]})
    return levels

def assign_roles(user: User, names: Iterable[str], *, actor: User) -> User:
    before = sorted(user.role_names)
    levels = _levels(names)
    with transaction.atomic():
        repo.set_levels(user, levels)
        audit_service.log_action(actor=actor.id, action="ROLES_ASSIGNED", object_type="user", object_id=user.id,
                                 before={"roles": before}, after={"roles": sorted(l.level_name for l in levels)})
    return user
