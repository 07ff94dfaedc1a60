# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from django.db import transaction
from django.db.models import QuerySet, Q

from kopkar.models import User, Level


def base_qs() -> QuerySet[User]:
    return User.objects.select_related("employee", "employee__department", "employee__golongan").prefetch_related("levels")

def get_by_id(user_id: int) -> Optional[User]:
    return base_qs().filter(id=user_id).first()

def get_by_email(email: str) -> Optional[User]:
    return User.objects.filter(email__iexact=email).first()

def get_by_login(identifier: str) -> Optional[User]:
    """Login accepts email or NIK."""
    return User.objects.filter(Q(email__iexact=identifier) | Q(nik=identifier)).first()

def get_by_token(field: str, token: str) -> Optional[User]:
    if not token:
        return None
    return User.objects.filter(**{field: token}).first()

def filter_users(filters: Dict[str, Any]) -> QuerySet[User]:
    qs = base_qs()
    if (role := filters.get("role")):
        qs = qs.filter(levels__level_name=role)
    if (member := filters.get("member_verified")) is not None:
        qs = qs.filter(member_verified=member)
    if (dept := filters.get("department_id")):
        qs = qs.filter(employee__department_id=dept)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(
            Q(name__icontains=qtext) | Q(email__icontains=qtext) | Q(nik__icontains=qtext)
            | Q(employee__employee_number__icontains=qtext)
        )
    return qs.distinct()

def email_taken(email: str, exclude_id: Optional[int] = None) -> bool:
    qs = User.objects.filter(email__iexact=email)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()

def nik_taken(nik: str, exclude_id: Optional[int] = None) -> bool:
    qs = User.objects.filter(nik=nik)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()

def employee_linked(employee_id: int, exclude_id: Optional[int] = None) -> bool:
    qs = User.objects.filter(employee_id=employee_id)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()

@transaction.atomic
def create(data: Dict[str, Any], raw_password: str) -> User:
    user = User(**data)
    user.set_password(raw_password)
    user.save()
    return user

@transaction.atomic
def set_levels(user: User, levels: Iterable[Level]) -> User:
    user.levels.set(list(levels))
    user.forget_roles()
    return user

@transaction.atomic
def add_level(user: User, level: Level) -> User:
    user.levels.add(level)
    user.forget_roles()
    return user

@transaction.atomic
def delete(obj: User) -> None:
    obj.delete()

@transaction.atomic
def remove_level(user: User, level: Level) -> User:
    user.levels.remove(level)
    user.forget_roles()
    return user
