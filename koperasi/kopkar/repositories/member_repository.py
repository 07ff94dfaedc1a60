# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Optional, Sequence

from django.db import transaction
from django.db.models import QuerySet, Q

from kopkar.models import MemberApplication, User


def base_qs() -> QuerySet[MemberApplication]:
    return MemberApplication.objects.select_related("user", "user__employee", "department")

def get_by_id(app_id: int) -> MemberApplication:
    return base_qs().get(id=app_id)

def latest_for_user(user_id: int) -> Optional[MemberApplication]:
    return base_qs().filter(user_id=user_id).order_by("-created_at", "-id").first()

def exists_for_user(user_id: int, statuses: Sequence[str]) -> bool:
    return MemberApplication.objects.filter(user_id=user_id, status__in=statuses).exists()

def filter_applications(filters: Dict[str, Any]) -> QuerySet[MemberApplication]:
    qs = base_qs()
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (steps := filters.get("current_step")):
        qs = qs.filter(current_step__in=steps)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(Q(user__name__icontains=qtext) | Q(nik__icontains=qtext) | Q(user__email__icontains=qtext))
    return qs

def _identity_taken(field: str, value: str, exclude_user_id: int, open_statuses: Sequence[str]) -> bool:
    """`value` held by another user, or by another user's open/approved application."""
    if User.objects.filter(**{field: value}).exclude(id=exclude_user_id).exists():
        return True
    return (
        MemberApplication.objects.filter(**{field: value}, status__in=list(open_statuses))
        .exclude(user_id=exclude_user_id)
        .exists()
    )

def nik_taken(nik: str, exclude_user_id: int, open_statuses: Sequence[str] = ()) -> bool:
    return _identity_taken("nik", nik, exclude_user_id, open_statuses)

def npwp_taken(npwp: str, exclude_user_id: int, open_statuses: Sequence[str] = ()) -> bool:
    return _identity_taken("npwp", npwp, exclude_user_id, open_statuses)

def unpaid_approved() -> QuerySet[MemberApplication]:
    return (
        MemberApplication.objects.select_for_update()
        .filter(status=MemberApplication.Status.APPROVED, is_paid_off=False)
        .order_by("id")
    )

@transaction.atomic
def create(data: Dict[str, Any]) -> MemberApplication:
    return MemberApplication.objects.create(**data)
