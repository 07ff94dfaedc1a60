# -*- coding: utf-8 -*-
"""
Repository cho DepositApplication + deposit options (thuần DB).
"""
from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from django.db import transaction
from django.db.models import QuerySet, Q, Sum

from kopkar.models import (
    DepositApplication, DepositAmountOption, DepositChangeRequest, DepositTenorOption, DepositWithdrawal,
)


# ============== Deposit applications ==============
def base_qs() -> QuerySet[DepositApplication]:
    return DepositApplication.objects.select_related("user", "user__employee")

def get_by_id(deposit_id: int) -> DepositApplication:
    return base_qs().get(id=deposit_id)

def filter_deposits(filters: Dict[str, Any]) -> QuerySet[DepositApplication]:
    qs = base_qs()
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (steps := filters.get("current_step")):
        qs = qs.filter(current_step__in=steps)
    if (user_id := filters.get("user_id")):
        qs = qs.filter(user_id=user_id)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(Q(deposit_number__icontains=qtext) | Q(user__name__icontains=qtext))
    return qs

def collectible(cutoff: date) -> QuerySet[DepositApplication]:
    """APPROVED/ACTIVE deposits approved on or before the payroll cutoff."""
    return (
        DepositApplication.objects.select_for_update()
        .filter(
            status__in=[DepositApplication.Status.APPROVED, DepositApplication.Status.ACTIVE],
            approved_at__date__lte=cutoff,
        )
        .order_by("id")
    )

def running_unmatured(user_id: int, today: date) -> QuerySet[DepositApplication]:
    return DepositApplication.objects.filter(
        user_id=user_id,
        status__in=[DepositApplication.Status.APPROVED, DepositApplication.Status.ACTIVE],
    ).filter(Q(maturity_date__isnull=True) | Q(maturity_date__gt=today))

@transaction.atomic
def create(data: Dict[str, Any]) -> DepositApplication:
    return DepositApplication.objects.create(**data)

@transaction.atomic
def delete(obj: DepositApplication) -> None:
    obj.delete()


# ============== Options ==============
def list_amount_options(active_only: bool = False) -> QuerySet[DepositAmountOption]:
    qs = DepositAmountOption.objects.all()
    return qs.filter(is_active=True) if active_only else qs

def list_tenor_options(active_only: bool = False) -> QuerySet[DepositTenorOption]:
    qs = DepositTenorOption.objects.all()
    return qs.filter(is_active=True) if active_only else qs

def get_active_amount(code: str) -> Optional[DepositAmountOption]:
    return DepositAmountOption.objects.filter(code=code, is_active=True).first()

def get_active_tenor(code: str) -> Optional[DepositTenorOption]:
    return DepositTenorOption.objects.filter(code=code, is_active=True).first()

@transaction.atomic
def create_option(model, data: Dict[str, Any]):
    return model.objects.create(**data)

@transaction.atomic
def delete_option(obj) -> None:
    obj.delete()


# ============== Withdrawals / change requests ==============
def withdrawal_qs() -> QuerySet[DepositWithdrawal]:
    return DepositWithdrawal.objects.select_related("user", "user__employee", "deposit")

def get_withdrawal(withdrawal_id: int) -> DepositWithdrawal:
    return withdrawal_qs().get(id=withdrawal_id)

def change_qs() -> QuerySet[DepositChangeRequest]:
    return DepositChangeRequest.objects.select_related("user", "user__employee", "deposit")

def get_change(change_id: int) -> DepositChangeRequest:
    return change_qs().get(id=change_id)

def filter_requests(qs: QuerySet, number_field: str, filters: Dict[str, Any]) -> QuerySet:
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (steps := filters.get("current_step")):
        qs = qs.filter(current_step__in=steps)
    if (user_id := filters.get("user_id")):
        qs = qs.filter(user_id=user_id)
    if (deposit_id := filters.get("deposit_id")):
        qs = qs.filter(deposit_id=deposit_id)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(
            Q(**{f"{number_field}__icontains": qtext}) | Q(deposit__deposit_number__icontains=qtext)
            | Q(user__name__icontains=qtext)
        )
    return qs

def has_open_request(model, deposit_id: int, open_statuses: Sequence[str]) -> bool:
    return model.objects.filter(deposit_id=deposit_id, status__in=open_statuses).exists()

@transaction.atomic
def create_request(model, data: Dict[str, Any]):
    return model.objects.create(**data)

def active_total(user_id: int) -> Decimal:
    agg = DepositApplication.objects.filter(
        user_id=user_id, status=DepositApplication.Status.ACTIVE,
    ).aggregate(total=Sum("amount_value"))
    return agg["total"] or Decimal("0")
