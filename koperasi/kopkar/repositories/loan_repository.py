# -*- coding: utf-8 -*-
"""
Repository layer for LoanApplication (thuần DB).
KHÔNG chứa rule nghiệp vụ; service quyết định.
"""
from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import QuerySet, Sum, Q
from django.utils import timezone

from kopkar.models import (
    LoanApplication, LoanInstallment, LoanDisbursement, LoanAuthorization,
)


# ============================
# Base queries
# ============================
def base_qs() -> QuerySet[LoanApplication]:
    return LoanApplication.objects.select_related(
        "user", "user__employee", "cash_detail", "reimburse_detail", "online_detail", "phone_detail",
    )

def get_by_id(loan_id: int) -> LoanApplication:
    return base_qs().get(id=loan_id)

def filter_loans(filters: Dict[str, Any]) -> QuerySet[LoanApplication]:
    qs = base_qs()
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (types := filters.get("loan_type")):
        qs = qs.filter(loan_type__in=types)
    if (steps := filters.get("current_step")):
        qs = qs.filter(current_step__in=steps)
    if (user_id := filters.get("user_id")):
        qs = qs.filter(user_id=user_id)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(
            Q(loan_number__icontains=qtext) | Q(user__name__icontains=qtext)
            | Q(user__employee__employee_number__icontains=qtext)
        )
    return qs

def installments(loan_id: int) -> QuerySet[LoanInstallment]:
    return LoanInstallment.objects.filter(loan_id=loan_id).order_by("installment_number")

def paid_total(loan_id: int) -> Decimal:
    agg = LoanInstallment.objects.filter(loan_id=loan_id, is_paid=True).aggregate(total=Sum("amount"))
    return agg["total"] or Decimal("0")

def unpaid_installments_of(user_id: int) -> QuerySet[LoanInstallment]:
    return (
        LoanInstallment.objects.select_related("loan")
        .filter(loan__user_id=user_id, loan__status=LoanApplication.Status.DISBURSED, is_paid=False)
        .order_by("due_date", "id")
    )

def due_installments(payroll_date: date) -> QuerySet[LoanInstallment]:
    """Unpaid installments of running loans due on or before `payroll_date` (arrears included)."""
    return (
        LoanInstallment.objects.select_related("loan")
        .filter(is_paid=False, due_date__lte=payroll_date,
                loan__status=LoanApplication.Status.DISBURSED)
        .order_by("loan_id", "installment_number")
    )


# ============================
# Mutations (thuần DB)
# ============================
@transaction.atomic
def create(data: Dict[str, Any]) -> LoanApplication:
    return LoanApplication.objects.create(**data)

@transaction.atomic
def delete(obj: LoanApplication) -> None:
    obj.delete()

@transaction.atomic
def create_disbursement(loan: LoanApplication, processed_by_id: int, on: date, notes: str = "") -> LoanDisbursement:
    return LoanDisbursement.objects.create(
        loan=loan, processed_by_id=processed_by_id, disbursement_date=on, notes=notes or "",
    )

@transaction.atomic
def create_authorization(loan: LoanApplication, authorized_by_id: int, on: date, notes: str = "") -> LoanAuthorization:
    return LoanAuthorization.objects.create(
        loan=loan, authorized_by_id=authorized_by_id, authorization_date=on, notes=notes or "",
    )

@transaction.atomic
def create_installments(loan: LoanApplication, rows: List[Dict[str, Any]]) -> List[LoanInstallment]:
    return LoanInstallment.objects.bulk_create([LoanInstallment(loan=loan, **r) for r in rows])

@transaction.atomic
def mark_installments_paid(qs: QuerySet[LoanInstallment], payroll_period_id: Optional[int] = None) -> int:
    return qs.filter(is_paid=False).update(
        is_paid=True, paid_at=timezone.now(), payroll_period_id=payroll_period_id, updated_at=timezone.now(),
    )

def installments_by_ids(ids: List[int]) -> QuerySet[LoanInstallment]:
    return LoanInstallment.objects.filter(id__in=ids)
