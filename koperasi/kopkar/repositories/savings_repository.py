# -*- coding: utf-8 -*-
"""
Repository cho SavingsAccount / SavingsTransaction / SavingsWithdrawal (thuần DB).
"""
from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from django.db import transaction
from django.db.models import F, QuerySet, Q, Sum
from django.db.models.functions import TruncMonth

from kopkar.models import SavingsAccount, SavingsTransaction, SavingsWithdrawal

LEDGER_COLUMNS = ("iuran_pendaftaran", "iuran_bulanan", "tabungan_deposito", "shu", "penarikan", "bunga")


# ============== Accounts ==============
def account_qs() -> QuerySet[SavingsAccount]:
    return SavingsAccount.objects.select_related("user", "user__employee", "user__employee__department")

def get_account(user_id: int) -> Optional[SavingsAccount]:
    return account_qs().filter(user_id=user_id).first()

def filter_accounts(filters: Dict[str, Any]) -> QuerySet[SavingsAccount]:
    qs = account_qs()
    if (dept := filters.get("department_id")):
        qs = qs.filter(user__employee__department_id=dept)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(
            Q(user__name__icontains=qtext) | Q(user__email__icontains=qtext)
            | Q(user__employee__employee_number__icontains=qtext)
        )
    return qs

def lock_account(user_id: int) -> SavingsAccount:
    return SavingsAccount.objects.select_for_update().get(user_id=user_id)

def lock_member_accounts() -> QuerySet[SavingsAccount]:
    return (
        SavingsAccount.objects.select_for_update()
        .filter(user__member_verified=True, user__is_active=True)
        .order_by("id")
    )

def accounts_by_ids(ids: Sequence[int]) -> QuerySet[SavingsAccount]:
    return SavingsAccount.objects.filter(id__in=list(ids)).order_by("id")

@transaction.atomic
def get_or_create_account(user_id: int) -> SavingsAccount:
    acc, _ = SavingsAccount.objects.get_or_create(user_id=user_id)
    return acc

@transaction.atomic
def add_to_balances(account_id: int, **deltas: Decimal) -> None:
    """Atomic F() increments; negative deltas decrement."""
    SavingsAccount.objects.filter(id=account_id).update(**{k: F(k) + v for k, v in deltas.items() if v})


# ============== Ledger ==============
def transactions_for(account_id: int, filters: Optional[Dict[str, Any]] = None) -> QuerySet[SavingsTransaction]:
    qs = SavingsTransaction.objects.filter(account_id=account_id).select_related("payroll_period")
    filters = filters or {}
    if (d_from := filters.get("date_from")):
        qs = qs.filter(transaction_date__gte=d_from)
    if (d_to := filters.get("date_to")):
        qs = qs.filter(transaction_date__lte=d_to)
    if (period := filters.get("payroll_period_id")):
        qs = qs.filter(payroll_period_id=period)
    return qs

def totals(qs: QuerySet[SavingsTransaction]) -> Dict[str, Decimal]:
    agg = qs.aggregate(**{c: Sum(c) for c in LEDGER_COLUMNS})
    return {c: agg[c] or Decimal("0") for c in LEDGER_COLUMNS}

@transaction.atomic
def add_period_entry(account_id: int, period_id: int, on: date, **amounts: Decimal) -> SavingsTransaction:
    """Upsert the ledger row of (account, payroll period), accumulating column amounts."""
    tx, _ = SavingsTransaction.objects.select_for_update().get_or_create(
        account_id=account_id, payroll_period_id=period_id, defaults={"transaction_date": on},
    )
    fields = []
    for col, val in amounts.items():
        if col == "interest_rate":
            tx.interest_rate = val
        else:
            setattr(tx, col, getattr(tx, col) + val)
        fields.append(col)
    if fields:
        tx.save(update_fields=fields + ["updated_at"])
    return tx

@transaction.atomic
def add_entry(account_id: int, on: date, note: str = "", **amounts: Decimal) -> SavingsTransaction:
    return SavingsTransaction.objects.create(account_id=account_id, transaction_date=on, note=note, **amounts)

def monthly_totals(account_id: int, since: date) -> List[Dict[str, Any]]:
    """Ledger column sums per month, oldest first."""
    return list(
        SavingsTransaction.objects.filter(account_id=account_id, transaction_date__gte=since)
        .annotate(month=TruncMonth("transaction_date"))
        .values("month")
        .annotate(**{f"total_{c}": Sum(c) for c in LEDGER_COLUMNS})
        .order_by("month")
    )

def latest_transaction_id(account_id: int) -> Optional[int]:
    return SavingsTransaction.objects.filter(account_id=account_id).order_by("-id").values_list("id", flat=True).first()


# ============== Withdrawals ==============
def withdrawal_qs() -> QuerySet[SavingsWithdrawal]:
    return SavingsWithdrawal.objects.select_related("user", "user__employee")

def get_withdrawal(withdrawal_id: int) -> SavingsWithdrawal:
    return withdrawal_qs().get(id=withdrawal_id)

def list_my_withdrawals(user_id: int) -> QuerySet[SavingsWithdrawal]:
    return withdrawal_qs().filter(user_id=user_id)

def filter_withdrawals(filters: Dict[str, Any]) -> QuerySet[SavingsWithdrawal]:
    qs = withdrawal_qs()
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (steps := filters.get("current_step")):
        qs = qs.filter(current_step__in=steps)
    if (qtext := (filters.get("q") or "").strip()):
        qs = qs.filter(Q(withdrawal_number__icontains=qtext) | Q(user__name__icontains=qtext))
    return qs

def has_open_withdrawal(user_id: int, open_statuses: Sequence[str]) -> bool:
    return SavingsWithdrawal.objects.filter(user_id=user_id, status__in=open_statuses).exists()

@transaction.atomic
def create_withdrawal(data: Dict[str, Any]) -> SavingsWithdrawal:
    return SavingsWithdrawal.objects.create(**data)
