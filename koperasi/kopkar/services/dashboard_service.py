# -*- coding: utf-8 -*-
"""
Dashboard ringkasan cho user đang đăng nhập: saldo, deposito aktif, sisa
pinjaman, tagihan berikutnya, aktivitas, grafik 6 bulan, transaksi terakhir.
"""
from __future__ import annotations
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.core.cache import cache
from django.db.models import Sum
from django.utils import timezone

from kopkar.models import User
from kopkar.repositories import deposit_repository, loan_repository, savings_repository
from kopkar.services import (
    approval_service, deposit_change_service, deposit_service, deposit_withdrawal_service, loan_service,
    member_application_service, repayment_service, savings_withdrawal_service,
)
from kopkar.utils import roles
from kopkar.utils.dates import add_months

logger = logging.getLogger(__name__)

CHART_MONTHS = 6
CHART_TTL = 600
ACTIVITY_LIMIT = 10
RECENT_TX_LIMIT = 5
DASHBOARD_APPROVER_ROLES = (roles.DIVISI_SIMPAN_PINJAM, roles.KETUA, roles.PENGAWAS, roles.SHOPKEEPER)
INCOME_COLUMNS = ("iuran_pendaftaran", "iuran_bulanan", "tabungan_deposito", "shu", "bunga")
SETTLED_STATUSES = ("APPROVED", "ACTIVE", "DISBURSED", "COMPLETED", "REJECTED", "CANCELLED")

APPROVER_FLOWS = (
    loan_service.LOAN_FLOW,
    deposit_service.DEPOSIT_FLOW,
    savings_withdrawal_service.WITHDRAWAL_FLOW,
    deposit_withdrawal_service.DEPOSIT_WITHDRAWAL_FLOW,
    deposit_change_service.DEPOSIT_CHANGE_FLOW,
    repayment_service.REPAYMENT_FLOW,
    member_application_service.MEMBER_FLOW,
)
MEMBER_FLOWS = APPROVER_FLOWS[:-1]
# flow -> status waiting for the shopkeeper
DISBURSEMENT_QUEUES = (
    (loan_service.LOAN_FLOW, "APPROVED_PENDING_DISBURSEMENT"),
    (savings_withdrawal_service.WITHDRAWAL_FLOW, "APPROVED_WAITING_DISBURSEMENT"),
    (deposit_withdrawal_service.DEPOSIT_WITHDRAWAL_FLOW, "APPROVED_WAITING_DISBURSEMENT"),
)


# ====== Sections ======
def financial_summary(user: User, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or timezone.localdate()
    account = savings_repository.get_account(user.id)
    total_savings = (
        account.saldo_pokok + account.saldo_wajib + account.saldo_sukarela if account else Decimal("0")
    )
    unpaid = loan_repository.unpaid_installments_of(user.id)
    remaining = unpaid.aggregate(total=Sum("amount"))["total"] or Decimal("0")
    nxt = unpaid.first()
    next_bill = None
    if nxt is not None:
        next_bill = {
            "loan_number": nxt.loan.loan_number,
            "installment_number": nxt.installment_number,
            "due_date": nxt.due_date,
            "amount": nxt.amount,
            "days_until_due": (nxt.due_date - today).days,
        }
    return {
        "total_savings": total_savings,
        "active_deposits": deposit_repository.active_total(user.id),
        "remaining_loan": remaining,
        "next_bill": next_bill,
    }

def _activity(flow, obj) -> Dict[str, Any]:
    owner = getattr(obj, flow.owner_field, None)
    return {
        "object_type": flow.object_type,
        "label": flow.label,
        "id": obj.pk,
        "number": flow.number(obj),
        "owner": getattr(owner, "name", ""),
        "status": obj.status,
        "status_display": obj.get_status_display(),
        "current_step": obj.current_step,
        "updated_at": obj.updated_at,
    }

def activities(user: User, is_approver: bool) -> List[Dict[str, Any]]:
    """Approvers see others' items at their steps; members see their own unsettled items."""
    items: List[Dict[str, Any]] = []
    if is_approver:
        for flow in APPROVER_FLOWS:
            qs = flow.model.objects.select_related(flow.owner_field).exclude(**{f"{flow.owner_field}_id": user.id})
            qs = approval_service.pending_for(qs, user).order_by("-updated_at")[:ACTIVITY_LIMIT]
            items.extend(_activity(flow, obj) for obj in qs)
        if user.has_role(roles.SHOPKEEPER):
            for flow, status in DISBURSEMENT_QUEUES:
                qs = flow.model.objects.select_related(flow.owner_field).filter(status=status)
                items.extend(_activity(flow, obj) for obj in qs.order_by("-updated_at")[:ACTIVITY_LIMIT])
    else:
        for flow in MEMBER_FLOWS:
            qs = (
                flow.model.objects.select_related(flow.owner_field)
                .filter(**{f"{flow.owner_field}_id": user.id})
                .exclude(status__in=SETTLED_STATUSES)
                .order_by("-updated_at")[:ACTIVITY_LIMIT]
            )
            items.extend(_activity(flow, obj) for obj in qs)
    items.sort(key=lambda item: item["updated_at"], reverse=True)
    return items[:ACTIVITY_LIMIT]

def chart_data(account_id: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Income vs penarikan of the last CHART_MONTHS months (current included).
    Cached per account; the key carries the latest ledger id so any new
    transaction invalidates it.
    """
    today = today or timezone.localdate()
    latest = savings_repository.latest_transaction_id(account_id)
    key = f"dashboard:chart:{account_id}:{latest}:{today:%Y%m}"
    cached = cache.get(key)
    if cached is not None:
        return cached
    logger.debug("[dashboard] chart cache miss account=%s", account_id)

    first = add_months(today.replace(day=1), -(CHART_MONTHS - 1))
    rows = {row["month"]: row for row in savings_repository.monthly_totals(account_id, first)}
    data = []
    for i in range(CHART_MONTHS):
        month = add_months(first, i)
        row = rows.get(month, {})
        income = sum((row.get(f"total_{c}") or Decimal("0") for c in INCOME_COLUMNS), Decimal("0"))
        data.append({
            "month": f"{month:%Y-%m}",
            "income": income,
            "expense": row.get("total_penarikan") or Decimal("0"),
        })
    cache.set(key, data, CHART_TTL)
    return data


# ====== Summary ======
def summary(user: User) -> Dict[str, Any]:
    approver_roles = [r for r in user.role_names if r in DASHBOARD_APPROVER_ROLES]
    is_approver = bool(approver_roles)
    account = savings_repository.get_account(user.id)
    employee = user.employee
    return {
        "greeting": {
            "name": user.name,
            "employee_number": employee.employee_number if employee else None,
        },
        "financial_summary": financial_summary(user),
        "activities": activities(user, is_approver),
        "chart_data": chart_data(account.id) if account else [],
        "recent_transactions": list(savings_repository.transactions_for(account.id)[:RECENT_TX_LIMIT]) if account else [],
        "is_approver": is_approver,
        "approver_roles": approver_roles,
    }
