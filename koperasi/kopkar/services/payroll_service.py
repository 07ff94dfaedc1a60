# -*- coding: utf-8 -*-
"""
Payroll bulanan: satu transaksi per periode.

Urutan posting (per akun, satu baris ledger per periode):
  1. iuran pendaftaran (simpanan pokok) anggota baru
  2. iuran bulanan (simpanan wajib)
  3. setoran deposito (simpanan sukarela)
  4. angsuran pinjaman jatuh tempo
  5. bunga bulanan atas total simpanan
"""
from __future__ import annotations
import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from kopkar.models import LoanApplication, PayrollPeriod, SavingsAccount, SavingsTransaction, User
from kopkar.repositories import (
    deposit_repository, loan_repository, member_repository, payroll_repository as repo, savings_repository,
)
from kopkar.repositories.base import lock, save_fields
from kopkar.services import audit_service, deposit_service, loan_service, member_application_service, settings_service
from kopkar.utils.dates import clamp_day, cutoff_window
from kopkar.utils.exceptions import Conflict

logger = logging.getLogger(__name__)

OBJECT_TYPE = "payroll_period"
MONTH_NAMES = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)


def period_name(month: int, year: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"

def _validate_period(month: int, year: int) -> None:
    errors = {}
    if not 1 <= int(month) <= 12:
        errors["month"] = ["Bulan harus 1-12"]
    if not 2000 <= int(year) <= 2100:
        errors["year"] = ["Tahun tidak valid"]
    if errors:
        raise ValidationError(errors)


# ====== Read ======
def list_periods() -> QuerySet[PayrollPeriod]:
    return repo.list_periods()

def get_period(period_id: int) -> PayrollPeriod:
    return repo.get_by_id(period_id)

def period_transactions(period_id: int) -> QuerySet[SavingsTransaction]:
    return repo.transactions(period_id)

def status(month: int, year: int) -> Dict[str, Any]:
    """Window and processing state of a period (used before running payroll)."""
    _validate_period(month, year)
    start, end = cutoff_window(month, year, settings_service.get_int("cooperative_cutoff_date"))
    period = repo.find(month, year)
    return {
        "month": month,
        "year": year,
        "name": period_name(month, year),
        "start_date": start,
        "end_date": end,
        "payroll_date": clamp_day(year, month, settings_service.get_int("cooperative_payroll_date")),
        "is_processed": bool(period and period.is_processed),
        "processed_at": period.processed_at if period else None,
        "total_amount": period.total_amount if period else Decimal("0"),
    }


# ====== Process ======
def process_payroll(*, month: int, year: int, actor: Optional[User] = None) -> PayrollPeriod:
    _validate_period(month, year)
    cutoff = settings_service.get_int("cooperative_cutoff_date")
    payroll_day = settings_service.get_int("cooperative_payroll_date")
    start, end = cutoff_window(month, year, cutoff)
    on = clamp_day(year, month, payroll_day)

    with transaction.atomic():
        period = repo.lock_or_create(month, year, {
            "name": period_name(month, year), "start_date": start, "end_date": end,
        })
        if period.is_processed:
            raise Conflict(f"Payroll {period.name} sudah diproses")

        summary: Dict[str, Any] = defaultdict(lambda: Decimal("0"))
        counts: Dict[str, int] = defaultdict(int)

        # 1. entrance fee
        for application in member_repository.unpaid_approved():
            amount = member_application_service.entrance_fee_due(application)
            if amount <= 0:
                continue
            account = savings_repository.get_or_create_account(application.user_id)
            savings_repository.add_period_entry(account.id, period.id, on, iuran_pendaftaran=amount)
            savings_repository.add_to_balances(account.id, saldo_pokok=amount)
            member_application_service.record_entrance_payment(application, amount)
            summary["iuran_pendaftaran"] += amount
            counts["iuran_pendaftaran"] += 1

        # 2. monthly fee
        monthly_fee = settings_service.get_decimal("monthly_membership_fee")
        accounts: List[SavingsAccount] = list(savings_repository.lock_member_accounts())
        if monthly_fee > 0:
            for account in accounts:
                savings_repository.add_period_entry(account.id, period.id, on, iuran_bulanan=monthly_fee)
                savings_repository.add_to_balances(account.id, saldo_wajib=monthly_fee)
                summary["iuran_bulanan"] += monthly_fee
                counts["iuran_bulanan"] += 1

        # 3. deposits
        for deposit in deposit_repository.collectible(end):
            account = savings_repository.get_or_create_account(deposit.user_id)
            savings_repository.add_period_entry(account.id, period.id, on, tabungan_deposito=deposit.amount_value)
            savings_repository.add_to_balances(account.id, saldo_sukarela=deposit.amount_value)
            deposit_service.collect_installment(deposit, on)
            summary["tabungan_deposito"] += deposit.amount_value
            counts["tabungan_deposito"] += 1

        # 4. loan installments
        due = list(loan_repository.due_installments(on))
        loan_ids = sorted({inst.loan_id for inst in due})
        for inst in due:
            summary["angsuran_pinjaman"] += inst.amount
        counts["angsuran_pinjaman"] = len(due)
        loan_repository.mark_installments_paid(
            loan_repository.installments_by_ids([inst.id for inst in due]), payroll_period_id=period.id,
        )
        completed = 0
        for loan_id in loan_ids:
            loan = lock(LoanApplication, loan_id)
            if loan_service.complete_if_paid(loan, actor.id if actor else None):
                completed += 1
        counts["pinjaman_lunas"] = completed

        # 5. interest on savings
        rate = settings_service.get_decimal("deposit_interest_rate")
        if rate > 0:
            for account in savings_repository.accounts_by_ids([a.id for a in accounts]):
                base = account.saldo_pokok + account.saldo_wajib + account.saldo_sukarela
                interest = (base * rate / Decimal("100") / Decimal("12")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
                if interest <= 0:
                    continue
                savings_repository.add_period_entry(account.id, period.id, on, bunga=interest, interest_rate=rate)
                savings_repository.add_to_balances(account.id, bunga_deposito=interest)
                summary["bunga"] += interest
                counts["bunga"] += 1

        collected = summary["iuran_pendaftaran"] + summary["iuran_bulanan"] + summary["tabungan_deposito"] + summary["angsuran_pinjaman"]
        result = {k: str(v) for k, v in summary.items()}
        result["counts"] = dict(counts)
        save_fields(period, {
            "is_processed": True,
            "processed_at": timezone.now(),
            "processed_by": actor,
            "total_amount": collected,
            "summary": result,
        })
        audit_service.log_action(actor=actor.id if actor else None, action="PROCESSED", object_type=OBJECT_TYPE,
                                 object_id=period.id, after=result)
    logger.info("[payroll] %s processed: total=%s counts=%s", period.name, collected, dict(counts))
    return period
