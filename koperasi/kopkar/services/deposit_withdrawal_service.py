# -*- coding: utf-8 -*-
"""
Service cho DepositWithdrawal (penarikan dana deposito).
Giống penarikan tabungan: SUBMITTED → DSP → KETUA → shopkeeper giải ngân →
ketua xác nhận. Khi hoàn tất trừ saldo sukarela và collected_amount của deposito.
"""
from __future__ import annotations
import logging
from decimal import Decimal, ROUND_HALF_UP
from functools import partial
from typing import Any, Dict, Iterable, List

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, DepositApplication, DepositWithdrawal, User
from kopkar.repositories import deposit_repository as repo, savings_repository
from kopkar.repositories.base import lock, save_fields
from kopkar.services import approval_service, audit_service, notification_service, settings_service
from kopkar.services.approval_service import REVIEW_STATUSES, Workflow
from kopkar.utils import roles
from kopkar.utils.numbering import next_number

logger = logging.getLogger(__name__)

S = DepositWithdrawal.Status
OBJECT_TYPE = "deposit_withdrawal"
OPEN_STATUSES = REVIEW_STATUSES + [S.APPROVED_WAITING_DISBURSEMENT, S.DISBURSEMENT_IN_PROGRESS]
WITHDRAWABLE = (DepositApplication.Status.APPROVED, DepositApplication.Status.ACTIVE)


def _notify(role: str, withdrawal: DepositWithdrawal, subject: str, text: str) -> None:
    try:
        notification_service.notify_role(role, subject=subject, text=text, object_type=OBJECT_TYPE, object_id=withdrawal.id)
    except Exception as ex:
        logger.warning("[deposit-withdrawal] notify %s failed: %s", role, ex)


def _on_approved(withdrawal: DepositWithdrawal, actor: User) -> None:
    transaction.on_commit(partial(
        _notify, roles.SHOPKEEPER, withdrawal,
        f"[Penarikan Deposito] {withdrawal.withdrawal_number} siap dicairkan",
        f"Penarikan deposito {withdrawal.withdrawal_number} atas nama {withdrawal.user.name} sebesar "
        f"Rp {int(withdrawal.net_amount):,} menunggu pencairan.",
    ))


DEPOSIT_WITHDRAWAL_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Penarikan deposito",
    model=DepositWithdrawal,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA),
    approved_status=S.APPROVED_WAITING_DISBURSEMENT,
    number_field="withdrawal_number",
    on_approved=_on_approved,
)


# ====== Calculation ======
def _owned_deposit(deposit: DepositApplication, user: User) -> DepositApplication:
    if deposit.user_id != user.id:
        raise PermissionDenied("Anda tidak memiliki akses ke deposito ini")
    if deposit.status not in WITHDRAWABLE:
        raise ValidationError("Hanya deposito yang disetujui atau aktif yang dapat ditarik")
    return deposit

def calculate(deposit: DepositApplication, amount: Decimal) -> Dict[str, Any]:
    """Penalty applies when withdrawing before the maturity date."""
    amount = Decimal(str(amount))
    today = timezone.localdate()
    is_early = deposit.maturity_date is None or today < deposit.maturity_date
    rate = settings_service.get_decimal("deposit_early_withdrawal_penalty_rate") if is_early else Decimal("0")
    penalty = (amount * rate / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return {
        "deposit_number": deposit.deposit_number,
        "withdrawal_amount": amount,
        "available_amount": deposit.collected_amount,
        "maturity_date": deposit.maturity_date,
        "is_early_withdrawal": is_early,
        "penalty_rate": rate,
        "penalty_amount": penalty,
        "net_amount": amount - penalty,
    }

def preview(*, deposit_id: int, user: User, amount: Decimal) -> Dict[str, Any]:
    deposit = _owned_deposit(repo.get_by_id(deposit_id), user)
    return calculate(deposit, amount)


# ====== Create / cancel ======
def create(*, user: User, deposit_id: int, amount: Decimal, bank_account_number: str = "", reason: str = "") -> DepositWithdrawal:
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationError({"withdrawal_amount": ["Jumlah penarikan harus lebih dari 0"]})
    bank_account = bank_account_number or user.bank_account_number or (
        user.employee.bank_account_number if user.employee else ""
    )
    if not bank_account:
        raise ValidationError({"bank_account_number": ["Nomor rekening wajib diisi"]})

    with transaction.atomic():
        deposit = _owned_deposit(lock(DepositApplication, deposit_id), user)
        if amount > deposit.collected_amount:
            raise ValidationError({"withdrawal_amount": [
                f"Jumlah penarikan melebihi dana deposito terkumpul Rp {int(deposit.collected_amount):,}"
            ]})
        if repo.has_open_request(DepositWithdrawal, deposit.id, OPEN_STATUSES):
            raise ValidationError("Masih ada penarikan deposito yang sedang diproses")

        calc = calculate(deposit, amount)
        withdrawal = repo.create_request(DepositWithdrawal, {
            "withdrawal_number": next_number(DepositWithdrawal, "withdrawal_number", "WD"),
            "user": user,
            "deposit": deposit,
            "withdrawal_amount": amount,
            "is_early_withdrawal": calc["is_early_withdrawal"],
            "penalty_rate": calc["penalty_rate"],
            "penalty_amount": calc["penalty_amount"],
            "net_amount": calc["net_amount"],
            "bank_account_number": bank_account,
            "reason": reason or "",
        })
        approval_service.start_review(DEPOSIT_WITHDRAWAL_FLOW, withdrawal, user)
    logger.info("[deposit-withdrawal] %s created for %s by user=%s", withdrawal.withdrawal_number,
                deposit.deposit_number, user.id)
    return withdrawal

def cancel(*, withdrawal_id: int, user: User, reason: str = "") -> DepositWithdrawal:
    return approval_service.cancel(DEPOSIT_WITHDRAWAL_FLOW, withdrawal_id, user, reason, allow_draft=False)


# ====== Approval ======
def process_approval(*, withdrawal_id: int, user: User, decision: str, notes: str = "") -> DepositWithdrawal:
    return approval_service.decide(DEPOSIT_WITHDRAWAL_FLOW, withdrawal_id, user, decision, notes)

def bulk_process_approval(*, withdrawal_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(DEPOSIT_WITHDRAWAL_FLOW, withdrawal_ids, user, decision, notes)


# ====== Disbursement ======
def confirm_disbursement(*, withdrawal_id: int, user: User, notes: str = "") -> DepositWithdrawal:
    with transaction.atomic():
        w = lock(DepositWithdrawal, withdrawal_id)
        if w.status != S.APPROVED_WAITING_DISBURSEMENT:
            raise ValidationError("Penarikan deposito belum siap untuk dicairkan")
        save_fields(w, {"status": S.DISBURSEMENT_IN_PROGRESS, "disbursed_at": timezone.now(), "disbursed_by": user})
        audit_service.log_action(actor=user.id, action="DISBURSEMENT_CONFIRMED", object_type=OBJECT_TYPE, object_id=w.id,
                                 before={"status": S.APPROVED_WAITING_DISBURSEMENT}, after={"status": w.status}, notes=notes)
        transaction.on_commit(partial(
            _notify, roles.KETUA, w,
            f"[Penarikan Deposito] {w.withdrawal_number} menunggu otorisasi",
            f"Pencairan penarikan deposito {w.withdrawal_number} menunggu otorisasi Ketua.",
        ))
    return w

def confirm_authorization(*, withdrawal_id: int, user: User, notes: str = "") -> DepositWithdrawal:
    with transaction.atomic():
        w = lock(DepositWithdrawal, withdrawal_id)
        if w.status != S.DISBURSEMENT_IN_PROGRESS:
            raise ValidationError("Pencairan penarikan deposito belum dikonfirmasi")
        deposit = lock(DepositApplication, w.deposit_id)
        if w.withdrawal_amount > deposit.collected_amount:
            raise ValidationError("Dana deposito terkumpul tidak mencukupi untuk menyelesaikan penarikan")
        account = savings_repository.lock_account(w.user_id)
        if w.withdrawal_amount > account.saldo_sukarela:
            raise ValidationError("Saldo sukarela tidak mencukupi untuk menyelesaikan penarikan")

        savings_repository.add_to_balances(account.id, saldo_sukarela=-w.withdrawal_amount)
        savings_repository.add_entry(account.id, timezone.localdate(),
                                     note=f"Penarikan deposito {w.withdrawal_number}", penarikan=w.withdrawal_amount)
        save_fields(deposit, {"collected_amount": deposit.collected_amount - w.withdrawal_amount})
        now = timezone.now()
        save_fields(w, {"status": S.COMPLETED, "authorized_at": now, "authorized_by": user, "completed_at": now})
        audit_service.log_action(actor=user.id, action="COMPLETED", object_type=OBJECT_TYPE, object_id=w.id,
                                 before={"status": S.DISBURSEMENT_IN_PROGRESS}, after={"status": w.status}, notes=notes)
    return w

def bulk_confirm_disbursement(*, withdrawal_ids: Iterable[int], user: User, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_apply(
        withdrawal_ids, lambda wid: confirm_disbursement(withdrawal_id=wid, user=user, notes=notes),
        describe=lambda w: {"number": w.withdrawal_number},
    )

def bulk_confirm_authorization(*, withdrawal_ids: Iterable[int], user: User, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_apply(
        withdrawal_ids, lambda wid: confirm_authorization(withdrawal_id=wid, user=user, notes=notes),
        describe=lambda w: {"number": w.withdrawal_number},
    )
