# -*- coding: utf-8 -*-
"""
Service cho SavingsWithdrawal (penarikan simpanan sukarela).
Tạo xong là SUBMITTED; approval DSP → KETUA; rồi shopkeeper giải ngân,
ketua xác nhận → COMPLETED (trừ saldo + ghi sổ).
"""
from __future__ import annotations
import logging
from decimal import Decimal, ROUND_HALF_UP
from functools import partial
from typing import Any, Dict, Iterable, List

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, SavingsWithdrawal, User
from kopkar.repositories import deposit_repository, savings_repository as repo
from kopkar.repositories.base import lock, save_fields
from kopkar.services import approval_service, audit_service, notification_service, settings_service
from kopkar.services.approval_service import REVIEW_STATUSES, Workflow
from kopkar.utils import roles
from kopkar.utils.numbering import next_number

logger = logging.getLogger(__name__)

S = SavingsWithdrawal.Status
OBJECT_TYPE = "savings_withdrawal"
OPEN_STATUSES = REVIEW_STATUSES + [S.APPROVED_WAITING_DISBURSEMENT, S.DISBURSEMENT_IN_PROGRESS]


def _notify(role: str, withdrawal: SavingsWithdrawal, subject: str, text: str) -> None:
    try:
        notification_service.notify_role(role, subject=subject, text=text, object_type=OBJECT_TYPE, object_id=withdrawal.id)
    except Exception as ex:
        logger.warning("[withdrawal] notify %s failed: %s", role, ex)


def _on_approved(withdrawal: SavingsWithdrawal, actor: User) -> None:
    transaction.on_commit(partial(
        _notify, roles.SHOPKEEPER, withdrawal,
        f"[Penarikan] {withdrawal.withdrawal_number} siap dicairkan",
        f"Penarikan {withdrawal.withdrawal_number} atas nama {withdrawal.user.name} sebesar "
        f"Rp {int(withdrawal.net_amount):,} menunggu pencairan.",
    ))


WITHDRAWAL_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Penarikan tabungan",
    model=SavingsWithdrawal,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA),
    approved_status=S.APPROVED_WAITING_DISBURSEMENT,
    number_field="withdrawal_number",
    on_approved=_on_approved,
)


# ====== Calculation ======
def calculate(user: User, amount: Decimal) -> Dict[str, Any]:
    """Early penalty applies while the member has a running (unmatured) deposit."""
    amount = Decimal(str(amount))
    has_running = deposit_repository.running_unmatured(user.id, timezone.localdate()).exists()
    rate = settings_service.get_decimal("deposit_early_withdrawal_penalty_rate") if has_running else Decimal("0")
    penalty = (amount * rate / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    account = repo.get_account(user.id)
    return {
        "withdrawal_amount": amount,
        "has_early_deposit_penalty": has_running,
        "early_deposit_penalty_rate": rate,
        "early_deposit_penalty_amount": penalty,
        "net_amount": amount - penalty,
        "saldo_sukarela": account.saldo_sukarela if account else Decimal("0"),
    }


# ====== Create / cancel ======
def create(*, user: User, amount: Decimal, bank_account_number: str = "", reason: str = "") -> SavingsWithdrawal:
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationError({"withdrawal_amount": ["Jumlah penarikan harus lebih dari 0"]})
    bank_account = bank_account_number or user.bank_account_number or (
        user.employee.bank_account_number if user.employee else ""
    )
    if not bank_account:
        raise ValidationError({"bank_account_number": ["Nomor rekening wajib diisi"]})

    with transaction.atomic():
        account = repo.get_account(user.id)
        if account is None:
            raise ValidationError("Anda belum memiliki buku tabungan")
        account = repo.lock_account(user.id)
        if amount > account.saldo_sukarela:
            raise ValidationError({"withdrawal_amount": [
                f"Saldo sukarela tidak mencukupi. Saldo tersedia Rp {int(account.saldo_sukarela):,}"
            ]})
        if repo.has_open_withdrawal(user.id, OPEN_STATUSES):
            raise ValidationError("Masih ada penarikan yang sedang diproses")

        calc = calculate(user, amount)
        withdrawal = repo.create_withdrawal({
            "withdrawal_number": next_number(SavingsWithdrawal, "withdrawal_number", "SW"),
            "user": user,
            "withdrawal_amount": amount,
            "has_early_deposit_penalty": calc["has_early_deposit_penalty"],
            "early_deposit_penalty_rate": calc["early_deposit_penalty_rate"],
            "early_deposit_penalty_amount": calc["early_deposit_penalty_amount"],
            "net_amount": calc["net_amount"],
            "bank_account_number": bank_account,
            "reason": reason or "",
        })
        approval_service.start_review(WITHDRAWAL_FLOW, withdrawal, user)
    return withdrawal

def cancel(*, withdrawal_id: int, user: User, reason: str = "") -> SavingsWithdrawal:
    return approval_service.cancel(WITHDRAWAL_FLOW, withdrawal_id, user, reason, allow_draft=False)


# ====== Approval ======
def process_approval(*, withdrawal_id: int, user: User, decision: str, notes: str = "") -> SavingsWithdrawal:
    return approval_service.decide(WITHDRAWAL_FLOW, withdrawal_id, user, decision, notes)

def bulk_process_approval(*, withdrawal_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(WITHDRAWAL_FLOW, withdrawal_ids, user, decision, notes)


# ====== Disbursement ======
def confirm_disbursement(*, withdrawal_id: int, user: User, notes: str = "") -> SavingsWithdrawal:
    with transaction.atomic():
        w = lock(SavingsWithdrawal, withdrawal_id)
        if w.status != S.APPROVED_WAITING_DISBURSEMENT:
            raise ValidationError("Penarikan belum siap untuk dicairkan")
        save_fields(w, {"status": S.DISBURSEMENT_IN_PROGRESS, "disbursed_at": timezone.now(), "disbursed_by": user})
        audit_service.log_action(actor=user.id, action="DISBURSEMENT_CONFIRMED", object_type=OBJECT_TYPE, object_id=w.id,
                                 before={"status": S.APPROVED_WAITING_DISBURSEMENT}, after={"status": w.status}, notes=notes)
        transaction.on_commit(partial(
            _notify, roles.KETUA, w,
            f"[Penarikan] {w.withdrawal_number} menunggu otorisasi",
            f"Pencairan penarikan {w.withdrawal_number} menunggu otorisasi Ketua.",
        ))
    return w

def confirm_authorization(*, withdrawal_id: int, user: User, notes: str = "") -> SavingsWithdrawal:
    with transaction.atomic():
        w = lock(SavingsWithdrawal, withdrawal_id)
        if w.status != S.DISBURSEMENT_IN_PROGRESS:
            raise ValidationError("Pencairan penarikan belum dikonfirmasi")
        account = repo.lock_account(w.user_id)
        if w.withdrawal_amount > account.saldo_sukarela:
            raise ValidationError("Saldo sukarela tidak mencukupi untuk menyelesaikan penarikan")
        repo.add_to_balances(account.id, saldo_sukarela=-w.withdrawal_amount)
        repo.add_entry(account.id, timezone.localdate(), note=f"Penarikan {w.withdrawal_number}",
                       penarikan=w.withdrawal_amount)
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
