# -*- coding: utf-8 -*-
"""
Service cho DepositChangeRequest (đổi setoran / tenor của deposito đang chạy).
Draft → submit → DSP → KETUA. Khi APPROVED: cập nhật deposito, tính lại
maturity + projection, trừ biaya admin từ saldo sukarela.
"""
from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, DepositApplication, DepositChangeRequest, User
from kopkar.repositories import deposit_repository as repo, savings_repository
from kopkar.repositories.base import lock, save_fields
from kopkar.services import approval_service, audit_service, settings_service
from kopkar.services.approval_service import DRAFT, REVIEW_STATUSES, Workflow
from kopkar.services.deposit_option_service import calculate_return
from kopkar.utils.dates import add_months
from kopkar.utils.numbering import next_number

logger = logging.getLogger(__name__)

S = DepositChangeRequest.Status
T = DepositChangeRequest.ChangeType
OBJECT_TYPE = "deposit_change"
OPEN_STATUSES = [DRAFT] + REVIEW_STATUSES
CHANGEABLE = (DepositApplication.Status.APPROVED, DepositApplication.Status.ACTIVE)


def _on_approved(change: DepositChangeRequest, actor: User) -> None:
    deposit = lock(DepositApplication, change.deposit_id)
    if deposit.status not in CHANGEABLE:
        raise ValidationError("Deposito sudah tidak aktif, perubahan tidak dapat diterapkan")
    if change.new_tenor_months <= deposit.installment_count:
        raise ValidationError("Tenor baru harus lebih besar dari jumlah setoran yang sudah berjalan")

    projection = calculate_return(
        change.new_amount_value, change.new_tenor_months, deposit.interest_rate,
        settings_service.get_value("deposit_calculation_method"),
    )
    before = {"amount_value": str(deposit.amount_value), "tenor_months": deposit.tenor_months}
    patch: Dict[str, Any] = {
        "amount_code": change.new_amount_code,
        "amount_value": change.new_amount_value,
        "tenor_code": change.new_tenor_code,
        "tenor_months": change.new_tenor_months,
        "projected_interest": projection["projected_interest"],
        "total_return": projection["total_return"],
    }
    if deposit.activated_at:
        patch["maturity_date"] = add_months(deposit.activated_at, change.new_tenor_months)
    save_fields(deposit, patch)

    if change.admin_fee > 0:
        if savings_repository.get_account(change.user_id) is None:
            raise ValidationError("Anggota belum memiliki buku tabungan")
        account = savings_repository.lock_account(change.user_id)
        if change.admin_fee > account.saldo_sukarela:
            raise ValidationError("Saldo sukarela tidak mencukupi untuk biaya admin perubahan deposito")
        savings_repository.add_to_balances(account.id, saldo_sukarela=-change.admin_fee)
        savings_repository.add_entry(account.id, timezone.localdate(),
                                     note=f"Biaya admin perubahan {change.change_number}", penarikan=change.admin_fee)

    audit_service.log_action(
        actor=actor.id, action="DEPOSIT_CHANGED", object_type="deposit", object_id=deposit.id,
        before=before, after={"amount_value": str(deposit.amount_value), "tenor_months": deposit.tenor_months},
        notes=change.change_number,
    )
    logger.info("[deposit-change] %s applied to %s by user=%s", change.change_number, deposit.deposit_number, actor.id)


DEPOSIT_CHANGE_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Perubahan deposito",
    model=DepositChangeRequest,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA),
    approved_status=S.APPROVED,
    number_field="change_number",
    on_approved=_on_approved,
)


# ====== Helpers ======
def _changeable_deposit(deposit: DepositApplication, user: User) -> DepositApplication:
    if deposit.user_id != user.id:
        raise PermissionDenied("Anda tidak memiliki akses ke deposito ini")
    if deposit.status not in CHANGEABLE:
        raise ValidationError("Hanya deposito yang disetujui atau aktif yang dapat diubah")
    return deposit

def _resolve_change(deposit: DepositApplication, amount_code: Optional[str], tenor_code: Optional[str]) -> Dict[str, Any]:
    """New option values + change_type; missing codes keep the current value."""
    new_amount_code, new_amount_value = deposit.amount_code, deposit.amount_value
    new_tenor_code, new_tenor_months = deposit.tenor_code, deposit.tenor_months
    if amount_code:
        option = repo.get_active_amount(amount_code)
        if option is None:
            raise ValidationError({"new_amount_code": ["Pilihan jumlah deposito tidak valid atau tidak aktif"]})
        new_amount_code, new_amount_value = option.code, option.amount
    if tenor_code:
        option = repo.get_active_tenor(tenor_code)
        if option is None:
            raise ValidationError({"new_tenor_code": ["Pilihan tenor tidak valid atau tidak aktif"]})
        if option.months <= deposit.installment_count:
            raise ValidationError({"new_tenor_code": [
                f"Tenor baru harus lebih dari {deposit.installment_count} bulan yang sudah berjalan"
            ]})
        new_tenor_code, new_tenor_months = option.code, option.months

    amount_changed = new_amount_value != deposit.amount_value
    tenor_changed = new_tenor_months != deposit.tenor_months
    if not (amount_changed or tenor_changed):
        raise ValidationError("Tidak ada perubahan yang diajukan")
    change_type = T.BOTH if amount_changed and tenor_changed else (T.AMOUNT_CHANGE if amount_changed else T.TENOR_CHANGE)
    return {
        "change_type": change_type,
        "new_amount_code": new_amount_code,
        "new_amount_value": new_amount_value,
        "new_tenor_code": new_tenor_code,
        "new_tenor_months": new_tenor_months,
    }

AGREEMENTS = {
    "agreed_to_terms": "Anda harus menyetujui syarat dan ketentuan",
    "agreed_to_admin_fee": "Anda harus menyetujui biaya admin",
}

def _check_agreements(data: Dict[str, Any]) -> None:
    for flag, message in AGREEMENTS.items():
        if not data.get(flag):
            raise ValidationError({flag: [message]})

def _get_owned_draft(change_id: int, user: User, verb: str) -> DepositChangeRequest:
    change = lock(DepositChangeRequest, change_id)
    if change.user_id != user.id:
        raise PermissionDenied("Anda tidak memiliki akses ke perubahan deposito ini")
    if change.status != S.DRAFT:
        raise ValidationError(f"Hanya draft yang bisa {verb}")
    return change


# ====== Draft CRUD ======
def create_draft(*, user: User, data: Dict[str, Any]) -> DepositChangeRequest:
    _check_agreements(data)
    with transaction.atomic():
        deposit = _changeable_deposit(lock(DepositApplication, data["deposit_id"]), user)
        if repo.has_open_request(DepositChangeRequest, deposit.id, OPEN_STATUSES):
            raise ValidationError("Masih ada pengajuan perubahan yang sedang diproses untuk deposito ini")
        change = repo.create_request(DepositChangeRequest, {
            "change_number": next_number(DepositChangeRequest, "change_number", "CHG"),
            "user": user,
            "deposit": deposit,
            "current_amount_code": deposit.amount_code,
            "current_amount_value": deposit.amount_value,
            "current_tenor_code": deposit.tenor_code,
            "current_tenor_months": deposit.tenor_months,
            "admin_fee": settings_service.get_decimal("deposit_change_admin_fee"),
            "agreed_to_terms": True,
            "agreed_to_admin_fee": True,
            "status": S.DRAFT,
            **_resolve_change(deposit, data.get("new_amount_code"), data.get("new_tenor_code")),
        })
        audit_service.log_action(actor=user.id, action="CREATED", object_type=OBJECT_TYPE, object_id=change.id,
                                 after={"status": S.DRAFT, "change_type": change.change_type})
    return change

def update_draft(*, change_id: int, user: User, data: Dict[str, Any]) -> DepositChangeRequest:
    with transaction.atomic():
        change = _get_owned_draft(change_id, user, "diupdate")
        patch: Dict[str, Any] = {}
        if "new_amount_code" in data or "new_tenor_code" in data:
            deposit = lock(DepositApplication, change.deposit_id)
            patch.update(_resolve_change(
                deposit,
                data.get("new_amount_code", change.new_amount_code),
                data.get("new_tenor_code", change.new_tenor_code),
            ))
        for flag, message in AGREEMENTS.items():
            if flag in data:
                if not data[flag]:
                    raise ValidationError({flag: [message]})
                patch[flag] = True
        save_fields(change, patch)
    return change

def delete_draft(*, change_id: int, user: User) -> None:
    with transaction.atomic():
        change = _get_owned_draft(change_id, user, "dihapus")
        change.delete()


# ====== Workflow ======
def _validate_before_submit(change: DepositChangeRequest) -> None:
    _check_agreements({"agreed_to_terms": change.agreed_to_terms, "agreed_to_admin_fee": change.agreed_to_admin_fee})
    deposit = lock(DepositApplication, change.deposit_id)
    if deposit.status not in CHANGEABLE:
        raise ValidationError("Hanya deposito yang disetujui atau aktif yang dapat diubah")

def submit(*, change_id: int, user: User) -> DepositChangeRequest:
    return approval_service.submit(DEPOSIT_CHANGE_FLOW, change_id, user, validate=_validate_before_submit)

def cancel(*, change_id: int, user: User, reason: str = "") -> DepositChangeRequest:
    return approval_service.cancel(DEPOSIT_CHANGE_FLOW, change_id, user, reason, allow_draft=False)

def process_approval(*, change_id: int, user: User, decision: str, notes: str = "") -> DepositChangeRequest:
    return approval_service.decide(DEPOSIT_CHANGE_FLOW, change_id, user, decision, notes)

def bulk_process_approval(*, change_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(DEPOSIT_CHANGE_FLOW, change_ids, user, decision, notes)


# ====== Read ======
def comparison(change: DepositChangeRequest) -> Dict[str, Any]:
    return {
        "current": {"amount_value": change.current_amount_value, "tenor_months": change.current_tenor_months},
        "new": {"amount_value": change.new_amount_value, "tenor_months": change.new_tenor_months},
        "difference": {
            "amount_value": change.new_amount_value - change.current_amount_value,
            "tenor_months": change.new_tenor_months - change.current_tenor_months,
        },
        "admin_fee": change.admin_fee or Decimal("0"),
    }
