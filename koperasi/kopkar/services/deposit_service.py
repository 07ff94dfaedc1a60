# -*- coding: utf-8 -*-
"""
Service cho DepositApplication (tabungan berjangka dengan setoran bulanan).
Approval DSP → KETUA; sau khi APPROVED payroll thu tiền hàng tháng.
"""
from __future__ import annotations
import logging
from functools import partial
from typing import Any, Dict, Iterable, List

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, DepositApplication, User
from kopkar.repositories import deposit_repository as repo
from kopkar.repositories.base import lock, save_fields
from kopkar.services import approval_service, audit_service, notification_service, settings_service
from kopkar.services.approval_service import Workflow
from kopkar.services.deposit_option_service import calculate_return
from kopkar.utils import roles
from kopkar.utils.dates import add_months, next_payroll_date
from kopkar.utils.numbering import next_number

logger = logging.getLogger(__name__)

S = DepositApplication.Status
OBJECT_TYPE = "deposit"


def _notify_payroll(deposit: DepositApplication) -> None:
    try:
        notification_service.notify_role(
            roles.PAYROLL,
            subject=f"[Deposito] {deposit.deposit_number} disetujui",
            text=(
                f"Deposito {deposit.deposit_number} atas nama {deposit.user.name} disetujui. "
                f"Potongan gaji Rp {int(deposit.amount_value):,} per bulan selama {deposit.tenor_months} bulan "
                f"mulai {deposit.activated_at}."
            ),
            object_type=OBJECT_TYPE, object_id=deposit.id,
        )
    except Exception as ex:
        logger.warning("[deposit] notify payroll failed: %s", ex)


def _on_approved(deposit: DepositApplication, actor: User) -> None:
    start = next_payroll_date(
        timezone.localdate(),
        settings_service.get_int("cooperative_cutoff_date"),
        settings_service.get_int("cooperative_payroll_date"),
    )
    save_fields(deposit, {"activated_at": start, "maturity_date": add_months(start, deposit.tenor_months)})
    transaction.on_commit(partial(_notify_payroll, deposit))


DEPOSIT_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Deposito",
    model=DepositApplication,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA),
    approved_status=S.APPROVED,
    number_field="deposit_number",
    on_approved=_on_approved,
)


# ====== Helpers ======
def _resolve_options(amount_code: str, tenor_code: str) -> Dict[str, Any]:
    amount = repo.get_active_amount(amount_code)
    if amount is None:
        raise ValidationError({"amount_code": ["Pilihan jumlah deposito tidak valid atau tidak aktif"]})
    tenor = repo.get_active_tenor(tenor_code)
    if tenor is None:
        raise ValidationError({"tenor_code": ["Pilihan tenor tidak valid atau tidak aktif"]})
    rate = settings_service.get_decimal("deposit_interest_rate")
    projection = calculate_return(
        amount.amount, tenor.months, rate, settings_service.get_value("deposit_calculation_method"),
    )
    return {
        "amount_code": amount.code,
        "tenor_code": tenor.code,
        "amount_value": amount.amount,
        "tenor_months": tenor.months,
        "interest_rate": rate,
        "projected_interest": projection["projected_interest"],
        "total_return": projection["total_return"],
    }

def preview(*, amount_code: str, tenor_code: str) -> Dict[str, Any]:
    resolved = _resolve_options(amount_code, tenor_code)
    projection = calculate_return(
        resolved["amount_value"], resolved["tenor_months"], resolved["interest_rate"],
        settings_service.get_value("deposit_calculation_method"),
    )
    return {**projection, "amount_code": resolved["amount_code"], "tenor_code": resolved["tenor_code"]}

def _get_owned_draft(deposit_id: int, user: User, verb: str) -> DepositApplication:
    deposit = lock(DepositApplication, deposit_id)
    if deposit.user_id != user.id:
        raise PermissionDenied("Anda tidak memiliki akses ke deposito ini")
    if deposit.status != S.DRAFT:
        raise ValidationError(f"Hanya draft yang bisa {verb}")
    return deposit


# ====== Draft CRUD ======
def create_draft(*, user: User, data: Dict[str, Any]) -> DepositApplication:
    if not data.get("agreed_to_terms"):
        raise ValidationError({"agreed_to_terms": ["Anda harus menyetujui syarat dan ketentuan"]})
    with transaction.atomic():
        deposit = repo.create({
            "deposit_number": next_number(DepositApplication, "deposit_number", "DEP"),
            "user": user,
            "agreed_to_terms": True,
            "status": S.DRAFT,
            **_resolve_options(data["amount_code"], data["tenor_code"]),
        })
        audit_service.log_action(actor=user.id, action="CREATED", object_type=OBJECT_TYPE, object_id=deposit.id,
                                 after={"status": S.DRAFT, "amount_value": str(deposit.amount_value)})
    return deposit

def update_draft(*, deposit_id: int, user: User, data: Dict[str, Any]) -> DepositApplication:
    with transaction.atomic():
        deposit = _get_owned_draft(deposit_id, user, "diupdate")
        patch: Dict[str, Any] = {}
        if "amount_code" in data or "tenor_code" in data:
            patch.update(_resolve_options(
                data.get("amount_code", deposit.amount_code), data.get("tenor_code", deposit.tenor_code),
            ))
        if "agreed_to_terms" in data:
            if not data["agreed_to_terms"]:
                raise ValidationError({"agreed_to_terms": ["Anda harus menyetujui syarat dan ketentuan"]})
            patch["agreed_to_terms"] = True
        save_fields(deposit, patch)
    return deposit

def delete_draft(*, deposit_id: int, user: User) -> None:
    with transaction.atomic():
        deposit = _get_owned_draft(deposit_id, user, "dihapus")
        repo.delete(deposit)


# ====== Workflow ======
def _validate_before_submit(deposit: DepositApplication) -> None:
    if not deposit.agreed_to_terms:
        raise ValidationError({"agreed_to_terms": ["Anda harus menyetujui syarat dan ketentuan"]})

def submit(*, deposit_id: int, user: User) -> DepositApplication:
    return approval_service.submit(DEPOSIT_FLOW, deposit_id, user, validate=_validate_before_submit)

def cancel(*, deposit_id: int, user: User, reason: str = "") -> DepositApplication:
    return approval_service.cancel(DEPOSIT_FLOW, deposit_id, user, reason)

def process_approval(*, deposit_id: int, user: User, decision: str, notes: str = "") -> DepositApplication:
    return approval_service.decide(DEPOSIT_FLOW, deposit_id, user, decision, notes)

def bulk_process_approval(*, deposit_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(DEPOSIT_FLOW, deposit_ids, user, decision, notes)


# ====== Payroll collection ======
def collect_installment(deposit: DepositApplication, on) -> bool:
    """
    Record one monthly collection (caller holds the row lock). Returns True
    when this collection completed the deposit.
    """
    count = deposit.installment_count + 1
    patch = {
        "installment_count": count,
        "collected_amount": deposit.collected_amount + deposit.amount_value,
        "last_installment_date": on,
        "status": S.ACTIVE,
    }
    if deposit.activated_at is None:
        patch["activated_at"] = on
    if count >= deposit.tenor_months:
        patch.update({"status": S.COMPLETED, "completed_at": timezone.now()})
    before = deposit.status
    save_fields(deposit, patch)
    if before != deposit.status:
        audit_service.log_action(actor=None, action=deposit.status, object_type=OBJECT_TYPE, object_id=deposit.id,
                                 before={"status": before}, after={"status": deposit.status})
    return deposit.status == S.COMPLETED
