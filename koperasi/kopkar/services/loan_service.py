# -*- coding: utf-8 -*-
"""
Service cho LoanApplication:
- draft CRUD, submit, cancel (owner)
- approval DSP → KETUA → PENGAWAS via approval_service
- DSP revision, disbursement (shopkeeper), authorization (ketua) + installment schedule
"""
from __future__ import annotations
import logging
from datetime import date
from decimal import Decimal
from functools import partial
from typing import Any, Dict, Iterable, List, Optional

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, Employee, LoanApplication, User
from kopkar.repositories import loan_repository as repo
from kopkar.repositories.base import lock, save_fields
from kopkar.services import approval_service, audit_service, notification_service, settings_service
from kopkar.services.approval_service import Workflow
from kopkar.services.loan_calculation import calculate, schedule, years_of_service
from kopkar.services.loan_types import handler_for
from kopkar.utils import roles
from kopkar.utils.numbering import next_number

logger = logging.getLogger(__name__)

S = LoanApplication.Status
OBJECT_TYPE = "loan"


# ====== Notify helpers ======
def _notify_shopkeepers(loan: LoanApplication) -> None:
    notification_service.notify_role(
        roles.SHOPKEEPER,
        subject=f"[Pinjaman] {loan.loan_number} siap dicairkan",
        text=(
            f"Pinjaman {loan.loan_number} ({loan.get_loan_type_display()}) atas nama {loan.user.name} "
            f"sebesar Rp {int(loan.loan_amount):,} telah disetujui dan menunggu pencairan."
        ),
        object_type=OBJECT_TYPE, object_id=loan.id,
    )

def _notify_ketua_authorization(loan: LoanApplication) -> None:
    notification_service.notify_role(
        roles.KETUA,
        subject=f"[Pinjaman] {loan.loan_number} menunggu otorisasi",
        text=f"Pencairan pinjaman {loan.loan_number} atas nama {loan.user.name} menunggu otorisasi Ketua.",
        object_type=OBJECT_TYPE, object_id=loan.id,
    )

def _notify_owner_disbursed(loan: LoanApplication) -> None:
    notification_service.notify_user(
        loan.user,
        subject=f"[Pinjaman] {loan.loan_number} telah dicairkan",
        text=(
            f"Pinjaman {loan.loan_number} telah dicairkan. Angsuran per bulan Rp {int(loan.monthly_installment or 0):,} "
            f"selama {loan.loan_tenor} bulan akan dipotong dari gaji."
        ),
        object_type=OBJECT_TYPE, object_id=loan.id,
    )


def _on_approved(loan: LoanApplication, actor: User) -> None:
    transaction.on_commit(partial(_safe, _notify_shopkeepers, loan))


def _safe(fn, *args) -> None:
    try:
        fn(*args)
    except Exception as ex:
        logger.warning("[loan] notify %s failed: %s", fn.__name__, ex)


LOAN_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Pinjaman",
    model=LoanApplication,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA, ApprovalStep.PENGAWAS),
    approved_status=S.APPROVED_PENDING_DISBURSEMENT,
    number_field="loan_number",
    on_approved=_on_approved,
)


# ====== Eligibility ======
def _employee_of(user: User) -> Employee:
    emp = getattr(user, "employee", None)
    if emp is None:
        raise PermissionDenied("Data karyawan tidak ditemukan")
    if emp.employee_type != Employee.EmployeeType.TETAP:
        raise PermissionDenied("Hanya karyawan tetap yang dapat mengajukan pinjaman")
    if not user.member_verified:
        raise PermissionDenied("Anda harus menjadi anggota terverifikasi untuk mengajukan pinjaman")
    return emp

def _validate_tenor(tenor: int) -> None:
    max_tenor = settings_service.get_int("max_loan_tenor")
    if tenor < 1:
        raise ValidationError({"loan_tenor": ["Tenor minimal 1 bulan"]})
    if tenor > max_tenor:
        raise ValidationError({"loan_tenor": [f"Tenor maksimal {max_tenor} bulan"]})

def get_eligibility(user: User, loan_type: str) -> Dict[str, Any]:
    emp = _employee_of(user)
    handler = handler_for(loan_type)
    return {
        "is_eligible": True,
        "employee": {
            "employee_number": emp.employee_number,
            "full_name": emp.full_name,
            "employee_type": emp.employee_type,
            "department": emp.department.name if emp.department else None,
            "golongan": emp.golongan.name if emp.golongan else None,
        },
        "years_of_service": years_of_service(emp),
        "loan_limit": {
            "min_loan_amount": settings_service.get_decimal("min_loan_amount"),
            "max_loan_amount": handler.max_amount(user),
            "max_tenor": settings_service.get_int("max_loan_tenor"),
            "interest_rate": settings_service.get_decimal("loan_interest_rate"),
        },
    }

def preview(user: User, loan_type: str, amount: Decimal, tenor: int) -> Dict[str, Any]:
    handler = handler_for(loan_type)
    _validate_tenor(tenor)
    handler.validate_amount(user, amount)
    return calculate(amount, tenor, settings_service.get_decimal("loan_interest_rate"), handler.shop_margin_rate())


# ====== Draft CRUD ======
def _pricing(loan_type: str, amount: Decimal, tenor: int) -> Dict[str, Any]:
    handler = handler_for(loan_type)
    margin = handler.shop_margin_rate()
    calc = calculate(amount, tenor, settings_service.get_decimal("loan_interest_rate"), margin)
    return {
        "loan_amount": calc["loan_amount"],
        "loan_tenor": tenor,
        "interest_rate": calc["interest_rate"],
        "shop_margin_rate": margin,
        "total_interest": calc["total_interest"],
        "total_repayment": calc["total_repayment"],
        "monthly_installment": calc["monthly_installment"],
    }

def _get_owned_draft(loan_id: int, user: User, verb: str) -> LoanApplication:
    loan = lock(LoanApplication, loan_id)
    if loan.user_id != user.id:
        raise PermissionDenied("Anda tidak memiliki akses ke pinjaman ini")
    if loan.status != S.DRAFT:
        raise ValidationError(f"Hanya draft yang bisa {verb}")
    return loan

def create_draft(*, user: User, data: Dict[str, Any]) -> LoanApplication:
    _employee_of(user)
    loan_type = data["loan_type"]
    handler = handler_for(loan_type)
    amount = Decimal(str(handler.amount_from(data) or 0))
    tenor = int(data["loan_tenor"])
    _validate_tenor(tenor)
    if loan_type != LoanApplication.LoanType.GOODS_PHONE:
        handler.validate_amount(user, amount)

    bank_account = data.get("bank_account_number") or user.bank_account_number or (
        user.employee.bank_account_number if user.employee else ""
    )
    if not bank_account:
        raise ValidationError({"bank_account_number": ["Nomor rekening wajib diisi"]})

    with transaction.atomic():
        loan = repo.create({
            "loan_number": next_number(LoanApplication, "loan_number", "LN"),
            "user": user,
            "loan_type": loan_type,
            "loan_purpose": data.get("loan_purpose", ""),
            "bank_account_number": bank_account,
            "status": S.DRAFT,
            **_pricing(loan_type, amount, tenor),
        })
        handler.create_detail(loan, data)
        audit_service.log_action(actor=user.id, action="CREATED", object_type=OBJECT_TYPE, object_id=loan.id,
                                 after={"status": S.DRAFT, "loan_amount": str(amount), "loan_tenor": tenor})
    return loan

def update_draft(*, loan_id: int, user: User, data: Dict[str, Any]) -> LoanApplication:
    with transaction.atomic():
        loan = _get_owned_draft(loan_id, user, "diupdate")
        handler = handler_for(loan.loan_type)
        handler.update_detail(loan, data)

        amount = handler.amount_from(data)
        amount = Decimal(str(amount)) if amount is not None else loan.loan_amount
        tenor = int(data.get("loan_tenor") or loan.loan_tenor)
        _validate_tenor(tenor)
        if loan.loan_type != LoanApplication.LoanType.GOODS_PHONE:
            handler.validate_amount(user, amount)

        patch = {k: data[k] for k in ("loan_purpose", "bank_account_number") if k in data}
        patch.update(_pricing(loan.loan_type, amount, tenor))
        save_fields(loan, patch)
    return repo.get_by_id(loan.id)

def delete_draft(*, loan_id: int, user: User) -> None:
    with transaction.atomic():
        loan = _get_owned_draft(loan_id, user, "dihapus")
        repo.delete(loan)


# ====== Workflow ======
def _validate_before_submit(loan: LoanApplication) -> None:
    _employee_of(loan.user)
    _validate_tenor(loan.loan_tenor)
    handler_for(loan.loan_type).validate_on_submit(loan)

def submit(*, loan_id: int, user: User) -> LoanApplication:
    return approval_service.submit(LOAN_FLOW, loan_id, user, validate=_validate_before_submit)

def cancel(*, loan_id: int, user: User, reason: str = "") -> LoanApplication:
    return approval_service.cancel(LOAN_FLOW, loan_id, user, reason)

def process_approval(*, loan_id: int, user: User, decision: str, notes: str = "") -> LoanApplication:
    return approval_service.decide(LOAN_FLOW, loan_id, user, decision, notes)

def bulk_process_approval(*, loan_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(LOAN_FLOW, loan_ids, user, decision, notes)

def revise(*, loan_id: int, user: User, data: Dict[str, Any]) -> LoanApplication:
    """DSP adjusts amount/tenor (and type prices) while the loan waits at the DSP step."""
    if not user.has_role(roles.DIVISI_SIMPAN_PINJAM):
        raise PermissionDenied("Hanya Divisi Simpan Pinjam yang dapat merevisi pinjaman")
    with transaction.atomic():
        loan = lock(LoanApplication, loan_id)
        if loan.current_step != ApprovalStep.DIVISI_SIMPAN_PINJAM:
            raise ValidationError("Revisi hanya dapat dilakukan pada tahap Divisi Simpan Pinjam")
        handler = handler_for(loan.loan_type)

        amount = data.get("loan_amount")
        if amount is None:
            amount = handler.amount_from(data)
        amount = Decimal(str(amount)) if amount is not None else loan.loan_amount
        tenor = int(data.get("loan_tenor") or loan.loan_tenor)
        _validate_tenor(tenor)
        handler.validate_amount(loan.user, amount)

        before = {"loan_amount": str(loan.loan_amount), "loan_tenor": loan.loan_tenor}
        handler.revise_detail(loan, data)
        save_fields(loan, {**_pricing(loan.loan_type, amount, tenor), "revision_count": loan.revision_count + 1})
        approval_service.record_revision(
            LOAN_FLOW, loan, user, data.get("notes", ""),
            {"before": before, "after": {"loan_amount": str(amount), "loan_tenor": tenor}},
        )
    return repo.get_by_id(loan.id)


# ====== Disbursement / authorization ======
def disburse(*, loan_id: int, user: User, disbursement_date: Optional[date] = None, notes: str = "") -> LoanApplication:
    with transaction.atomic():
        loan = lock(LoanApplication, loan_id)
        if loan.status != S.APPROVED_PENDING_DISBURSEMENT:
            raise ValidationError("Pinjaman belum siap untuk dicairkan")
        repo.create_disbursement(loan, user.id, disbursement_date or timezone.localdate(), notes)
        save_fields(loan, {"status": S.PENDING_AUTHORIZATION})
        audit_service.log_action(actor=user.id, action="DISBURSEMENT_PROCESSED", object_type=OBJECT_TYPE,
                                 object_id=loan.id, before={"status": S.APPROVED_PENDING_DISBURSEMENT},
                                 after={"status": loan.status}, notes=notes)
        transaction.on_commit(partial(_safe, _notify_ketua_authorization, loan))
    return loan

def bulk_disburse(*, loan_ids: Iterable[int], user: User, disbursement_date: Optional[date] = None, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_apply(
        loan_ids,
        lambda loan_id: disburse(loan_id=loan_id, user=user, disbursement_date=disbursement_date, notes=notes),
        describe=lambda loan: {"number": loan.loan_number},
    )

def authorize(*, loan_id: int, user: User, authorization_date: Optional[date] = None, notes: str = "") -> LoanApplication:
    with transaction.atomic():
        loan = lock(LoanApplication, loan_id)
        if loan.status != S.PENDING_AUTHORIZATION:
            raise ValidationError("Pinjaman belum diproses pencairannya")
        on = authorization_date or timezone.localdate()
        repo.create_authorization(loan, user.id, on, notes)
        disbursed_on = loan.disbursement.disbursement_date
        repo.create_installments(loan, schedule(
            loan.total_repayment or loan.loan_amount,
            loan.loan_tenor,
            disbursed_on,
            settings_service.get_int("cooperative_cutoff_date"),
            settings_service.get_int("cooperative_payroll_date"),
        ))
        save_fields(loan, {"status": S.DISBURSED, "disbursed_at": timezone.now()})
        audit_service.log_action(actor=user.id, action="AUTHORIZED", object_type=OBJECT_TYPE, object_id=loan.id,
                                 before={"status": S.PENDING_AUTHORIZATION}, after={"status": S.DISBURSED}, notes=notes)
        transaction.on_commit(partial(_safe, _notify_owner_disbursed, loan))
    return loan

def bulk_authorize(*, loan_ids: Iterable[int], user: User, authorization_date: Optional[date] = None, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_apply(
        loan_ids,
        lambda loan_id: authorize(loan_id=loan_id, user=user, authorization_date=authorization_date, notes=notes),
        describe=lambda loan: {"number": loan.loan_number},
    )


# ====== Balances ======
def remaining_balance(loan: LoanApplication) -> Decimal:
    total = loan.total_repayment or loan.loan_amount
    return max(Decimal("0"), total - repo.paid_total(loan.id))

def complete_if_paid(loan: LoanApplication, actor_id: Optional[int] = None) -> bool:
    if repo.installments(loan.id).filter(is_paid=False).exists():
        return False
    save_fields(loan, {"status": S.COMPLETED, "completed_at": timezone.now()})
    audit_service.log_action(actor=actor_id, action="COMPLETED", object_type=OBJECT_TYPE, object_id=loan.id,
                             before={"status": S.DISBURSED}, after={"status": S.COMPLETED})
    return True
