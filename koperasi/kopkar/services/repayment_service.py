# -*- coding: utf-8 -*-
"""
Service cho LoanRepayment (pelunasan dipercepat), approval DSP → KETUA.
Final approval: sisa angsuran dianggap lunas, pinjaman COMPLETED.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, LoanApplication, LoanRepayment, User
from kopkar.repositories import loan_repository, repayment_repository as repo
from kopkar.repositories.base import lock, save_fields
from kopkar.services import approval_service, audit_service, loan_service
from kopkar.services.approval_service import REVIEW_STATUSES, Workflow
from kopkar.utils.numbering import next_number

logger = logging.getLogger(__name__)

S = LoanRepayment.Status
OBJECT_TYPE = "loan_repayment"


def _on_approved(repayment: LoanRepayment, actor: User) -> None:
    loan = lock(LoanApplication, repayment.loan_id)
    loan_repository.mark_installments_paid(loan_repository.installments(loan.id))
    save_fields(loan, {"status": LoanApplication.Status.COMPLETED, "completed_at": timezone.now()})
    audit_service.log_action(actor=actor.id, action="COMPLETED", object_type=loan_service.OBJECT_TYPE, object_id=loan.id,
                             before={"status": LoanApplication.Status.DISBURSED},
                             after={"status": loan.status, "repayment": repayment.repayment_number})


REPAYMENT_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Pelunasan pinjaman",
    model=LoanRepayment,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA),
    approved_status=S.APPROVED,
    number_field="repayment_number",
    on_approved=_on_approved,
)


def _owned_disbursed_loan(loan_id: int, user: User) -> LoanApplication:
    loan = loan_repository.get_by_id(loan_id)
    if loan.user_id != user.id:
        raise PermissionDenied("Anda tidak memiliki akses ke pinjaman ini")
    if loan.status != LoanApplication.Status.DISBURSED:
        raise ValidationError("Pelunasan hanya untuk pinjaman yang sudah dicairkan")
    return loan

def calculate(*, loan_id: int, user: User) -> Dict[str, Any]:
    loan = _owned_disbursed_loan(loan_id, user)
    installments = loan_repository.installments(loan.id)
    paid = installments.filter(is_paid=True).count()
    return {
        "loan_id": loan.id,
        "loan_number": loan.loan_number,
        "total_repayment": loan.total_repayment,
        "paid_amount": loan_repository.paid_total(loan.id),
        "remaining_amount": loan_service.remaining_balance(loan),
        "paid_installments": paid,
        "remaining_installments": installments.count() - paid,
        "has_pending_repayment": repo.has_open_for_loan(loan.id, REVIEW_STATUSES),
    }

def create(*, loan_id: int, user: User, notes: str = "") -> LoanRepayment:
    with transaction.atomic():
        lock(LoanApplication, loan_id)
        calc = calculate(loan_id=loan_id, user=user)
        if calc["has_pending_repayment"]:
            raise ValidationError("Masih ada pengajuan pelunasan yang sedang diproses untuk pinjaman ini")
        if calc["remaining_amount"] <= 0:
            raise ValidationError("Pinjaman sudah lunas")
        repayment = repo.create({
            "repayment_number": next_number(LoanRepayment, "repayment_number", "RP"),
            "loan_id": loan_id,
            "user": user,
            "total_amount": calc["remaining_amount"],
            "paid_installments": calc["paid_installments"],
            "remaining_installments": calc["remaining_installments"],
            "notes": notes or "",
        })
        approval_service.start_review(REPAYMENT_FLOW, repayment, user)
    return repayment

def cancel(*, repayment_id: int, user: User, reason: str = "") -> LoanRepayment:
    return approval_service.cancel(REPAYMENT_FLOW, repayment_id, user, reason, allow_draft=False)

def process_approval(*, repayment_id: int, user: User, decision: str, notes: str = "") -> LoanRepayment:
    return approval_service.decide(REPAYMENT_FLOW, repayment_id, user, decision, notes)

def bulk_process_approval(*, repayment_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(REPAYMENT_FLOW, repayment_ids, user, decision, notes)
