# -*- coding: utf-8 -*-
"""
Service cho MemberApplication: đăng ký thành viên, approval DSP → KETUA.
Final approval: user.member_verified, role anggota, mở buku tabungan.
"""
from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from kopkar.models import ApprovalStep, MemberApplication, User
from kopkar.repositories import level_repository, member_repository as repo, savings_repository, user_repository
from kopkar.repositories.base import save_fields
from kopkar.services import approval_service, settings_service
from kopkar.services.approval_service import REVIEW_STATUSES, Workflow
from kopkar.utils import roles
from kopkar.utils.exceptions import Conflict

logger = logging.getLogger(__name__)

S = MemberApplication.Status
OBJECT_TYPE = "member_application"
OPEN_STATUSES = REVIEW_STATUSES + [S.APPROVED]


def _on_approved(application: MemberApplication, actor: User) -> None:
    user = application.user
    if repo.nik_taken(application.nik, user.id):
        raise Conflict("NIK sudah terdaftar")
    if application.npwp and repo.npwp_taken(application.npwp, user.id):
        raise Conflict("NPWP sudah terdaftar")
    try:
        with transaction.atomic():
            save_fields(user, {
                "member_verified": True,
                "member_verified_at": timezone.now(),
                "nik": application.nik,
                "npwp": application.npwp or None,
                "date_of_birth": application.date_of_birth,
                "birth_place": application.birth_place,
            })
    except IntegrityError:
        # concurrent approval of another application with the same identity
        raise Conflict("NIK atau NPWP sudah terdaftar")
    anggota = level_repository.get_by_names([roles.ANGGOTA])
    if anggota:
        user_repository.add_level(user, anggota[0])
    savings_repository.get_or_create_account(user.id)
    logger.info("[member] user=%s verified as member via application #%s", user.id, application.id)


MEMBER_FLOW = Workflow(
    object_type=OBJECT_TYPE,
    label="Pendaftaran anggota",
    model=MemberApplication,
    default_steps=(ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA),
    approved_status=S.APPROVED,
    number_field="nik",
    on_approved=_on_approved,
)


def submit(*, user: User, data: Dict[str, Any]) -> MemberApplication:
    if user.member_verified:
        raise ValidationError("Anda sudah menjadi anggota koperasi")
    if repo.exists_for_user(user.id, OPEN_STATUSES):
        raise ValidationError("Anda sudah memiliki pendaftaran yang sedang diproses atau disetujui")
    if repo.nik_taken(data["nik"], user.id, OPEN_STATUSES):
        raise Conflict("NIK sudah terdaftar")
    if data.get("npwp") and repo.npwp_taken(data["npwp"], user.id, OPEN_STATUSES):
        raise Conflict("NPWP sudah terdaftar")

    fee = settings_service.get_decimal("initial_membership_fee")
    with transaction.atomic():
        application = repo.create({
            "user": user,
            "nik": data["nik"],
            "npwp": data.get("npwp", ""),
            "date_of_birth": data["date_of_birth"],
            "birth_place": data["birth_place"],
            "department": data.get("department") or (user.employee.department if user.employee else None),
            "installment_plan": data.get("installment_plan", MemberApplication.InstallmentPlan.FULL),
            "entrance_fee": fee,
            "paid_amount": Decimal("0"),
            "remaining_amount": fee,
        })
        approval_service.start_review(MEMBER_FLOW, application, user)
    return application

def process_approval(*, application_id: int, user: User, decision: str, notes: str = "") -> MemberApplication:
    return approval_service.decide(MEMBER_FLOW, application_id, user, decision, notes)

def bulk_process_approval(*, application_ids: Iterable[int], user: User, decision: str, notes: str = "") -> Dict[str, List]:
    return approval_service.bulk_decide(MEMBER_FLOW, application_ids, user, decision, notes)


# ====== Payroll: entrance fee ======
def entrance_fee_due(application: MemberApplication) -> Decimal:
    """Plan 1 pays everything at once; plan 2 pays half, then the rest."""
    if application.is_paid_off or application.remaining_amount <= 0:
        return Decimal("0")
    if application.installment_plan == MemberApplication.InstallmentPlan.TWO_MONTHS:
        half = (application.entrance_fee / 2).quantize(Decimal("1"))
        return min(half, application.remaining_amount) if application.paid_amount == 0 else application.remaining_amount
    return application.remaining_amount

def record_entrance_payment(application: MemberApplication, amount: Decimal) -> None:
    paid = application.paid_amount + amount
    remaining = max(Decimal("0"), application.entrance_fee - paid)
    save_fields(application, {"paid_amount": paid, "remaining_amount": remaining, "is_paid_off": remaining == 0})
