import pytest
from decimal import Decimal
from django.core.exceptions import PermissionDenied, ValidationError

from kopkar.models import Approval, ApprovalStep, LoanApplication
from kopkar.services import approval_service, deposit_service, loan_service
from kopkar.utils import roles


def _submitted_loan(member, amount="5000000", tenor=12):
    loan = loan_service.create_draft(user=member, data={
        "loan_type": "CASH_LOAN", "loan_amount": Decimal(amount), "loan_tenor": tenor, "loan_purpose": "Renovasi",
    })
    return loan_service.submit(loan_id=loan.id, user=member)


@pytest.mark.django_db
def test_submit_snapshots_steps_and_waits_at_first(member):
    loan = _submitted_loan(member)
    assert loan.status == "SUBMITTED"
    assert loan.current_step == ApprovalStep.DIVISI_SIMPAN_PINJAM
    assert loan.submitted_at is not None

    rows = list(Approval.objects.filter(object_type="loan", object_id=loan.id).order_by("sequence"))
    assert [r.step for r in rows] == [
        ApprovalStep.DIVISI_SIMPAN_PINJAM, ApprovalStep.KETUA, ApprovalStep.PENGAWAS,
    ]
    assert all(r.decision is None for r in rows)


@pytest.mark.django_db
def test_full_approval_chain(member, dsp, ketua, pengawas):
    loan = _submitted_loan(member)

    loan = loan_service.process_approval(loan_id=loan.id, user=dsp, decision="APPROVED")
    assert loan.status == "UNDER_REVIEW_KETUA"
    assert loan.current_step == ApprovalStep.KETUA

    loan = loan_service.process_approval(loan_id=loan.id, user=ketua, decision="APPROVED")
    assert loan.status == "UNDER_REVIEW_PENGAWAS"

    loan = loan_service.process_approval(loan_id=loan.id, user=pengawas, decision="APPROVED", notes="ok")
    assert loan.status == LoanApplication.Status.APPROVED_PENDING_DISBURSEMENT
    assert loan.current_step is None
    assert loan.approved_at is not None

    decided = Approval.objects.filter(object_type="loan", object_id=loan.id, decision="APPROVED")
    assert decided.count() == 3


@pytest.mark.django_db
def test_wrong_role_cannot_decide(member, ketua):
    loan = _submitted_loan(member)
    with pytest.raises(PermissionDenied):
        loan_service.process_approval(loan_id=loan.id, user=ketua, decision="APPROVED")

    loan.refresh_from_db()
    assert loan.status == "SUBMITTED"
    assert not Approval.objects.filter(object_type="loan", object_id=loan.id).exclude(decision=None).exists()


@pytest.mark.django_db
def test_reject_stops_workflow(member, dsp, ketua):
    loan = _submitted_loan(member)
    loan = loan_service.process_approval(loan_id=loan.id, user=dsp, decision="REJECTED", notes="Dokumen kurang")
    assert loan.status == "REJECTED"
    assert loan.current_step is None
    assert loan.rejection_reason == "Dokumen kurang"

    # tahap berikutnya tidak bisa memutuskan lagi
    with pytest.raises(ValidationError):
        loan_service.process_approval(loan_id=loan.id, user=ketua, decision="APPROVED")


@pytest.mark.django_db
def test_invalid_decision(member, dsp):
    loan = _submitted_loan(member)
    with pytest.raises(ValidationError):
        loan_service.process_approval(loan_id=loan.id, user=dsp, decision="MAYBE")


@pytest.mark.django_db
def test_bulk_decide_reports_per_item(member, dsp):
    loan = _submitted_loan(member)
    results = loan_service.bulk_process_approval(loan_ids=[loan.id, 999999], user=dsp, decision="APPROVED")

    assert [r["id"] for r in results["success"]] == [loan.id]
    assert results["success"][0]["new_status"] == "UNDER_REVIEW_KETUA"
    assert results["success"][0]["number"] == loan.loan_number
    assert results["failed"] == [{"id": 999999, "reason": "Data tidak ditemukan"}]


@pytest.mark.django_db
def test_bulk_decide_keeps_successes_when_one_fails(member, dsp, ketua):
    first = _submitted_loan(member)
    second = _submitted_loan(member)
    loan_service.process_approval(loan_id=second.id, user=dsp, decision="APPROVED")

    # DSP hanya boleh memutuskan `first`; `second` sudah di tahap ketua
    results = loan_service.bulk_process_approval(loan_ids=[first.id, second.id], user=dsp, decision="APPROVED")
    assert len(results["success"]) == 1
    assert results["failed"][0]["id"] == second.id

    first.refresh_from_db()
    assert first.status == "UNDER_REVIEW_KETUA"


@pytest.mark.django_db
def test_cancel_only_by_owner(member, dsp):
    loan = _submitted_loan(member)
    with pytest.raises(PermissionDenied):
        loan_service.cancel(loan_id=loan.id, user=dsp)

    loan = loan_service.cancel(loan_id=loan.id, user=member, reason="Tidak jadi")
    assert loan.status == "CANCELLED"
    assert loan.current_step is None


@pytest.mark.django_db
def test_configured_flow_replaces_default_steps(member, ketua, deposit_options):
    approval_service.configure_flow("deposit", [roles.KETUA])
    assert approval_service.steps_for(deposit_service.DEPOSIT_FLOW) == [ApprovalStep.KETUA]

    deposit = deposit_service.create_draft(user=member, data={
        "amount_code": "AMT_500K", "tenor_code": "TENOR_12", "agreed_to_terms": True,
    })
    deposit = deposit_service.submit(deposit_id=deposit.id, user=member)
    assert deposit.status == "SUBMITTED"
    assert deposit.current_step == ApprovalStep.KETUA

    deposit = deposit_service.process_approval(deposit_id=deposit.id, user=ketua, decision="APPROVED")
    assert deposit.status == "APPROVED"


@pytest.mark.django_db
def test_configure_flow_validation(db):
    with pytest.raises(ValidationError):
        approval_service.configure_flow("loan", [])
    with pytest.raises(ValidationError):
        approval_service.configure_flow("loan", [roles.SHOPKEEPER])
    with pytest.raises(ValidationError):
        approval_service.configure_flow("loan", [roles.KETUA, roles.KETUA])
