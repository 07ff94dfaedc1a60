import pytest
from decimal import Decimal
from django.core.exceptions import PermissionDenied, ValidationError

from kopkar.models import LoanApplication, LoanInstallment
from kopkar.services import repayment_service as svc


@pytest.mark.django_db
def test_calculate_remaining(disbursed_loan, member):
    out = svc.calculate(loan_id=disbursed_loan.id, user=member)
    assert out["remaining_amount"] == Decimal("5400000")
    assert out["paid_installments"] == 0
    assert out["remaining_installments"] == 12
    assert out["has_pending_repayment"] is False


@pytest.mark.django_db
def test_other_user_cannot_repay(disbursed_loan, dsp):
    with pytest.raises(PermissionDenied):
        svc.calculate(loan_id=disbursed_loan.id, user=dsp)


@pytest.mark.django_db
def test_repayment_approval_completes_loan(disbursed_loan, member, dsp, ketua):
    repayment = svc.create(loan_id=disbursed_loan.id, user=member, notes="Bonus tahunan")
    assert repayment.status == "SUBMITTED"
    assert repayment.total_amount == Decimal("5400000")

    with pytest.raises(ValidationError):
        svc.create(loan_id=disbursed_loan.id, user=member)

    svc.process_approval(repayment_id=repayment.id, user=dsp, decision="APPROVED")
    repayment = svc.process_approval(repayment_id=repayment.id, user=ketua, decision="APPROVED")
    assert repayment.status == "APPROVED"

    disbursed_loan.refresh_from_db()
    assert disbursed_loan.status == LoanApplication.Status.COMPLETED
    assert not LoanInstallment.objects.filter(loan=disbursed_loan, is_paid=False).exists()


@pytest.mark.django_db
def test_rejected_repayment_leaves_loan_running(disbursed_loan, member, dsp):
    repayment = svc.create(loan_id=disbursed_loan.id, user=member)
    svc.process_approval(repayment_id=repayment.id, user=dsp, decision="REJECTED", notes="Belum bisa")
    disbursed_loan.refresh_from_db()
    assert disbursed_loan.status == LoanApplication.Status.DISBURSED
    # boleh mengajukan ulang
    assert svc.create(loan_id=disbursed_loan.id, user=member).status == "SUBMITTED"
