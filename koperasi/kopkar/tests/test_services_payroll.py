import pytest
from datetime import date
from decimal import Decimal
from django.core.exceptions import ValidationError

from kopkar.models import LoanInstallment, SavingsAccount, SavingsTransaction
from kopkar.services import payroll_service
from kopkar.utils.exceptions import Conflict


@pytest.mark.django_db
def test_status_before_processing(db):
    out = payroll_service.status(2, 2025)
    assert out["name"] == "Februari 2025"
    assert out["start_date"] == date(2025, 1, 16)
    assert out["end_date"] == date(2025, 2, 15)
    assert out["payroll_date"] == date(2025, 2, 27)
    assert out["is_processed"] is False


@pytest.mark.django_db
def test_invalid_period(db):
    with pytest.raises(ValidationError):
        payroll_service.status(13, 2025)


@pytest.mark.django_db
def test_process_payroll_posts_fees_installments_and_interest(member, disbursed_loan, payroll_user):
    # cair 10 Jan (sebelum cutoff 15) → angsuran 1 jatuh tempo 27 Jan, dipotong payroll Januari
    period = payroll_service.process_payroll(month=1, year=2025, actor=payroll_user)
    assert period.is_processed is True
    assert period.processed_by == payroll_user

    account = SavingsAccount.objects.get(user=member)
    assert account.saldo_wajib == Decimal("100000")
    # (500.000 + 100.000 + 2.000.000) × 4% / 12
    assert account.bunga_deposito == Decimal("8667")

    entry = SavingsTransaction.objects.get(account=account, payroll_period=period)
    assert entry.iuran_bulanan == Decimal("100000")
    assert entry.bunga == Decimal("8667")
    assert entry.transaction_date == date(2025, 1, 27)

    first = LoanInstallment.objects.get(loan=disbursed_loan, installment_number=1)
    assert first.due_date == date(2025, 1, 27)
    assert first.is_paid is True
    assert first.payroll_period_id == period.id
    assert LoanInstallment.objects.filter(loan=disbursed_loan, is_paid=False).count() == 11

    assert period.total_amount == Decimal("550000")
    assert period.summary["counts"]["angsuran_pinjaman"] == 1


@pytest.mark.django_db
def test_installments_follow_payroll_months(member, disbursed_loan, payroll_user):
    january = payroll_service.process_payroll(month=1, year=2025, actor=payroll_user)
    february = payroll_service.process_payroll(month=2, year=2025, actor=payroll_user)

    paid = {i.installment_number: i.payroll_period_id
            for i in LoanInstallment.objects.filter(loan=disbursed_loan, is_paid=True)}
    assert paid == {1: january.id, 2: february.id}
    assert february.summary["counts"]["angsuran_pinjaman"] == 1


@pytest.mark.django_db
def test_missed_installment_collected_next_payroll(member, disbursed_loan, payroll_user):
    # payroll Januari terlewat: Februari memotong angsuran 1 dan 2
    period = payroll_service.process_payroll(month=2, year=2025, actor=payroll_user)
    assert period.summary["counts"]["angsuran_pinjaman"] == 2
    assert set(
        LoanInstallment.objects.filter(loan=disbursed_loan, is_paid=True).values_list("installment_number", flat=True)
    ) == {1, 2}


@pytest.mark.django_db
def test_period_processed_once(member, payroll_user):
    payroll_service.process_payroll(month=3, year=2025, actor=payroll_user)
    with pytest.raises(Conflict):
        payroll_service.process_payroll(month=3, year=2025, actor=payroll_user)
    assert payroll_service.status(3, 2025)["is_processed"] is True
