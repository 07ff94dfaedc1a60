import pytest
from datetime import date
from decimal import Decimal
from django.core.exceptions import PermissionDenied, ValidationError

from kopkar.models import Employee, LoanInstallment, LoanLimit
from kopkar.services import loan_service
from kopkar.services.loan_calculation import calculate, schedule, years_of_service


def test_flat_rate_calculation():
    calc = calculate(Decimal("5000000"), 12, Decimal("8"))
    assert calc["total_interest"] == Decimal("400000")
    assert calc["total_repayment"] == Decimal("5400000")
    assert calc["monthly_installment"] == Decimal("450000")


def test_online_purchase_adds_shop_margin():
    calc = calculate(Decimal("8000000"), 10, Decimal("8"), Decimal("5"))
    assert calc["total_interest"] == Decimal("533333")
    assert calc["shop_margin_amount"] == Decimal("400000")
    assert calc["total_repayment"] == Decimal("8933333")


def test_schedule_last_installment_absorbs_rounding():
    rows = schedule(Decimal("1000000"), 3, date(2025, 1, 10), 15, 27)
    assert [r["due_date"] for r in rows] == [date(2025, 1, 27), date(2025, 2, 27), date(2025, 3, 27)]
    assert [r["amount"] for r in rows] == [Decimal("333333"), Decimal("333333"), Decimal("333334")]


def test_schedule_after_cutoff_starts_next_month():
    rows = schedule(Decimal("600000"), 2, date(2025, 1, 20), 15, 27)
    assert rows[0]["due_date"] == date(2025, 2, 27)


def test_years_of_service_from_employee_number():
    emp = Employee(employee_number="E1530001", permanent_employee_date=None)
    # tahun 2015, bulan 3
    assert years_of_service(emp, today=date(2025, 6, 1)) == 10
    assert years_of_service(emp, today=date(2025, 2, 1)) == 9


@pytest.mark.django_db
def test_create_draft_prices_loan(member):
    loan = loan_service.create_draft(user=member, data={
        "loan_type": "CASH_LOAN", "loan_amount": Decimal("5000000"), "loan_tenor": 12,
    })
    assert loan.status == "DRAFT"
    assert loan.loan_number.startswith("LN-")
    assert loan.monthly_installment == Decimal("450000")
    assert loan.bank_account_number == "1234567890"
    assert loan.cash_detail is not None


@pytest.mark.django_db
def test_amount_above_golongan_limit(member):
    with pytest.raises(ValidationError):
        loan_service.create_draft(user=member, data={
            "loan_type": "CASH_LOAN", "loan_amount": Decimal("25000000"), "loan_tenor": 12,
        })


@pytest.mark.django_db
def test_tenor_above_max(member):
    with pytest.raises(ValidationError):
        loan_service.create_draft(user=member, data={
            "loan_type": "CASH_LOAN", "loan_amount": Decimal("5000000"), "loan_tenor": 48,
        })


@pytest.mark.django_db
def test_zero_limit_is_not_eligible(member, master_data):
    LoanLimit.objects.filter(golongan=master_data["golongan"]).update(max_loan_amount=0)
    with pytest.raises(ValidationError):
        loan_service.preview(member, "CASH_LOAN", Decimal("1000000"), 6)


@pytest.mark.django_db
def test_contract_employee_cannot_apply(member, master_data):
    Employee.objects.filter(pk=master_data["emp"].pk).update(employee_type=Employee.EmployeeType.KONTRAK)
    member.employee.refresh_from_db()
    with pytest.raises(PermissionDenied):
        loan_service.get_eligibility(member, "CASH_LOAN")


@pytest.mark.django_db
def test_update_and_delete_draft(member, dsp):
    loan = loan_service.create_draft(user=member, data={
        "loan_type": "CASH_LOAN", "loan_amount": Decimal("5000000"), "loan_tenor": 12,
    })
    loan = loan_service.update_draft(loan_id=loan.id, user=member, data={"loan_tenor": 6})
    assert loan.loan_tenor == 6
    assert loan.monthly_installment == Decimal("866667")

    with pytest.raises(PermissionDenied):
        loan_service.delete_draft(loan_id=loan.id, user=dsp)
    loan_service.delete_draft(loan_id=loan.id, user=member)


@pytest.mark.django_db
def test_revise_only_at_dsp_step(member, dsp, ketua):
    loan = loan_service.create_draft(user=member, data={
        "loan_type": "CASH_LOAN", "loan_amount": Decimal("5000000"), "loan_tenor": 12,
    })
    loan_service.submit(loan_id=loan.id, user=member)

    with pytest.raises(PermissionDenied):
        loan_service.revise(loan_id=loan.id, user=ketua, data={"loan_amount": Decimal("4000000")})

    loan = loan_service.revise(loan_id=loan.id, user=dsp, data={"loan_amount": Decimal("4000000"), "notes": "Plafon"})
    assert loan.loan_amount == Decimal("4000000")
    assert loan.revision_count == 1
    assert loan.status == "SUBMITTED"

    # DSP tetap bisa memutuskan setelah revisi
    loan = loan_service.process_approval(loan_id=loan.id, user=dsp, decision="APPROVED")
    assert loan.status == "UNDER_REVIEW_KETUA"
    with pytest.raises(ValidationError):
        loan_service.revise(loan_id=loan.id, user=dsp, data={"loan_tenor": 6})


@pytest.mark.django_db
def test_disbursement_then_authorization(disbursed_loan):
    loan = disbursed_loan
    assert loan.status == "DISBURSED"
    installments = LoanInstallment.objects.filter(loan=loan).order_by("installment_number")
    assert installments.count() == 12
    assert sum(i.amount for i in installments) == loan.total_repayment
    assert installments.first().due_date == date(2025, 1, 27)
    assert loan_service.remaining_balance(loan) == loan.total_repayment


@pytest.mark.django_db
def test_disburse_requires_approved_loan(member, shopkeeper, ketua):
    loan = loan_service.create_draft(user=member, data={
        "loan_type": "CASH_LOAN", "loan_amount": Decimal("5000000"), "loan_tenor": 12,
    })
    with pytest.raises(ValidationError):
        loan_service.disburse(loan_id=loan.id, user=shopkeeper)
    with pytest.raises(ValidationError):
        loan_service.authorize(loan_id=loan.id, user=ketua)

    results = loan_service.bulk_disburse(loan_ids=[loan.id], user=shopkeeper)
    assert results["success"] == []
    assert results["failed"][0]["reason"] == "Pinjaman belum siap untuk dicairkan"
