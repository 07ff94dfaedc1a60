import pytest
from datetime import date
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient

from kopkar.models import (
    Department, DepositAmountOption, DepositTenorOption, Employee, Golongan, Level, LoanLimit, SavingsAccount, User,
)
from kopkar.utils import roles


@pytest.fixture
def levels(db):
    return {name: Level.objects.create(level_name=name) for name in roles.ALL_ROLES}


@pytest.fixture
def master_data(db):
    dept = Department.objects.create(name="Produksi")
    gol = Golongan.objects.create(name="III")
    LoanLimit.objects.create(golongan=gol, min_years_of_service=0, max_years_of_service=None,
                             max_loan_amount=Decimal("20000000"))
    emp = Employee.objects.create(
        employee_number="E1501001", full_name="Budi Santoso", department=dept, golongan=gol,
        employee_type=Employee.EmployeeType.TETAP, permanent_employee_date=date(2015, 1, 1),
        bank_account_number="1234567890",
    )
    return {"dept": dept, "golongan": gol, "emp": emp}


@pytest.fixture
def make_user(db, levels):
    def _make(email, *role_names, employee=None, member=False, password="Rahasia123"):
        user = User(
            name=email.split("@")[0].title(), email=email, employee=employee,
            email_verified_at=timezone.now(), member_verified=member,
            bank_account_number=employee.bank_account_number if employee else "",
        )
        user.set_password(password)
        user.save()
        user.levels.set([levels[r] for r in role_names])
        return user
    return _make


@pytest.fixture
def member(make_user, master_data):
    # anggota terverifikasi dengan saldo sukarela 2 juta
    user = make_user("budi@example.com", roles.ANGGOTA, employee=master_data["emp"], member=True)
    SavingsAccount.objects.create(user=user, saldo_pokok=Decimal("500000"), saldo_sukarela=Decimal("2000000"))
    return user


@pytest.fixture
def dsp(make_user):
    return make_user("dsp@example.com", roles.DIVISI_SIMPAN_PINJAM)


@pytest.fixture
def ketua(make_user):
    return make_user("ketua@example.com", roles.KETUA)


@pytest.fixture
def pengawas(make_user):
    return make_user("pengawas@example.com", roles.PENGAWAS)


@pytest.fixture
def shopkeeper(make_user):
    return make_user("toko@example.com", roles.SHOPKEEPER)


@pytest.fixture
def payroll_user(make_user):
    return make_user("payroll@example.com", roles.PAYROLL)


@pytest.fixture
def deposit_options(db):
    amount = DepositAmountOption.objects.create(code="AMT_500K", label="Rp 500.000", amount=Decimal("500000"))
    tenor = DepositTenorOption.objects.create(code="TENOR_12", label="12 bulan", months=12)
    return {"amount": amount, "tenor": tenor}


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def disbursed_loan(member, dsp, ketua, pengawas, shopkeeper):
    """Pinjaman tunai 5 juta / 12 bulan yang sudah melewati approval, pencairan, dan otorisasi."""
    from kopkar.services import loan_service

    loan = loan_service.create_draft(user=member, data={
        "loan_type": "CASH_LOAN", "loan_amount": Decimal("5000000"), "loan_tenor": 12,
    })
    loan_service.submit(loan_id=loan.id, user=member)
    for approver in (dsp, ketua, pengawas):
        loan_service.process_approval(loan_id=loan.id, user=approver, decision="APPROVED")
    loan_service.disburse(loan_id=loan.id, user=shopkeeper, disbursement_date=date(2025, 1, 10))
    return loan_service.authorize(loan_id=loan.id, user=ketua, authorization_date=date(2025, 1, 10))
