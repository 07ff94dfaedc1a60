import pytest
from decimal import Decimal
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from kopkar.models import DepositApplication, SavingsAccount
from kopkar.repositories import savings_repository
from kopkar.services import dashboard_service, savings_withdrawal_service


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.mark.django_db
def test_financial_summary(disbursed_loan, member):
    DepositApplication.objects.create(
        deposit_number="DEP-1", user=member, amount_code="AMT_500K", tenor_code="TENOR_12",
        amount_value=Decimal("500000"), tenor_months=12, interest_rate=Decimal("4"),
        status=DepositApplication.Status.ACTIVE,
    )
    summary = dashboard_service.financial_summary(member)
    assert summary["total_savings"] == Decimal("2500000")
    assert summary["active_deposits"] == Decimal("500000")
    assert summary["remaining_loan"] == sum(i.amount for i in disbursed_loan.installments.all())

    first = disbursed_loan.installments.order_by("installment_number").first()
    assert summary["next_bill"]["loan_number"] == disbursed_loan.loan_number
    assert summary["next_bill"]["installment_number"] == first.installment_number
    assert summary["next_bill"]["days_until_due"] == (first.due_date - timezone.localdate()).days


@pytest.mark.django_db
def test_member_and_approver_activities(member, dsp):
    w = savings_withdrawal_service.create(user=member, amount=Decimal("500000"))

    mine = dashboard_service.summary(member)
    assert mine["is_approver"] is False
    assert [(a["object_type"], a["id"]) for a in mine["activities"]] == [("savings_withdrawal", w.id)]

    queue = dashboard_service.summary(dsp)
    assert queue["is_approver"] is True
    assert queue["approver_roles"] == ["divisi_simpan_pinjam"]
    assert queue["activities"][0]["number"] == w.withdrawal_number
    assert queue["activities"][0]["current_step"] == "DIVISI_SIMPAN_PINJAM"


@pytest.mark.django_db
def test_chart_tracks_new_transactions(member):
    account = SavingsAccount.objects.get(user=member)
    today = timezone.localdate()
    savings_repository.add_entry(account.id, today, iuran_bulanan=Decimal("100000"), tabungan_deposito=Decimal("500000"))

    chart = dashboard_service.chart_data(account.id)
    assert len(chart) == 6
    assert chart[-1] == {"month": f"{today:%Y-%m}", "income": Decimal("600000"), "expense": Decimal("0")}

    savings_repository.add_entry(account.id, today, penarikan=Decimal("250000"))
    assert dashboard_service.chart_data(account.id)[-1]["expense"] == Decimal("250000")


@pytest.mark.django_db
def test_dashboard_endpoint(member):
    assert APIClient().get("/api/dashboard/summary/").status_code in (401, 403)

    client = APIClient()
    client.force_authenticate(user=member)
    resp = client.get("/api/dashboard/summary/")
    assert resp.status_code == 200, resp.content
    body = resp.json()
    assert body["greeting"] == {"name": member.name, "employee_number": "E1501001"}
    assert body["financial_summary"]["next_bill"] is None
    assert body["recent_transactions"] == []
