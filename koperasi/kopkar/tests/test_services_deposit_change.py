import pytest
from datetime import date
from decimal import Decimal
from django.core.exceptions import PermissionDenied, ValidationError

from kopkar.models import (
    DepositAmountOption, DepositApplication, DepositChangeRequest, DepositTenorOption, SavingsAccount, SavingsTransaction,
)
from kopkar.services import deposit_change_service as svc

AGREED = {"agreed_to_terms": True, "agreed_to_admin_fee": True}


@pytest.fixture
def running_deposit(member, deposit_options):
    DepositAmountOption.objects.create(code="AMT_1M", label="Rp 1.000.000", amount=Decimal("1000000"))
    DepositTenorOption.objects.create(code="TENOR_24", label="24 bulan", months=24)
    DepositTenorOption.objects.create(code="TENOR_3", label="3 bulan", months=3)
    return DepositApplication.objects.create(
        deposit_number="DEP-20250101-0001", user=member, amount_code="AMT_500K", tenor_code="TENOR_12",
        amount_value=Decimal("500000"), tenor_months=12, interest_rate=Decimal("4"),
        status=DepositApplication.Status.ACTIVE, installment_count=4, collected_amount=Decimal("2000000"),
        activated_at=date(2025, 1, 27), maturity_date=date(2026, 1, 27),
    )


def _draft(member, deposit, **codes):
    return svc.create_draft(user=member, data={"deposit_id": deposit.id, **AGREED, **codes})


@pytest.mark.django_db
def test_draft_snapshots_current_values(member, running_deposit):
    change = _draft(member, running_deposit, new_amount_code="AMT_1M")
    assert change.change_number.startswith("CHG-")
    assert change.status == "DRAFT"
    assert change.change_type == "AMOUNT_CHANGE"
    assert change.current_amount_value == Decimal("500000")
    assert change.new_amount_value == Decimal("1000000")
    assert change.new_tenor_months == 12
    assert change.admin_fee == Decimal("15000")


@pytest.mark.django_db
def test_change_type_both(member, running_deposit):
    change = _draft(member, running_deposit, new_amount_code="AMT_1M", new_tenor_code="TENOR_24")
    assert change.change_type == "BOTH"


@pytest.mark.django_db
def test_request_without_change_rejected(member, running_deposit):
    with pytest.raises(ValidationError) as exc:
        _draft(member, running_deposit, new_amount_code="AMT_500K", new_tenor_code="TENOR_12")
    assert "Tidak ada perubahan yang diajukan" in exc.value.messages


@pytest.mark.django_db
def test_new_tenor_must_exceed_paid_installments(member, running_deposit):
    with pytest.raises(ValidationError):
        _draft(member, running_deposit, new_tenor_code="TENOR_3")


@pytest.mark.django_db
def test_admin_fee_must_be_accepted(member, running_deposit):
    with pytest.raises(ValidationError):
        svc.create_draft(user=member, data={
            "deposit_id": running_deposit.id, "agreed_to_terms": True, "agreed_to_admin_fee": False,
            "new_amount_code": "AMT_1M",
        })


@pytest.mark.django_db
def test_one_open_change_per_deposit(member, running_deposit):
    _draft(member, running_deposit, new_amount_code="AMT_1M")
    with pytest.raises(ValidationError):
        _draft(member, running_deposit, new_tenor_code="TENOR_24")


@pytest.mark.django_db
def test_other_member_cannot_change_deposit(make_user, running_deposit):
    other = make_user("lain@example.com", "anggota", member=True)
    with pytest.raises(PermissionDenied):
        _draft(other, running_deposit, new_amount_code="AMT_1M")


@pytest.mark.django_db
def test_approval_applies_change_and_charges_fee(member, dsp, ketua, running_deposit):
    change = _draft(member, running_deposit, new_amount_code="AMT_1M", new_tenor_code="TENOR_24")
    change = svc.submit(change_id=change.id, user=member)
    assert change.status == "SUBMITTED"
    svc.process_approval(change_id=change.id, user=dsp, decision="APPROVED")
    change = svc.process_approval(change_id=change.id, user=ketua, decision="APPROVED")
    assert change.status == "APPROVED"

    running_deposit.refresh_from_db()
    assert running_deposit.amount_value == Decimal("1000000")
    assert running_deposit.amount_code == "AMT_1M"
    assert running_deposit.tenor_months == 24
    assert running_deposit.maturity_date == date(2027, 1, 27)
    assert running_deposit.collected_amount == Decimal("2000000")

    account = SavingsAccount.objects.get(user=member)
    assert account.saldo_sukarela == Decimal("1985000")
    entry = SavingsTransaction.objects.get(account=account)
    assert entry.penarikan == Decimal("15000")
    assert change.change_number in entry.note


@pytest.mark.django_db
def test_rejection_leaves_deposit_untouched(member, dsp, running_deposit):
    change = _draft(member, running_deposit, new_amount_code="AMT_1M")
    svc.submit(change_id=change.id, user=member)
    change = svc.process_approval(change_id=change.id, user=dsp, decision="REJECTED", notes="Belum waktunya")
    assert change.status == "REJECTED"
    running_deposit.refresh_from_db()
    assert running_deposit.amount_value == Decimal("500000")
    assert SavingsAccount.objects.get(user=member).saldo_sukarela == Decimal("2000000")
    # setelah ditolak boleh mengajukan lagi
    assert _draft(member, running_deposit, new_tenor_code="TENOR_24").status == "DRAFT"


@pytest.mark.django_db
def test_update_and_delete_draft(member, running_deposit):
    change = _draft(member, running_deposit, new_amount_code="AMT_1M")
    change = svc.update_draft(change_id=change.id, user=member, data={"new_tenor_code": "TENOR_24"})
    assert change.change_type == "BOTH"
    assert svc.comparison(change)["difference"] == {"amount_value": Decimal("500000"), "tenor_months": 12}

    svc.delete_draft(change_id=change.id, user=member)
    assert not DepositChangeRequest.objects.filter(id=change.id).exists()
