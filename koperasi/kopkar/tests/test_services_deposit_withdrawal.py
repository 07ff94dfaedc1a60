import pytest
from datetime import timedelta
from decimal import Decimal
from django.core.exceptions import PermissionDenied, ValidationError
from django.utils import timezone

from kopkar.models import DepositApplication, SavingsAccount, SavingsTransaction
from kopkar.services import deposit_withdrawal_service as svc


def _deposit(user, days_to_maturity=180, collected="3000000", status=DepositApplication.Status.ACTIVE):
    today = timezone.localdate()
    return DepositApplication.objects.create(
        deposit_number=f"DEP-{user.id}-{days_to_maturity}", user=user, amount_code="AMT_500K", tenor_code="TENOR_12",
        amount_value=Decimal("500000"), tenor_months=12, interest_rate=Decimal("4"),
        status=status, installment_count=6, collected_amount=Decimal(collected),
        activated_at=today - timedelta(days=180), maturity_date=today + timedelta(days=days_to_maturity),
    )


def _approved(member, dsp, ketua, deposit, amount="1000000"):
    w = svc.create(user=member, deposit_id=deposit.id, amount=Decimal(amount), reason="Renovasi rumah")
    svc.process_approval(withdrawal_id=w.id, user=dsp, decision="APPROVED")
    return svc.process_approval(withdrawal_id=w.id, user=ketua, decision="APPROVED")


@pytest.mark.django_db
def test_early_withdrawal_is_penalised(member):
    deposit = _deposit(member)
    w = svc.create(user=member, deposit_id=deposit.id, amount=Decimal("1000000"))
    assert w.withdrawal_number.startswith("WD-")
    assert w.status == "SUBMITTED"
    assert w.current_step == "DIVISI_SIMPAN_PINJAM"
    assert w.is_early_withdrawal is True
    assert w.penalty_amount == Decimal("30000")
    assert w.net_amount == Decimal("970000")
    assert w.bank_account_number == "1234567890"


@pytest.mark.django_db
def test_matured_deposit_has_no_penalty(member):
    deposit = _deposit(member, days_to_maturity=-1)
    calc = svc.preview(deposit_id=deposit.id, user=member, amount=Decimal("1000000"))
    assert calc["is_early_withdrawal"] is False
    assert calc["penalty_amount"] == Decimal("0")
    assert calc["net_amount"] == Decimal("1000000")


@pytest.mark.django_db
def test_amount_limited_to_collected_funds(member):
    deposit = _deposit(member, collected="500000")
    with pytest.raises(ValidationError):
        svc.create(user=member, deposit_id=deposit.id, amount=Decimal("600000"))


@pytest.mark.django_db
def test_only_one_open_withdrawal_per_deposit(member):
    deposit = _deposit(member)
    svc.create(user=member, deposit_id=deposit.id, amount=Decimal("500000"))
    with pytest.raises(ValidationError):
        svc.create(user=member, deposit_id=deposit.id, amount=Decimal("500000"))


@pytest.mark.django_db
def test_only_owner_of_running_deposit_can_withdraw(member, make_user):
    other = make_user("lain@example.com", "anggota", member=True)
    with pytest.raises(PermissionDenied):
        svc.create(user=other, deposit_id=_deposit(member).id, amount=Decimal("100000"))

    draft = _deposit(member, days_to_maturity=90, status=DepositApplication.Status.DRAFT)
    with pytest.raises(ValidationError):
        svc.create(user=member, deposit_id=draft.id, amount=Decimal("100000"))


@pytest.mark.django_db
def test_withdrawal_end_to_end(member, dsp, ketua, shopkeeper):
    deposit = _deposit(member)
    w = _approved(member, dsp, ketua, deposit)
    assert w.status == "APPROVED_WAITING_DISBURSEMENT"

    w = svc.confirm_disbursement(withdrawal_id=w.id, user=shopkeeper)
    assert w.status == "DISBURSEMENT_IN_PROGRESS"
    w = svc.confirm_authorization(withdrawal_id=w.id, user=ketua)
    assert w.status == "COMPLETED"
    assert w.authorized_by == ketua

    deposit.refresh_from_db()
    assert deposit.collected_amount == Decimal("2000000")
    account = SavingsAccount.objects.get(user=member)
    assert account.saldo_sukarela == Decimal("1000000")
    entry = SavingsTransaction.objects.get(account=account, penarikan__gt=0)
    assert entry.penarikan == Decimal("1000000")
    assert w.withdrawal_number in entry.note


@pytest.mark.django_db
def test_bulk_steps_report_per_item(member, dsp, ketua, shopkeeper):
    deposit = _deposit(member)
    w = _approved(member, dsp, ketua, deposit)

    results = svc.bulk_confirm_authorization(withdrawal_ids=[w.id], user=ketua)
    assert results["success"] == []
    assert results["failed"][0]["id"] == w.id

    results = svc.bulk_confirm_disbursement(withdrawal_ids=[w.id, 999999], user=shopkeeper)
    assert results["success"] == [{"id": w.id, "new_status": "DISBURSEMENT_IN_PROGRESS", "number": w.withdrawal_number}]
    assert results["failed"] == [{"id": 999999, "reason": "Data tidak ditemukan"}]


@pytest.mark.django_db
def test_cancel_then_withdraw_again(member):
    deposit = _deposit(member)
    w = svc.create(user=member, deposit_id=deposit.id, amount=Decimal("500000"))
    assert svc.cancel(withdrawal_id=w.id, user=member).status == "CANCELLED"
    assert svc.create(user=member, deposit_id=deposit.id, amount=Decimal("500000")).status == "SUBMITTED"
