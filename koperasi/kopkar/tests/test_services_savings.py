import pytest
from decimal import Decimal
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError

from kopkar.models import DepositApplication, SavingsAccount, SavingsTransaction
from kopkar.services import buku_tabungan_service, savings_withdrawal_service as svc


def _approved_withdrawal(member, dsp, ketua, amount="1000000"):
    w = svc.create(user=member, amount=Decimal(amount), reason="Biaya sekolah")
    svc.process_approval(withdrawal_id=w.id, user=dsp, decision="APPROVED")
    return svc.process_approval(withdrawal_id=w.id, user=ketua, decision="APPROVED")


@pytest.mark.django_db
def test_calculate_without_running_deposit(member):
    calc = svc.calculate(member, Decimal("1000000"))
    assert calc["has_early_deposit_penalty"] is False
    assert calc["net_amount"] == Decimal("1000000")
    assert calc["saldo_sukarela"] == Decimal("2000000")


@pytest.mark.django_db
def test_running_deposit_applies_early_penalty(member):
    DepositApplication.objects.create(
        deposit_number="DEP-1", user=member, amount_code="AMT_500K", tenor_code="TENOR_12",
        amount_value=Decimal("500000"), tenor_months=12, interest_rate=Decimal("4"),
        status=DepositApplication.Status.ACTIVE,
    )
    calc = svc.calculate(member, Decimal("1000000"))
    assert calc["has_early_deposit_penalty"] is True
    assert calc["early_deposit_penalty_amount"] == Decimal("30000")
    assert calc["net_amount"] == Decimal("970000")


@pytest.mark.django_db
def test_create_starts_review(member):
    w = svc.create(user=member, amount=Decimal("1000000"))
    assert w.status == "SUBMITTED"
    assert w.current_step == "DIVISI_SIMPAN_PINJAM"
    assert w.withdrawal_number.startswith("SW-")
    assert w.bank_account_number == "1234567890"


@pytest.mark.django_db
def test_cannot_withdraw_more_than_balance(member):
    with pytest.raises(ValidationError):
        svc.create(user=member, amount=Decimal("2500000"))


@pytest.mark.django_db
def test_only_one_open_withdrawal(member):
    svc.create(user=member, amount=Decimal("500000"))
    with pytest.raises(ValidationError):
        svc.create(user=member, amount=Decimal("500000"))


@pytest.mark.django_db
def test_withdrawal_end_to_end(member, dsp, ketua, shopkeeper):
    w = _approved_withdrawal(member, dsp, ketua)
    assert w.status == "APPROVED_WAITING_DISBURSEMENT"

    w = svc.confirm_disbursement(withdrawal_id=w.id, user=shopkeeper)
    assert w.status == "DISBURSEMENT_IN_PROGRESS"
    assert w.disbursed_by == shopkeeper

    w = svc.confirm_authorization(withdrawal_id=w.id, user=ketua)
    assert w.status == "COMPLETED"

    account = SavingsAccount.objects.get(user=member)
    assert account.saldo_sukarela == Decimal("1000000")
    entry = SavingsTransaction.objects.get(account=account, penarikan__gt=0)
    assert entry.penarikan == Decimal("1000000")
    assert w.withdrawal_number in entry.note


@pytest.mark.django_db
def test_authorization_requires_disbursement(member, dsp, ketua):
    w = _approved_withdrawal(member, dsp, ketua)
    with pytest.raises(ValidationError):
        svc.confirm_authorization(withdrawal_id=w.id, user=ketua)

    results = svc.bulk_confirm_authorization(withdrawal_ids=[w.id], user=ketua)
    assert results["success"] == []
    assert results["failed"][0]["id"] == w.id


@pytest.mark.django_db
def test_cancel_submitted_withdrawal(member):
    w = svc.create(user=member, amount=Decimal("500000"))
    w = svc.cancel(withdrawal_id=w.id, user=member)
    assert w.status == "CANCELLED"
    # setelah dibatalkan boleh mengajukan lagi
    assert svc.create(user=member, amount=Decimal("500000")).status == "SUBMITTED"


@pytest.mark.django_db
def test_buku_tabungan_summary(member):
    data = buku_tabungan_service.my_account(member)
    assert data["balances"]["saldo_sukarela"] == Decimal("2000000")
    assert data["balances"]["total_saldo"] == Decimal("2500000")


@pytest.mark.django_db
def test_buku_tabungan_requires_membership(make_user):
    outsider = make_user("luar@example.com")
    with pytest.raises(PermissionDenied):
        buku_tabungan_service.my_account(outsider)
    with pytest.raises(ObjectDoesNotExist):
        buku_tabungan_service.account_of_user(outsider.id)
