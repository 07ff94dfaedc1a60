import pytest
from decimal import Decimal
from django.core.exceptions import PermissionDenied, ValidationError

from kopkar.services import deposit_service
from kopkar.services.deposit_option_service import calculate_return

DRAFT = {"amount_code": "AMT_500K", "tenor_code": "TENOR_12", "agreed_to_terms": True}


def test_simple_return_projection():
    out = calculate_return(Decimal("500000"), 12, Decimal("4"), "SIMPLE")
    assert out["total_principal"] == Decimal("6000000")
    assert out["projected_interest"] == Decimal("130000")
    assert out["total_return"] == Decimal("6130000")
    assert len(out["monthly_breakdown"]) == 12


def test_compound_projection():
    simple = calculate_return(Decimal("500000"), 12, Decimal("4"), "SIMPLE")
    compound = calculate_return(Decimal("500000"), 12, Decimal("4"), "COMPOUND")
    assert compound["calculation_method"] == "COMPOUND"
    assert compound["projected_interest"] > 0
    assert compound["total_principal"] == simple["total_principal"]


@pytest.mark.django_db
def test_create_draft_requires_terms(member, deposit_options):
    with pytest.raises(ValidationError):
        deposit_service.create_draft(user=member, data={**DRAFT, "agreed_to_terms": False})


@pytest.mark.django_db
def test_inactive_option_rejected(member, deposit_options):
    deposit_options["amount"].is_active = False
    deposit_options["amount"].save()
    with pytest.raises(ValidationError):
        deposit_service.create_draft(user=member, data=dict(DRAFT))


@pytest.mark.django_db
def test_create_draft_snapshots_option_values(member, deposit_options):
    deposit = deposit_service.create_draft(user=member, data=dict(DRAFT))
    assert deposit.status == "DRAFT"
    assert deposit.amount_value == Decimal("500000")
    assert deposit.tenor_months == 12
    assert deposit.interest_rate == Decimal("4")
    assert deposit.total_return == Decimal("6130000")

    # opsi diubah belakangan tidak mempengaruhi draft
    deposit_options["amount"].amount = Decimal("750000")
    deposit_options["amount"].save()
    deposit.refresh_from_db()
    assert deposit.amount_value == Decimal("500000")


@pytest.mark.django_db
def test_preview(deposit_options):
    out = deposit_service.preview(amount_code="AMT_500K", tenor_code="TENOR_12")
    assert out["amount_code"] == "AMT_500K"
    assert out["projected_interest"] == Decimal("130000")


@pytest.mark.django_db
def test_deposit_approval_sets_schedule(member, dsp, ketua, deposit_options):
    deposit = deposit_service.create_draft(user=member, data=dict(DRAFT))
    deposit = deposit_service.submit(deposit_id=deposit.id, user=member)
    assert deposit.current_step == "DIVISI_SIMPAN_PINJAM"

    deposit_service.process_approval(deposit_id=deposit.id, user=dsp, decision="APPROVED")
    deposit = deposit_service.process_approval(deposit_id=deposit.id, user=ketua, decision="APPROVED")
    assert deposit.status == "APPROVED"
    assert deposit.activated_at is not None
    assert deposit.maturity_date > deposit.activated_at


@pytest.mark.django_db
def test_only_owner_edits_draft(member, dsp, deposit_options):
    deposit = deposit_service.create_draft(user=member, data=dict(DRAFT))
    with pytest.raises(PermissionDenied):
        deposit_service.update_draft(deposit_id=deposit.id, user=dsp, data={"tenor_code": "TENOR_12"})
    deposit_service.submit(deposit_id=deposit.id, user=member)
    with pytest.raises(ValidationError):
        deposit_service.delete_draft(deposit_id=deposit.id, user=member)


@pytest.mark.django_db
def test_collect_installment_completes_at_tenor(member, deposit_options):
    from datetime import date
    deposit = deposit_service.create_draft(user=member, data=dict(DRAFT))
    deposit.installment_count = 11
    deposit.status = "APPROVED"
    deposit.save()
    assert deposit_service.collect_installment(deposit, date(2025, 1, 27)) is True
    assert deposit.status == "COMPLETED"
    assert deposit.collected_amount == Decimal("500000")
