import pytest
from datetime import date
from decimal import Decimal
from django.core.exceptions import ValidationError

from kopkar.models import Employee, MemberApplication, SavingsAccount
from kopkar.services import approval_service, member_application_service as svc
from kopkar.utils import roles
from kopkar.utils.exceptions import Conflict

APPLICATION = {"nik": "3201010101900001", "date_of_birth": date(1990, 1, 1), "birth_place": "Bandung"}


@pytest.fixture
def applicant(make_user, master_data):
    emp = Employee.objects.create(
        employee_number="E2001002", full_name="Siti Aminah", department=master_data["dept"],
        bank_account_number="999000111",
    )
    return make_user("siti@example.com", employee=emp)


@pytest.mark.django_db
def test_submit_application(applicant, master_data):
    app = svc.submit(user=applicant, data=dict(APPLICATION))
    assert app.status == "SUBMITTED"
    assert app.current_step == "DIVISI_SIMPAN_PINJAM"
    assert app.entrance_fee == Decimal("500000")
    assert app.remaining_amount == Decimal("500000")
    assert app.department == master_data["dept"]


@pytest.mark.django_db
def test_final_approval_verifies_member(applicant, dsp, ketua):
    app = svc.submit(user=applicant, data=dict(APPLICATION))
    app = svc.process_approval(application_id=app.id, user=dsp, decision="APPROVED")
    assert app.status == "UNDER_REVIEW_KETUA"
    app = svc.process_approval(application_id=app.id, user=ketua, decision="APPROVED")
    assert app.status == "APPROVED"

    applicant.refresh_from_db()
    applicant.forget_roles()
    assert applicant.member_verified is True
    assert applicant.nik == APPLICATION["nik"]
    assert applicant.has_role(roles.ANGGOTA)
    assert SavingsAccount.objects.filter(user=applicant).exists()


@pytest.mark.django_db
def test_duplicate_nik_conflict(applicant, member):
    member.nik = APPLICATION["nik"]
    member.save(update_fields=["nik"])
    with pytest.raises(Conflict):
        svc.submit(user=applicant, data=dict(APPLICATION))


@pytest.mark.django_db
def test_single_open_application(applicant):
    svc.submit(user=applicant, data=dict(APPLICATION))
    with pytest.raises(ValidationError):
        svc.submit(user=applicant, data=dict(APPLICATION))


@pytest.mark.django_db
def test_member_cannot_apply_again(member):
    with pytest.raises(ValidationError):
        svc.submit(user=member, data=dict(APPLICATION))


def test_entrance_fee_two_installments():
    app = MemberApplication(
        installment_plan=MemberApplication.InstallmentPlan.TWO_MONTHS,
        entrance_fee=Decimal("500000"), paid_amount=Decimal("0"), remaining_amount=Decimal("500000"),
    )
    assert svc.entrance_fee_due(app) == Decimal("250000")
    app.paid_amount = Decimal("250000")
    app.remaining_amount = Decimal("250000")
    assert svc.entrance_fee_due(app) == Decimal("250000")
    app.is_paid_off = True
    assert svc.entrance_fee_due(app) == Decimal("0")


@pytest.mark.django_db
def test_pending_application_reserves_nik(applicant, make_user):
    svc.submit(user=applicant, data=dict(APPLICATION))
    other = make_user("rudi@example.com")
    with pytest.raises(Conflict):
        svc.submit(user=other, data=dict(APPLICATION, npwp=""))
    assert not MemberApplication.objects.filter(user=other).exists()


@pytest.mark.django_db
def test_bulk_approval_reports_nik_conflict(applicant, make_user, dsp, ketua):
    first = svc.submit(user=applicant, data=dict(APPLICATION))
    other = make_user("rudi@example.com")
    # pengajuan lama dengan NIK sama yang sudah terlanjur masuk antrean
    second = MemberApplication.objects.create(
        user=other, nik=APPLICATION["nik"], date_of_birth=date(1991, 2, 2), birth_place="Bogor",
        entrance_fee=Decimal("500000"), remaining_amount=Decimal("500000"),
    )
    approval_service.start_review(svc.MEMBER_FLOW, second, other)

    for app in (first, second):
        svc.process_approval(application_id=app.id, user=dsp, decision="APPROVED")
    svc.process_approval(application_id=first.id, user=ketua, decision="APPROVED")

    results = svc.bulk_process_approval(application_ids=[second.id], user=ketua, decision="APPROVED")
    assert results["success"] == []
    assert results["failed"] == [{"id": second.id, "reason": "NIK sudah terdaftar"}]

    second.refresh_from_db()
    other.refresh_from_db()
    assert second.status == "UNDER_REVIEW_KETUA"
    assert other.member_verified is False
    assert other.nik is None
