import pytest
from rest_framework.test import APIClient

from kopkar.models import LoanApplication

CASH = {"loan_type": "CASH_LOAN", "loan_amount": "5000000", "loan_tenor": 12, "loan_purpose": "Renovasi"}


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.mark.django_db
def test_member_creates_and_submits_loan(member):
    client = client_for(member)
    resp = client.post("/api/loans/", CASH, format="json")
    assert resp.status_code == 201, resp.content
    loan_id = resp.json()["id"]
    assert resp.json()["status"] == "DRAFT"

    resp = client.post(f"/api/loans/{loan_id}/submit/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "SUBMITTED"
    assert body["current_step"] == "DIVISI_SIMPAN_PINJAM"
    assert [a["step"] for a in body["approvals"]] == ["DIVISI_SIMPAN_PINJAM", "KETUA", "PENGAWAS"]


@pytest.mark.django_db
def test_non_member_cannot_create(make_user):
    resp = client_for(make_user("luar@example.com")).post("/api/loans/", CASH, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_my_loans_paginated(member):
    client = client_for(member)
    for _ in range(3):
        assert client.post("/api/loans/", CASH, format="json").status_code == 201

    resp = client.get("/api/loans/my/?page=2&limit=2&sortBy=createdAt&sortOrder=asc")
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}
    assert len(body["data"]) == 1


@pytest.mark.django_db
def test_approval_endpoints_are_role_gated(member, dsp, ketua):
    client = client_for(member)
    loan_id = client.post("/api/loans/", CASH, format="json").json()["id"]
    client.post(f"/api/loans/{loan_id}/submit/")

    # anggota biasa tidak punya role approver
    assert client.post(f"/api/loans/{loan_id}/approve/", {"decision": "APPROVED"}, format="json").status_code == 403
    # ketua bukan pemegang tahap DSP
    resp = client_for(ketua).post(f"/api/loans/{loan_id}/approve/", {"decision": "APPROVED"}, format="json")
    assert resp.status_code == 403

    pending = client_for(dsp).get("/api/loans/pending-approval/")
    assert pending.status_code == 200
    assert [x["id"] for x in pending.json()["data"]] == [loan_id]

    resp = client_for(dsp).post(f"/api/loans/{loan_id}/approve/", {"decision": "APPROVED", "notes": "ok"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["status"] == "UNDER_REVIEW_KETUA"


@pytest.mark.django_db
def test_bulk_approve_returns_per_item_results(member, dsp):
    client = client_for(member)
    loan_id = client.post("/api/loans/", CASH, format="json").json()["id"]
    client.post(f"/api/loans/{loan_id}/submit/")

    resp = client_for(dsp).post("/api/loans/bulk-approve/", {"ids": [loan_id, 424242], "decision": "APPROVED"}, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"].endswith("1 berhasil, 1 gagal")
    assert body["results"]["success"][0]["id"] == loan_id
    assert body["results"]["failed"][0]["id"] == 424242


@pytest.mark.django_db
def test_other_member_cannot_see_loan(member, make_user, master_data):
    loan_id = client_for(member).post("/api/loans/", CASH, format="json").json()["id"]
    other = make_user("lain@example.com", "anggota", member=True)
    assert client_for(other).get(f"/api/loans/{loan_id}/").status_code == 403
    assert client_for(member).get(f"/api/loans/{loan_id}/").status_code == 200


@pytest.mark.django_db
def test_missing_loan_is_404(dsp):
    assert client_for(dsp).get("/api/loans/999999/").status_code == 404


@pytest.mark.django_db
def test_shopkeeper_disbursement_flow(member, dsp, ketua, pengawas, shopkeeper):
    client = client_for(member)
    loan_id = client.post("/api/loans/", CASH, format="json").json()["id"]
    client.post(f"/api/loans/{loan_id}/submit/")
    for approver in (dsp, ketua, pengawas):
        resp = client_for(approver).post(f"/api/loans/{loan_id}/approve/", {"decision": "APPROVED"}, format="json")
        assert resp.status_code == 200

    pending = client_for(shopkeeper).get("/api/loans/pending-disbursement/")
    assert [x["id"] for x in pending.json()["data"]] == [loan_id]

    resp = client_for(shopkeeper).post(f"/api/loans/{loan_id}/disburse/", {"disbursement_date": "2025-01-10"}, format="json")
    assert resp.status_code == 200, resp.content
    assert resp.json()["status"] == "PENDING_AUTHORIZATION"

    resp = client_for(ketua).post(f"/api/loans/{loan_id}/authorize/", {}, format="json")
    assert resp.status_code == 200, resp.content
    assert LoanApplication.objects.get(pk=loan_id).status == "DISBURSED"

    resp = client.get(f"/api/loans/{loan_id}/installments/")
    assert resp.status_code == 200
