import pytest
from rest_framework.test import APIClient

from kopkar.models import Department


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.mark.django_db
def test_department_list_is_open_to_members(member, master_data):
    resp = client_for(member).get("/api/departments/")
    assert resp.status_code == 200
    assert any(x["name"] == "Produksi" for x in resp.json())


@pytest.mark.django_db
def test_department_create_requires_admin(member, dsp):
    assert client_for(member).post("/api/departments/", {"name": "Gudang"}, format="json").status_code == 403

    resp = client_for(dsp).post("/api/departments/", {"name": "Gudang"}, format="json")
    assert resp.status_code == 201, resp.content
    assert Department.objects.filter(name="Gudang").exists()

    # nama sama → 409
    assert client_for(dsp).post("/api/departments/", {"name": "Gudang"}, format="json").status_code == 409


@pytest.mark.django_db
def test_department_not_found(dsp):
    resp = client_for(dsp).get("/api/departments/9999/")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Department tidak ditemukan"


@pytest.mark.django_db
def test_settings_grouped_and_update(ketua):
    client = client_for(ketua)
    resp = client.get("/api/settings/")
    assert resp.status_code == 200
    keys = {s["key"] for group in resp.json().values() for s in group}
    assert "loan_interest_rate" in keys

    resp = client.put("/api/settings/loan_interest_rate/", {"value": "9"}, format="json")
    assert resp.status_code == 200, resp.content
    assert client.get("/api/settings/loan_interest_rate/").json()["value"] == "9"

    assert client.put("/api/settings/loan_interest_rate/", {"value": "abc"}, format="json").status_code == 400


@pytest.mark.django_db
def test_approval_flow_configuration(ketua):
    client = client_for(ketua)
    flows = client.get("/api/settings/approval-flows/").json()
    loan = next(f for f in flows if f["object_type"] == "loan")
    assert loan["roles"] == ["divisi_simpan_pinjam", "ketua", "pengawas"]
    assert loan["is_default"] is True

    resp = client.put("/api/settings/approval-flows/deposit/", {"roles": ["ketua"]}, format="json")
    assert resp.status_code == 200, resp.content
    assert resp.json()["roles"] == ["ketua"]
    assert resp.json()["is_default"] is False

    assert client.get("/api/settings/approval-flows/unknown/").status_code == 404


@pytest.mark.django_db
def test_buku_tabungan_me_and_export(member):
    client = client_for(member)
    resp = client.get("/api/buku-tabungan/me/")
    assert resp.status_code == 200

    resp = client.get("/api/buku-tabungan/me/export/")
    assert resp.status_code == 200
    assert resp["Content-Type"].startswith("text/csv")
    assert resp.content.decode().splitlines()[0].startswith("tanggal,periode")


@pytest.mark.django_db
def test_buku_tabungan_staff_only_list(member, dsp):
    assert client_for(member).get("/api/buku-tabungan/").status_code == 403
    resp = client_for(dsp).get("/api/buku-tabungan/")
    assert resp.status_code == 200
    assert resp.json()["meta"]["total"] == 1


@pytest.mark.django_db
def test_deposit_option_admin(member, dsp, deposit_options):
    resp = client_for(member).get("/api/deposit-options/")
    assert resp.status_code == 200

    resp = client_for(dsp).post("/api/deposit-options/tenor/", {
        "code": "TENOR_24", "label": "24 bulan", "months": 24,
    }, format="json")
    assert resp.status_code == 201, resp.content
    assert client_for(dsp).get("/api/deposit-options/unknown/").status_code == 400


@pytest.mark.django_db
def test_payroll_status_and_process(payroll_user, member):
    client = client_for(payroll_user)
    resp = client.get("/api/payroll/status/?month=2&year=2025")
    assert resp.status_code == 200
    assert resp.json()["is_processed"] is False

    resp = client.post("/api/payroll/process/", {"month": 2, "year": 2025}, format="json")
    assert resp.status_code == 201, resp.content
    assert client.post("/api/payroll/process/", {"month": 2, "year": 2025}, format="json").status_code == 409

    assert client_for(member).get("/api/payroll/").status_code == 403
