import pytest
from django.core import mail

from kopkar.models import Employee, User
from kopkar.utils.auth import ACCESS_COOKIE, REFRESH_COOKIE

REGISTER = {
    "name": "Siti Aminah", "email": "siti@example.com", "employee_number": "E2001002",
    "password": "Rahasia123", "conf_password": "Rahasia123",
}


@pytest.fixture
def free_employee(master_data):
    return Employee.objects.create(employee_number="E2001002", full_name="Siti Aminah", department=master_data["dept"])


@pytest.mark.django_db
def test_register_verify_login_me(api_client, free_employee, levels):
    resp = api_client.post("/api/auth/register/", REGISTER, format="json")
    assert resp.status_code == 201, resp.content
    assert resp.json()["email_verified"] is False
    assert len(mail.outbox) == 1

    # belum verifikasi email
    resp = api_client.post("/api/auth/login/", {"email_or_nik": "siti@example.com", "password": "Rahasia123"}, format="json")
    assert resp.status_code == 401

    token = User.objects.get(email="siti@example.com").verification_token
    resp = api_client.get(f"/api/auth/verify-email/?token={token}")
    assert resp.status_code == 200

    resp = api_client.post("/api/auth/login/", {"email_or_nik": "siti@example.com", "password": "Rahasia123"}, format="json")
    assert resp.status_code == 200
    assert resp.cookies[ACCESS_COOKIE].value
    assert resp.cookies[REFRESH_COOKIE]["httponly"]

    resp = api_client.get("/api/auth/me/")
    assert resp.status_code == 200
    assert resp.json()["employee"]["employee_number"] == "E2001002"
    assert "anggota" in resp.json()["roles"]


@pytest.mark.django_db
def test_register_unknown_employee(api_client, levels):
    resp = api_client.post("/api/auth/register/", {**REGISTER, "employee_number": "X999"}, format="json")
    assert resp.status_code == 400
    assert "employee_number" in resp.json()


@pytest.mark.django_db
def test_register_employee_already_linked(api_client, member):
    resp = api_client.post("/api/auth/register/", {**REGISTER, "employee_number": "E1501001"}, format="json")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_register_weak_password(api_client, free_employee):
    resp = api_client.post("/api/auth/register/", {**REGISTER, "password": "abc", "conf_password": "abc"}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_wrong_password(api_client, member):
    resp = api_client.post("/api/auth/login/", {"email_or_nik": member.email, "password": "Salah123"}, format="json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_refresh_and_logout(api_client, member):
    resp = api_client.post("/api/auth/login/", {"email_or_nik": member.email, "password": "Rahasia123"}, format="json")
    assert resp.status_code == 200

    resp = api_client.post("/api/auth/refresh/")
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == member.id

    resp = api_client.post("/api/auth/logout/")
    assert resp.status_code == 200
    assert resp.cookies[ACCESS_COOKIE].value == ""


@pytest.mark.django_db
def test_me_requires_login(api_client):
    resp = api_client.get("/api/auth/me/")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_change_password(api_client, member):
    api_client.force_authenticate(user=member)
    resp = api_client.post("/api/profile/change-password/", {
        "current_password": "Rahasia123", "new_password": "BaruSekali1", "confirm_password": "BaruSekali1",
    }, format="json")
    assert resp.status_code == 200, resp.content
    member.refresh_from_db()
    assert member.check_password("BaruSekali1")
