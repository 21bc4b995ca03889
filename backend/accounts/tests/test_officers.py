"""
Integration tests: administrator management of staff accounts.

Endpoints under test (prefix /api/accounts/officers/):
    GET    /                  list with per-status assignment stats
    POST   /                  create
    GET    /{id}/             retrieve
    PATCH  /{id}/             partial update
    POST   /{id}/activate/
    POST   /{id}/deactivate/
"""

from __future__ import annotations

import pytest

from complaints.models import Assignment, Complaint

pytestmark = pytest.mark.django_db

URL = "/api/accounts/officers/"

_NEW_OFFICER = {
    "username": "new_officer",
    "password": "Str0ng!Pass99",
    "email": "new_officer@civic.gov",
    "phone_number": "+15550001111",
    "first_name": "Nora",
    "last_name": "Field",
    "department": "Transportation",
}


@pytest.fixture()
def admin(create_user):
    return create_user(username="chief_admin", role="admin", department="Public Works")


@pytest.fixture()
def officer(create_user):
    return create_user(username="field_officer", role="officer", department="Utilities")


def test_admin_creates_officer(admin, login_as):
    resp = login_as(admin).post(URL, _NEW_OFFICER, format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["role"] == "officer"
    assert resp.data["department"] == "Transportation"


def test_create_with_taken_email_conflicts(admin, officer, login_as):
    payload = {**_NEW_OFFICER, "email": officer.email}

    resp = login_as(admin).post(URL, payload, format="json")

    assert resp.status_code == 409


def test_create_with_unknown_department(admin, login_as):
    resp = login_as(admin).post(URL, {**_NEW_OFFICER, "department": "Space Program"}, format="json")
    assert resp.status_code == 400


def test_officer_cannot_manage_officers(officer, login_as):
    client = login_as(officer)

    assert client.get(URL).status_code == 403
    assert client.post(URL, _NEW_OFFICER, format="json").status_code == 403


def test_list_includes_assignment_stats(admin, officer, create_user, login_as):
    citizen = create_user(username="stats_citizen")
    for status in ("assigned", "completed", "completed"):
        complaint = Complaint.objects.create(
            citizen=citizen, title="Broken bench", description="The bench is broken.", location="Park",
        )
        Assignment.objects.create(
            complaint=complaint, officer=officer, assigned_by=admin, status=status,
        )
    create_user(username="plain_citizen")

    resp = login_as(admin).get(URL)

    assert resp.status_code == 200
    rows = {row["username"]: row for row in resp.data}
    assert set(rows) == {"chief_admin", "field_officer"}
    assert rows["field_officer"]["stats"] == {
        "total": 3, "assigned": 1, "in_progress": 0, "completed": 2,
    }
    assert rows["chief_admin"]["stats"]["total"] == 0


def test_list_filters(admin, officer, login_as):
    client = login_as(admin)

    assert [r["username"] for r in client.get(URL, {"role": "officer"}).data] == ["field_officer"]
    assert [r["username"] for r in client.get(URL, {"department": "Public Works"}).data] == ["chief_admin"]
    assert [r["username"] for r in client.get(URL, {"search": "field"}).data] == ["field_officer"]


def test_update_officer(admin, officer, login_as):
    resp = login_as(admin).patch(f"{URL}{officer.pk}/", {"department": "Parks & Recreation"}, format="json")

    assert resp.status_code == 200
    officer.refresh_from_db()
    assert officer.department == "Parks & Recreation"


def test_retrieve_citizen_is_not_found(admin, create_user, login_as):
    citizen = create_user(username="not_staff")
    assert login_as(admin).get(f"{URL}{citizen.pk}/").status_code == 404


def test_deactivate_and_activate(admin, officer, login_as):
    client = login_as(admin)

    resp = client.post(f"{URL}{officer.pk}/deactivate/")
    assert resp.status_code == 200
    assert resp.data["is_active"] is False
    officer.refresh_from_db()
    assert not officer.is_active
    assert officer.capabilities == frozenset()

    resp = client.post(f"{URL}{officer.pk}/activate/")
    assert resp.status_code == 200
    assert resp.data["is_active"] is True


def test_admin_cannot_deactivate_self(admin, login_as):
    resp = login_as(admin).post(f"{URL}{admin.pk}/deactivate/")

    assert resp.status_code == 400
    admin.refresh_from_db()
    assert admin.is_active
