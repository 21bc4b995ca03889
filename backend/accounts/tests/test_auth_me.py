"""
Integration tests: the current-user endpoint.

Endpoint under test:  GET / PATCH /api/accounts/me/
                      (named URL: accounts:me)
"""

from __future__ import annotations

import pytest
from django.urls import reverse

pytestmark = pytest.mark.django_db


@pytest.fixture()
def me_url():
    return reverse("accounts:me")


def test_me_requires_authentication(api_client, me_url):
    assert api_client.get(me_url).status_code == 401


def test_me_returns_profile_and_capabilities(api_client, create_user, login_as, me_url):
    officer = create_user(username="me_officer", role="officer", department="Utilities")

    resp = login_as(officer).get(me_url)

    assert resp.status_code == 200
    assert resp.data["username"] == "me_officer"
    assert resp.data["role"] == "officer"
    assert resp.data["department"] == "Utilities"
    assert "update_own_assignment" in resp.data["capabilities"]
    assert "assign_complaint" not in resp.data["capabilities"]


def test_patch_updates_allowed_fields(create_user, login_as, me_url):
    user = create_user(username="me_citizen")

    resp = login_as(user).patch(
        me_url,
        {"first_name": "Renamed", "phone_number": "+447700900123"},
        format="json",
    )

    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.first_name == "Renamed"
    assert user.phone_number == "+447700900123"


def test_patch_cannot_change_role(create_user, login_as, me_url):
    user = create_user(username="me_citizen")

    resp = login_as(user).patch(me_url, {"role": "admin", "department": "Utilities"}, format="json")

    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.role == "citizen"
    assert user.department == ""


def test_patch_rejects_email_taken_by_another_account(create_user, login_as, me_url):
    create_user(username="first", email="taken@example.com")
    user = create_user(username="second")

    resp = login_as(user).patch(me_url, {"email": "TAKEN@example.com"}, format="json")

    assert resp.status_code == 400
    assert "email" in resp.data
