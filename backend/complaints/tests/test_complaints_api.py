"""
Integration tests: complaints, assignments and comments over HTTP.

Endpoints under test:
    GET/POST   /api/complaints/
    GET        /api/complaints/{id}/
    PATCH      /api/complaints/{id}/status/
    GET/POST   /api/complaints/{id}/comments/
    GET/POST   /api/assignments/
    GET/PATCH  /api/assignments/{id}/

Domain errors surface through the global exception handler as
``{"detail": ...}`` with 400 / 403 / 404 / 409.
"""

from __future__ import annotations

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from complaints.models import Assignment, Comment, Complaint, ComplaintStatus
from core.models import SystemSetting

_PASSWORD = "Str0ng!Pass99"

_COMPLAINT_PAYLOAD = {
    "title": "Streetlight out on 5th Avenue",
    "description": "The streetlight at the corner has been dark for a week.",
    "category": "streetlight",
    "priority": "medium",
    "location": "5th Avenue & Pine",
    "area": "Downtown",
    "landmark": "City Hall",
}


def _make_user(username: str, phone: str, role: str = "citizen", **extra) -> User:
    return User.objects.create_user(
        username=username,
        password=_PASSWORD,
        email=f"{username}@example.com",
        phone_number=phone,
        first_name=username.split("_")[0].title(),
        last_name="Tester",
        role=role,
        **extra,
    )


class ComplaintAPITestBase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.citizen = _make_user("carol_citizen", "09120000001")
        cls.other_citizen = _make_user("dave_citizen", "09120000002")
        cls.admin = _make_user("alice_admin", "09120000003", role="admin", department="Public Works")
        cls.officer = _make_user("oscar_officer", "09120000004", role="officer", department="Utilities")
        cls.officer_2 = _make_user("olga_officer", "09120000005", role="officer", department="Transportation")

    def setUp(self):
        from core.settings_store import reset_settings_store

        reset_settings_store()
        self.client = APIClient()

    def as_user(self, user: User) -> APIClient:
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")
        return self.client

    def file_complaint(self, user=None, **overrides) -> dict:
        resp = self.as_user(user or self.citizen).post(
            "/api/complaints/", {**_COMPLAINT_PAYLOAD, **overrides}, format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        return resp.data

    def assign(self, complaint_id: int, officer: User):
        return self.as_user(self.admin).post(
            "/api/assignments/",
            {"complaint": complaint_id, "officer": officer.pk},
            format="json",
        )


class TestFileComplaint(ComplaintAPITestBase):

    def test_citizen_files_pending_complaint(self):
        data = self.file_complaint()

        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["citizen"]["id"], self.citizen.pk)
        self.assertEqual(data["assignments"], [])
        self.assertEqual(data["comments"], [])

    def test_status_in_payload_is_ignored(self):
        data = self.file_complaint(status="resolved")
        self.assertEqual(data["status"], "pending")

    def test_category_and_priority_default_from_settings(self):
        payload = {k: v for k, v in _COMPLAINT_PAYLOAD.items() if k not in ("category", "priority")}
        resp = self.as_user(self.citizen).post("/api/complaints/", payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["category"], "others")
        self.assertEqual(resp.data["priority"], "medium")

    def test_staff_cannot_file(self):
        resp = self.as_user(self.officer).post("/api/complaints/", _COMPLAINT_PAYLOAD, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_maintenance_mode_blocks_filing(self):
        SystemSetting.objects.create(key="maintenance_mode", value=True)

        resp = self.as_user(self.citizen).post("/api/complaints/", _COMPLAINT_PAYLOAD, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(Complaint.objects.exists())

    def test_image_type_must_be_allowed(self):
        resp = self.as_user(self.citizen).post(
            "/api/complaints/",
            {**_COMPLAINT_PAYLOAD, "images": ["https://cdn.example.com/photo.exe"]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        data = self.file_complaint(images=["https://cdn.example.com/photo.JPG"])
        self.assertEqual(data["images"], ["https://cdn.example.com/photo.JPG"])

    def test_short_title_rejected(self):
        resp = self.as_user(self.citizen).post(
            "/api/complaints/", {**_COMPLAINT_PAYLOAD, "title": "Hole"}, format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("title", resp.data)

    def test_unauthenticated_rejected(self):
        resp = APIClient().post("/api/complaints/", _COMPLAINT_PAYLOAD, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)


class TestListAndRetrieve(ComplaintAPITestBase):

    def test_citizen_lists_only_own_with_pagination_envelope(self):
        self.file_complaint()
        self.file_complaint(user=self.other_citizen, title="Overflowing bins on Oak")

        resp = self.as_user(self.citizen).get("/api/complaints/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["pagination"]["total"], 1)
        self.assertEqual(resp.data["pagination"]["page"], 1)
        self.assertEqual(resp.data["results"][0]["citizen"]["id"], self.citizen.pk)

    def test_limit_and_page(self):
        for i in range(3):
            self.file_complaint(title=f"Pothole number {i}")

        resp = self.as_user(self.admin).get("/api/complaints/", {"limit": 2, "page": 2})

        self.assertEqual(resp.data["pagination"], {"page": 2, "limit": 2, "total": 3, "pages": 2})
        self.assertEqual(len(resp.data["results"]), 1)
        # Newest first: page 2 holds the oldest.
        self.assertEqual(resp.data["results"][0]["title"], "Pothole number 0")

    def test_filters_and_search(self):
        self.file_complaint()
        self.file_complaint(title="Burst water main", category="water", priority="critical")

        client = self.as_user(self.admin)
        self.assertEqual(client.get("/api/complaints/", {"category": "water"}).data["pagination"]["total"], 1)
        self.assertEqual(client.get("/api/complaints/", {"priority": "critical"}).data["pagination"]["total"], 1)
        self.assertEqual(client.get("/api/complaints/", {"search": "burst"}).data["pagination"]["total"], 1)
        self.assertEqual(client.get("/api/complaints/", {"search": "carol"}).data["pagination"]["total"], 2)
        self.assertEqual(client.get("/api/complaints/", {"status": "pending"}).data["pagination"]["total"], 2)

    def test_invalid_filter_value(self):
        resp = self.as_user(self.admin).get("/api/complaints/", {"status": "archived"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_citizen_gets_404(self):
        complaint = self.file_complaint()

        resp = self.as_user(self.other_citizen).get(f"/api/complaints/{complaint['id']}/")

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_unassigned_officer_gets_403(self):
        complaint = self.file_complaint()

        resp = self.as_user(self.officer).get(f"/api/complaints/{complaint['id']}/")

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_complaint_404(self):
        resp = self.as_user(self.admin).get("/api/complaints/424242/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)


class TestAssignmentFlow(ComplaintAPITestBase):

    def test_scenario_over_http(self):
        complaint_id = self.file_complaint()["id"]
        detail_url = f"/api/complaints/{complaint_id}/"

        resp = self.assign(complaint_id, self.officer)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        assignment_id = resp.data["id"]
        self.assertEqual(resp.data["status"], "assigned")
        self.assertEqual(self.as_user(self.citizen).get(detail_url).data["status"], "assigned")

        resp = self.assign(complaint_id, self.officer_2)
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

        resp = self.as_user(self.officer).patch(
            f"/api/assignments/{assignment_id}/", {"status": "in_progress"}, format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(self.as_user(self.citizen).get(detail_url).data["status"], "in_progress")

        resp = self.as_user(self.officer).patch(
            f"/api/assignments/{assignment_id}/",
            {"status": "completed", "notes": "Replaced the bulb."},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["notes"], "Replaced the bulb.")

        detail = self.as_user(self.citizen).get(detail_url)
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data["status"], "resolved")
        self.assertEqual(len(detail.data["assignments"]), 1)

        self.assertEqual(
            self.as_user(self.officer_2).get(detail_url).status_code,
            status.HTTP_403_FORBIDDEN,
        )

    def test_officer_cannot_assign(self):
        complaint_id = self.file_complaint()["id"]

        resp = self.as_user(self.officer).post(
            "/api/assignments/", {"complaint": complaint_id, "officer": self.officer.pk}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_assign_to_non_officer_404(self):
        complaint_id = self.file_complaint()["id"]
        resp = self.assign(complaint_id, self.other_citizen)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_officer_cannot_update_priority(self):
        complaint_id = self.file_complaint()["id"]
        assignment_id = self.assign(complaint_id, self.officer).data["id"]

        resp = self.as_user(self.officer).patch(
            f"/api/assignments/{assignment_id}/", {"priority": "low"}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_assignment_status(self):
        complaint_id = self.file_complaint()["id"]
        assignment_id = self.assign(complaint_id, self.officer).data["id"]

        resp = self.as_user(self.officer).patch(
            f"/api/assignments/{assignment_id}/", {"status": "resolved"}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_assignment_update(self):
        complaint_id = self.file_complaint()["id"]
        assignment_id = self.assign(complaint_id, self.officer).data["id"]

        resp = self.as_user(self.admin).patch(f"/api/assignments/{assignment_id}/", {}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assignment_list_scoping(self):
        first = self.file_complaint()["id"]
        second = self.file_complaint(title="Fallen tree on the path")["id"]
        self.assign(first, self.officer)
        self.assign(second, self.officer_2)

        own = self.as_user(self.officer).get("/api/assignments/")
        everything = self.as_user(self.admin).get("/api/assignments/")
        by_department = self.as_user(self.admin).get("/api/assignments/", {"department": "Transportation"})
        citizen = self.as_user(self.citizen).get("/api/assignments/")

        self.assertEqual([a["complaint"] for a in own.data], [first])
        self.assertEqual(len(everything.data), 2)
        self.assertEqual([a["complaint"] for a in by_department.data], [second])
        self.assertEqual(citizen.status_code, status.HTTP_403_FORBIDDEN)

    def test_officer_cannot_read_foreign_assignment(self):
        complaint_id = self.file_complaint()["id"]
        assignment_id = self.assign(complaint_id, self.officer).data["id"]

        resp = self.as_user(self.officer_2).get(f"/api/assignments/{assignment_id}/")

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class TestStatusOverride(ComplaintAPITestBase):

    def test_admin_closes_complaint(self):
        complaint_id = self.file_complaint()["id"]

        resp = self.as_user(self.admin).patch(
            f"/api/complaints/{complaint_id}/status/", {"status": "closed"}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "closed")

    def test_invalid_status_value(self):
        complaint_id = self.file_complaint()["id"]

        resp = self.as_user(self.admin).patch(
            f"/api/complaints/{complaint_id}/status/", {"status": "archived"}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_backward_transition_setting(self):
        complaint_id = self.file_complaint()["id"]
        url = f"/api/complaints/{complaint_id}/status/"
        client = self.as_user(self.admin)

        client.patch("/api/core/settings/", {"allow_backward_status_transitions": False}, format="json")
        self.assertEqual(client.patch(url, {"status": "resolved"}, format="json").status_code, 200)

        resp = client.patch(url, {"status": "pending"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Complaint.objects.get(pk=complaint_id).status, ComplaintStatus.RESOLVED)

    def test_citizen_cannot_override(self):
        complaint_id = self.file_complaint()["id"]

        resp = self.as_user(self.citizen).patch(
            f"/api/complaints/{complaint_id}/status/", {"status": "closed"}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class TestComments(ComplaintAPITestBase):

    def test_citizen_and_bound_officer_comment(self):
        complaint_id = self.file_complaint()["id"]
        self.assign(complaint_id, self.officer)
        url = f"/api/complaints/{complaint_id}/comments/"

        first = self.as_user(self.citizen).post(url, {"content": "  Any update?  "}, format="json")
        second = self.as_user(self.officer).post(url, {"content": "Crew scheduled."}, format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data["content"], "Any update?")
        self.assertEqual(second.status_code, status.HTTP_201_CREATED)

        listing = self.as_user(self.admin).get(url)
        self.assertEqual(
            [c["content"] for c in listing.data], ["Any update?", "Crew scheduled."],
        )

    def test_blank_and_overlong_content_rejected(self):
        complaint_id = self.file_complaint()["id"]
        url = f"/api/complaints/{complaint_id}/comments/"
        client = self.as_user(self.citizen)

        self.assertEqual(client.post(url, {"content": "   "}, format="json").status_code, 400)
        self.assertEqual(client.post(url, {"content": "x" * 1001}, format="json").status_code, 400)
        self.assertEqual(client.post(url, {"content": "x" * 1000}, format="json").status_code, 201)

    def test_comments_gated_by_visibility(self):
        complaint_id = self.file_complaint()["id"]
        url = f"/api/complaints/{complaint_id}/comments/"

        resp_citizen = self.as_user(self.other_citizen).post(url, {"content": "Me too"}, format="json")
        resp_officer = self.as_user(self.officer).get(url)

        self.assertEqual(resp_citizen.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp_officer.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Comment.objects.exists())

    def test_superseded_officer_can_still_comment(self):
        complaint_id = self.file_complaint()["id"]
        first_id = self.assign(complaint_id, self.officer).data["id"]
        self.as_user(self.officer).patch(f"/api/assignments/{first_id}/", {"status": "completed"}, format="json")
        self.assertEqual(self.assign(complaint_id, self.officer_2).status_code, 201)

        resp = self.as_user(self.officer).post(
            f"/api/complaints/{complaint_id}/comments/", {"content": "Handed over."}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Assignment.objects.filter(complaint_id=complaint_id).count(), 2)
