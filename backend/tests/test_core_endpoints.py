"""
Integration tests for core endpoints.

Scope in this file:
- GET        /api/core/dashboard/
- GET        /api/core/dashboard/recent-complaints/
- GET        /api/core/reports/
- GET/PATCH  /api/core/settings/
- GET        /api/core/constants/
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from complaints.models import Assignment, Complaint, ComplaintStatus
from core.models import SystemSetting
from core.permissions_constants import ROLE_CAPABILITIES, Capability


def _user(username: str, phone: str, role: str = "citizen", **extra) -> User:
    return User.objects.create_user(
        username=username,
        password="CoreEndpointsP@ss123",
        email=f"{username}@example.com",
        phone_number=phone,
        first_name=username.split("_")[0].title(),
        last_name="Tester",
        role=role,
        **extra,
    )


def _complaint(citizen: User, title: str = "Pothole on Main Street", **fields) -> Complaint:
    return Complaint.objects.create(
        citizen=citizen,
        title=title,
        description="A deep pothole is damaging cars.",
        location="Main Street",
        **fields,
    )


def _backdate(complaint: Complaint, *, days: int) -> None:
    moment = timezone.now() - timedelta(days=days)
    Complaint.objects.filter(pk=complaint.pk).update(created_at=moment, updated_at=moment)


class CoreEndpointsBase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.citizen = _user("carol_citizen", "09120000001")
        cls.other_citizen = _user("dan_citizen", "09120000002")
        cls.admin = _user("ada_admin", "09120000003", role="admin", department="Public Works")
        cls.officer = _user("oli_officer", "09120000004", role="officer", department="Utilities")
        cls.officer_2 = _user("ola_officer", "09120000005", role="officer", department="Utilities")
        cls.idle_officer = _user("ivy_officer", "09120000006", role="officer", department="Transportation")
        cls.retired_officer = _user(
            "rex_officer", "09120000007", role="officer", department="Transportation", is_active=False,
        )

        cls.c_pending = _complaint(cls.citizen, "Pending pothole", category="roads", priority="high")
        cls.c_assigned = _complaint(cls.citizen, "Dark streetlight", category="streetlight",
                                    status=ComplaintStatus.ASSIGNED)
        cls.c_resolved = _complaint(cls.citizen, "Fixed leak", category="water",
                                    status=ComplaintStatus.RESOLVED)
        cls.c_other = _complaint(cls.other_citizen, "Overflowing bins", category="sanitation",
                                 status=ComplaintStatus.IN_PROGRESS)

        Assignment.objects.create(
            complaint=cls.c_assigned, officer=cls.officer, assigned_by=cls.admin, status="assigned",
        )
        Assignment.objects.create(
            complaint=cls.c_resolved, officer=cls.officer, assigned_by=cls.admin, status="completed",
        )
        Assignment.objects.create(
            complaint=cls.c_other, officer=cls.officer_2, assigned_by=cls.admin, status="in_progress",
        )

    def setUp(self):
        self.client = APIClient()

    def as_user(self, user: User) -> APIClient:
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")
        return self.client


class TestDashboard(CoreEndpointsBase):

    def test_citizen_dashboard_counts_own_complaints(self):
        resp = self.as_user(self.citizen).get(reverse("core:dashboard-stats"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            resp.data, {"total": 3, "pending": 1, "in_progress": 0, "resolved": 1},
        )

    def test_admin_dashboard(self):
        resp = self.as_user(self.admin).get(reverse("core:dashboard-stats"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["total_complaints"], 4)
        self.assertEqual(resp.data["pending"], 1)
        self.assertEqual(resp.data["assigned"], 1)
        self.assertEqual(resp.data["resolved"], 1)
        # Officers and administrators, active or not.
        self.assertEqual(resp.data["total_officers"], 5)
        self.assertEqual(resp.data["active_officers"], 4)

    def test_officer_dashboard_is_scoped(self):
        resp = self.as_user(self.officer).get(reverse("core:dashboard-stats"))

        self.assertEqual(resp.data["total_complaints"], 2)
        self.assertEqual(resp.data["pending"], 0)

    def test_dashboard_shape_follows_capability(self):
        officer_caps = ROLE_CAPABILITIES["officer"] - {Capability.VIEW_STAFF_DASHBOARD}

        with patch.dict(ROLE_CAPABILITIES, {"officer": officer_caps}):
            resp = self.as_user(self.officer).get(reverse("core:dashboard-stats"))

        self.assertEqual(set(resp.data), {"total", "pending", "in_progress", "resolved"})
        self.assertEqual(resp.data["total"], 2)

    def test_dashboard_requires_authentication(self):
        resp = self.client.get(reverse("core:dashboard-stats"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_recent_complaints_limits(self):
        for i in range(12):
            _complaint(self.citizen, f"Extra complaint {i}")

        citizen_rows = self.as_user(self.citizen).get(reverse("core:dashboard-recent-complaints")).data
        admin_rows = self.as_user(self.admin).get(reverse("core:dashboard-recent-complaints")).data

        self.assertEqual(len(citizen_rows), 5)
        self.assertEqual(len(admin_rows), 10)
        self.assertEqual(citizen_rows[0]["title"], "Extra complaint 11")
        self.assertEqual(citizen_rows[0]["citizen_name"], "Carol Tester")


class TestReports(CoreEndpointsBase):

    def test_citizen_is_refused(self):
        resp = self.as_user(self.citizen).get(reverse("core:reports"))
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_summary(self):
        resp = self.as_user(self.admin).get(reverse("core:reports"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        summary = resp.data["summary"]
        self.assertEqual(summary["total_complaints"], 4)
        statuses = {row["status"]: row["count"] for row in summary["status_distribution"]}
        self.assertEqual(statuses, {"pending": 1, "assigned": 1, "resolved": 1, "in_progress": 1})
        categories = {row["category"]: row["count"] for row in summary["category_distribution"]}
        self.assertEqual(categories["roads"], 1)
        assignments = {row["status"]: row["count"] for row in summary["assignment_distribution"]}
        self.assertEqual(assignments, {"assigned": 1, "completed": 1, "in_progress": 1})

    def test_department_stats_and_zero_completion_rate(self):
        resp = self.as_user(self.admin).get(reverse("core:reports"))

        rows = {row["department"]: row for row in resp.data["department_stats"]}
        # Only departments with officers; the admin's department is not one.
        self.assertEqual(set(rows), {"Utilities", "Transportation"})
        self.assertEqual(rows["Utilities"]["officers"], 2)
        self.assertEqual(rows["Utilities"]["total_assignments"], 3)
        self.assertEqual(rows["Utilities"]["completed_assignments"], 1)
        self.assertEqual(rows["Utilities"]["completion_rate"], 33)
        self.assertEqual(rows["Transportation"]["total_assignments"], 0)
        self.assertEqual(rows["Transportation"]["completion_rate"], 0)

    def test_top_officers(self):
        resp = self.as_user(self.admin).get(reverse("core:reports"))

        self.assertEqual(
            resp.data["top_officers"],
            [{
                "id": self.officer.pk,
                "name": "Oli Tester",
                "department": "Utilities",
                "completed_assignments": 1,
            }],
        )

    def test_department_filter_applies_to_assignment_distribution(self):
        resp = self.as_user(self.admin).get(reverse("core:reports"), {"department": "Transportation"})

        self.assertEqual(resp.data["summary"]["assignment_distribution"], [])
        self.assertEqual(resp.data["summary"]["total_complaints"], 4)

    def test_officer_report_is_scoped(self):
        resp = self.as_user(self.officer).get(reverse("core:reports"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["summary"]["total_complaints"], 2)
        self.assertEqual(resp.data["department_stats"], [])
        self.assertEqual(resp.data["top_officers"], [])
        assignments = {row["status"]: row["count"] for row in resp.data["summary"]["assignment_distribution"]}
        self.assertEqual(assignments, {"assigned": 1, "completed": 1})

    def test_date_window_is_inclusive_and_needs_both_bounds(self):
        _backdate(self.c_pending, days=30)
        today = timezone.localdate()
        client = self.as_user(self.admin)

        windowed = client.get(reverse("core:reports"), {
            "start_date": (today - timedelta(days=1)).isoformat(),
            "end_date": today.isoformat(),
        })
        half_open = client.get(reverse("core:reports"), {
            "start_date": (today - timedelta(days=1)).isoformat(),
        })

        self.assertEqual(windowed.data["summary"]["total_complaints"], 3)
        self.assertEqual(len(windowed.data["recent_complaints"]), 3)
        self.assertEqual(half_open.data["summary"]["total_complaints"], 4)

    def test_reversed_window_rejected(self):
        today = timezone.localdate()

        resp = self.as_user(self.admin).get(reverse("core:reports"), {
            "start_date": today.isoformat(),
            "end_date": (today - timedelta(days=3)).isoformat(),
        })

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_seven_day_trend(self):
        _backdate(self.c_pending, days=3)
        _backdate(self.c_other, days=10)

        trend = self.as_user(self.admin).get(reverse("core:reports")).data["trend"]

        self.assertEqual(len(trend), 7)
        today = timezone.localdate()
        self.assertEqual(trend[-1]["date"], today.isoformat())
        self.assertEqual(trend[0]["date"], (today - timedelta(days=6)).isoformat())
        self.assertEqual(trend[-1]["complaints"], 2)
        self.assertEqual(trend[-1]["resolved"], 1)
        self.assertEqual(trend[-4]["complaints"], 1)
        self.assertEqual(sum(day["complaints"] for day in trend), 3)

    def test_recent_complaints_capped_at_ten(self):
        for i in range(12):
            _complaint(self.other_citizen, f"Bulk complaint {i}")

        resp = self.as_user(self.admin).get(reverse("core:reports"))

        self.assertEqual(len(resp.data["recent_complaints"]), 10)


class TestSystemSettings(CoreEndpointsBase):

    def test_admin_reads_defaults(self):
        resp = self.as_user(self.admin).get(reverse("core:system-settings"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["default_priority"], "medium")
        self.assertIs(resp.data["allow_backward_status_transitions"], True)

    def test_non_admins_refused(self):
        for user in (self.officer, self.citizen):
            with self.subTest(user=user.username):
                client = self.as_user(user)
                self.assertEqual(client.get(reverse("core:system-settings")).status_code, 403)
                self.assertEqual(
                    client.patch(reverse("core:system-settings"), {"site_name": "X"}, format="json").status_code,
                    403,
                )

    def test_patch_persists(self):
        resp = self.as_user(self.admin).patch(
            reverse("core:system-settings"),
            {"site_name": "Springfield 311", "max_file_size_mb": 10},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["site_name"], "Springfield 311")
        self.assertEqual(resp.data["max_file_size_mb"], 10)
        row = SystemSetting.objects.get(key="site_name")
        self.assertEqual(row.value, "Springfield 311")
        self.assertEqual(row.updated_by, self.admin)

    def test_patch_rejects_unknown_key_and_bad_type(self):
        client = self.as_user(self.admin)

        unknown = client.patch(reverse("core:system-settings"), {"theme": "dark"}, format="json")
        bad_type = client.patch(
            reverse("core:system-settings"),
            {"site_name": "Fine", "maintenance_mode": "yes"},
            format="json",
        )

        self.assertEqual(unknown.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(bad_type.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(SystemSetting.objects.exists())


class TestSystemConstants(TestCase):

    def test_constants_are_public(self):
        resp = APIClient().get(reverse("core:system-constants"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn({"value": "in_progress", "label": "In Progress"}, resp.data["complaint_statuses"])
        self.assertEqual(
            [c["value"] for c in resp.data["assignment_statuses"]],
            ["assigned", "in_progress", "completed"],
        )
        self.assertEqual(
            [r["value"] for r in resp.data["roles"]], ["citizen", "officer", "admin"],
        )
        self.assertIn("Public Works", resp.data["departments"])
        self.assertEqual(len(resp.data["complaint_categories"]), 8)
