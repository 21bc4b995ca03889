"""
Core app services: **Service Layer**.

Contains cross-app aggregation logic: role-aware dashboards, the
reporting view, the public constants payload and the runtime settings
endpoint.  Views delegate all business logic to the service classes
defined here, keeping views thin and ensuring testability.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  The core app reads models owned by ``accounts`` and               ║
║  ``complaints``.  To prevent circular imports at module load time: ║
║                                                                    ║
║  1. NEVER import models from other apps at the **module level**.   ║
║     Always import inside the method/function that needs them.      ║
║                                                                    ║
║  2. Preferred pattern:                                             ║
║       from django.apps import apps                                 ║
║       Complaint = apps.get_model("complaints", "Complaint")        ║
║                                                                    ║
║  3. Choice/enum classes (e.g. ComplaintStatus) live in the         ║
║     respective app's ``models.py``.  Import them lazily too.       ║
║                                                                    ║
║  4. Visibility is never re-implemented here: complaint figures     ║
║     are always computed over                                       ║
║     ``LifecycleEngine.visible_complaints(user)``.                  ║
║                                                                    ║
║  5. For aggregations, prefer ``.aggregate()`` and                  ║
║     ``.values().annotate()`` over Python-side loops.               ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, TYPE_CHECKING

from django.apps import apps
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from core.constants import (
    CITIZEN_RECENT_COMPLAINTS,
    REPORT_RECENT_COMPLAINTS,
    STAFF_RECENT_COMPLAINTS,
    TOP_OFFICERS_LIMIT,
    TREND_DAYS,
)
from core.domain.access import apply_capability_scope, require_capability
from core.permissions_constants import STAFF_ROLES, Capability, UserRole
from core.settings_store import SettingsStore, get_settings_store

if TYPE_CHECKING:
    from accounts.models import User


def _visible_complaints(user: User) -> QuerySet:
    from complaints.services import LifecycleEngine

    return LifecycleEngine.visible_complaints(user)


def _day_start(day: date) -> datetime:
    """Midnight of ``day`` in the server's local time zone."""
    return timezone.make_aware(datetime.combine(day, time.min))


def _complaint_summary(complaint) -> dict[str, Any]:
    citizen = complaint.citizen
    return {
        "id": complaint.pk,
        "title": complaint.title,
        "category": complaint.category,
        "priority": complaint.priority,
        "status": complaint.status,
        "location": complaint.location,
        "area": complaint.area,
        "citizen_name": citizen.get_full_name() or citizen.username,
        "created_at": complaint.created_at,
    }


def _grouped_counts(
    qs: QuerySet, field: str, choices_class: type,
) -> list[dict[str, Any]]:
    """Group ``qs`` by ``field`` into ``[{field, label, count}]`` rows."""
    label_map = dict(choices_class.choices)
    rows = qs.values(field).annotate(count=Count("id")).order_by(field)
    return [
        {
            field: row[field],
            "label": str(label_map.get(row[field], row[field])),
            "count": row["count"],
        }
        for row in rows
    ]


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces the role-aware dashboard consumed by
    ``CitizenDashboardSerializer`` / ``StaffDashboardSerializer``.

    * **Citizen**: counts over the complaints they filed.
    * **Officer / Admin**: counts over their visible complaints, plus
      how many staff accounts exist and how many are active.
    """

    def __init__(self, user: User) -> None:
        self.user = user

    @property
    def is_staff_view(self) -> bool:
        return self.user.has_capability(Capability.VIEW_STAFF_DASHBOARD)

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the dashboard statistics dictionary."""
        from complaints.models import ComplaintStatus

        complaint_qs = _visible_complaints(self.user)

        if not self.is_staff_view:
            return complaint_qs.aggregate(
                total=Count("id"),
                pending=Count("id", filter=Q(status=ComplaintStatus.PENDING)),
                in_progress=Count("id", filter=Q(status=ComplaintStatus.IN_PROGRESS)),
                resolved=Count("id", filter=Q(status=ComplaintStatus.RESOLVED)),
            )

        stats = complaint_qs.aggregate(
            total_complaints=Count("id"),
            pending=Count("id", filter=Q(status=ComplaintStatus.PENDING)),
            assigned=Count("id", filter=Q(status=ComplaintStatus.ASSIGNED)),
            resolved=Count("id", filter=Q(status=ComplaintStatus.RESOLVED)),
        )
        stats.update(self._get_staff_counts())
        return stats

    def recent_complaints(self) -> list[dict[str, Any]]:
        """Newest visible complaints; fewer for citizens than for staff."""
        limit = STAFF_RECENT_COMPLAINTS if self.is_staff_view else CITIZEN_RECENT_COMPLAINTS
        qs = (
            _visible_complaints(self.user)
            .select_related("citizen")
            .order_by("-created_at", "-id")[:limit]
        )
        return [_complaint_summary(c) for c in qs]

    # ── Private helpers ─────────────────────────────────────────────

    def _get_staff_counts(self) -> dict[str, int]:
        User = apps.get_model("accounts", "User")
        return User.objects.filter(role__in=STAFF_ROLES).aggregate(
            total_officers=Count("id"),
            active_officers=Count("id", filter=Q(is_active=True)),
        )


# ════════════════════════════════════════════════════════════════════
#  Reporting Service
# ════════════════════════════════════════════════════════════════════

class ReportingService:
    """
    Read-only aggregation over complaints and the assignment ledger.

    The optional reporting window applies only when both ``start_date``
    and ``end_date`` are given.  Both days are included: the window runs
    from midnight of ``start_date`` up to (not including) midnight of
    the day after ``end_date``.  Complaints are windowed on
    ``created_at``, assignments on ``assigned_at``.

    Complaint-side figures are always scoped to what the caller can
    see.  Department statistics and the top-officer table are only
    computed for callers holding ``VIEW_DEPARTMENT_STATS``; otherwise
    they are returned as empty lists.

    The ``trend`` always covers the last ``TREND_DAYS`` local calendar
    days regardless of the window.  Its ``resolved`` figure counts
    complaints currently ``resolved`` whose ``updated_at`` falls on that
    day, which approximates the resolution date.
    """

    def __init__(
        self,
        user: User,
        start_date: date | None = None,
        end_date: date | None = None,
        department: str | None = None,
    ) -> None:
        self.user = user
        self.department = department or None
        if start_date and end_date:
            self.window: tuple[datetime, datetime] | None = (
                _day_start(start_date),
                _day_start(end_date + timedelta(days=1)),
            )
        else:
            self.window = None

    # ── Public API ──────────────────────────────────────────────────

    def get_report(self) -> dict[str, Any]:
        require_capability(
            self.user,
            Capability.VIEW_REPORTS,
            message="Only staff members can view reports.",
        )
        complaint_qs = self._windowed(_visible_complaints(self.user), "created_at")
        with_department_stats = self.user.has_capability(Capability.VIEW_DEPARTMENT_STATS)

        return {
            "summary": self._get_summary(complaint_qs),
            "department_stats": self._get_department_stats() if with_department_stats else [],
            "top_officers": self._get_top_officers() if with_department_stats else [],
            "recent_complaints": self._get_recent_complaints(complaint_qs),
            "trend": self._get_trend(),
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _windowed(self, qs: QuerySet, field: str) -> QuerySet:
        if self.window is None:
            return qs
        start, end = self.window
        return qs.filter(**{f"{field}__gte": start, f"{field}__lt": end})

    def _assignment_queryset(self) -> QuerySet:
        from complaints.services import ASSIGNMENT_SCOPE_RULES

        Assignment = apps.get_model("complaints", "Assignment")
        qs = apply_capability_scope(
            Assignment.objects.all(), self.user, scope_rules=ASSIGNMENT_SCOPE_RULES,
        )
        return self._windowed(qs, "assigned_at")

    def _get_summary(self, complaint_qs: QuerySet) -> dict[str, Any]:
        from complaints.models import (
            AssignmentStatus,
            ComplaintCategory,
            ComplaintPriority,
            ComplaintStatus,
        )

        assignment_qs = self._assignment_queryset()
        if self.department:
            assignment_qs = assignment_qs.filter(officer__department=self.department)

        return {
            "total_complaints": complaint_qs.count(),
            "status_distribution": _grouped_counts(complaint_qs, "status", ComplaintStatus),
            "category_distribution": _grouped_counts(complaint_qs, "category", ComplaintCategory),
            "priority_distribution": _grouped_counts(complaint_qs, "priority", ComplaintPriority),
            "assignment_distribution": _grouped_counts(assignment_qs, "status", AssignmentStatus),
        }

    def _get_department_stats(self) -> list[dict[str, Any]]:
        """One row per department that has at least one officer."""
        from complaints.models import AssignmentStatus

        User = apps.get_model("accounts", "User")
        officer_rows = (
            User.objects
            .filter(role=UserRole.OFFICER)
            .exclude(department="")
            .values("department")
            .annotate(officers=Count("id"))
            .order_by("department")
        )
        assignment_rows = (
            self._assignment_queryset()
            .filter(officer__role=UserRole.OFFICER)
            .values("officer__department")
            .annotate(
                total=Count("id"),
                completed=Count("id", filter=Q(status=AssignmentStatus.COMPLETED)),
            )
        )
        by_department = {row["officer__department"]: row for row in assignment_rows}

        stats = []
        for row in officer_rows:
            counts = by_department.get(row["department"], {})
            total = counts.get("total", 0)
            completed = counts.get("completed", 0)
            stats.append({
                "department": row["department"],
                "officers": row["officers"],
                "total_assignments": total,
                "completed_assignments": completed,
                "completion_rate": round(completed / total * 100) if total else 0,
            })
        return stats

    def _get_top_officers(self) -> list[dict[str, Any]]:
        from complaints.models import AssignmentStatus

        rows = (
            self._assignment_queryset()
            .filter(status=AssignmentStatus.COMPLETED)
            .values(
                "officer_id",
                "officer__username",
                "officer__first_name",
                "officer__last_name",
                "officer__department",
            )
            .annotate(completed=Count("id"))
            .order_by("-completed", "officer_id")[:TOP_OFFICERS_LIMIT]
        )
        return [
            {
                "id": row["officer_id"],
                "name": (
                    f"{row['officer__first_name']} {row['officer__last_name']}".strip()
                    or row["officer__username"]
                ),
                "department": row["officer__department"],
                "completed_assignments": row["completed"],
            }
            for row in rows
        ]

    @staticmethod
    def _get_recent_complaints(complaint_qs: QuerySet) -> list[dict[str, Any]]:
        qs = complaint_qs.select_related("citizen").order_by("-created_at", "-id")
        return [_complaint_summary(c) for c in qs[:REPORT_RECENT_COMPLAINTS]]

    def _get_trend(self) -> list[dict[str, Any]]:
        from complaints.models import ComplaintStatus

        complaint_qs = _visible_complaints(self.user)
        today = timezone.localdate()
        trend = []
        for offset in range(TREND_DAYS - 1, -1, -1):
            day = today - timedelta(days=offset)
            start, end = _day_start(day), _day_start(day + timedelta(days=1))
            trend.append({
                "date": day,
                "complaints": complaint_qs.filter(
                    created_at__gte=start, created_at__lt=end,
                ).count(),
                "resolved": complaint_qs.filter(
                    status=ComplaintStatus.RESOLVED,
                    updated_at__gte=start,
                    updated_at__lt=end,
                ).count(),
            })
        return trend


# ════════════════════════════════════════════════════════════════════
#  System Settings Service
# ════════════════════════════════════════════════════════════════════

class SystemSettingsService:
    """Admin-facing read / write access to the runtime settings store."""

    def __init__(self, store: SettingsStore | None = None) -> None:
        self.store = store or get_settings_store()

    def get_settings(self, actor: User) -> dict[str, Any]:
        require_capability(
            actor,
            Capability.MANAGE_SETTINGS,
            message="Only administrators can view system settings.",
        )
        return self.store.as_dict()

    def update_settings(self, actor: User, changes: dict[str, Any]) -> dict[str, Any]:
        return self.store.update(changes, actor)


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all choice enumerations into a single dict for clients.

    This service is **stateless**: it does not depend on the requesting
    user.  All constants are public information needed to render
    dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import DEPARTMENTS
        from complaints.models import (
            AssignmentStatus,
            ComplaintCategory,
            ComplaintPriority,
            ComplaintStatus,
        )

        to_list = SystemConstantsService._choices_to_list

        return {
            "complaint_categories": to_list(ComplaintCategory),
            "complaint_priorities": to_list(ComplaintPriority),
            "complaint_statuses": to_list(ComplaintStatus),
            "assignment_statuses": to_list(AssignmentStatus),
            "roles": to_list(UserRole),
            "departments": list(DEPARTMENTS),
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
