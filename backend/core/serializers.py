"""
Core app serializers.

Mostly **response-only** serializers for the aggregated endpoints
served by the core app: dashboards, reports, runtime settings and
system constants.  The only input serializer is
``ReportQuerySerializer``, which validates the report's query string.

Architectural note
------------------
These serializers never import models from other apps.  They work
exclusively with plain Python dicts / lists produced by the service
layer, keeping the core app decoupled from ``accounts`` and
``complaints``.
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers


# ════════════════════════════════════════════════════════════════════
#  Shared rows
# ════════════════════════════════════════════════════════════════════

class RecentComplaintSerializer(serializers.Serializer):
    """
    Abbreviated complaint used by dashboard and report feeds.

    Example::

        {
            "id": 17,
            "title": "Broken streetlight",
            "category": "streetlight",
            "priority": "medium",
            "status": "assigned",
            "location": "5th Avenue",
            "area": "North",
            "citizen_name": "Jane Doe",
            "created_at": "2025-06-15T10:30:00Z"
        }
    """

    id = serializers.IntegerField()
    title = serializers.CharField()
    category = serializers.CharField()
    priority = serializers.CharField()
    status = serializers.CharField()
    location = serializers.CharField()
    area = serializers.CharField(allow_blank=True)
    citizen_name = serializers.CharField()
    created_at = serializers.DateTimeField()


class StatusCountSerializer(serializers.Serializer):
    status = serializers.CharField(help_text="Machine-readable status key.")
    label = serializers.CharField(help_text="Human-readable display label.")
    count = serializers.IntegerField()


class CategoryCountSerializer(serializers.Serializer):
    category = serializers.CharField()
    label = serializers.CharField()
    count = serializers.IntegerField()


class PriorityCountSerializer(serializers.Serializer):
    priority = serializers.CharField()
    label = serializers.CharField()
    count = serializers.IntegerField()


# ════════════════════════════════════════════════════════════════════
#  Dashboards
# ════════════════════════════════════════════════════════════════════

class CitizenDashboardSerializer(serializers.Serializer):
    """Counts over the complaints the citizen filed."""

    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    resolved = serializers.IntegerField()


class StaffDashboardSerializer(serializers.Serializer):
    """
    Counts over the staff member's visible complaints, plus staff
    account totals (officers and administrators).
    """

    total_complaints = serializers.IntegerField()
    pending = serializers.IntegerField()
    assigned = serializers.IntegerField()
    resolved = serializers.IntegerField()
    total_officers = serializers.IntegerField()
    active_officers = serializers.IntegerField()


# ════════════════════════════════════════════════════════════════════
#  Reports
# ════════════════════════════════════════════════════════════════════

class ReportQuerySerializer(serializers.Serializer):
    """
    Query parameters for ``GET /api/core/reports/``.

    The window is applied only when both dates are supplied.
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    department = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError(
                {"end_date": "end_date must not be before start_date."}
            )
        return attrs


class ReportSummarySerializer(serializers.Serializer):
    total_complaints = serializers.IntegerField()
    status_distribution = StatusCountSerializer(many=True)
    category_distribution = CategoryCountSerializer(many=True)
    priority_distribution = PriorityCountSerializer(many=True)
    assignment_distribution = StatusCountSerializer(many=True)


class DepartmentStatSerializer(serializers.Serializer):
    """
    Example::

        {
            "department": "Public Works",
            "officers": 3,
            "total_assignments": 8,
            "completed_assignments": 6,
            "completion_rate": 75
        }
    """

    department = serializers.CharField()
    officers = serializers.IntegerField()
    total_assignments = serializers.IntegerField()
    completed_assignments = serializers.IntegerField()
    completion_rate = serializers.IntegerField(
        help_text="Completed / total assignments as a whole percentage; 0 with no assignments.",
    )


class TopOfficerSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    department = serializers.CharField(allow_blank=True)
    completed_assignments = serializers.IntegerField()


class TrendPointSerializer(serializers.Serializer):
    date = serializers.DateField()
    complaints = serializers.IntegerField(help_text="Complaints filed that day.")
    resolved = serializers.IntegerField(
        help_text="Complaints now resolved whose last update fell on that day.",
    )


class ReportSerializer(serializers.Serializer):
    summary = ReportSummarySerializer()
    department_stats = DepartmentStatSerializer(many=True)
    top_officers = TopOfficerSerializer(many=True)
    recent_complaints = RecentComplaintSerializer(many=True)
    trend = TrendPointSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  Runtime settings
# ════════════════════════════════════════════════════════════════════

class SystemSettingsSerializer(serializers.Serializer):
    """Shape of the runtime settings snapshot."""

    site_name = serializers.CharField()
    site_description = serializers.CharField()
    contact_email = serializers.CharField()
    max_file_size_mb = serializers.IntegerField()
    allowed_file_types = serializers.ListField(child=serializers.CharField())
    auto_assignment = serializers.BooleanField()
    email_notifications = serializers.BooleanField()
    sms_notifications = serializers.BooleanField()
    default_priority = serializers.CharField()
    default_category = serializers.CharField()
    maintenance_mode = serializers.BooleanField()
    session_timeout_minutes = serializers.IntegerField()
    allow_backward_status_transitions = serializers.BooleanField()


# ════════════════════════════════════════════════════════════════════
#  System Constants
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single choice option.

    Example::

        {"value": "in_progress", "label": "In Progress"}
    """

    value = serializers.CharField()
    label = serializers.CharField()


class SystemConstantsSerializer(serializers.Serializer):
    complaint_categories = ChoiceItemSerializer(many=True)
    complaint_priorities = ChoiceItemSerializer(many=True)
    complaint_statuses = ChoiceItemSerializer(many=True)
    assignment_statuses = ChoiceItemSerializer(many=True)
    roles = ChoiceItemSerializer(many=True)
    departments = serializers.ListField(child=serializers.CharField())
