"""
Complaints app serializers.

Contains all Request and Response serializers for the Complaints API.
Serializers handle field definitions, read/write constraints and
field-level validation only.  **No lifecycle rules live here**; those
belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Complaint read serializers (list, detail)
3. Complaint write serializers (create, status override)
4. Assignment serializers
5. Comment serializers
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import (
    Assignment,
    AssignmentStatus,
    Comment,
    Complaint,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user representation nested in complaint payloads."""

    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "full_name", "email", "phone_number", "role", "department"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintFilterSerializer(serializers.Serializer):
    """
    Validates query parameters for ``GET /api/complaints/``.

    ``page`` / ``limit`` are read by ``core.pagination.PageLimitPagination``;
    the keys below are passed to ``ComplaintQueryService.list_for``.
    """

    status = serializers.ChoiceField(choices=ComplaintStatus.choices, required=False)
    category = serializers.ChoiceField(choices=ComplaintCategory.choices, required=False)
    priority = serializers.ChoiceField(choices=ComplaintPriority.choices, required=False)
    search = serializers.CharField(required=False, max_length=255, allow_blank=True)


class AssignmentFilterSerializer(serializers.Serializer):
    """Validates query parameters for ``GET /api/assignments/``."""

    department = serializers.CharField(required=False, max_length=100)
    status = serializers.ChoiceField(choices=AssignmentStatus.choices, required=False)
    priority = serializers.ChoiceField(choices=ComplaintPriority.choices, required=False)
    complaint = serializers.IntegerField(required=False, min_value=1)


# ═══════════════════════════════════════════════════════════════════
#  2. Complaint Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintListSerializer(serializers.ModelSerializer):
    """Compact representation for list pages and dashboards."""

    citizen = UserSummarySerializer(read_only=True)
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "category",
            "category_display",
            "priority",
            "status",
            "status_display",
            "location",
            "area",
            "citizen",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AssignmentSerializer(serializers.ModelSerializer):
    officer = UserSummarySerializer(read_only=True)
    assigned_by = UserSummarySerializer(read_only=True)
    complaint_title = serializers.CharField(source="complaint.title", read_only=True)

    class Meta:
        model = Assignment
        fields = [
            "id",
            "complaint",
            "complaint_title",
            "officer",
            "assigned_by",
            "priority",
            "status",
            "notes",
            "due_date",
            "assigned_at",
            "updated_at",
        ]
        read_only_fields = fields


class CommentSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ["id", "complaint", "user", "content", "created_at"]
        read_only_fields = fields


class ComplaintDetailSerializer(serializers.ModelSerializer):
    """
    Full complaint with its assignment history (newest first) and
    comments (oldest first).
    """

    citizen = UserSummarySerializer(read_only=True)
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    priority_display = serializers.CharField(source="get_priority_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    assignments = AssignmentSerializer(many=True, read_only=True)
    comments = CommentSerializer(many=True, read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "description",
            "category",
            "category_display",
            "priority",
            "priority_display",
            "status",
            "status_display",
            "location",
            "area",
            "landmark",
            "images",
            "citizen",
            "assignments",
            "comments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  3. Complaint Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintCreateSerializer(serializers.Serializer):
    """
    Payload for a citizen filing a complaint.

    ``category`` and ``priority`` are optional; the service fills them
    from the runtime settings when omitted.
    """

    title = serializers.CharField(min_length=5, max_length=100)
    description = serializers.CharField(min_length=10, max_length=1000)
    category = serializers.ChoiceField(choices=ComplaintCategory.choices, required=False)
    priority = serializers.ChoiceField(choices=ComplaintPriority.choices, required=False)
    location = serializers.CharField(min_length=1, max_length=255)
    area = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    landmark = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    images = serializers.ListField(
        child=serializers.URLField(max_length=500),
        required=False,
        default=list,
        max_length=10,
    )


class ComplaintStatusUpdateSerializer(serializers.Serializer):
    """
    Body of ``PATCH /api/complaints/{id}/status/``.

    Enum membership is checked by the lifecycle engine.
    """

    status = serializers.CharField(max_length=20)


# ═══════════════════════════════════════════════════════════════════
#  4. Assignment Write Serializers
# ═══════════════════════════════════════════════════════════════════


class AssignmentCreateSerializer(serializers.Serializer):
    complaint = serializers.IntegerField(min_value=1)
    officer = serializers.IntegerField(min_value=1)
    priority = serializers.ChoiceField(choices=ComplaintPriority.choices, required=False)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class AssignmentUpdateSerializer(serializers.Serializer):
    """
    Body of ``PATCH /api/assignments/{id}/``.

    Officers may only send ``status`` and ``notes``; the service refuses
    anything else from them.
    """

    status = serializers.CharField(required=False, max_length=20)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    priority = serializers.ChoiceField(choices=ComplaintPriority.choices, required=False)
    due_date = serializers.DateTimeField(required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if not attrs:
            raise serializers.ValidationError("Provide at least one field to update.")
        return attrs


# ═══════════════════════════════════════════════════════════════════
#  5. Comment Write Serializers
# ═══════════════════════════════════════════════════════════════════


class CommentCreateSerializer(serializers.Serializer):
    # Blank / overlong content is refused by CommentService.
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
