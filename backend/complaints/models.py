"""
Complaints app models.

Covers the complaint lifecycle: a citizen files a complaint, an
administrator binds it to an officer through an ``Assignment``, the
officer works the assignment to completion, and everyone with
visibility annotates the complaint with ``Comment`` rows.

Complaints are never deleted; the furthest they go is ``closed``.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ComplaintCategory(models.TextChoices):
    ROADS = "roads", "Roads & Potholes"
    STREETLIGHT = "streetlight", "Streetlights"
    SANITATION = "sanitation", "Sanitation & Garbage"
    WATER = "water", "Water Supply"
    TREE = "tree", "Trees & Vegetation"
    ELECTRICITY = "electricity", "Electricity"
    DRAINAGE = "drainage", "Drainage & Sewage"
    OTHERS = "others", "Others"


class ComplaintPriority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"


class ComplaintStatus(models.TextChoices):
    """
    Complaint status.  Declaration order is the forward order of the
    lifecycle: pending → assigned → in_progress → resolved → closed.
    """

    PENDING = "pending", "Pending"
    ASSIGNED = "assigned", "Assigned"
    IN_PROGRESS = "in_progress", "In Progress"
    RESOLVED = "resolved", "Resolved"
    CLOSED = "closed", "Closed"


class AssignmentStatus(models.TextChoices):
    ASSIGNED = "assigned", "Assigned"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"


#: Assignment statuses that count as "active"; at most one per complaint.
ACTIVE_ASSIGNMENT_STATUSES = (AssignmentStatus.ASSIGNED, AssignmentStatus.IN_PROGRESS)

#: Assignment status → the complaint status it forces.
ASSIGNMENT_CASCADE: dict[str, str] = {
    AssignmentStatus.ASSIGNED.value: ComplaintStatus.ASSIGNED.value,
    AssignmentStatus.IN_PROGRESS.value: ComplaintStatus.IN_PROGRESS.value,
    AssignmentStatus.COMPLETED.value: ComplaintStatus.RESOLVED.value,
}


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Complaint(TimeStampedModel):
    """
    A civic issue reported by a citizen.

    ``status`` starts at ``pending`` and is only ever advanced by the
    lifecycle engine (assignment cascade or a direct staff override).
    """

    citizen = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Citizen",
    )
    title = models.CharField(
        max_length=100,
        verbose_name="Title",
    )
    description = models.TextField(
        max_length=1000,
        verbose_name="Description",
    )
    category = models.CharField(
        max_length=20,
        choices=ComplaintCategory.choices,
        default=ComplaintCategory.OTHERS,
        db_index=True,
        verbose_name="Category",
    )
    priority = models.CharField(
        max_length=10,
        choices=ComplaintPriority.choices,
        default=ComplaintPriority.MEDIUM,
        db_index=True,
        verbose_name="Priority",
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.PENDING,
        db_index=True,
        verbose_name="Status",
    )
    location = models.CharField(
        max_length=255,
        verbose_name="Location",
    )
    area = models.CharField(
        max_length=100,
        blank=True,
        default="",
        verbose_name="Area",
    )
    landmark = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Landmark",
    )
    images = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Image URLs",
    )

    class Meta:
        verbose_name = "Complaint"
        verbose_name_plural = "Complaints"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Complaint #{self.pk}: {self.title} [{self.get_status_display()}]"


class AssignmentQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status__in=ACTIVE_ASSIGNMENT_STATUSES)


class Assignment(models.Model):
    """
    Binds a complaint to the officer responsible for it.

    A complaint accumulates assignments over time (reassignment creates a
    new row) and the newest by ``assigned_at`` is authoritative.  The
    database refuses a second *active* assignment for the same complaint.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="assignments",
        verbose_name="Complaint",
    )
    officer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assignments",
        verbose_name="Officer",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assignments_made",
        verbose_name="Assigned By",
    )
    priority = models.CharField(
        max_length=10,
        choices=ComplaintPriority.choices,
        default=ComplaintPriority.MEDIUM,
        verbose_name="Priority",
    )
    status = models.CharField(
        max_length=20,
        choices=AssignmentStatus.choices,
        default=AssignmentStatus.ASSIGNED,
        db_index=True,
        verbose_name="Status",
    )
    notes = models.TextField(
        blank=True,
        default="",
        verbose_name="Notes",
    )
    due_date = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Due Date",
    )
    assigned_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name="Assigned At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    objects = AssignmentQuerySet.as_manager()

    class Meta:
        verbose_name = "Assignment"
        verbose_name_plural = "Assignments"
        ordering = ["-assigned_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["complaint"],
                condition=models.Q(status__in=["assigned", "in_progress"]),
                name="unique_active_assignment_per_complaint",
            ),
        ]

    def __str__(self):
        return f"Assignment #{self.pk}: complaint {self.complaint_id} → {self.officer_id} [{self.status}]"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_ASSIGNMENT_STATUSES


class Comment(models.Model):
    """Append-only annotation on a complaint."""

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="comments",
        verbose_name="Complaint",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaint_comments",
        verbose_name="Author",
    )
    content = models.TextField(
        max_length=1000,
        verbose_name="Content",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )

    class Meta:
        verbose_name = "Comment"
        verbose_name_plural = "Comments"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Comment #{self.pk} on complaint {self.complaint_id} by {self.user_id}"
