"""
Complaints app Service Layer.

This module is the **single source of truth** for all business logic
in the ``complaints`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``LifecycleEngine``             - Assignment creation, assignment status
                                    cascade, direct complaint status
                                    override, and the visibility predicate.
- ``ComplaintSubmissionService``  - Citizens filing complaints.
- ``ComplaintQueryService``       - Visibility-scoped listing and detail.
- ``CommentService``              - Append-only complaint comments.
- ``AssignmentQueryService``      - Capability-scoped assignment listing.

Lifecycle Overview
------------------
  pending ──(admin creates assignment)──► assigned
  assignment.status  assigned     → complaint.status assigned
  assignment.status  in_progress  → complaint.status in_progress
  assignment.status  completed    → complaint.status resolved
  staff override: any status → any status (backward moves can be
  disabled with the ``allow_backward_status_transitions`` setting)

At most one assignment per complaint is *active* (``assigned`` or
``in_progress``).  The check runs under a row lock on the complaint and
a partial unique constraint on ``Assignment`` is the final guard.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any
from urllib.parse import urlparse

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Prefetch, Q, QuerySet

from core.constants import COMMENT_MAX_LENGTH
from core.domain.access import apply_capability_scope, require_capability
from core.domain.exceptions import (
    Conflict,
    InvalidValue,
    NotFound,
    PermissionDenied,
)
from core.domain.transactions import atomic_transition, lock_for_update
from core.permissions_constants import Capability, UserRole
from core.settings_store import SettingsStore, get_settings_store

from .models import (
    ASSIGNMENT_CASCADE,
    Assignment,
    AssignmentStatus,
    Comment,
    Complaint,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)

User = get_user_model()

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Scope rules
# ═══════════════════════════════════════════════════════════════════

def _complaints_ever_assigned_to(user) -> QuerySet:
    return Assignment.objects.filter(officer=user).values("complaint_id")


#: Complaint visibility, broadest first.  An officer keeps visibility of
#: a complaint through any assignment, including completed or superseded
#: ones.
COMPLAINT_SCOPE_RULES = [
    (Capability.SCOPE_ALL_COMPLAINTS, lambda qs, u: qs),
    (
        Capability.SCOPE_ASSIGNED_COMPLAINTS,
        lambda qs, u: qs.filter(pk__in=_complaints_ever_assigned_to(u)),
    ),
    (Capability.SCOPE_OWN_COMPLAINTS, lambda qs, u: qs.filter(citizen=u)),
]

ASSIGNMENT_SCOPE_RULES = [
    (Capability.SCOPE_ALL_ASSIGNMENTS, lambda qs, u: qs),
    (Capability.SCOPE_OWN_ASSIGNMENTS, lambda qs, u: qs.filter(officer=u)),
]

#: Forward order of complaint statuses, used when backward moves are disabled.
_STATUS_RANK: dict[str, int] = {
    value: rank for rank, value in enumerate(ComplaintStatus.values)
}


def _validate_choice(value: Any, choices: type, label: str) -> str:
    if value not in choices.values:
        raise InvalidValue(
            f"'{value}' is not a valid {label}. "
            f"Expected one of: {', '.join(choices.values)}."
        )
    return str(value)


# ═══════════════════════════════════════════════════════════════════
#  Lifecycle Engine
# ═══════════════════════════════════════════════════════════════════


class LifecycleEngine:
    """
    The rules coupling complaints and their assignments.

    Every mutation runs inside ``transaction.atomic()`` and locks the
    complaint row before reading the state it depends on, so two
    concurrent requests on the same complaint serialize.

    Parameters
    ----------
    settings_store : SettingsStore, optional
        Runtime settings; defaults to the process-wide store.
    """

    def __init__(self, settings_store: SettingsStore | None = None) -> None:
        self.settings_store = settings_store or get_settings_store()

    # ── Visibility ──────────────────────────────────────────────────

    @staticmethod
    def is_visible_to(principal: User, complaint: Complaint) -> bool:
        """
        Whether ``principal`` may see ``complaint``.

        - admin: always.
        - officer: iff some assignment (any status) binds them to it.
        - citizen: iff they filed it.
        - inactive accounts: never.
        """
        if principal.has_capability(Capability.SCOPE_ALL_COMPLAINTS):
            return True
        if principal.has_capability(Capability.SCOPE_ASSIGNED_COMPLAINTS):
            return Assignment.objects.filter(
                complaint_id=complaint.pk, officer_id=principal.pk,
            ).exists()
        if principal.has_capability(Capability.SCOPE_OWN_COMPLAINTS):
            return complaint.citizen_id == principal.pk
        return False

    @staticmethod
    def visible_complaints(principal: User) -> QuerySet:
        """Queryset form of ``is_visible_to``."""
        return apply_capability_scope(
            Complaint.objects.all(), principal, scope_rules=COMPLAINT_SCOPE_RULES,
        )

    @classmethod
    def get_visible_complaint(cls, principal: User, complaint_id: int) -> Complaint:
        """
        Fetch a complaint the principal may see.

        Raises
        ------
        NotFound
            Missing complaint, or hidden from a citizen (existence is not
            leaked to citizens).
        PermissionDenied
            The complaint exists but a staff principal has no binding.
        """
        try:
            complaint = Complaint.objects.select_related("citizen").get(pk=complaint_id)
        except Complaint.DoesNotExist:
            raise NotFound(f"Complaint with id {complaint_id} does not exist.")

        if cls.is_visible_to(principal, complaint):
            return complaint
        if principal.is_active and principal.is_staff_member:
            raise PermissionDenied("You are not assigned to this complaint.")
        raise NotFound(f"Complaint with id {complaint_id} does not exist.")

    # ── Mutations ───────────────────────────────────────────────────

    def create_assignment(
        self,
        complaint_id: int,
        officer_id: int,
        assigner: User,
        priority: str | None = None,
        due_date=None,
        notes: str = "",
    ) -> Assignment:
        """
        Bind a complaint to an officer.

        The new assignment starts ``assigned`` and the complaint is forced
        to ``assigned`` whatever its prior status.  ``priority`` defaults
        to the complaint's own priority.

        Raises
        ------
        PermissionDenied
            ``assigner`` is not an administrator.
        NotFound
            Complaint missing, or ``officer_id`` is not an active officer.
        InvalidValue
            ``priority`` outside the priority enum.
        Conflict
            The complaint already has an active assignment; nothing
            changes.
        """
        require_capability(
            assigner,
            Capability.ASSIGN_COMPLAINT,
            message="Only administrators can assign complaints.",
        )
        if priority is not None:
            _validate_choice(priority, ComplaintPriority, "priority")

        with transaction.atomic():
            complaint = lock_for_update(Complaint, complaint_id)

            try:
                officer = User.objects.get(
                    pk=officer_id, role=UserRole.OFFICER, is_active=True,
                )
            except User.DoesNotExist:
                raise NotFound(f"Active officer with id {officer_id} does not exist.")

            active = Assignment.objects.active().filter(complaint=complaint).first()
            if active is not None:
                raise Conflict(
                    f"Complaint #{complaint.pk} already has an active assignment "
                    f"(#{active.pk}, officer {active.officer_id})."
                )

            try:
                with transaction.atomic():
                    assignment = Assignment.objects.create(
                        complaint=complaint,
                        officer=officer,
                        assigned_by=assigner,
                        priority=priority or complaint.priority,
                        status=AssignmentStatus.ASSIGNED,
                        due_date=due_date,
                        notes=notes or "",
                    )
            except IntegrityError:
                raise Conflict(
                    f"Complaint #{complaint.pk} already has an active assignment."
                )

            complaint.status = ComplaintStatus.ASSIGNED
            complaint.save(update_fields=["status", "updated_at"])

        logger.info(
            "Complaint #%s assigned to officer %s by %s (assignment #%s)",
            complaint.pk,
            officer.username,
            assigner.username,
            assignment.pk,
        )
        return assignment

    def update_assignment_status(
        self,
        assignment_id: int,
        actor: User,
        new_status: str | None = None,
        notes: str | None = None,
        priority: str | None = None,
        due_date=None,
    ) -> Assignment:
        """
        Update an assignment and cascade its status onto the complaint.

        Cascade (unconditional overwrite of the complaint status):
        ``assigned → assigned``, ``in_progress → in_progress``,
        ``completed → resolved``.

        Officers may only touch their own assignments and only
        ``status`` / ``notes``; administrators may change any field.

        Raises
        ------
        PermissionDenied
            Actor is neither an administrator nor the bound officer, or an
            officer tried to change priority / due date.
        NotFound
            Assignment missing.
        InvalidValue
            ``new_status`` or ``priority`` outside their enums.
        Conflict
            Changing the status of an assignment while another assignment
            of the same complaint is active (the newer one is authoritative).
        """
        require_capability(
            actor,
            Capability.UPDATE_ANY_ASSIGNMENT,
            Capability.UPDATE_OWN_ASSIGNMENT,
            message="You cannot update assignments.",
        )
        if new_status is not None:
            new_status = _validate_choice(new_status, AssignmentStatus, "assignment status")
        if priority is not None:
            _validate_choice(priority, ComplaintPriority, "priority")

        is_admin = actor.has_capability(Capability.UPDATE_ANY_ASSIGNMENT)

        complaint_id = (
            Assignment.objects.filter(pk=assignment_id)
            .values_list("complaint_id", flat=True)
            .first()
        )
        if complaint_id is None:
            raise NotFound(f"Assignment with id {assignment_id} does not exist.")

        with transaction.atomic():
            # Same lock order as create_assignment: complaint, then assignment.
            complaint = lock_for_update(Complaint, complaint_id)
            assignment = lock_for_update(Assignment, assignment_id)

            if not is_admin:
                if assignment.officer_id != actor.pk:
                    raise PermissionDenied("You can only update your own assignments.")
                if priority is not None or due_date is not None:
                    raise PermissionDenied(
                        "Officers may only change the status and notes of an assignment."
                    )

            update_fields = ["updated_at"]
            if new_status is not None:
                # A superseded assignment must not drive the complaint
                # status while a newer one is being worked.
                if (
                    Assignment.objects.active()
                    .filter(complaint_id=complaint.pk)
                    .exclude(pk=assignment.pk)
                    .exists()
                ):
                    raise Conflict(
                        f"Assignment #{assignment.pk} has been superseded: complaint "
                        f"#{complaint.pk} already has another active assignment."
                    )
                assignment.status = new_status
                update_fields.append("status")
            if notes is not None:
                assignment.notes = notes
                update_fields.append("notes")
            if priority is not None:
                assignment.priority = priority
                update_fields.append("priority")
            if due_date is not None:
                assignment.due_date = due_date
                update_fields.append("due_date")

            try:
                with transaction.atomic():
                    assignment.save(update_fields=update_fields)
            except IntegrityError:
                raise Conflict(
                    f"Complaint #{complaint.pk} already has another active assignment."
                )

            if new_status is not None:
                complaint.status = ASSIGNMENT_CASCADE[new_status]
                complaint.save(update_fields=["status", "updated_at"])

        if new_status is not None:
            logger.info(
                "Assignment #%s set to %s by %s; complaint #%s cascaded to %s",
                assignment.pk,
                new_status,
                actor.username,
                complaint.pk,
                complaint.status,
            )
        return assignment

    def update_complaint_status(
        self,
        complaint_id: int,
        new_status: str,
        actor: User,
    ) -> Complaint:
        """
        Set a complaint's status directly, without touching assignments.

        Administrators may override any complaint; officers only those an
        assignment binds them to.  Any status is reachable from any other
        unless ``allow_backward_status_transitions`` is off, in which case
        moving to an earlier status raises ``InvalidTransition``.
        """
        new_status = _validate_choice(new_status, ComplaintStatus, "complaint status")
        require_capability(
            actor,
            Capability.OVERRIDE_ANY_COMPLAINT_STATUS,
            Capability.OVERRIDE_ASSIGNED_COMPLAINT_STATUS,
            message="You cannot change complaint statuses.",
        )
        complaint = self.get_visible_complaint(actor, complaint_id)
        previous = complaint.status

        allowed_sources = None
        if not self.settings_store.get("allow_backward_status_transitions"):
            target_rank = _STATUS_RANK[new_status]
            allowed_sources = {
                value for value, rank in _STATUS_RANK.items() if rank <= target_rank
            }

        atomic_transition(
            instance=complaint,
            target_status=new_status,
            allowed_sources=allowed_sources,
            reason="Backward status transitions are disabled.",
        )
        logger.info(
            "Complaint #%s status overridden %s → %s by %s",
            complaint.pk,
            previous,
            new_status,
            actor.username,
        )
        return complaint


# ═══════════════════════════════════════════════════════════════════
#  Complaint Submission Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintSubmissionService:
    """Citizens filing new complaints."""

    def __init__(self, settings_store: SettingsStore | None = None) -> None:
        self.settings_store = settings_store or get_settings_store()

    def _validate_images(self, images: list[str]) -> list[str]:
        allowed = {ext.lower().lstrip(".") for ext in self.settings_store.get("allowed_file_types")}
        for url in images:
            ext = posixpath.splitext(urlparse(url).path)[1].lower().lstrip(".")
            if ext not in allowed:
                raise InvalidValue(
                    f"Image '{url}' has a file type that is not allowed. "
                    f"Allowed types: {', '.join(sorted(allowed))}."
                )
        return list(images)

    def file_complaint(self, citizen: User, data: dict[str, Any]) -> Complaint:
        """
        Create a complaint owned by ``citizen``.

        The status always starts ``pending``.  Missing ``category`` /
        ``priority`` fall back to the ``default_category`` /
        ``default_priority`` settings.

        Raises
        ------
        PermissionDenied
            ``citizen`` may not file complaints (staff accounts).
        Conflict
            The portal is in maintenance mode.
        InvalidValue
            Category, priority or an image type is not allowed.
        """
        require_capability(
            citizen,
            Capability.FILE_COMPLAINT,
            message="Only citizens can file complaints.",
        )
        if self.settings_store.get("maintenance_mode"):
            raise Conflict("The portal is in maintenance mode; complaints cannot be filed.")

        category = data.get("category") or self.settings_store.get("default_category")
        priority = data.get("priority") or self.settings_store.get("default_priority")
        _validate_choice(category, ComplaintCategory, "category")
        _validate_choice(priority, ComplaintPriority, "priority")

        complaint = Complaint.objects.create(
            citizen=citizen,
            title=data["title"],
            description=data["description"],
            category=category,
            priority=priority,
            status=ComplaintStatus.PENDING,
            location=data["location"],
            area=data.get("area", ""),
            landmark=data.get("landmark", ""),
            images=self._validate_images(data.get("images") or []),
        )
        logger.info(
            "Complaint #%s filed by %s (%s, %s)",
            complaint.pk,
            citizen.username,
            category,
            priority,
        )
        return complaint


# ═══════════════════════════════════════════════════════════════════
#  Complaint Query Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintQueryService:
    """Visibility-scoped reads of complaints."""

    @staticmethod
    def list_for(principal: User, filters: dict[str, Any]) -> QuerySet:
        """
        Complaints visible to ``principal``, newest first.

        Supported filter keys: ``status``, ``category``, ``priority``,
        ``search`` (case-insensitive on title, description, location and
        the filing citizen's name).
        """
        qs = LifecycleEngine.visible_complaints(principal)

        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("category"):
            qs = qs.filter(category=filters["category"])
        if filters.get("priority"):
            qs = qs.filter(priority=filters["priority"])
        search = filters.get("search")
        if search:
            qs = qs.filter(
                Q(title__icontains=search)
                | Q(description__icontains=search)
                | Q(location__icontains=search)
                | Q(citizen__first_name__icontains=search)
                | Q(citizen__last_name__icontains=search)
                | Q(citizen__username__icontains=search)
            )

        return qs.select_related("citizen").order_by("-created_at", "-id")

    @staticmethod
    def get_detail(principal: User, complaint_id: int) -> Complaint:
        """
        A single visible complaint with its assignments (newest first)
        and comments (oldest first) prefetched.
        """
        LifecycleEngine.get_visible_complaint(principal, complaint_id)
        return (
            Complaint.objects.select_related("citizen")
            .prefetch_related(
                Prefetch(
                    "assignments",
                    queryset=Assignment.objects.select_related("officer", "assigned_by"),
                ),
                Prefetch(
                    "comments",
                    queryset=Comment.objects.select_related("user"),
                ),
            )
            .get(pk=complaint_id)
        )


# ═══════════════════════════════════════════════════════════════════
#  Comment Service
# ═══════════════════════════════════════════════════════════════════


class CommentService:
    """Append-only comments, gated by complaint visibility."""

    MAX_LENGTH = COMMENT_MAX_LENGTH

    @staticmethod
    def list_comments(principal: User, complaint_id: int) -> QuerySet:
        complaint = LifecycleEngine.get_visible_complaint(principal, complaint_id)
        return complaint.comments.select_related("user").order_by("created_at", "id")

    @staticmethod
    def post_comment(principal: User, complaint_id: int, content: str) -> Comment:
        """
        Raises
        ------
        NotFound / PermissionDenied
            The complaint is not visible to ``principal``.
        InvalidValue
            ``content`` is blank after stripping or too long.
        """
        require_capability(principal, Capability.POST_COMMENT)
        complaint = LifecycleEngine.get_visible_complaint(principal, complaint_id)

        content = (content or "").strip()
        if not content:
            raise InvalidValue("Comment content cannot be empty.")
        if len(content) > CommentService.MAX_LENGTH:
            raise InvalidValue(
                f"Comment content cannot exceed {CommentService.MAX_LENGTH} characters."
            )

        comment = Comment.objects.create(
            complaint=complaint, user=principal, content=content,
        )
        logger.info(
            "Comment #%s posted on complaint #%s by %s",
            comment.pk,
            complaint.pk,
            principal.username,
        )
        return comment


# ═══════════════════════════════════════════════════════════════════
#  Assignment Query Service
# ═══════════════════════════════════════════════════════════════════


class AssignmentQueryService:
    """Capability-scoped reads of the assignment ledger."""

    @staticmethod
    def _require_ledger_access(principal: User) -> None:
        require_capability(
            principal,
            Capability.SCOPE_ALL_ASSIGNMENTS,
            Capability.SCOPE_OWN_ASSIGNMENTS,
            message="You cannot view assignments.",
        )

    @staticmethod
    def list_for(principal: User, filters: dict[str, Any]) -> QuerySet:
        """
        Officers see their own assignments; administrators see all.

        Supported filter keys: ``department`` (bound officer's
        department), ``status``, ``priority``, ``complaint``.
        """
        AssignmentQueryService._require_ledger_access(principal)
        qs = apply_capability_scope(
            Assignment.objects.all(), principal, scope_rules=ASSIGNMENT_SCOPE_RULES,
        )

        if filters.get("department"):
            qs = qs.filter(officer__department=filters["department"])
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("priority"):
            qs = qs.filter(priority=filters["priority"])
        if filters.get("complaint"):
            qs = qs.filter(complaint_id=filters["complaint"])

        return qs.select_related(
            "complaint", "complaint__citizen", "officer", "assigned_by",
        ).order_by("-assigned_at", "-id")

    @staticmethod
    def get_detail(principal: User, assignment_id: int) -> Assignment:
        AssignmentQueryService._require_ledger_access(principal)
        try:
            assignment = Assignment.objects.select_related(
                "complaint", "complaint__citizen", "officer", "assigned_by",
            ).get(pk=assignment_id)
        except Assignment.DoesNotExist:
            raise NotFound(f"Assignment with id {assignment_id} does not exist.")

        if not (
            principal.has_capability(Capability.SCOPE_ALL_ASSIGNMENTS)
            or assignment.officer_id == principal.pk
        ):
            raise PermissionDenied("You can only view your own assignments.")
        return assignment
