"""
Permissions Constants: **Single Source of Truth**

Roles form a closed set (``UserRole``) and every operation in the
service layer is guarded by a named **capability**.  A role's rights are
the fixed capability set declared in ``ROLE_CAPABILITIES``; nothing in
the code compares role strings directly.

Organisation
------------
- ``UserRole``          - the three principal kinds.
- ``Capability``        - one constant per guarded operation.
- ``ROLE_CAPABILITIES`` - role → frozenset of capabilities.

Adding a new guarded operation requires:
    1. Add the constant to ``Capability``.
    2. Add it to the capability set of every role that may perform it.
    3. Guard the service method with
       ``core.domain.access.require_capability``.
"""

from __future__ import annotations

from django.db import models


class UserRole(models.TextChoices):
    """Principal kinds issued by the identity gate."""

    CITIZEN = "citizen", "Citizen"
    OFFICER = "officer", "Officer"
    ADMIN = "admin", "Administrator"


#: Roles that belong to a department and may sign in to the admin API.
STAFF_ROLES: frozenset[str] = frozenset({UserRole.OFFICER.value, UserRole.ADMIN.value})


# ════════════════════════════════════════════════════════════════════
#  Capabilities
# ════════════════════════════════════════════════════════════════════

class Capability:
    """Named operation rights checked by the service layer."""

    # ── Complaint visibility tiers ──────────────────────────────────
    SCOPE_ALL_COMPLAINTS = "scope_all_complaints"
    """Unrestricted complaint visibility (Admin)."""

    SCOPE_ASSIGNED_COMPLAINTS = "scope_assigned_complaints"
    """See complaints this user has ever been assigned to (Officer)."""

    SCOPE_OWN_COMPLAINTS = "scope_own_complaints"
    """See only complaints this user filed (Citizen)."""

    # ── Complaint lifecycle ─────────────────────────────────────────
    FILE_COMPLAINT = "file_complaint"
    """File a new complaint."""

    ASSIGN_COMPLAINT = "assign_complaint"
    """Create an assignment binding a complaint to an officer."""

    UPDATE_ANY_ASSIGNMENT = "update_any_assignment"
    """Edit any assignment (status, notes, priority, due date)."""

    UPDATE_OWN_ASSIGNMENT = "update_own_assignment"
    """Edit status / notes of assignments bound to this user."""

    OVERRIDE_ANY_COMPLAINT_STATUS = "override_any_complaint_status"
    """Set any complaint's status directly."""

    OVERRIDE_ASSIGNED_COMPLAINT_STATUS = "override_assigned_complaint_status"
    """Set the status of complaints this user is assigned to."""

    POST_COMMENT = "post_comment"
    """Annotate a visible complaint."""

    # ── Assignment ledger visibility ────────────────────────────────
    SCOPE_ALL_ASSIGNMENTS = "scope_all_assignments"
    SCOPE_OWN_ASSIGNMENTS = "scope_own_assignments"

    # ── Reporting / administration ──────────────────────────────────
    VIEW_STAFF_DASHBOARD = "view_staff_dashboard"
    """Staff dashboard: visible-complaint counts plus staff account totals."""

    VIEW_REPORTS = "view_reports"
    VIEW_DEPARTMENT_STATS = "view_department_stats"
    MANAGE_OFFICERS = "manage_officers"
    MANAGE_SETTINGS = "manage_settings"


ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    UserRole.CITIZEN.value: frozenset({
        Capability.SCOPE_OWN_COMPLAINTS,
        Capability.FILE_COMPLAINT,
        Capability.POST_COMMENT,
    }),
    UserRole.OFFICER.value: frozenset({
        Capability.SCOPE_ASSIGNED_COMPLAINTS,
        Capability.UPDATE_OWN_ASSIGNMENT,
        Capability.OVERRIDE_ASSIGNED_COMPLAINT_STATUS,
        Capability.POST_COMMENT,
        Capability.SCOPE_OWN_ASSIGNMENTS,
        Capability.VIEW_STAFF_DASHBOARD,
        Capability.VIEW_REPORTS,
    }),
    UserRole.ADMIN.value: frozenset({
        Capability.SCOPE_ALL_COMPLAINTS,
        Capability.ASSIGN_COMPLAINT,
        Capability.UPDATE_ANY_ASSIGNMENT,
        Capability.OVERRIDE_ANY_COMPLAINT_STATUS,
        Capability.POST_COMMENT,
        Capability.SCOPE_ALL_ASSIGNMENTS,
        Capability.VIEW_STAFF_DASHBOARD,
        Capability.VIEW_REPORTS,
        Capability.VIEW_DEPARTMENT_STATS,
        Capability.MANAGE_OFFICERS,
        Capability.MANAGE_SETTINGS,
    }),
}
