"""
core.domain.access: Capability-scoped queryset selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to obtain querysets filtered by the requesting user's
capabilities, and to guard operations.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT: Per-app scoping logic does NOT live here.            ║
║  Each app's ``services.py`` owns its own scope-rules list.       ║
║  This module provides:                                           ║
║    1) ``apply_capability_scope``: ordered capability dispatch.   ║
║    2) ``require_capability``: guard raising PermissionDenied.    ║
╚══════════════════════════════════════════════════════════════════╝

Usage in an app's service layer::

    from core.domain.access import apply_capability_scope

    COMPLAINT_SCOPE_RULES = [
        (Capability.SCOPE_ALL_COMPLAINTS,      lambda qs, u: qs),
        (Capability.SCOPE_ASSIGNED_COMPLAINTS, lambda qs, u: qs.filter(assignments__officer=u)),
        (Capability.SCOPE_OWN_COMPLAINTS,      lambda qs, u: qs.filter(citizen=u)),
    ]

    qs = apply_capability_scope(
        Complaint.objects.all(), user, scope_rules=COMPLAINT_SCOPE_RULES,
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User

# Type alias for a scope filter function.
# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

# Type alias for a single scope rule: (capability, filter_fn).
ScopeRule = tuple[str, ScopeFilter]


def apply_capability_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: list[ScopeRule],
) -> QuerySet:
    """
    Apply the first matching capability-based scope rule.

    Rules are checked **in order**; first capability match wins.
    Order rules from broadest (unrestricted) to narrowest so that users
    with wider access hit their rule first.  A user matching no rule
    gets an empty queryset.
    """
    for capability, filter_fn in scope_rules:
        if user.has_capability(capability):
            return filter_fn(queryset, user)
    return queryset.none()


def require_capability(user: User, *capabilities: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` unless the user holds at
    least one of the given capabilities (OR-logic).

    Example::

        require_capability(user, Capability.ASSIGN_COMPLAINT)
    """
    for capability in capabilities:
        if user.has_capability(capability):
            return
    raise PermissionDenied(
        message or f"Missing required capability: {', '.join(capabilities)}."
    )
