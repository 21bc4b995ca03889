"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the
result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``   - public citizen sign-up.
- ``CurrentUserService``        - "Me" endpoint helpers.
- ``OfficerManagementService``  - staff accounts: list with assignment
  stats, create, update, activate / deactivate.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet

from core.domain.access import require_capability
from core.domain.exceptions import Conflict, DomainError, NotFound
from core.permissions_constants import STAFF_ROLES, Capability, UserRole

User = get_user_model()

logger = logging.getLogger(__name__)


def _unique_field_conflicts(data: dict[str, Any], *, exclude_pk: int | None = None) -> list[str]:
    """Return the names of unique fields in ``data`` already taken."""
    qs = User.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)

    conflicts = []
    if "username" in data and qs.filter(username=data["username"]).exists():
        conflicts.append("username")
    if "email" in data and qs.filter(email__iexact=data["email"]).exists():
        conflicts.append("email")
    if "phone_number" in data and qs.filter(phone_number=data["phone_number"]).exists():
        conflicts.append("phone_number")
    return conflicts


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """Public sign-up.  Only ever creates citizens."""

    @staticmethod
    def register_citizen(validated_data: dict[str, Any]) -> User:
        """
        Create a new citizen account.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer`` containing
            ``username``, ``password``, ``email``, ``phone_number``,
            ``first_name`` and ``last_name``.

        Raises
        ------
        core.domain.exceptions.Conflict
            If a unique field (username, email, phone_number) is taken.
        """
        validated_data = dict(validated_data)
        validated_data.pop("password_confirm", None)
        password = validated_data.pop("password")
        # Never trust a client-supplied role or department.
        validated_data.pop("role", None)
        validated_data.pop("department", None)

        conflicts = _unique_field_conflicts(validated_data)
        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    password=password,
                    role=UserRole.CITIZEN,
                    **validated_data,
                )
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists."
            )

        logger.info("Citizen %s registered", user.username)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the "Me" endpoint."""

    @staticmethod
    def get_profile(user: User) -> User:
        return User.objects.get(pk=user.pk)

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Update the authenticated user's own profile fields.

        The user may NOT change their own ``role``, ``department``,
        ``is_active`` or ``username`` via this endpoint; the serializer
        only lets email, phone_number, first_name and last_name through.
        """
        if not validated_data:
            return CurrentUserService.get_profile(user)

        for field, value in validated_data.items():
            setattr(user, field, value)
        try:
            user.save(update_fields=list(validated_data.keys()))
        except IntegrityError:
            raise Conflict("Email or phone number is already in use.")
        return CurrentUserService.get_profile(user)


# ═══════════════════════════════════════════════════════════════════
#  Officer Management Service
# ═══════════════════════════════════════════════════════════════════


class OfficerManagementService:
    """
    Administrative operations on staff (officer / admin) accounts.

    Every method requires ``Capability.MANAGE_OFFICERS``.
    """

    @staticmethod
    def _staff_queryset() -> QuerySet[User]:
        return User.objects.filter(role__in=STAFF_ROLES)

    @staticmethod
    def list_officers(
        actor: User,
        *,
        role: str | None = None,
        department: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> QuerySet[User]:
        """
        Return staff accounts annotated with per-status assignment
        counts (``total_assignments``, ``assigned_assignments``,
        ``in_progress_assignments``, ``completed_assignments``).
        """
        require_capability(
            actor,
            Capability.MANAGE_OFFICERS,
            message="Only administrators can manage officers.",
        )
        qs = OfficerManagementService._staff_queryset()

        if role:
            qs = qs.filter(role=role)
        if department:
            qs = qs.filter(department=department)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(employee_id__icontains=search)
            )

        return qs.annotate(
            total_assignments=Count("assignments", distinct=True),
            assigned_assignments=Count(
                "assignments", filter=Q(assignments__status="assigned"), distinct=True,
            ),
            in_progress_assignments=Count(
                "assignments", filter=Q(assignments__status="in_progress"), distinct=True,
            ),
            completed_assignments=Count(
                "assignments", filter=Q(assignments__status="completed"), distinct=True,
            ),
        ).order_by("-date_joined")

    @staticmethod
    def get_officer(actor: User, officer_id: int) -> User:
        require_capability(
            actor,
            Capability.MANAGE_OFFICERS,
            message="Only administrators can manage officers.",
        )
        try:
            return OfficerManagementService._staff_queryset().get(pk=officer_id)
        except User.DoesNotExist:
            raise NotFound(f"Officer with id {officer_id} not found.")

    @staticmethod
    def create_officer(actor: User, validated_data: dict[str, Any]) -> User:
        """
        Create a staff account.

        Raises
        ------
        PermissionDenied
            If ``actor`` may not manage officers.
        Conflict
            If the username, email or phone number is already taken.
        """
        require_capability(
            actor,
            Capability.MANAGE_OFFICERS,
            message="Only administrators can create officers.",
        )
        data = dict(validated_data)
        password = data.pop("password")

        conflicts = _unique_field_conflicts(data)
        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        try:
            with transaction.atomic():
                officer = User.objects.create_user(password=password, **data)
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists."
            )

        logger.info(
            "Staff account %s (%s, %s) created by %s",
            officer.username,
            officer.role,
            officer.department,
            actor.username,
        )
        return officer

    @staticmethod
    def update_officer(actor: User, officer_id: int, validated_data: dict[str, Any]) -> User:
        officer = OfficerManagementService.get_officer(actor, officer_id)
        if not validated_data:
            return officer

        conflicts = _unique_field_conflicts(validated_data, exclude_pk=officer.pk)
        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        for field, value in validated_data.items():
            setattr(officer, field, value)
        officer.save(update_fields=list(validated_data.keys()))
        logger.info(
            "Staff account %s updated by %s: %s",
            officer.username,
            actor.username,
            sorted(validated_data),
        )
        return officer

    @staticmethod
    def activate_officer(actor: User, officer_id: int) -> User:
        officer = OfficerManagementService.get_officer(actor, officer_id)
        officer.is_active = True
        officer.save(update_fields=["is_active"])
        logger.info("Staff account %s activated by %s", officer.username, actor.username)
        return officer

    @staticmethod
    def deactivate_officer(actor: User, officer_id: int) -> User:
        """
        Soft-delete a staff account.  Accounts are never hard-deleted so
        the assignment history they are bound to stays intact.
        """
        officer = OfficerManagementService.get_officer(actor, officer_id)
        if officer.pk == actor.pk:
            raise DomainError("You cannot deactivate your own account.")

        officer.is_active = False
        officer.save(update_fields=["is_active"])
        logger.info("Staff account %s deactivated by %s", officer.username, actor.username)
        return officer
