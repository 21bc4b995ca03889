"""
Accounts app models.

Defines a custom User model that extends Django's ``AbstractUser``.
Every account holds exactly one role from the closed ``UserRole`` set;
what a role may do is decided by the capability table in
``core.permissions_constants``, never by comparing role strings.
"""

from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.db import models

from core.permissions_constants import ROLE_CAPABILITIES, STAFF_ROLES, UserRole

#: Departments seeded for staff accounts.
DEPARTMENTS = (
    "Public Works",
    "Utilities",
    "Transportation",
    "Parks & Recreation",
    "Environmental Services",
)


class UserManager(BaseUserManager):
    """Manager whose superusers are portal administrators."""

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", UserRole.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom user model for the civic complaint portal.

    Registration requires: username, password, email, phone_number,
    first_name and last_name.  Login is supported via *any one* of
    username / phone_number / email together with the password.

    Public sign-up always yields a ``citizen``; officer and admin
    accounts are created by administrators.  Accounts are never deleted:
    ``is_active=False`` is the soft delete.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    phone_number = models.CharField(
        max_length=15,
        unique=True,
        verbose_name="Phone Number",
        db_index=True,
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CITIZEN,
        db_index=True,
        verbose_name="Role",
    )
    department = models.CharField(
        max_length=100,
        blank=True,
        default="",
        verbose_name="Department",
        help_text="Only officers and administrators belong to a department.",
    )
    employee_id = models.CharField(
        max_length=30,
        blank=True,
        default="",
        verbose_name="Employee ID",
    )

    objects = UserManager()

    # Fields required when creating a superuser via CLI
    REQUIRED_FIELDS = ["email", "phone_number", "first_name", "last_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_full_name()}) - {self.get_role_display()}"

    def save(self, *args, **kwargs):
        if not self.is_staff_member:
            self.department = ""
        super().save(*args, **kwargs)

    # ── Helper predicates for role checks ────────────────────────────

    @property
    def is_staff_member(self) -> bool:
        """Officer or admin."""
        return str(self.role) in STAFF_ROLES

    @property
    def capabilities(self) -> frozenset[str]:
        if not self.is_active:
            return frozenset()
        return ROLE_CAPABILITIES.get(str(self.role), frozenset())

    def has_capability(self, capability: str) -> bool:
        """Inactive accounts hold no capabilities."""
        return capability in self.capabilities
