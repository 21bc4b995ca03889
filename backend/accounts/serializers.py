"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here; all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

import re
from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from core.permissions_constants import UserRole

from .models import DEPARTMENTS

User = get_user_model()

PHONE_PATTERN = re.compile(r"^\+?\d{10,15}$")
PHONE_ERROR = "Phone number must contain 10 to 15 digits (an optional leading '+')."


def _validate_phone(value: str) -> str:
    if not PHONE_PATTERN.match(value):
        raise serializers.ValidationError(PHONE_ERROR)
    return value


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.ModelSerializer):
    """
    Validates citizen sign-up data.

    Required fields: username, password, email, phone_number,
    first_name, last_name.  The role is never accepted from the client;
    public registration always creates a citizen.
    """

    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )

    class Meta:
        model = User
        fields = [
            "username",
            "password",
            "password_confirm",
            "email",
            "phone_number",
            "first_name",
            "last_name",
        ]
        extra_kwargs = {
            "email": {"required": True},
            "first_name": {"required": True},
            "last_name": {"required": True},
            "phone_number": {"required": True},
        }

    def validate_phone_number(self, value: str) -> str:
        return _validate_phone(value)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )
        attrs.pop("password_confirm")
        return attrs


class LoginRequestSerializer(serializers.Serializer):
    """
    Accepts multi-field login credentials.

    The client sends ``identifier`` (a username, phone_number, or
    email) together with ``password``.
    """

    identifier = serializers.CharField(
        help_text="Username, Phone Number, or Email.",
    )
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="User account password.",
    )


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom SimpleJWT serializer that:

    1. Accepts ``identifier`` + ``password`` instead of
       ``username`` + ``password``.
    2. Resolves the user via the ``MultiFieldAuthBackend``.
    3. Injects the principal claims (``role``, ``department``) into the
       JWT payload.
    """

    username_field = "identifier"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields.pop(self.username_field, None)
        self.fields["identifier"] = serializers.CharField(
            help_text="Username, Phone Number, or Email.",
        )

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role"] = str(user.role)
        token["department"] = user.department or None
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Authenticate using the custom ``MultiFieldAuthBackend``.

        Returns a dict containing ``access`` and ``refresh``; the
        authenticated user is left on ``self.user`` for the view.
        """
        user = authenticate(
            request=self.context.get("request"),
            identifier=attrs.get("identifier"),
            password=attrs.get("password"),
        )

        # ModelBackend refuses inactive users, so a disabled account
        # surfaces here as bad credentials.
        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


class TokenResponseSerializer(serializers.Serializer):
    """
    Serializes the JWT token pair returned after successful login.
    """

    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    user = serializers.SerializerMethodField()

    def get_user(self, obj: dict) -> dict | None:
        user = obj.get("user")
        if user:
            return UserDetailSerializer(user).data
        return None


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used in me, registration and login
    responses).  ``capabilities`` is the flat list the front-ends use to
    decide which controls to render.
    """

    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone_number",
            "first_name",
            "last_name",
            "role",
            "department",
            "employee_id",
            "is_active",
            "date_joined",
            "capabilities",
        ]
        read_only_fields = fields

    def get_capabilities(self, obj) -> list[str]:
        return sorted(obj.capabilities)


class MeUpdateSerializer(serializers.ModelSerializer):
    """
    Allows the authenticated user to update limited profile fields.
    Sensitive fields (role, department, is_active, username) are
    read-only and cannot be self-modified.
    """

    class Meta:
        model = User
        fields = [
            "email",
            "phone_number",
            "first_name",
            "last_name",
        ]

    def validate_email(self, value: str) -> str:
        if (
            self.instance
            and User.objects.exclude(pk=self.instance.pk)
            .filter(email__iexact=value)
            .exists()
        ):
            raise serializers.ValidationError(
                "This email is already in use by another account."
            )
        return value

    def validate_phone_number(self, value: str) -> str:
        _validate_phone(value)
        if (
            self.instance
            and User.objects.exclude(pk=self.instance.pk)
            .filter(phone_number=value)
            .exists()
        ):
            raise serializers.ValidationError(
                "This phone number is already in use by another account."
            )
        return value


# ═══════════════════════════════════════════════════════════════════
#  Officer Management Serializers
# ═══════════════════════════════════════════════════════════════════


class OfficerStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    assigned = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    completed = serializers.IntegerField()


class OfficerListSerializer(serializers.ModelSerializer):
    """
    Staff account with its assignment counts.

    The counts are annotated onto the queryset by
    ``OfficerManagementService.list_officers``.
    """

    full_name = serializers.CharField(source="get_full_name", read_only=True)
    stats = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "full_name",
            "email",
            "phone_number",
            "role",
            "department",
            "employee_id",
            "is_active",
            "date_joined",
            "stats",
        ]
        read_only_fields = fields

    def get_stats(self, obj) -> dict[str, int]:
        return {
            "total": getattr(obj, "total_assignments", 0),
            "assigned": getattr(obj, "assigned_assignments", 0),
            "in_progress": getattr(obj, "in_progress_assignments", 0),
            "completed": getattr(obj, "completed_assignments", 0),
        }


class OfficerCreateSerializer(serializers.Serializer):
    """Validates the payload for an admin creating a staff account."""

    username = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
    )
    email = serializers.EmailField()
    phone_number = serializers.CharField(max_length=15)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    role = serializers.ChoiceField(
        choices=[UserRole.OFFICER, UserRole.ADMIN],
        default=UserRole.OFFICER,
    )
    department = serializers.ChoiceField(choices=DEPARTMENTS)
    employee_id = serializers.CharField(
        max_length=30, required=False, allow_blank=True, default="",
    )

    def validate_phone_number(self, value: str) -> str:
        return _validate_phone(value)


class OfficerUpdateSerializer(serializers.Serializer):
    """Partial update of a staff account's profile fields."""

    email = serializers.EmailField(required=False)
    phone_number = serializers.CharField(max_length=15, required=False)
    first_name = serializers.CharField(max_length=150, required=False)
    last_name = serializers.CharField(max_length=150, required=False)
    department = serializers.ChoiceField(choices=DEPARTMENTS, required=False)
    employee_id = serializers.CharField(
        max_length=30, required=False, allow_blank=True,
    )

    def validate_phone_number(self, value: str) -> str:
        return _validate_phone(value)
