"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``RegisterView``     - POST /auth/register/
- ``LoginView``        - POST /auth/login/
- ``MeView``           - GET / PATCH /me/
- ``OfficerViewSet``   - /officers/  (list, create, retrieve,
                         partial_update, activate, deactivate)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    CustomTokenObtainPairSerializer,
    LoginRequestSerializer,
    MeUpdateSerializer,
    OfficerCreateSerializer,
    OfficerListSerializer,
    OfficerUpdateSerializer,
    RegisterRequestSerializer,
    TokenResponseSerializer,
    UserDetailSerializer,
)
from .services import (
    CurrentUserService,
    OfficerManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a new citizen account.

    Request body  → ``RegisterRequestSerializer``
    Response body → ``UserDetailSerializer`` (201 Created)
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = RegisterRequestSerializer

    @extend_schema(
        summary="Register a citizen account",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Account created."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="Username, email or phone already taken."),
        },
        tags=["Auth"],
    )
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_citizen(serializer.validated_data)
        response_serializer = UserDetailSerializer(user)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a user via any of the three
    unique identifiers (username, phone_number, email) plus password,
    and returns a JWT pair whose access token carries ``role`` and
    ``department`` claims.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(response=TokenResponseSerializer, description="Token pair and profile."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data
        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") View
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET  /api/accounts/me/  → Retrieve current user profile.
    PATCH /api/accounts/me/ → Update own profile fields.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: UserDetailSerializer},
        tags=["Auth"],
    )
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update own profile",
        request=MeUpdateSerializer,
        responses={
            200: UserDetailSerializer,
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Auth"],
    )
    def patch(self, request: Request) -> Response:
        serializer = MeUpdateSerializer(
            instance=request.user, data=request.data, partial=True,
        )
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(
            request.user, serializer.validated_data,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Officer Management ViewSet
# ═══════════════════════════════════════════════════════════════════


def _parse_bool(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


class OfficerViewSet(viewsets.ViewSet):
    """
    /api/accounts/officers/

    Administrative management of staff accounts.  Authorization is
    enforced by ``OfficerManagementService``; every action requires the
    ``manage_officers`` capability.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List staff accounts",
        parameters=[
            OpenApiParameter(name="role", type=str, location=OpenApiParameter.QUERY, description="'officer' or 'admin'."),
            OpenApiParameter(name="department", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="is_active", type=bool, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY),
        ],
        responses={
            200: OfficerListSerializer(many=True),
            403: OpenApiResponse(description="Not an administrator."),
        },
        tags=["Officers"],
    )
    def list(self, request: Request) -> Response:
        params = request.query_params
        qs = OfficerManagementService.list_officers(
            request.user,
            role=params.get("role") or None,
            department=params.get("department") or None,
            is_active=_parse_bool(params.get("is_active")),
            search=params.get("search") or None,
        )
        return Response(OfficerListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Create a staff account",
        request=OfficerCreateSerializer,
        responses={
            201: UserDetailSerializer,
            403: OpenApiResponse(description="Not an administrator."),
            409: OpenApiResponse(description="Username, email or phone already taken."),
        },
        tags=["Officers"],
    )
    def create(self, request: Request) -> Response:
        serializer = OfficerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        officer = OfficerManagementService.create_officer(
            request.user, serializer.validated_data,
        )
        return Response(UserDetailSerializer(officer).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a staff account",
        responses={200: UserDetailSerializer, 404: OpenApiResponse(description="Not found.")},
        tags=["Officers"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        officer = OfficerManagementService.get_officer(request.user, int(pk))
        return Response(UserDetailSerializer(officer).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update a staff account",
        request=OfficerUpdateSerializer,
        responses={200: UserDetailSerializer},
        tags=["Officers"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = OfficerUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        officer = OfficerManagementService.update_officer(
            request.user, int(pk), serializer.validated_data,
        )
        return Response(UserDetailSerializer(officer).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Reactivate a staff account",
        request=None,
        responses={200: UserDetailSerializer},
        tags=["Officers"],
    )
    @action(detail=True, methods=["post"], url_path="activate")
    def activate(self, request: Request, pk: str = None) -> Response:
        officer = OfficerManagementService.activate_officer(request.user, int(pk))
        return Response(UserDetailSerializer(officer).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Deactivate (soft-delete) a staff account",
        request=None,
        responses={
            200: UserDetailSerializer,
            400: OpenApiResponse(description="Cannot deactivate yourself."),
        },
        tags=["Officers"],
    )
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request: Request, pk: str = None) -> Response:
        officer = OfficerManagementService.deactivate_officer(request.user, int(pk))
        return Response(UserDetailSerializer(officer).data, status=status.HTTP_200_OK)
