"""
Complaints app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

ViewSets
--------
- ``ComplaintViewSet``  - list / file / retrieve complaints, and the
  ``status`` override action.
- ``CommentViewSet``    - nested under a complaint; list / post.
- ``AssignmentViewSet`` - list / create / retrieve / partial_update.

Permission Strategy
-------------------
The base permission is ``IsAuthenticated``.  Role, ownership and
visibility checks are enforced exclusively inside the service layer.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.pagination import PageLimitPagination

from .serializers import (
    AssignmentCreateSerializer,
    AssignmentFilterSerializer,
    AssignmentSerializer,
    AssignmentUpdateSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    ComplaintCreateSerializer,
    ComplaintDetailSerializer,
    ComplaintFilterSerializer,
    ComplaintListSerializer,
    ComplaintStatusUpdateSerializer,
)
from .services import (
    AssignmentQueryService,
    CommentService,
    ComplaintQueryService,
    ComplaintSubmissionService,
    LifecycleEngine,
)


class ComplaintViewSet(viewsets.ViewSet):
    """
    /api/complaints/

    Uses ``viewsets.ViewSet`` so every action is explicitly defined;
    complaints have no update-in-place or delete endpoint.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List complaints",
        description="Complaints visible to the caller, newest first, paginated.",
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="category", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="priority", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Title, description, location or citizen name."),
            OpenApiParameter(name="page", type=int, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY),
        ],
        responses={200: ComplaintListSerializer(many=True)},
        tags=["Complaints"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = ComplaintFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        qs = ComplaintQueryService.list_for(request.user, filter_serializer.validated_data)
        paginator = PageLimitPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        serializer = ComplaintListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(
        summary="File a complaint",
        request=ComplaintCreateSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint filed."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Only citizens can file complaints."),
            409: OpenApiResponse(description="Portal in maintenance mode."),
        },
        tags=["Complaints"],
    )
    def create(self, request: Request) -> Response:
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = ComplaintSubmissionService().file_complaint(
            request.user, serializer.validated_data,
        )
        complaint = ComplaintQueryService.get_detail(request.user, complaint.pk)
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve complaint details",
        responses={
            200: ComplaintDetailSerializer,
            403: OpenApiResponse(description="Staff member not assigned to this complaint."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        complaint = ComplaintQueryService.get_detail(request.user, int(pk))
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Override complaint status",
        description=(
            "Set the complaint status directly. Administrators may change any "
            "complaint; officers only complaints they are assigned to."
        ),
        request=ComplaintStatusUpdateSerializer,
        responses={
            200: ComplaintDetailSerializer,
            400: OpenApiResponse(description="Unknown status."),
            403: OpenApiResponse(description="Not allowed."),
            409: OpenApiResponse(description="Backward transition disabled."),
        },
        tags=["Complaints"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str = None) -> Response:
        serializer = ComplaintStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        LifecycleEngine().update_complaint_status(
            int(pk), serializer.validated_data["status"], request.user,
        )
        complaint = ComplaintQueryService.get_detail(request.user, int(pk))
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_200_OK)


class CommentViewSet(viewsets.ViewSet):
    """
    /api/complaints/{complaint_pk}/comments/

    Comments are append-only: there is no update or delete route.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List comments on a complaint",
        responses={200: CommentSerializer(many=True)},
        tags=["Comments"],
    )
    def list(self, request: Request, complaint_pk: str = None) -> Response:
        comments = CommentService.list_comments(request.user, int(complaint_pk))
        return Response(CommentSerializer(comments, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Post a comment",
        request=CommentCreateSerializer,
        responses={
            201: CommentSerializer,
            400: OpenApiResponse(description="Empty or overlong content."),
        },
        tags=["Comments"],
    )
    def create(self, request: Request, complaint_pk: str = None) -> Response:
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = CommentService.post_comment(
            request.user, int(complaint_pk), serializer.validated_data["content"],
        )
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class AssignmentViewSet(viewsets.ViewSet):
    """
    /api/assignments/

    Administrators create assignments and may edit any field; officers
    see and update only their own.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List assignments",
        parameters=[
            OpenApiParameter(name="department", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="priority", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="complaint", type=int, location=OpenApiParameter.QUERY),
        ],
        responses={200: AssignmentSerializer(many=True)},
        tags=["Assignments"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = AssignmentFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        qs = AssignmentQueryService.list_for(request.user, filter_serializer.validated_data)
        return Response(AssignmentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Assign a complaint to an officer",
        request=AssignmentCreateSerializer,
        responses={
            201: AssignmentSerializer,
            403: OpenApiResponse(description="Only administrators can assign."),
            404: OpenApiResponse(description="Complaint or officer not found."),
            409: OpenApiResponse(description="Complaint already has an active assignment."),
        },
        tags=["Assignments"],
    )
    def create(self, request: Request) -> Response:
        serializer = AssignmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        assignment = LifecycleEngine().create_assignment(
            complaint_id=data["complaint"],
            officer_id=data["officer"],
            assigner=request.user,
            priority=data.get("priority"),
            due_date=data.get("due_date"),
            notes=data.get("notes", ""),
        )
        assignment = AssignmentQueryService.get_detail(request.user, assignment.pk)
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve an assignment",
        responses={200: AssignmentSerializer},
        tags=["Assignments"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        assignment = AssignmentQueryService.get_detail(request.user, int(pk))
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update an assignment",
        description=(
            "Changing the status cascades onto the complaint: "
            "assigned → assigned, in_progress → in_progress, completed → resolved."
        ),
        request=AssignmentUpdateSerializer,
        responses={
            200: AssignmentSerializer,
            400: OpenApiResponse(description="Unknown status."),
            403: OpenApiResponse(description="Not the bound officer, or officer changing admin-only fields."),
            409: OpenApiResponse(description="Another assignment is already active."),
        },
        tags=["Assignments"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = AssignmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        LifecycleEngine().update_assignment_status(
            int(pk),
            request.user,
            new_status=data.get("status"),
            notes=data.get("notes"),
            priority=data.get("priority"),
            due_date=data.get("due_date"),
        )
        assignment = AssignmentQueryService.get_detail(request.user, int(pk))
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_200_OK)
