"""
Core app views: **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.

No model imports, no aggregation logic, no cross-app queries.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from .serializers import (
    CitizenDashboardSerializer,
    RecentComplaintSerializer,
    ReportQuerySerializer,
    ReportSerializer,
    StaffDashboardSerializer,
    SystemConstantsSerializer,
    SystemSettingsSerializer,
)
from .services import (
    DashboardAggregationService,
    ReportingService,
    SystemConstantsService,
    SystemSettingsService,
)


class DashboardStatsView(APIView):
    """
    **GET /api/core/dashboard/**

    Return dashboard statistics for the authenticated user.

    The payload is **role-aware**: citizens get counts over their own
    complaints, staff get counts over the complaints they can see plus
    staff account totals.  See ``DashboardAggregationService``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard statistics",
        description=(
            "Staff receive total_complaints / pending / assigned / resolved and "
            "officer account totals. Citizens receive total / pending / "
            "in_progress / resolved over their own complaints."
        ),
        responses={
            200: OpenApiResponse(response=StaffDashboardSerializer, description="Dashboard stats."),
        },
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        service = DashboardAggregationService(user=request.user)
        serializer_class = (
            StaffDashboardSerializer if service.is_staff_view else CitizenDashboardSerializer
        )
        return Response(serializer_class(service.get_stats()).data, status=status.HTTP_200_OK)


class RecentComplaintsView(APIView):
    """**GET /api/core/dashboard/recent-complaints/**"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Recent complaints",
        description="Newest visible complaints: 5 for citizens, 10 for staff.",
        responses={200: RecentComplaintSerializer(many=True)},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        rows = DashboardAggregationService(user=request.user).recent_complaints()
        return Response(RecentComplaintSerializer(rows, many=True).data, status=status.HTTP_200_OK)


class ReportView(APIView):
    """
    **GET /api/core/reports/[?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD][&department=...]**

    Aggregated complaint / assignment report.

    **Error Responses**:
        - ``400 Bad Request``: malformed dates or ``end_date`` before ``start_date``.
        - ``403 Forbidden``: citizens cannot read reports.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Complaint report",
        parameters=[
            OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, description="YYYY-MM-DD, inclusive."),
            OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, description="YYYY-MM-DD, inclusive."),
            OpenApiParameter(name="department", type=str, location=OpenApiParameter.QUERY, description="Restrict the assignment distribution to one department."),
        ],
        responses={
            200: ReportSerializer,
            400: OpenApiResponse(description="Invalid query parameters."),
            403: OpenApiResponse(description="Citizens cannot view reports."),
        },
        tags=["Reports"],
    )
    def get(self, request: Request) -> Response:
        query = ReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        report = ReportingService(user=request.user, **query.validated_data).get_report()
        return Response(ReportSerializer(report).data, status=status.HTTP_200_OK)


class SystemSettingsView(APIView):
    """
    **GET / PATCH /api/core/settings/**

    Administrators read and change the runtime settings.  A PATCH body
    holds only the keys to change; unknown keys or wrongly typed values
    are rejected with ``400`` and nothing is written.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Read runtime settings",
        responses={
            200: SystemSettingsSerializer,
            403: OpenApiResponse(description="Administrators only."),
        },
        tags=["Settings"],
    )
    def get(self, request: Request) -> Response:
        data = SystemSettingsService().get_settings(request.user)
        return Response(SystemSettingsSerializer(data).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Change runtime settings",
        request=SystemSettingsSerializer(partial=True),
        responses={
            200: SystemSettingsSerializer,
            400: OpenApiResponse(description="Unknown key or wrongly typed value."),
            403: OpenApiResponse(description="Administrators only."),
        },
        tags=["Settings"],
    )
    def patch(self, request: Request) -> Response:
        data = SystemSettingsService().update_settings(request.user, request.data)
        return Response(SystemSettingsSerializer(data).data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return choice enumerations (categories, priorities, statuses, roles,
    departments) so clients can render dropdowns without hard-coding
    values.  Public: no authentication required.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="System constants",
        responses={200: SystemConstantsSerializer},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        return Response(SystemConstantsSerializer(data).data, status=status.HTTP_200_OK)
