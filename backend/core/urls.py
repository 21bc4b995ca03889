"""
Core app URL configuration.

Cross-app aggregation endpoints: dashboards, reports, runtime settings
and system-wide constants.

URL prefix (registered in ``civicdesk/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET        /api/core/dashboard/                   - Role-aware dashboard statistics.
GET        /api/core/dashboard/recent-complaints/ - Newest visible complaints.
GET        /api/core/reports/                     - Complaint / assignment report (staff).
GET/PATCH  /api/core/settings/                    - Runtime settings (admin).
GET        /api/core/constants/                   - Choice enumerations (public).
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    # ── Dashboard ────────────────────────────────────────────────────
    path(
        "dashboard/",
        views.DashboardStatsView.as_view(),
        name="dashboard-stats",
    ),
    path(
        "dashboard/recent-complaints/",
        views.RecentComplaintsView.as_view(),
        name="dashboard-recent-complaints",
    ),

    # ── Reports ──────────────────────────────────────────────────────
    path(
        "reports/",
        views.ReportView.as_view(),
        name="reports",
    ),

    # ── Runtime settings ─────────────────────────────────────────────
    path(
        "settings/",
        views.SystemSettingsView.as_view(),
        name="system-settings",
    ),

    # ── System Constants / Enums ─────────────────────────────────────
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),
]
