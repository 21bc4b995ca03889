"""
Complaints app URL configuration.

Included in the project-level ``urls.py`` as::

    path("api/", include("complaints.urls")),

Route Hierarchy
---------------
  /api/complaints/                              → list / create
  /api/complaints/{id}/                         → retrieve
  PATCH /api/complaints/{id}/status/            → direct status override (@action)
  /api/complaints/{complaint_pk}/comments/      → list / create (nested)

  /api/assignments/                             → list / create
  /api/assignments/{id}/                        → retrieve / partial_update
"""

from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers as nested_routers

from .views import AssignmentViewSet, CommentViewSet, ComplaintViewSet

# ── Root router ──────────────────────────────────────────────────────────────
router = DefaultRouter()
router.register(
    prefix=r"complaints",
    viewset=ComplaintViewSet,
    basename="complaint",
)
router.register(
    prefix=r"assignments",
    viewset=AssignmentViewSet,
    basename="assignment",
)

# ── Nested router: comments ──────────────────────────────────────────────────
comments_router = nested_routers.NestedDefaultRouter(
    parent_router=router,
    parent_prefix=r"complaints",
    lookup="complaint",  # produces kwarg ``complaint_pk``
)
comments_router.register(
    prefix=r"comments",
    viewset=CommentViewSet,
    basename="complaint-comment",
)

urlpatterns = [
    *router.urls,
    *comments_router.urls,
]
