"""
Accounts app URL configuration.

Included in the project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/register/              → RegisterView
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)

Current User Profile ("Me")
    GET    /me/                         → MeView  (retrieve)
    PATCH  /me/                         → MeView  (partial update)

Officer Management (administrators)
    GET    /officers/                   → OfficerViewSet.list
    POST   /officers/                   → OfficerViewSet.create
    GET    /officers/{id}/              → OfficerViewSet.retrieve
    PATCH  /officers/{id}/              → OfficerViewSet.partial_update
    POST   /officers/{id}/activate/     → OfficerViewSet.activate
    POST   /officers/{id}/deactivate/   → OfficerViewSet.deactivate
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, MeView, OfficerViewSet, RegisterView

app_name = "accounts"

router = DefaultRouter()
router.register(r"officers", OfficerViewSet, basename="officer")

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),

    # ── Current User (Me) ───────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),

    # ── Router-registered viewsets (officers/) ──────────────────────
    path("", include(router.urls)),
]
