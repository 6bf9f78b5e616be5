from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.http import JsonResponse
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from common.views import AppSettingsView


# === Healthcheck ===
def healthcheck(request):
    """
    Endpoint simple para verificar el estado del servidor.
    Útil para monitoreo o comprobaciones automáticas.
    """
    return JsonResponse({"status": "ok"}, status=200)


urlpatterns = [
    # Admin: configurable por .env
    path(settings.ADMIN_URL, admin.site.urls),

    # Healthcheck
    path("healthz/", healthcheck, name="healthcheck"),

    # Auth (la emisión de identidades es externa al core; solo exponemos JWT)
    path("api/auth/token", TokenObtainPairView.as_view(), name="auth-token"),
    path("api/auth/refresh", TokenRefreshView.as_view(), name="auth-refresh"),

    # API
    path("api/policies/", include("policies.urls")),
    path("api/cobranzas/", include("cobranzas.urls")),
    path("api/admin/settings", AppSettingsView.as_view(), name="admin-settings"),
]


# === Root amigable (en lugar del 404) ===
urlpatterns += [
    path(
        "",
        lambda r: JsonResponse(
            {
                "message": "Corredora API - cobranzas",
                "endpoints": [
                    "/api/policies/",
                    "/api/cobranzas/",
                    "/api/admin/settings",
                    "/healthz/",
                    f"/{settings.ADMIN_URL}",
                ],
            },
            status=200,
        ),
        name="api-root",
    ),
]
