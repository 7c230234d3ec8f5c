# opsbilling/urls.py
from rest_framework.decorators import (
    api_view,
    authentication_classes,
    permission_classes,
)
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

from .health import health_check


@api_view(["GET"])
@permission_classes([AllowAny])
@authentication_classes([])
def api_root(request):
    """API root endpoint showing available endpoints"""
    return Response(
        {
            "message": "Operations Billing API",
            "version": "1.0",
            "api_versions": {"current": "v1", "supported": ["v1"], "deprecated": []},
            "endpoints": {
                "admin": request.build_absolute_uri("/admin/"),
                "health": request.build_absolute_uri("/health/"),
                "v1_bills": request.build_absolute_uri("/api/v1/bills/"),
            },
        }
    )


urlpatterns = [
    path("", RedirectView.as_view(url="/api/", permanent=False)),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health-check"),
    path("api/", api_root, name="api-root"),
    path("api/v1/", api_root, name="api-v1-root"),
    path("api/v1/bills/", include("billing.urls")),
]
