"""
Health check view for DevOps monitoring
"""

import logging

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def health_check(request):
    """Report database and cache availability"""
    status = {
        "status": "healthy",
        "timestamp": timezone.now().isoformat(),
        "services": {},
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        status["services"]["database"] = {"status": "healthy"}
    except Exception:
        logger.exception("Database health check failed")
        status["services"]["database"] = {
            "status": "unhealthy",
            "error": "Database connection failed",
        }
        status["status"] = "unhealthy"

    try:
        cache.set("health_check", "ok", 10)
        cache.get("health_check")
        status["services"]["cache"] = {"status": "healthy"}
    except Exception:
        logger.exception("Cache health check failed")
        status["services"]["cache"] = {
            "status": "unhealthy",
            "error": "Cache service unavailable",
        }
        status["status"] = "unhealthy"

    # Every group mode needs a registered calculator
    from billing.services.enums import GroupMode
    from billing.services.factory import get_billing_factory

    missing = [
        str(mode)
        for mode in GroupMode
        if not get_billing_factory().is_strategy_available(mode)
    ]
    if missing:
        status["services"]["billing_engine"] = {"status": "unhealthy", "missing_modes": missing}
        status["status"] = "unhealthy"
    else:
        status["services"]["billing_engine"] = {"status": "healthy"}

    http_status = 200 if status["status"] == "healthy" else 503
    return JsonResponse(status, status=http_status)
