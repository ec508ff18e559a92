"""
Health check endpoints for operations monitoring.

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can the default database be reached?)
- /_health/full    - every configured database plus reporting settings
"""
import logging
import time
from typing import Any, Dict

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.monotonic()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except DatabaseError as e:
            logger.warning(
                "Database health check failed",
                extra={"alias": alias, "error": str(e)},
            )
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
            }
        return {
            "status": "healthy",
            "alias": alias,
            "duration_ms": round((time.monotonic() - start) * 1000, 2),
        }

    @staticmethod
    def check_all_databases() -> Dict[str, Any]:
        """Check all configured databases."""
        results = {
            alias: HealthCheck.check_database(alias)
            for alias in settings.DATABASES.keys()
        }
        all_healthy = all(r["status"] == "healthy" for r in results.values())
        return {
            "status": "healthy" if all_healthy else "degraded",
            "databases": results,
        }

    @staticmethod
    def check_reporting_settings() -> Dict[str, Any]:
        """Reporting knobs must be positive integers."""
        chunk_size = getattr(settings, "REPORTING_LINE_CHUNK_SIZE", None)
        range_days = getattr(settings, "REPORTING_DEFAULT_RANGE_DAYS", None)
        ok = all(
            isinstance(value, int) and value > 0
            for value in (chunk_size, range_days)
        )
        return {
            "status": "healthy" if ok else "unhealthy",
            "line_chunk_size": chunk_size,
            "default_range_days": range_days,
        }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            "databases": HealthCheck.check_all_databases(),
            "reporting": HealthCheck.check_reporting_settings(),
        }

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s == "healthy" for s in statuses):
            overall = "healthy"
        elif any(s == "unhealthy" for s in statuses):
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "development" if settings.DEBUG else "production",
        }


class LivenessView(View):
    """
    Liveness probe.

    Returns 200 if the process is running. Touches no external dependency.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 if the service can handle traffic, 503 if the default
    database is unreachable.
    """

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({"status": "ready", "database": db_check})
        return JsonResponse({"status": "not_ready", "database": db_check}, status=503)


class FullHealthView(View):
    """
    Full health check for debugging and dashboards.

    Should be protected in production (internal network only).
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
