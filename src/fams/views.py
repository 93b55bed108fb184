"""Project-level views for FAMS."""

import logging

from django.http import JsonResponse

logger = logging.getLogger(__name__)


def ratelimited_view(request, exception=None):
    """Return 429 with a Retry-After header on rate limit."""
    response = JsonResponse(
        {
            "error": "rate_limited",
            "message": "Rate limit exceeded. Please try again later.",
        },
        status=429,
    )
    response["Retry-After"] = "60"
    return response


def health_check(request):
    """Health check endpoint for monitoring and load balancers."""
    from django.db import connection

    db_ok = True
    try:
        connection.ensure_connection()
    except Exception:
        logger.exception("Health check: database unreachable")
        db_ok = False

    cache_ok = True
    try:
        from django.core.cache import cache

        cache.set("_health_check", "1", timeout=10)
        cache_ok = cache.get("_health_check") == "1"
    except Exception:
        logger.exception("Health check: cache unreachable")
        cache_ok = False

    status = "ok" if db_ok and cache_ok else "degraded"
    status_code = 200 if db_ok else 503

    return JsonResponse(
        {"status": status, "db": db_ok, "cache": cache_ok},
        status=status_code,
    )
