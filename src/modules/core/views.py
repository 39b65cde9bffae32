import time
from typing import Any, Dict

import requests
import structlog
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

from modules.orders.catalog import get_product_validator
from modules.orders.repositories.django_repository import OrderDjangoRepository

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    # Check database
    try:
        start = time.monotonic()
        OrderDjangoRepository().connect()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_db_failure")

    # Check product catalog (reachability only, any HTTP answer counts)
    try:
        start = time.monotonic()
        get_product_validator().ping()
        services["products"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except requests.RequestException:
        services["products"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_products_failure")

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )
