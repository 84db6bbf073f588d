"""Observability and system API endpoints.

- GET /metrics: Prometheus exposition (mounted at the root)
- GET /api/system/health: component health in the response envelope
- GET /api/system/info: static application info
"""

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from .. import __version__
from ..common.responses import ApiResponse, error_response
from ..config import settings
from ..database import get_db
from .health import HealthStatus, check_database_health, check_upload_dir_health, get_overall_health

metrics_router = APIRouter(tags=["observability"])
system_router = APIRouter(prefix="/system", tags=["system"])


@metrics_router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    include_in_schema=False,
)
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@system_router.get(
    "/health",
    response_model=ApiResponse[dict],
    summary="Health check endpoint",
    description="Database and attachment store health. Returns 503 if the database is unreachable.",
)
def health_check(db: Session = Depends(get_db)):
    components = {
        "database": check_database_health(db),
        "uploadDir": check_upload_dir_health(settings.UPLOAD_DIR),
    }
    overall = get_overall_health(components)

    data = {
        "status": "DOWN" if overall == HealthStatus.UNHEALTHY else "UP",
        "health": overall.value,
        "version": __version__,
        "database": (
            "Connected"
            if components["database"].status == HealthStatus.HEALTHY
            else "Disconnected"
        ),
        "components": {name: c.to_dict() for name, c in components.items()},
    }

    if overall == HealthStatus.UNHEALTHY:
        return error_response(503, "系统异常", data)
    return ApiResponse.ok(data, "系统运行正常")


@system_router.get("/info", response_model=ApiResponse[dict], summary="Application info")
def system_info():
    return ApiResponse.ok({
        "applicationName": "印章管理系统",
        "version": __version__,
        "environment": settings.ENV,
        "description": "企业印章使用申请、审批和管理系统",
    }, "获取成功")
