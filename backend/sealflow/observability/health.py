"""Health checks for the database and the attachment store."""

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "latencyMs": self.latency_ms,
        }


def check_database_health(db: Session) -> ComponentHealth:
    """Run ``SELECT 1`` and time it."""
    try:
        start = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message=f"Database error: {e}")


def check_upload_dir_health(upload_dir: str) -> ComponentHealth:
    """The attachment store is usable if its root exists (or can be created) and is writable.

    An unusable store only degrades the service; applications still work
    without attachments.
    """
    try:
        os.makedirs(upload_dir, exist_ok=True)
    except OSError as e:
        logger.warning(f"Upload directory unavailable: {e}")
        return ComponentHealth(status=HealthStatus.DEGRADED, message=f"Upload dir error: {e}")

    if not os.access(upload_dir, os.W_OK):
        return ComponentHealth(status=HealthStatus.DEGRADED, message="Upload dir not writable")
    return ComponentHealth(status=HealthStatus.HEALTHY, message="Upload dir OK")


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Worst status wins: any UNHEALTHY, else any DEGRADED, else HEALTHY."""
    statuses = {c.status for c in components.values()}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
