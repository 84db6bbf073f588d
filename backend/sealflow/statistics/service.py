"""Statistics service - reads a snapshot and hands it to the engine."""

import logging
from datetime import timedelta
from typing import Any, Dict, List

from sqlalchemy import asc
from sqlalchemy.orm import Session

from ..workflow.clock import Clock, system_clock
from ..workflow.kinds import WorkflowKind
from ..workflow.status import ApplicationStatus
from . import engine
from .engine import ApplicationRow

logger = logging.getLogger(__name__)


class StatisticsService:
    """Application statistics for one kind, recomputed on every call."""

    def __init__(self, db: Session, kind: WorkflowKind, clock: Clock = system_clock):
        self.db = db
        self.kind = kind
        self.clock = clock

    def snapshot(self) -> List[ApplicationRow]:
        """Read the statistics columns of every application once."""
        model = self.kind.model
        expected_time = getattr(model, "expected_time", None)
        columns = [
            model.application_no,
            model.status,
            self.kind.column(self.kind.department_column),
            model.seal_name,
            model.apply_time,
            model.approve_time,
        ]
        if expected_time is not None:
            columns.append(expected_time)

        rows = []
        for record in self.db.query(*columns).all():
            rows.append(ApplicationRow(*record))
        return rows

    def summary(self) -> Dict[str, Any]:
        return engine.summary(self.snapshot())

    def by_department(self) -> List[Dict[str, Any]]:
        return engine.count_by_department(self.snapshot())

    def by_seal(self) -> List[Dict[str, Any]]:
        return engine.count_by_seal_name(self.snapshot())

    def monthly_trend(self, months: int) -> List[Dict[str, Any]]:
        return engine.monthly_trend(self.snapshot(), months, self.clock.now())

    def average_processing_time(self) -> float:
        return engine.average_processing_time(self.snapshot())

    def approval_duration(self) -> Dict[str, Any]:
        """Decision-time report; degrades to a placeholder if it cannot be built."""
        try:
            return engine.approval_duration_statistics(self.snapshot())
        except Exception:
            logger.error(
                "Approval duration statistics failed",
                extra={"kind": self.kind.name},
                exc_info=True
            )
            self.db.rollback()
            return engine.degraded_duration_statistics()

    def upcoming(self, hours: int) -> List[Any]:
        """APPROVED usage applications expected within the next ``hours`` hours."""
        model = self.kind.model
        deadline = self.clock.now() + timedelta(hours=hours)
        return self.db.query(model).filter(
            model.status == ApplicationStatus.APPROVED.value,
            model.expected_time <= deadline
        ).order_by(asc(model.expected_time), asc(model.id)).all()
