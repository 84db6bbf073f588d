"""Application number generation.

Usage applications are numbered ``YY{yyyyMMdd}{4-digit sequence}`` and creation
applications ``SC{epoch millis mod 1e6}``. Both generators check the store for
the candidate and move to the next free value, so a number is never handed out
twice. The unique constraint on ``application_no`` backs this up when two
writers race.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from .errors import InternalError

logger = logging.getLogger(__name__)

DAILY_SEQUENCE_MAX = 9999
MILLIS_MODULUS = 1_000_000


class ApplicationNumberGenerator(ABC):
    """Produces a unique application number for one new application."""

    def __init__(self, max_attempts: int = 20):
        self.max_attempts = max_attempts

    @abstractmethod
    def next_number(self, db: Session, model, now: datetime) -> str:
        """Return an application number not yet used by ``model``.

        Raises:
            InternalError: If no free number is found within max_attempts
        """

    @staticmethod
    def is_taken(db: Session, model, application_no: str) -> bool:
        return db.query(model.id).filter(model.application_no == application_no).first() is not None


class DailySequenceNumberGenerator(ApplicationNumberGenerator):
    """``{prefix}{yyyyMMdd}{NNNN}`` with NNNN counting up within the day."""

    def __init__(self, prefix: str = "YY", max_attempts: int = 20):
        super().__init__(max_attempts)
        self.prefix = prefix

    def day_prefix(self, now: datetime) -> str:
        return f"{self.prefix}{now:%Y%m%d}"

    def next_number(self, db: Session, model, now: datetime) -> str:
        day_prefix = self.day_prefix(now)

        latest = db.query(func.max(model.application_no)).filter(
            model.application_no.like(f"{day_prefix}%")
        ).scalar()

        sequence = 1
        if latest:
            suffix = latest[len(day_prefix):]
            if suffix.isdigit():
                sequence = int(suffix) + 1

        for _ in range(self.max_attempts):
            if sequence > DAILY_SEQUENCE_MAX:
                break
            candidate = f"{day_prefix}{sequence:04d}"
            if not self.is_taken(db, model, candidate):
                return candidate
            sequence += 1

        logger.error(
            "Application number space exhausted",
            extra={"prefix": day_prefix, "last_sequence": sequence}
        )
        raise InternalError("申请编号生成失败")


class MillisResidueNumberGenerator(ApplicationNumberGenerator):
    """``{prefix}{epoch millis mod 1e6}``, stepping forward on collision."""

    def __init__(self, prefix: str = "SC", max_attempts: int = 20):
        super().__init__(max_attempts)
        self.prefix = prefix

    def next_number(self, db: Session, model, now: datetime) -> str:
        residue = int(now.timestamp() * 1000) % MILLIS_MODULUS

        for _ in range(self.max_attempts):
            candidate = f"{self.prefix}{residue}"
            if not self.is_taken(db, model, candidate):
                return candidate
            residue = (residue + 1) % MILLIS_MODULUS

        logger.error(
            "Could not find a free application number",
            extra={"prefix": self.prefix, "attempts": self.max_attempts}
        )
        raise InternalError("申请编号生成失败")
