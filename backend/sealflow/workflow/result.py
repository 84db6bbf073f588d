"""Outcome types for operations that report failure instead of raising."""

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ApplicationError


@dataclass
class ActionResult:
    """Outcome of a single workflow action.

    error_kind is one of the ApplicationError kinds (NOT_FOUND, INVALID_STATE,
    FORBIDDEN, VALIDATION, INTERNAL) when ok is False.
    """
    ok: bool
    application_id: Optional[int] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, application_id: Optional[int] = None) -> "ActionResult":
        return cls(ok=True, application_id=application_id)

    @classmethod
    def failure(cls, error: ApplicationError, application_id: Optional[int] = None) -> "ActionResult":
        return cls(
            ok=False,
            application_id=application_id,
            error_kind=error.kind,
            message=error.message,
        )

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class BatchResult:
    """Per-id outcomes of a batch operation plus the summary the API reports."""
    results: List[ActionResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return self.total - self.success

    def summary(self) -> dict:
        return {"total": self.total, "success": self.success, "failed": self.failed}
