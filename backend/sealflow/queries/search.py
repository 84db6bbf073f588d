"""Read-only queries over seal applications.

Paged search plus the derived views (pending inbox, completed, my
applications, keeper inbox). Nothing here writes.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import and_, asc, desc, or_
from sqlalchemy.orm import Session

from ..config import settings
from ..models.seal import Seal
from ..workflow.errors import ValidationError
from ..workflow.kinds import WorkflowKind
from ..workflow.status import ApplicationStatus, parse_status

DEFAULT_SORT_BY = "applyTime"
DEFAULT_SORT_DIR = "desc"
SORT_DIRECTIONS = ("asc", "desc")


@dataclass
class Page:
    """One page of results; ``page`` keeps the caller's numbering."""
    items: List[Any] = field(default_factory=list)
    total: int = 0
    page: int = 0
    size: int = 10

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)


def resolve_sort(kind: WorkflowKind, sort_by: Optional[str], sort_dir: Optional[str]):
    """Translate API sort parameters into an ORDER BY clause.

    Raises:
        ValidationError: Unknown sort field or direction
    """
    sort_by = sort_by or DEFAULT_SORT_BY
    sort_dir = (sort_dir or DEFAULT_SORT_DIR).lower()

    attribute = kind.sort_fields.get(sort_by)
    if attribute is None:
        raise ValidationError(f"不支持的排序字段: {sort_by}")
    if sort_dir not in SORT_DIRECTIONS:
        raise ValidationError(f"不支持的排序方向: {sort_dir}")

    column = kind.column(attribute)
    return asc(column) if sort_dir == "asc" else desc(column)


class ApplicationQueryService:
    """Search and list views for one application kind."""

    def __init__(self, db: Session, kind: WorkflowKind):
        self.db = db
        self.kind = kind

    @property
    def model(self):
        return self.kind.model

    def search(
        self,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
        applicant: Optional[str] = None,
        department: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        page: int = 0,
        size: int = settings.DEFAULT_PAGE_SIZE,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None
    ) -> Page:
        """Paged search; all given filters must match.

        Args:
            keyword: Case-sensitive substring of application number, applicant
                or the kind's description column (purpose / seal name)
            status: Exact status
            applicant: Exact applicant
            department: Exact department of the applicant
            start_time: Inclusive lower bound on apply_time
            end_time: Inclusive upper bound on apply_time
            page: Page number (0-indexed)
            size: Results per page
            sort_by: Field from the kind's sort allowlist
            sort_dir: asc or desc

        Raises:
            ValidationError: Bad paging, sort or status parameter
        """
        order = resolve_sort(self.kind, sort_by, sort_dir)

        conditions = []
        if keyword:
            pattern = f"%{keyword}%"
            conditions.append(or_(*[
                self.kind.column(name).like(pattern) for name in self.kind.keyword_columns
            ]))
        if status:
            try:
                conditions.append(self.model.status == parse_status(status).value)
            except ValueError:
                raise ValidationError(f"无效的申请状态: {status}")
        if applicant:
            conditions.append(self.model.applicant == applicant)
        if department:
            conditions.append(self.kind.column(self.kind.department_column) == department)
        if start_time:
            conditions.append(self.model.apply_time >= start_time)
        if end_time:
            conditions.append(self.model.apply_time <= end_time)

        query = self.db.query(self.model)
        if conditions:
            query = query.filter(and_(*conditions))

        return self._paginate(query, (order, desc(self.model.id)), page, size)

    def _paginate(self, query, order, page: int, size: int) -> Page:
        if page < 0 or size <= 0:
            raise ValidationError("分页参数无效")
        total = query.count()
        items = query.order_by(*order).offset(page * size).limit(size).all()
        return Page(items=items, total=total, page=page, size=size)

    def pending(self, page: int = 0, size: int = settings.DEFAULT_PAGE_SIZE) -> Page:
        """Approver inbox, oldest first."""
        query = self.db.query(self.model).filter(
            self.model.status == ApplicationStatus.PENDING.value
        )
        return self._paginate(query, (asc(self.model.apply_time), asc(self.model.id)), page, size)

    def completed(self, page: int = 0, size: int = settings.DEFAULT_PAGE_SIZE) -> Page:
        query = self.db.query(self.model).filter(
            self.model.status == ApplicationStatus.COMPLETED.value
        )
        return self._paginate(query, (desc(self.model.update_time), desc(self.model.id)), page, size)

    def mine(self, applicant: str, page: int = 0, size: int = settings.DEFAULT_PAGE_SIZE) -> Page:
        query = self.db.query(self.model).filter(self.model.applicant == applicant)
        return self._paginate(query, (desc(self.model.apply_time), desc(self.model.id)), page, size)

    def keeper_pending(
        self,
        keeper: str,
        page: int = 0,
        size: int = settings.DEFAULT_PAGE_SIZE
    ) -> Page:
        """PENDING applications for any seal the keeper looks after, oldest first."""
        kept_seals = self.db.query(Seal.name).filter(Seal.keeper == keeper)
        query = self.db.query(self.model).filter(
            self.model.status == ApplicationStatus.PENDING.value,
            self.model.seal_name.in_(kept_seals.scalar_subquery())
        )
        return self._paginate(query, (asc(self.model.apply_time), asc(self.model.id)), page, size)
