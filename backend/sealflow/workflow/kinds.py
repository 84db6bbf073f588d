"""Workflow kind definitions.

A kind bundles everything that differs between usage and creation
applications: the model, the transition table, required and editable fields,
the numbering scheme, the columns search uses and the side-effect hooks. The
state machine itself is shared (see ApplicationWorkflow).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from ..config import settings
from ..models.seal_application import SealUsageApplication
from ..models.seal_create_application import SealCreateApplication
from .hooks import COPIED_SEAL_ATTRIBUTES, copy_seal_attributes, mint_seal
from .numbering import (
    ApplicationNumberGenerator,
    DailySequenceNumberGenerator,
    MillisResidueNumberGenerator,
)
from .status import (
    ApplicationStatus,
    TransitionTable,
    USAGE_TRANSITIONS,
    CREATION_TRANSITIONS,
)

SubmitHook = Callable[[Session, Dict[str, Any]], None]
ApproveHook = Callable[[Session, Any, datetime], Any]

# Sort keys shared by both kinds: API name -> model attribute
_COMMON_SORT_FIELDS = {
    "id": "id",
    "applicationNo": "application_no",
    "sealName": "seal_name",
    "sealType": "seal_type",
    "applicant": "applicant",
    "status": "status",
    "applyTime": "apply_time",
    "updateTime": "update_time",
    "approveTime": "approve_time",
}


@dataclass(frozen=True)
class WorkflowKind:
    """Static description of one application kind."""
    name: str
    model: type
    transitions: TransitionTable
    # (field, message) pairs checked in order on create
    required_fields: Tuple[Tuple[str, str], ...]
    create_fields: Tuple[str, ...]
    editable_fields: Tuple[str, ...]
    number_generator: ApplicationNumberGenerator
    keyword_columns: Tuple[str, ...]
    department_column: str
    sort_fields: Dict[str, str] = field(default_factory=dict)
    on_submit: Optional[SubmitHook] = None
    # Columns on_submit fills; cleared and refilled when seal_name changes
    submit_copied_fields: Tuple[str, ...] = ()
    on_approve: Optional[ApproveHook] = None

    @property
    def supports_completion(self) -> bool:
        return any(ApplicationStatus.COMPLETED in targets for targets in self.transitions.values())

    def column(self, attribute: str):
        return getattr(self.model, attribute)


USAGE = WorkflowKind(
    name="usage",
    model=SealUsageApplication,
    transitions=USAGE_TRANSITIONS,
    required_fields=(
        ("seal_name", "印章名称不能为空"),
        ("seal_type", "印章类型不能为空"),
        ("applicant", "申请人不能为空"),
        ("department", "申请部门不能为空"),
        ("purpose", "用印目的不能为空"),
        ("expected_time", "期望用印时间不能为空"),
    ),
    create_fields=(
        "seal_name",
        "seal_type",
        "seal_shape",
        "seal_owner_department",
        "seal_keeper_department",
        "applicant",
        "department",
        "file_name",
        "addressee",
        "copies",
        "purpose",
        "attachment_url",
        "attachment_name",
        "documents",
        "expected_time",
    ),
    editable_fields=(
        "seal_name",
        "seal_type",
        "purpose",
        "expected_time",
        "documents",
        "file_name",
        "addressee",
        "copies",
        "attachment_url",
        "attachment_name",
    ),
    number_generator=DailySequenceNumberGenerator(
        prefix="YY", max_attempts=settings.APPLICATION_NO_MAX_ATTEMPTS
    ),
    keyword_columns=("application_no", "purpose", "applicant"),
    department_column="department",
    sort_fields={
        **_COMMON_SORT_FIELDS,
        "department": "department",
        "expectedTime": "expected_time",
    },
    on_submit=copy_seal_attributes,
    submit_copied_fields=tuple(column for _, column in COPIED_SEAL_ATTRIBUTES),
)

CREATION = WorkflowKind(
    name="creation",
    model=SealCreateApplication,
    transitions=CREATION_TRANSITIONS,
    required_fields=(
        ("seal_name", "印章名称不能为空"),
        ("seal_type", "印章类型不能为空"),
        ("seal_shape", "印章形状不能为空"),
        ("owner_department", "所属部门不能为空"),
        ("keeper_department", "保管部门不能为空"),
        ("keeper", "保管人不能为空"),
        ("applicant", "申请人不能为空"),
        ("applicant_department", "申请部门不能为空"),
    ),
    create_fields=(
        "seal_name",
        "seal_type",
        "seal_shape",
        "owner_department",
        "keeper_department",
        "keeper",
        "description",
        "applicant",
        "applicant_department",
    ),
    editable_fields=(
        "seal_name",
        "seal_type",
        "seal_shape",
        "owner_department",
        "keeper_department",
        "keeper",
        "description",
    ),
    number_generator=MillisResidueNumberGenerator(
        prefix="SC", max_attempts=settings.APPLICATION_NO_MAX_ATTEMPTS
    ),
    keyword_columns=("application_no", "seal_name", "applicant"),
    department_column="applicant_department",
    sort_fields={
        **_COMMON_SORT_FIELDS,
        "applicantDepartment": "applicant_department",
    },
    on_approve=mint_seal,
)
