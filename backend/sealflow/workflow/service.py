"""Application workflow service.

One state machine serves both application kinds. The kind supplies the model,
transition table, field rules, numbering and hooks; this service supplies the
transaction handling, validation order, logging and metrics.

Every mutating operation validates before touching the record and commits
once. A failure after the first write (for example the seal-minting hook on
approval) rolls the whole operation back.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.seal import SealShape, SealType
from ..observability.metrics import record_action_failure, record_decision, record_transition
from .clock import Clock, system_clock
from .errors import (
    ApplicationError,
    ForbiddenError,
    InternalError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .kinds import WorkflowKind
from .result import ActionResult, BatchResult
from .status import (
    ApplicationStatus,
    DECISION_STATUSES,
    StateTransitionError,
    validate_transition,
)

logger = logging.getLogger(__name__)

# Commits tried per create when the application number is taken concurrently
CREATE_ATTEMPTS = 3

# Enum-backed columns validated on create and update
_ENUM_FIELDS = {
    "seal_type": (SealType, "无效的印章类型"),
    "seal_shape": (SealShape, "无效的印章形状"),
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _parse_decision(status: Any, approver: Optional[str]) -> ApplicationStatus:
    if _is_blank(status):
        raise ValidationError("审批状态不能为空")
    try:
        target = ApplicationStatus(status)
    except ValueError:
        raise ValidationError(f"无效的审批状态: {status}")
    if target not in DECISION_STATUSES:
        raise ValidationError(f"无效的审批状态: {target.value}")
    if _is_blank(approver):
        raise ValidationError("审批人不能为空")
    return target


def _normalize_enums(data: Dict[str, Any]) -> None:
    for field, (enum_cls, message) in _ENUM_FIELDS.items():
        value = data.get(field)
        if _is_blank(value):
            continue
        try:
            data[field] = enum_cls(value).value
        except ValueError:
            raise ValidationError(f"{message}: {value}")


class ApplicationWorkflow:
    """State machine for one kind of seal application."""

    def __init__(self, db: Session, kind: WorkflowKind, clock: Clock = system_clock):
        self.db = db
        self.kind = kind
        self.clock = clock

    @property
    def model(self):
        return self.kind.model

    # -- reads ---------------------------------------------------------------

    def get(self, application_id: int):
        return self.db.query(self.model).filter(self.model.id == application_id).first()

    def get_or_404(self, application_id: int):
        application = self.get(application_id)
        if not application:
            raise NotFoundError(f"申请不存在: {application_id}")
        return application

    def get_by_no(self, application_no: str):
        return self.db.query(self.model).filter(
            self.model.application_no == application_no
        ).first()

    def can_edit(self, application_id: int, applicant: str) -> bool:
        application = self.get(application_id)
        return bool(
            application
            and application.applicant == applicant
            and application.status == ApplicationStatus.PENDING.value
        )

    def can_approve(self, application_id: int) -> bool:
        application = self.get(application_id)
        return bool(application and application.status == ApplicationStatus.PENDING.value)

    # -- mutations -----------------------------------------------------------

    def create(self, data: Dict[str, Any]):
        """Submit a new application in PENDING.

        Args:
            data: Field values keyed by model attribute. Keys outside the
                kind's create fields are ignored.

        Returns:
            The persisted application

        Raises:
            ValidationError: First required field that is missing or blank,
                or an unknown seal type/shape
            InternalError: No free application number
        """
        values = {k: data.get(k) for k in self.kind.create_fields if k in data}

        for field, message in self.kind.required_fields:
            if _is_blank(values.get(field)):
                raise ValidationError(message)
        _normalize_enums(values)

        if self.kind.on_submit:
            self.kind.on_submit(self.db, values)

        now = self.clock.now()
        for attempt in range(1, CREATE_ATTEMPTS + 1):
            application = self.model(**values)
            application.application_no = self.kind.number_generator.next_number(
                self.db, self.model, now
            )
            application.status = ApplicationStatus.PENDING.value
            application.apply_time = now
            application.update_time = now

            self.db.add(application)
            try:
                self.db.commit()
                break
            except IntegrityError as e:
                # Another writer took the number between the check and the commit
                self.db.rollback()
                logger.warning(
                    f"Duplicate application number {application.application_no}",
                    extra={"kind": self.kind.name, "attempt": attempt}
                )
                if attempt == CREATE_ATTEMPTS:
                    logger.error(
                        "Giving up on application number generation",
                        extra={"kind": self.kind.name, "attempts": CREATE_ATTEMPTS}
                    )
                    raise InternalError("申请编号生成失败") from e
        self.db.refresh(application)

        record_transition(self.kind.name, ApplicationStatus.PENDING.value)
        logger.info(
            f"Application submitted: {application.application_no}",
            extra={"kind": self.kind.name, "application_id": application.id}
        )
        return application

    def update(self, application_id: int, patch: Dict[str, Any]):
        """Overwrite editable fields of a PENDING application.

        Only keys present in ``patch`` and in the kind's editable fields are
        applied. Required fields may be changed but not cleared.

        Raises:
            NotFoundError: Unknown application
            InvalidStateError: Application already decided
            ValidationError: Required field cleared or invalid enum value
        """
        application = self.get_or_404(application_id)
        if application.status != ApplicationStatus.PENDING.value:
            raise InvalidStateError("申请已处理，无法修改")

        values = {k: patch[k] for k in self.kind.editable_fields if k in patch}
        for field, message in self.kind.required_fields:
            if field in values and _is_blank(values[field]):
                raise ValidationError(message)
        _normalize_enums(values)

        # A renamed seal takes its attributes from the new seal, not the old one
        if (
            self.kind.on_submit
            and "seal_name" in values
            and values["seal_name"] != application.seal_name
        ):
            for field in self.kind.submit_copied_fields:
                values.setdefault(field, None)
            self.kind.on_submit(self.db, values)

        for field, value in values.items():
            setattr(application, field, value)
        application.update_time = self.clock.now()

        self.db.commit()
        self.db.refresh(application)

        logger.info(
            f"Application updated: {application.application_no}",
            extra={"kind": self.kind.name, "fields": sorted(values)}
        )
        return application

    def delete(self, application_id: int) -> None:
        application = self.get_or_404(application_id)
        if application.status != ApplicationStatus.PENDING.value:
            raise InvalidStateError("申请已处理，无法删除")

        self.db.delete(application)
        self.db.commit()

        record_transition(self.kind.name, "DELETED")
        logger.info(
            f"Application deleted: {application.application_no}",
            extra={"kind": self.kind.name, "application_id": application_id}
        )

    def withdraw(self, application_id: int, requester: str) -> ActionResult:
        """Withdraw (delete) a PENDING application on behalf of its applicant.

        Failures are returned, not raised. The applicant check comes before
        the status check, so a stranger learns nothing about the status.
        """
        try:
            application = self.get_or_404(application_id)
            if application.applicant != requester:
                raise ForbiddenError("只有申请人可以撤回申请")
            if application.status != ApplicationStatus.PENDING.value:
                raise InvalidStateError("申请已处理，无法撤回")
        except ApplicationError as e:
            record_action_failure(self.kind.name, "withdraw", e.kind)
            logger.warning(
                f"Withdraw rejected for application {application_id}: {e.message}",
                extra={"kind": self.kind.name, "requester": requester, "reason": e.kind}
            )
            return ActionResult.failure(e, application_id)

        try:
            self.db.delete(application)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            error = InternalError("申请撤回失败")
            record_action_failure(self.kind.name, "withdraw", error.kind)
            logger.error(
                f"Withdraw of application {application_id} rolled back",
                extra={"kind": self.kind.name, "requester": requester},
                exc_info=True
            )
            return ActionResult.failure(error, application_id)

        record_transition(self.kind.name, "WITHDRAWN")
        logger.info(
            f"Application withdrawn: {application.application_no}",
            extra={"kind": self.kind.name, "requester": requester}
        )
        return ActionResult.success(application_id)

    def approve(
        self,
        application_id: int,
        status: Any,
        approver: str,
        remark: Optional[str] = None
    ):
        """Record an approval decision on a PENDING application.

        Args:
            application_id: Application to decide
            status: APPROVED or REJECTED
            approver: Name of the approver, required
            remark: Optional free text

        Returns:
            The decided application

        Raises:
            ValidationError: Status is not a decision or approver is blank
            NotFoundError: Unknown application
            InvalidStateError: Application already decided
        """
        target = _parse_decision(status, approver)

        application = self.get_or_404(application_id)
        current = ApplicationStatus(application.status)
        if current != ApplicationStatus.PENDING:
            raise InvalidStateError("申请已处理，无法重复审批")
        try:
            validate_transition(self.kind.transitions, current, target)
        except StateTransitionError as e:
            raise InvalidStateError(str(e))

        now = self.clock.now()
        application.status = target.value
        application.approver = approver
        application.approve_time = now
        application.approve_remark = remark
        application.update_time = now

        try:
            if target == ApplicationStatus.APPROVED and self.kind.on_approve:
                self.kind.on_approve(self.db, application, now)
            self.db.commit()
        except (ApplicationError, SQLAlchemyError):
            self.db.rollback()
            logger.error(
                f"Approval of {application_id} rolled back",
                extra={"kind": self.kind.name, "approver": approver},
                exc_info=True
            )
            raise
        self.db.refresh(application)

        record_transition(self.kind.name, target.value)
        record_decision(
            self.kind.name,
            (application.approve_time - application.apply_time).total_seconds() / 3600
        )
        logger.info(
            f"Application {application.application_no} {target.value} by {approver}",
            extra={"kind": self.kind.name, "application_id": application_id}
        )
        return application

    def complete(self, application_id: int):
        """Mark an APPROVED application as used (usage kind only).

        Raises:
            InvalidStateError: Kind has no completion step or the application
                is not APPROVED
            NotFoundError: Unknown application
        """
        if not self.kind.supports_completion:
            raise InvalidStateError("该类申请不支持完成操作")

        application = self.get_or_404(application_id)
        if application.status != ApplicationStatus.APPROVED.value:
            raise InvalidStateError("只有已批准的申请才能完成")
        validate_transition(
            self.kind.transitions,
            ApplicationStatus.APPROVED,
            ApplicationStatus.COMPLETED
        )

        application.status = ApplicationStatus.COMPLETED.value
        application.update_time = self.clock.now()
        self.db.commit()
        self.db.refresh(application)

        record_transition(self.kind.name, ApplicationStatus.COMPLETED.value)
        logger.info(
            f"Application completed: {application.application_no}",
            extra={"kind": self.kind.name, "application_id": application_id}
        )
        return application

    def batch_approve(
        self,
        application_ids: Iterable[int],
        status: Any,
        approver: str,
        remark: Optional[str] = None
    ) -> BatchResult:
        """Approve several applications, one transaction each.

        A failing id is counted and logged; it never aborts the rest. The
        decision itself is validated once up front.

        Raises:
            ValidationError: Status is not a decision or approver is blank
        """
        _parse_decision(status, approver)

        batch = BatchResult()
        for application_id in application_ids:
            try:
                self.approve(application_id, status, approver, remark)
            except ApplicationError as e:
                record_action_failure(self.kind.name, "batch_approve", e.kind)
                logger.warning(
                    f"Batch approval skipped application {application_id}: {e.message}",
                    extra={"kind": self.kind.name, "reason": e.kind}
                )
                batch.results.append(ActionResult.failure(e, application_id))
            except SQLAlchemyError as e:
                # approve() already rolled back this id
                error = InternalError("审批失败")
                record_action_failure(self.kind.name, "batch_approve", error.kind)
                logger.warning(
                    f"Batch approval failed for application {application_id}: {e}",
                    extra={"kind": self.kind.name, "reason": error.kind}
                )
                batch.results.append(ActionResult.failure(error, application_id))
            else:
                batch.results.append(ActionResult.success(application_id))

        logger.info(
            f"Batch approval finished: {batch.success}/{batch.total} succeeded",
            extra={"kind": self.kind.name, "approver": approver}
        )
        return batch
