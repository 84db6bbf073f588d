"""Application API routers.

Both application kinds expose the same REST surface, built by
build_application_router from the kind definition. Usage applications get the
extra endpoints that only make sense for them (completion, upcoming use,
per-seal statistics, keeper inbox).

Static paths are registered before ``/{application_id}`` so that they are
not captured by the id route.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..common.responses import ApiResponse, PageResponse
from ..config import settings
from ..database import get_db
from ..dependencies import get_clock
from ..queries.search import ApplicationQueryService
from ..statistics.service import StatisticsService
from ..workflow.clock import Clock
from ..workflow.errors import NotFoundError, ValidationError
from ..workflow.kinds import CREATION, USAGE, WorkflowKind
from ..workflow.service import ApplicationWorkflow
from .schemas import (
    ApproveRequest,
    BatchApproveRequest,
    BatchApproveSummary,
    CreationApplicationCreate,
    CreationApplicationResponse,
    CreationApplicationUpdate,
    UsageApplicationCreate,
    UsageApplicationResponse,
    UsageApplicationUpdate,
    WithdrawRequest,
)


def build_application_router(
    kind: WorkflowKind,
    prefix: str,
    noun: str,
    response_schema,
    create_schema,
    update_schema,
) -> APIRouter:
    """Build the REST router for one application kind.

    Args:
        kind: Workflow kind served by the router
        prefix: URL prefix, e.g. /applications
        noun: What the kind is called in response messages
        response_schema: Pydantic model for one application
        create_schema: Pydantic model of the create body
        update_schema: Pydantic model of the update body

    Returns:
        APIRouter with all endpoints of the kind
    """
    router = APIRouter(prefix=prefix, tags=[f"{kind.name}_applications"])
    is_usage = kind.supports_completion

    def workflow(db: Session, clock: Clock) -> ApplicationWorkflow:
        return ApplicationWorkflow(db, kind, clock)

    def one(application) -> Any:
        return response_schema.model_validate(application)

    def paged(page) -> PageResponse:
        return PageResponse.from_page(page, response_schema)

    # ------------------------------------------------------------------ create

    @router.post(
        "",
        response_model=ApiResponse[response_schema],
        summary=f"Submit {kind.name} application",
        description=f"""
        Submit a new {kind.name} application. It starts in PENDING with a
        freshly generated application number.

        Required fields are validated in order; the first missing one is
        reported as a 400 with its message.
        """
    )
    def create_application(
        body: create_schema,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        application = workflow(db, clock).create(body.model_dump(exclude_unset=True))
        return ApiResponse.ok(one(application), f"{noun}创建成功")

    # ------------------------------------------------------------------ lists

    @router.get(
        "",
        response_model=ApiResponse[PageResponse[response_schema]],
        summary=f"Search {kind.name} applications",
        description="""
        Paged search. All given filters must match.

        **Filters:** keyword, status, applicant, department, startTime, endTime

        **Sorting:** sortBy (allowlisted field), sortDir (asc|desc)
        """
    )
    def search_applications(
        page: int = Query(0, ge=0, description="Page number (0-indexed)"),
        size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        sort_by: str = Query("applyTime", alias="sortBy"),
        sort_dir: str = Query("desc", alias="sortDir"),
        keyword: Optional[str] = Query(None),
        status: Optional[str] = Query(None),
        applicant: Optional[str] = Query(None),
        department: Optional[str] = Query(None),
        start_time: Optional[datetime] = Query(None, alias="startTime"),
        end_time: Optional[datetime] = Query(None, alias="endTime"),
        db: Session = Depends(get_db)
    ):
        result = ApplicationQueryService(db, kind).search(
            keyword=keyword,
            status=status,
            applicant=applicant,
            department=department,
            start_time=start_time,
            end_time=end_time,
            page=page,
            size=size,
            sort_by=sort_by,
            sort_dir=sort_dir,
        )
        return ApiResponse.ok(paged(result), f"获取{noun}列表成功")

    @router.get(
        "/pending",
        response_model=ApiResponse[PageResponse[response_schema]],
        summary="Approver inbox",
    )
    def list_pending(
        page: int = Query(0, ge=0, description="Page number (0-indexed)"),
        size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        db: Session = Depends(get_db)
    ):
        result = ApplicationQueryService(db, kind).pending(page, size)
        return ApiResponse.ok(paged(result), f"获取待审批{noun}成功")

    if is_usage:
        @router.get(
            "/completed",
            response_model=ApiResponse[PageResponse[response_schema]],
            summary="Completed applications",
        )
        def list_completed(
            page: int = Query(0, ge=0, description="Page number (0-indexed)"),
            size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
            db: Session = Depends(get_db)
        ):
            result = ApplicationQueryService(db, kind).completed(page, size)
            return ApiResponse.ok(paged(result), f"获取已完成{noun}成功")

    @router.get(
        "/my/{applicant}",
        response_model=ApiResponse[PageResponse[response_schema]],
        summary="Applications submitted by one applicant",
    )
    def list_mine(
        applicant: str,
        page: int = Query(0, ge=0, description="Page number (0-indexed)"),
        size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        db: Session = Depends(get_db)
    ):
        result = ApplicationQueryService(db, kind).mine(applicant, page, size)
        return ApiResponse.ok(paged(result), f"获取我的{noun}成功")

    if is_usage:
        @router.get(
            "/keeper/{keeper}/pending",
            response_model=ApiResponse[PageResponse[response_schema]],
            summary="Keeper inbox",
            description="PENDING applications for seals kept by the given keeper, oldest first.",
        )
        def list_keeper_pending(
            keeper: str,
            page: int = Query(0, ge=0, description="Page number (0-indexed)"),
            size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
            db: Session = Depends(get_db)
        ):
            result = ApplicationQueryService(db, kind).keeper_pending(keeper, page, size)
            return ApiResponse.ok(paged(result), f"获取待审批{noun}成功")

    @router.get(
        "/no/{application_no}",
        response_model=ApiResponse[response_schema],
        summary="Get application by number",
    )
    def get_by_number(application_no: str, db: Session = Depends(get_db)):
        application = ApplicationWorkflow(db, kind).get_by_no(application_no)
        if not application:
            raise NotFoundError(f"申请不存在: {application_no}")
        return ApiResponse.ok(one(application), f"获取{noun}信息成功")

    # ------------------------------------------------------------------ batch

    @router.post(
        "/batch-approve",
        response_model=ApiResponse[BatchApproveSummary],
        summary="Approve or reject several applications",
        description="""
        Each id is decided in its own transaction. Ids that cannot be decided
        (unknown, already decided) are counted as failed; the call itself
        still succeeds.
        """
    )
    def batch_approve(
        body: BatchApproveRequest,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        if not body.ids:
            raise ValidationError("申请ID列表不能为空")
        result = workflow(db, clock).batch_approve(
            body.ids, body.status, body.approver, body.remark
        )
        return ApiResponse.ok(BatchApproveSummary(**result.summary()), "批量审批完成")

    # ------------------------------------------------------------------ statistics

    @router.get(
        "/statistics",
        response_model=ApiResponse[Dict[str, Any]],
        summary="Totals, status breakdown and average processing time",
    )
    def get_statistics(db: Session = Depends(get_db)):
        return ApiResponse.ok(StatisticsService(db, kind).summary(), f"获取{noun}统计信息成功")

    @router.get(
        "/statistics/department",
        response_model=ApiResponse[List[Dict[str, Any]]],
        summary="Applications per department",
    )
    def get_department_statistics(db: Session = Depends(get_db)):
        return ApiResponse.ok(StatisticsService(db, kind).by_department(), "获取部门统计成功")

    if is_usage:
        @router.get(
            "/statistics/seal-usage",
            response_model=ApiResponse[List[Dict[str, Any]]],
            summary="Applications per seal",
        )
        def get_seal_usage_statistics(db: Session = Depends(get_db)):
            return ApiResponse.ok(StatisticsService(db, kind).by_seal(), "获取印章使用统计成功")

    @router.get(
        "/statistics/monthly-trend",
        response_model=ApiResponse[List[Dict[str, Any]]],
        summary="Submissions per month",
    )
    def get_monthly_trend(
        months: int = Query(6, ge=1, le=120),
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        trend = StatisticsService(db, kind, clock).monthly_trend(months)
        return ApiResponse.ok(trend, "获取月度趋势成功")

    @router.get(
        "/statistics/average-processing-time",
        response_model=ApiResponse[float],
        summary="Mean hours from submission to decision",
    )
    def get_average_processing_time(db: Session = Depends(get_db)):
        average = StatisticsService(db, kind).average_processing_time()
        return ApiResponse.ok(average, "获取平均处理时间成功")

    @router.get(
        "/statistics/approval-duration",
        response_model=ApiResponse[Dict[str, Any]],
        summary="Decision-time distribution",
        description="""
        Average decision time, bucketed counts (within1Hour, within1Day,
        within3Days, within7Days, moreThan7Days) and the fastest and slowest
        decisions. Degrades to a placeholder report instead of failing.
        """
    )
    def get_approval_duration(db: Session = Depends(get_db)):
        report = StatisticsService(db, kind).approval_duration()
        return ApiResponse.ok(report, "获取审批时长统计成功")

    if is_usage:
        @router.get(
            "/upcoming",
            response_model=ApiResponse[List[response_schema]],
            summary="Approved applications due soon",
        )
        def list_upcoming(
            hours: int = Query(24, ge=0),
            db: Session = Depends(get_db),
            clock: Clock = Depends(get_clock)
        ):
            applications = StatisticsService(db, kind, clock).upcoming(hours)
            return ApiResponse.ok([one(a) for a in applications], f"获取即将到期{noun}成功")

    # ------------------------------------------------------------------ single application

    @router.get(
        "/{application_id}",
        response_model=ApiResponse[response_schema],
        summary="Get application",
    )
    def get_application(application_id: int, db: Session = Depends(get_db)):
        application = ApplicationWorkflow(db, kind).get_or_404(application_id)
        return ApiResponse.ok(one(application), f"获取{noun}信息成功")

    @router.put(
        "/{application_id}",
        response_model=ApiResponse[response_schema],
        summary="Edit a PENDING application",
    )
    def update_application(
        application_id: int,
        body: update_schema,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        application = workflow(db, clock).update(
            application_id, body.model_dump(exclude_unset=True)
        )
        return ApiResponse.ok(one(application), f"{noun}更新成功")

    @router.delete(
        "/{application_id}",
        response_model=ApiResponse[Any],
        summary="Delete a PENDING application",
    )
    def delete_application(
        application_id: int,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        workflow(db, clock).delete(application_id)
        return ApiResponse.ok(None, f"{noun}删除成功")

    @router.post(
        "/{application_id}/approve",
        response_model=ApiResponse[response_schema],
        summary="Approve or reject",
        description="""
        Record the decision on a PENDING application. status must be
        APPROVED or REJECTED and approver is required.
        """
    )
    def approve_application(
        application_id: int,
        body: ApproveRequest,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        application = workflow(db, clock).approve(
            application_id, body.status, body.approver, body.remark
        )
        return ApiResponse.ok(one(application), f"{noun}审批成功")

    if is_usage:
        @router.post(
            "/{application_id}/complete",
            response_model=ApiResponse[response_schema],
            summary="Mark an approved application as used",
        )
        def complete_application(
            application_id: int,
            db: Session = Depends(get_db),
            clock: Clock = Depends(get_clock)
        ):
            application = workflow(db, clock).complete(application_id)
            return ApiResponse.ok(one(application), f"{noun}完成成功")

    @router.post(
        "/{application_id}/withdraw",
        response_model=ApiResponse[Any],
        summary="Withdraw own PENDING application",
        description="""
        Deletes the application if it is PENDING and the caller is its
        applicant. Any other refusal is reported as a plain 400.
        """
    )
    def withdraw_application(
        application_id: int,
        body: WithdrawRequest,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock)
    ):
        service = workflow(db, clock)
        service.get_or_404(application_id)
        if not body.applicant or not body.applicant.strip():
            raise ValidationError("申请人不能为空")

        if not service.withdraw(application_id, body.applicant):
            raise ValidationError(f"{noun}撤回失败")
        return ApiResponse.ok(None, f"{noun}撤回成功")

    @router.get(
        "/{application_id}/can-edit",
        response_model=ApiResponse[bool],
        summary="Whether the applicant may still edit",
    )
    def can_edit(
        application_id: int,
        applicant: str = Query(...),
        db: Session = Depends(get_db)
    ):
        return ApiResponse.ok(ApplicationWorkflow(db, kind).can_edit(application_id, applicant), "检查完成")

    @router.get(
        "/{application_id}/can-approve",
        response_model=ApiResponse[bool],
        summary="Whether the application awaits a decision",
    )
    def can_approve(application_id: int, db: Session = Depends(get_db)):
        return ApiResponse.ok(ApplicationWorkflow(db, kind).can_approve(application_id), "检查完成")

    return router


usage_router = build_application_router(
    USAGE,
    prefix="/applications",
    noun="申请",
    response_schema=UsageApplicationResponse,
    create_schema=UsageApplicationCreate,
    update_schema=UsageApplicationUpdate,
)

creation_router = build_application_router(
    CREATION,
    prefix="/seal-create-applications",
    noun="印章申请",
    response_schema=CreationApplicationResponse,
    create_schema=CreationApplicationCreate,
    update_schema=CreationApplicationUpdate,
)
