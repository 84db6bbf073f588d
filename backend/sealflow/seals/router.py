"""Seal registry API Router

Endpoints for registering seals, editing custody information and reading the
enum catalogs the frontend renders in its forms.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..common.responses import ApiResponse, PageResponse
from ..config import settings
from ..database import get_db
from ..dependencies import get_clock
from ..models.seal import SealShape, SealStatus, SealType
from ..queries.search import Page
from ..workflow.clock import Clock
from .schemas import EnumOption, SealCreate, SealResponse, SealStatusUpdate, SealUpdate
from .service import SealService

router = APIRouter(prefix="/seals", tags=["seals"])


def _options(enum_cls) -> List[EnumOption]:
    return [EnumOption(value=member.value, label=member.label) for member in enum_cls]


@router.get(
    "",
    response_model=ApiResponse[PageResponse[SealResponse]],
    summary="List seals",
    description="""
    List seals, most recently updated first.

    **Pagination:** page is 1-indexed (default 1)

    **Filters:** keyword (name, keeper or location), status
    """
)
def list_seals(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    seals, total = SealService(db).list_seals(page=page, size=size, keyword=keyword, status=status)
    result = Page(items=seals, total=total, page=page, size=size)
    return ApiResponse.ok(PageResponse.from_page(result, SealResponse), "获取成功")


@router.get("/types", response_model=ApiResponse[List[EnumOption]], summary="Seal type catalog")
def list_types():
    return ApiResponse.ok(_options(SealType), "获取成功")


@router.get("/shapes", response_model=ApiResponse[List[EnumOption]], summary="Seal shape catalog")
def list_shapes():
    return ApiResponse.ok(_options(SealShape), "获取成功")


@router.get("/statuses", response_model=ApiResponse[List[EnumOption]], summary="Seal status catalog")
def list_statuses():
    return ApiResponse.ok(_options(SealStatus), "获取成功")


@router.get(
    "/statistics",
    response_model=ApiResponse[Dict[str, Any]],
    summary="Seal counts by status and type",
)
def get_statistics(db: Session = Depends(get_db)):
    return ApiResponse.ok(SealService(db).get_statistics(), "获取成功")


@router.get(
    "/keeper/{keeper}",
    response_model=ApiResponse[List[SealResponse]],
    summary="Seals kept by one person",
)
def list_by_keeper(keeper: str, db: Session = Depends(get_db)):
    seals = SealService(db).find_by_keeper(keeper)
    return ApiResponse.ok([SealResponse.model_validate(s) for s in seals], "获取成功")


@router.get("/{seal_id}", response_model=ApiResponse[SealResponse], summary="Get seal")
def get_seal(seal_id: int, db: Session = Depends(get_db)):
    seal = SealService(db).get_seal_or_404(seal_id)
    return ApiResponse.ok(SealResponse.model_validate(seal), "获取成功")


@router.post(
    "",
    response_model=ApiResponse[SealResponse],
    summary="Register seal",
    description="""
    Register a seal by hand. name, type, keeper, keeperPhone and location
    are required; name must be unique. status defaults to IN_USE.
    """
)
def create_seal(
    body: SealCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    seal = SealService(db, clock).create_seal(body.model_dump())
    return ApiResponse.ok(SealResponse.model_validate(seal), "创建成功")


@router.put("/{seal_id}", response_model=ApiResponse[SealResponse], summary="Update seal")
def update_seal(
    seal_id: int,
    body: SealUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    seal = SealService(db, clock).update_seal(seal_id, body.model_dump())
    return ApiResponse.ok(SealResponse.model_validate(seal), "更新成功")


@router.delete("/{seal_id}", response_model=ApiResponse[Any], summary="Delete seal")
def delete_seal(seal_id: int, db: Session = Depends(get_db)):
    SealService(db).delete_seal(seal_id)
    return ApiResponse.ok(None, "删除成功")


@router.patch(
    "/{seal_id}/status",
    response_model=ApiResponse[SealResponse],
    summary="Change custody status",
)
def update_seal_status(
    seal_id: int,
    body: SealStatusUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    seal = SealService(db, clock).update_status(seal_id, body.status)
    return ApiResponse.ok(SealResponse.model_validate(seal), "状态更新成功")
