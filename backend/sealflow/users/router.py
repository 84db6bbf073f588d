"""User directory endpoints (read only)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..common.responses import ApiResponse
from ..database import get_db
from ..workflow.errors import NotFoundError
from .directory import UserDirectory
from .schemas import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/check-username",
    response_model=ApiResponse[bool],
    summary="Whether a username is taken",
)
def check_username(username: str = Query(...), db: Session = Depends(get_db)):
    return ApiResponse.ok(UserDirectory(db).exists(username), "检查完成")


@router.get(
    "/{username}",
    response_model=ApiResponse[UserResponse],
    summary="Get user profile",
    description="Profile of one user by username. The password is never returned.",
)
def get_user(username: str, db: Session = Depends(get_db)):
    user = UserDirectory(db).find_by_username(username)
    if not user:
        raise NotFoundError(f"用户不存在: {username}")
    return ApiResponse.ok(UserResponse.model_validate(user), "获取用户信息成功")
