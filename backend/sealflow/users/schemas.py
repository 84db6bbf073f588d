"""Pydantic schemas for the user directory API"""

from datetime import datetime
from typing import Optional

from ..common.responses import CamelModel


class UserResponse(CamelModel):
    """Public profile; the password hash is never exposed"""
    id: int
    username: str
    real_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    role: str
    status: str
    last_login: Optional[datetime] = None
    login_count: int = 0
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
