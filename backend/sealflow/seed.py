"""Demo data for a fresh installation.

Creates three users (admin, manager, test_user) and the four standard seals
if they do not exist yet. Safe to run repeatedly.
"""

import logging
from typing import Dict

from sqlalchemy.orm import Session

from .models.seal import SealShape, SealStatus, SealType
from .models.user import User, UserRole, UserStatus
from .seals.service import SealService
from .workflow.clock import Clock, system_clock

logger = logging.getLogger(__name__)

# Accounts are authenticated elsewhere; "!" never matches a password hash
UNUSABLE_PASSWORD = "!"

DEMO_USERS = (
    {
        "username": "admin",
        "real_name": "系统管理员",
        "email": "admin@company.com",
        "phone": "13800138000",
        "department": "信息技术部",
        "position": "系统管理员",
        "role": UserRole.ADMIN.value,
    },
    {
        "username": "test_user",
        "real_name": "测试用户",
        "email": "test@company.com",
        "phone": "13800138001",
        "department": "行政部",
        "position": "行政专员",
        "role": UserRole.USER.value,
    },
    {
        "username": "manager",
        "real_name": "部门经理",
        "email": "manager@company.com",
        "phone": "13800138002",
        "department": "行政部",
        "position": "部门经理",
        "role": UserRole.MANAGER.value,
    },
)

DEMO_SEALS = (
    {
        "name": "公司公章",
        "type": SealType.OFFICIAL.value,
        "shape": SealShape.ROUND.value,
        "owner_department": "总经理办公室",
        "keeper_department": "行政部",
        "keeper": "行政部经理",
        "keeper_phone": "13800138888",
        "location": "行政部办公室保险柜",
        "description": "公司对外正式文件专用印章",
    },
    {
        "name": "财务专用章",
        "type": SealType.FINANCE.value,
        "shape": SealShape.ROUND.value,
        "owner_department": "财务部",
        "keeper_department": "财务部",
        "keeper": "财务部经理",
        "keeper_phone": "13800138889",
        "location": "财务部办公室保险柜",
        "description": "财务相关文件专用印章",
    },
    {
        "name": "合同专用章",
        "type": SealType.CONTRACT.value,
        "shape": SealShape.SQUARE.value,
        "owner_department": "法务部",
        "keeper_department": "法务部",
        "keeper": "法务部经理",
        "keeper_phone": "13800138890",
        "location": "法务部办公室保险柜",
        "description": "合同签署专用印章",
    },
    {
        "name": "人事专用章",
        "type": SealType.HR.value,
        "shape": SealShape.OVAL.value,
        "owner_department": "人事部",
        "keeper_department": "人事部",
        "keeper": "人事部经理",
        "keeper_phone": "13800138891",
        "location": "人事部办公室保险柜",
        "description": "人事相关文件专用印章",
    },
)


def seed_demo_data(db: Session, clock: Clock = system_clock) -> Dict[str, int]:
    """Insert missing demo users and seals and commit.

    Returns:
        Number of users and seals actually created
    """
    now = clock.now()
    created = {"users": 0, "seals": 0}

    for data in DEMO_USERS:
        if db.query(User.id).filter(User.username == data["username"]).first():
            continue
        db.add(User(
            **data,
            password=UNUSABLE_PASSWORD,
            status=UserStatus.ACTIVE.value,
            login_count=0,
            create_time=now,
            update_time=now,
        ))
        created["users"] += 1

    seals = SealService(db, clock)
    for data in DEMO_SEALS:
        if seals.name_taken(data["name"]):
            continue
        seals.add_seal({**data, "status": SealStatus.IN_USE.value})
        created["seals"] += 1

    db.commit()
    logger.info(
        f"Demo data seeded: {created['users']} users, {created['seals']} seals",
        extra=created
    )
    return created
