"""SQLAlchemy Models for SealFlow"""

from .base import Base
from .seal import Seal, SealType, SealShape, SealStatus
from .seal_application import SealUsageApplication
from .seal_create_application import SealCreateApplication
from .user import User, UserRole, UserStatus

__all__ = [
    "Base",
    "Seal",
    "SealType",
    "SealShape",
    "SealStatus",
    "SealUsageApplication",
    "SealCreateApplication",
    "User",
    "UserRole",
    "UserStatus",
]
