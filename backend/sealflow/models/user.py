"""User model for SealFlow

Users are referenced by username string from applications (applicant,
approver) and seals (keeper). There is no foreign key from those columns to
this table: any string is accepted as an identity.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime

from .base import Base


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"


class User(Base):
    """Directory entry for a person who can apply, approve or keep seals.

    The password column holds whatever hash the authentication service wrote;
    it is never returned by the API.
    """

    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True)
    real_name = Column(String(100), nullable=True)
    password = Column(String(255), nullable=False)
    email = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    department = Column(String(100), nullable=True)
    position = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    last_login = Column(DateTime, nullable=True)
    login_count = Column(Integer, nullable=False, default=0)
    create_time = Column(DateTime, nullable=False, default=datetime.now)
    update_time = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role})>"
