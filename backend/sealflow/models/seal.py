"""Seal model for SealFlow

Represents a physical seal (official stamp) together with its custody
information. Seals are created directly by an administrator or minted when a
seal creation application is approved. Seals are never deleted automatically.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index

from .base import Base


class SealType(str, Enum):
    """Kind of seal."""
    OFFICIAL = "OFFICIAL"
    FINANCE = "FINANCE"
    CONTRACT = "CONTRACT"
    PERSONAL = "PERSONAL"
    LEGAL = "LEGAL"
    HR = "HR"

    @property
    def label(self) -> str:
        return SEAL_TYPE_LABELS[self]


class SealShape(str, Enum):
    """Physical outline of a seal."""
    ROUND = "ROUND"
    SQUARE = "SQUARE"
    OVAL = "OVAL"

    @property
    def label(self) -> str:
        return SEAL_SHAPE_LABELS[self]


class SealStatus(str, Enum):
    """Custody status of a seal."""
    IN_USE = "IN_USE"
    DESTROYED = "DESTROYED"
    LOST = "LOST"
    SUSPENDED = "SUSPENDED"

    @property
    def label(self) -> str:
        return SEAL_STATUS_LABELS[self]


SEAL_TYPE_LABELS = {
    SealType.OFFICIAL: "公章",
    SealType.FINANCE: "财务章",
    SealType.CONTRACT: "合同章",
    SealType.PERSONAL: "个人印章",
    SealType.LEGAL: "法人章",
    SealType.HR: "人事章",
}

SEAL_SHAPE_LABELS = {
    SealShape.ROUND: "圆形",
    SealShape.SQUARE: "方形",
    SealShape.OVAL: "椭圆形",
}

SEAL_STATUS_LABELS = {
    SealStatus.IN_USE: "在用",
    SealStatus.DESTROYED: "已销毁",
    SealStatus.LOST: "遗失",
    SealStatus.SUSPENDED: "暂停使用",
}


class Seal(Base):
    """A registered seal and who keeps it.

    Invariants:
    - name is unique across all seals
    - source_application_id is unique: a creation application mints at most one seal
    """

    __tablename__ = 'seals'

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(100), nullable=False, unique=True)
    type = Column(String(20), nullable=False, comment="SealType value")
    shape = Column(String(20), nullable=True, comment="SealShape value")
    status = Column(
        String(20),
        nullable=False,
        default=SealStatus.IN_USE.value,
        comment="SealStatus value"
    )

    # Custody
    owner_department = Column(String(100), nullable=True)
    keeper_department = Column(String(100), nullable=True)
    keeper = Column(String(100), nullable=True)
    keeper_phone = Column(String(20), nullable=True)
    location = Column(String(200), nullable=True)

    description = Column(Text, nullable=True)
    image_url = Column(String(255), nullable=True)

    source_application_id = Column(
        Integer,
        ForeignKey('seal_create_applications.id', ondelete='SET NULL'),
        nullable=True,
        unique=True,
        comment="Creation application that minted this seal"
    )

    create_time = Column(DateTime, nullable=False, default=datetime.now)
    update_time = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index('ix_seals_keeper', 'keeper'),
        Index('ix_seals_status', 'status'),
    )
