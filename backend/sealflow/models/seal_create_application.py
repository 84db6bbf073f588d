"""Seal creation application model for SealFlow

A request to mint a new seal. Approving it is the only path by which a seal is
created from an application; rejection is terminal.

State machine: PENDING → APPROVED, PENDING → REJECTED
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index

from .base import Base


class SealCreateApplication(Base):
    """Application to create a new seal."""

    __tablename__ = 'seal_create_applications'

    id = Column(Integer, primary_key=True, autoincrement=True)

    application_no = Column(
        String(50),
        nullable=False,
        unique=True,
        comment="SC{epoch millis mod 1e6}"
    )

    # Attributes of the seal to be minted
    seal_name = Column(String(100), nullable=False)
    seal_type = Column(String(20), nullable=False)
    seal_shape = Column(String(20), nullable=False)
    owner_department = Column(String(100), nullable=False)
    keeper_department = Column(String(100), nullable=False)
    keeper = Column(String(50), nullable=False)
    description = Column(String(500), nullable=True)

    applicant = Column(String(50), nullable=False)
    applicant_department = Column(String(100), nullable=False)

    # State machine
    status = Column(String(20), nullable=False, default='PENDING')
    approver = Column(String(50), nullable=True)
    approve_time = Column(DateTime, nullable=True)
    approve_remark = Column(String(500), nullable=True)

    # Timestamps
    apply_time = Column(DateTime, nullable=False)
    update_time = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('ix_seal_create_applications_status', 'status'),
        Index('ix_seal_create_applications_applicant', 'applicant'),
    )

    def __repr__(self) -> str:
        return f"<SealCreateApplication {self.application_no} {self.status}>"
