"""Seal usage application model for SealFlow

A request to use an existing seal for a specific document or purpose. The
target seal's attributes are copied onto the application when it is submitted,
so later edits to the seal do not rewrite history.

State machine: PENDING → APPROVED → COMPLETED, PENDING → REJECTED
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index

from .base import Base


class SealUsageApplication(Base):
    """Application to use a seal.

    apply_time is set once on submission. update_time is refreshed by the
    workflow on every mutation. status, approver, approve_time and
    approve_remark are written only by the workflow.
    """

    __tablename__ = 'seal_applications'

    id = Column(Integer, primary_key=True, autoincrement=True)

    application_no = Column(
        String(50),
        nullable=False,
        unique=True,
        comment="YY{yyyyMMdd}{4-digit sequence}"
    )

    # Denormalized copy of the target seal at submission time
    seal_name = Column(String(100), nullable=False)
    seal_type = Column(String(20), nullable=False)
    seal_shape = Column(String(20), nullable=True)
    seal_owner_department = Column(String(100), nullable=True)
    seal_keeper_department = Column(String(100), nullable=True)

    # Request details
    applicant = Column(String(100), nullable=False)
    department = Column(String(100), nullable=False)
    file_name = Column(String(200), nullable=True)
    addressee = Column(String(200), nullable=True)
    copies = Column(Integer, nullable=True)
    purpose = Column(Text, nullable=False)
    attachment_url = Column(String(500), nullable=True)
    attachment_name = Column(String(500), nullable=True)
    documents = Column(String(500), nullable=True)
    expected_time = Column(DateTime, nullable=True)

    # State machine
    status = Column(String(20), nullable=False, default='PENDING')
    approver = Column(String(100), nullable=True)
    approve_time = Column(DateTime, nullable=True)
    approve_remark = Column(Text, nullable=True)

    # Timestamps
    apply_time = Column(DateTime, nullable=False)
    update_time = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('ix_seal_applications_status', 'status'),
        Index('ix_seal_applications_applicant', 'applicant'),
        Index('ix_seal_applications_apply_time', 'apply_time'),
    )

    def __repr__(self) -> str:
        return f"<SealUsageApplication {self.application_no} {self.status}>"
