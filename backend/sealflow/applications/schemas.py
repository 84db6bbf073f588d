"""Pydantic schemas for the application APIs

Request/response models for usage applications (/api/applications) and
creation applications (/api/seal-create-applications). JSON is camelCase.
Required-field checks live in the workflow so that the error messages match
whichever client submitted the data; the request models only check types.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..common.responses import CamelModel


# ============================================================================
# Usage Application Schemas
# ============================================================================

class UsageApplicationCreate(CamelModel):
    """Body of POST /api/applications"""
    seal_name: Optional[str] = None
    seal_type: Optional[str] = None
    seal_shape: Optional[str] = None
    seal_owner_department: Optional[str] = None
    seal_keeper_department: Optional[str] = None
    applicant: Optional[str] = None
    department: Optional[str] = None
    file_name: Optional[str] = None
    addressee: Optional[str] = None
    copies: Optional[int] = Field(None, ge=1)
    purpose: Optional[str] = None
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None
    documents: Optional[str] = None
    expected_time: Optional[datetime] = None


class UsageApplicationUpdate(CamelModel):
    """Body of PUT /api/applications/{id}; only sent fields are applied"""
    seal_name: Optional[str] = None
    seal_type: Optional[str] = None
    purpose: Optional[str] = None
    expected_time: Optional[datetime] = None
    documents: Optional[str] = None
    file_name: Optional[str] = None
    addressee: Optional[str] = None
    copies: Optional[int] = Field(None, ge=1)
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None


class UsageApplicationResponse(CamelModel):
    id: int
    application_no: str
    seal_name: str
    seal_type: str
    seal_shape: Optional[str] = None
    seal_owner_department: Optional[str] = None
    seal_keeper_department: Optional[str] = None
    applicant: str
    department: str
    file_name: Optional[str] = None
    addressee: Optional[str] = None
    copies: Optional[int] = None
    purpose: str
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None
    documents: Optional[str] = None
    expected_time: Optional[datetime] = None
    status: str
    approver: Optional[str] = None
    approve_time: Optional[datetime] = None
    approve_remark: Optional[str] = None
    apply_time: datetime
    update_time: datetime


# ============================================================================
# Creation Application Schemas
# ============================================================================

class CreationApplicationCreate(CamelModel):
    """Body of POST /api/seal-create-applications"""
    seal_name: Optional[str] = None
    seal_type: Optional[str] = None
    seal_shape: Optional[str] = None
    owner_department: Optional[str] = None
    keeper_department: Optional[str] = None
    keeper: Optional[str] = None
    description: Optional[str] = None
    applicant: Optional[str] = None
    applicant_department: Optional[str] = None


class CreationApplicationUpdate(CamelModel):
    seal_name: Optional[str] = None
    seal_type: Optional[str] = None
    seal_shape: Optional[str] = None
    owner_department: Optional[str] = None
    keeper_department: Optional[str] = None
    keeper: Optional[str] = None
    description: Optional[str] = None


class CreationApplicationResponse(CamelModel):
    id: int
    application_no: str
    seal_name: str
    seal_type: str
    seal_shape: str
    owner_department: str
    keeper_department: str
    keeper: str
    description: Optional[str] = None
    applicant: str
    applicant_department: str
    status: str
    approver: Optional[str] = None
    approve_time: Optional[datetime] = None
    approve_remark: Optional[str] = None
    apply_time: datetime
    update_time: datetime


# ============================================================================
# Workflow Action Schemas
# ============================================================================

class ApproveRequest(CamelModel):
    """Body of POST /{id}/approve"""
    status: Optional[str] = Field(None, description="APPROVED or REJECTED")
    approver: Optional[str] = None
    remark: Optional[str] = None


class BatchApproveRequest(ApproveRequest):
    ids: List[int] = Field(default_factory=list)


class WithdrawRequest(CamelModel):
    applicant: Optional[str] = None


class BatchApproveSummary(CamelModel):
    total: int
    success: int
    failed: int

