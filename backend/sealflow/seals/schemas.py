"""Pydantic schemas for the seal registry API"""

from datetime import datetime
from typing import Optional

from ..common.responses import CamelModel


class SealBase(CamelModel):
    name: Optional[str] = None
    type: Optional[str] = None
    shape: Optional[str] = None
    owner_department: Optional[str] = None
    keeper_department: Optional[str] = None
    keeper: Optional[str] = None
    keeper_phone: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class SealCreate(SealBase):
    """Body of POST /api/seals"""
    status: Optional[str] = None


class SealUpdate(SealBase):
    """Body of PUT /api/seals/{id}; null fields are left unchanged"""
    pass


class SealStatusUpdate(CamelModel):
    status: Optional[str] = None


class SealResponse(SealBase):
    id: int
    name: str
    type: str
    status: str
    source_application_id: Optional[int] = None
    create_time: datetime
    update_time: datetime


class EnumOption(CamelModel):
    """One entry of an enum catalog, e.g. {"value": "OFFICIAL", "label": "公章"}"""
    value: str
    label: str
