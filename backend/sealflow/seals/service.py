"""Seal registry service - Business logic for seal records.

Seals are created here directly by administrators and, through add_seal, by
the creation-application workflow when an application is approved.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.seal import Seal, SealType, SealShape, SealStatus
from ..workflow.clock import Clock, system_clock
from ..workflow.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Fields an update may overwrite; None values are ignored
UPDATABLE_FIELDS = (
    "name",
    "type",
    "shape",
    "owner_department",
    "keeper_department",
    "keeper",
    "keeper_phone",
    "location",
    "description",
    "image_url",
)

# Fields an administrator must fill when registering a seal by hand
MANUAL_REQUIRED_FIELDS = (
    ("name", "印章名称不能为空"),
    ("type", "印章类型不能为空"),
    ("keeper", "保管人不能为空"),
    ("keeper_phone", "保管人电话不能为空"),
    ("location", "存放位置不能为空"),
)


def _enum_value(enum_cls, value, message: str) -> Optional[str]:
    if value is None:
        return None
    try:
        return enum_cls(value).value
    except ValueError:
        raise ValidationError(f"{message}: {value}")


class SealService:
    """Service for seal registry operations."""

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    def get_seal(self, seal_id: int) -> Optional[Seal]:
        return self.db.query(Seal).filter(Seal.id == seal_id).first()

    def get_seal_or_404(self, seal_id: int) -> Seal:
        seal = self.get_seal(seal_id)
        if not seal:
            raise NotFoundError(f"印章不存在，ID: {seal_id}")
        return seal

    def find_by_name(self, name: str) -> Optional[Seal]:
        return self.db.query(Seal).filter(Seal.name == name).first()

    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Seal.id).filter(Seal.name == name)
        if exclude_id is not None:
            query = query.filter(Seal.id != exclude_id)
        return query.first() is not None

    def list_seals(
        self,
        page: int = 1,
        size: int = 10,
        keyword: Optional[str] = None,
        status: Optional[str] = None
    ) -> Tuple[List[Seal], int]:
        """List seals, most recently updated first.

        Args:
            page: Page number (1-indexed)
            size: Results per page
            keyword: Substring matched against name, keeper and location
            status: Filter by SealStatus value

        Returns:
            Tuple of (list of seals, total count)
        """
        query = self.db.query(Seal)

        if keyword and keyword.strip():
            pattern = f"%{keyword.strip()}%"
            query = query.filter(or_(
                Seal.name.like(pattern),
                Seal.keeper.like(pattern),
                Seal.location.like(pattern),
            ))

        if status:
            query = query.filter(Seal.status == _enum_value(SealStatus, status, "无效的印章状态"))

        total = query.count()
        seals = query.order_by(desc(Seal.update_time), desc(Seal.id)) \
            .offset((page - 1) * size).limit(size).all()

        return seals, total

    def add_seal(
        self,
        data: Dict[str, Any],
        source_application_id: Optional[int] = None
    ) -> Seal:
        """Validate and insert a seal without committing.

        The caller owns the transaction. Used directly by the creation
        workflow so that the seal and the approval commit together.

        Raises:
            ValidationError: Missing name/type or the name is already taken
        """
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("印章名称不能为空")
        if not data.get("type"):
            raise ValidationError("印章类型不能为空")
        if self.name_taken(name):
            raise ValidationError(f"印章名称已存在: {name}")

        now = self.clock.now()
        seal = Seal(
            name=name,
            type=_enum_value(SealType, data.get("type"), "无效的印章类型"),
            shape=_enum_value(SealShape, data.get("shape"), "无效的印章形状"),
            status=_enum_value(SealStatus, data.get("status"), "无效的印章状态") or SealStatus.IN_USE.value,
            owner_department=data.get("owner_department"),
            keeper_department=data.get("keeper_department"),
            keeper=data.get("keeper"),
            keeper_phone=data.get("keeper_phone"),
            location=data.get("location"),
            description=data.get("description"),
            image_url=data.get("image_url"),
            source_application_id=source_application_id,
            create_time=now,
            update_time=now,
        )
        self.db.add(seal)

        try:
            self.db.flush()
        except IntegrityError as e:
            raise ValidationError(f"印章创建失败，名称或来源申请重复: {name}") from e

        return seal

    def create_seal(self, data: Dict[str, Any]) -> Seal:
        """Register a seal by hand and commit.

        Raises:
            ValidationError: Missing field or duplicate name
        """
        for field, message in MANUAL_REQUIRED_FIELDS:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(message)

        try:
            seal = self.add_seal(data)
        except ValidationError:
            self.db.rollback()
            raise
        self.db.commit()
        self.db.refresh(seal)
        logger.info(f"Seal created: {seal.name}", extra={"seal_id": seal.id})
        return seal

    def update_seal(self, seal_id: int, data: Dict[str, Any]) -> Seal:
        """Overwrite the non-null fields of a seal.

        Raises:
            NotFoundError: Unknown seal
            ValidationError: New name already used by another seal
        """
        seal = self.get_seal_or_404(seal_id)

        name = data.get("name")
        if name is not None and self.name_taken(name, exclude_id=seal_id):
            raise ValidationError(f"印章名称已存在: {name}")

        for field in UPDATABLE_FIELDS:
            value = data.get(field)
            if value is None:
                continue
            if field == "type":
                value = _enum_value(SealType, value, "无效的印章类型")
            elif field == "shape":
                value = _enum_value(SealShape, value, "无效的印章形状")
            setattr(seal, field, value)

        seal.update_time = self.clock.now()
        self.db.commit()
        self.db.refresh(seal)
        return seal

    def update_status(self, seal_id: int, status: Optional[str]) -> Seal:
        seal = self.get_seal_or_404(seal_id)
        if not status or not status.strip():
            raise ValidationError("状态不能为空")
        seal.status = _enum_value(SealStatus, status.strip().upper(), "无效的状态值")
        seal.update_time = self.clock.now()
        self.db.commit()
        self.db.refresh(seal)
        logger.info(f"Seal {seal.name} status changed to {seal.status}", extra={"seal_id": seal.id})
        return seal

    def delete_seal(self, seal_id: int) -> None:
        seal = self.get_seal_or_404(seal_id)
        self.db.delete(seal)
        self.db.commit()
        logger.info(f"Seal deleted: {seal_id}")

    def find_by_keeper(self, keeper: str) -> List[Seal]:
        return self.db.query(Seal).filter(Seal.keeper == keeper).order_by(Seal.id).all()

    def get_statistics(self) -> Dict[str, Any]:
        """Seal counts overall, by status and by type."""
        by_status = dict(
            self.db.query(Seal.status, func.count(Seal.id)).group_by(Seal.status).all()
        )
        by_type = dict(
            self.db.query(Seal.type, func.count(Seal.id)).group_by(Seal.type).all()
        )
        return {
            "total": self.db.query(func.count(Seal.id)).scalar() or 0,
            "byStatus": by_status,
            "byType": by_type,
        }
