"""Side effects attached to workflow kinds.

- copy_seal_attributes runs when a usage application is submitted
- mint_seal runs when a creation application is approved, inside the
  approval transaction
"""

import logging
from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from ..models.seal import Seal, SealStatus
from ..models.seal_create_application import SealCreateApplication
from ..observability.metrics import seals_minted_total
from ..seals.service import SealService

logger = logging.getLogger(__name__)

# seal attribute -> usage application column
COPIED_SEAL_ATTRIBUTES = (
    ("shape", "seal_shape"),
    ("owner_department", "seal_owner_department"),
    ("keeper_department", "seal_keeper_department"),
)


def copy_seal_attributes(db: Session, data: Dict[str, Any]) -> None:
    """Fill missing seal attributes from the registry at submission time.

    Values given by the applicant are kept. The copy is refreshed only when
    the application is moved to a different seal, never when the registry
    entry itself changes.
    """
    seal = db.query(Seal).filter(Seal.name == data.get("seal_name")).first()
    if not seal:
        return

    for source, target in COPIED_SEAL_ATTRIBUTES:
        if not data.get(target):
            data[target] = getattr(seal, source)


def mint_seal(db: Session, application: SealCreateApplication, now: datetime) -> Seal:
    """Create the seal described by an approved creation application.

    Does not commit. Raises ValidationError if the seal cannot be created, in
    which case the caller rolls back the approval as well.
    """
    seal = SealService(db).add_seal(
        {
            "name": application.seal_name,
            "type": application.seal_type,
            "shape": application.seal_shape,
            "status": SealStatus.IN_USE.value,
            "owner_department": application.owner_department,
            "keeper_department": application.keeper_department,
            "keeper": application.keeper,
            "description": application.description,
        },
        source_application_id=application.id,
    )
    seal.create_time = now
    seal.update_time = now

    seals_minted_total.inc()
    logger.info(
        f"Seal minted from application {application.application_no}: {seal.name}",
        extra={"application_id": application.id}
    )
    return seal
