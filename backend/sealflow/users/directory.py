"""User directory - read access to user profiles.

Accounts are created and authenticated elsewhere; SealFlow only looks users
up by username.
"""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User


class UserDirectory:
    """Lookup service for user profiles."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def exists(self, username: str) -> bool:
        return self.db.query(User.id).filter(User.username == username).first() is not None
