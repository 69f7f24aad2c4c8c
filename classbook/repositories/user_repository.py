# classbook/repositories/user_repository.py
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classbook.core.exceptions import RepositoryException
from classbook.models.user import User
from classbook.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Account lookups for authentication and the route guard."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        try:
            return (
                self.db.query(User)
                .filter(func.lower(User.email) == email.strip().lower())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}") from e

    def get_role(self, user_id: str) -> Optional[str]:
        """Return the role of an active user, or None when there is no such profile."""
        try:
            row = (
                self.db.query(User.role)
                .filter(User.id == user_id, User.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading role for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load user role: {str(e)}") from e
        return row[0] if row else None
