# classbook/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

The route guard middleware has already decoded the session cookie and put a
``SessionUser`` on ``request.state.user``; these dependencies turn that into
a database ``User`` and enforce roles for handlers that need one.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from classbook.api.dependencies.database import get_db
from classbook.core.exceptions import ForbiddenException, UnauthorizedException
from classbook.models.user import User
from classbook.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def get_current_user_optional(
    request: Request, db: Session = Depends(get_db)
) -> Optional[User]:
    session_user = getattr(request.state, "user", None)
    if session_user is None:
        return None
    user = UserRepository(db).get_by_id(session_user.id, load_relationships=False)
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    """
    Get the current authenticated user from the database.

    Raises:
        UnauthorizedException: No valid session, or the account is gone or inactive
    """
    if user is None:
        raise UnauthorizedException("Not authenticated")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"User {current_user.id} attempted an admin action")
        raise ForbiddenException("Admin access required")
    return current_user


def require_instructor(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_instructor:
        raise ForbiddenException("Instructor access required")
    return current_user
