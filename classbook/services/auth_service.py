# classbook/services/auth_service.py
"""
Auth Service

Email and password authentication for dashboard and portal accounts, and
self-service signup (always as a customer).
"""

from typing import Optional

from sqlalchemy.orm import Session

from classbook.auth import DUMMY_HASH_FOR_TIMING_ATTACK, get_password_hash, verify_password
from classbook.core.enums import RoleName
from classbook.core.exceptions import ConflictException
from classbook.models.user import User
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.auth import SignupRequest
from classbook.services.base import BaseService


class AuthService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("authenticate_user")
    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Returns:
            The user when the credentials match an active account, otherwise None
        """
        user = self.user_repository.get_by_email(email)
        if user is None:
            # Burn the same bcrypt time as a real check
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            self.logger.info("Authentication failed for unknown email")
            return None
        if not verify_password(password, user.hashed_password):
            self.logger.info(f"Authentication failed for user {user.id}")
            return None
        if not user.is_active:
            self.logger.info(f"Authentication refused for inactive user {user.id}")
            return None
        return user

    @BaseService.measure_operation("register_user")
    def register_user(self, data: SignupRequest) -> User:
        if self.user_repository.get_by_email(data.email):
            raise ConflictException("An account with this email already exists", code="EMAIL_TAKEN")
        with self.transaction():
            user = self.user_repository.create(
                email=data.email.lower(),
                hashed_password=get_password_hash(data.password),
                full_name=data.full_name,
                role=RoleName.CUSTOMER.value,
                is_active=True,
            )
        self.log_operation("register_user", user_id=user.id)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user_repository.get_by_id(user_id, load_relationships=False)
