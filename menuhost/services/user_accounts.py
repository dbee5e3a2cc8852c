"""
User account creation and lookup
"""

from typing import Optional
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select
import structlog

from menuhost.core.auth import hash_password
from menuhost.core.config import get_settings
from menuhost.core.exceptions import ConflictError, InternalFailureError, ValidationFailedError
from menuhost.models.user import User, UserRole

logger = structlog.get_logger(__name__)


class UserAccounts:
    """Creates users with hashed credentials"""

    def __init__(self, session: Session):
        self.session = session
        self.password_min_length = get_settings().PASSWORD_MIN_LENGTH

    def create_user(
        self,
        email: str,
        full_name: str,
        password: str,
        role: UserRole = UserRole.USER,
        tenant_id: Optional[uuid.UUID] = None,
        created_by_id: Optional[uuid.UUID] = None,
        is_active: bool = False,
    ) -> User:
        """
        Create and persist a user.

        Raises:
            ValidationFailedError: Empty name or too short password
            ConflictError: Email already taken by another user
            InternalFailureError: Any other storage failure
        """
        if not full_name or not full_name.strip():
            raise ValidationFailedError("Full name is required", field="full_name")
        if len(password or "") < self.password_min_length:
            raise ValidationFailedError(
                f"Password must be at least {self.password_min_length} characters",
                field="password",
            )

        user = User(
            email=email,
            full_name=full_name.strip(),
            password_hash=hash_password(password),
            role=role,
            tenant_id=tenant_id,
            created_by_id=created_by_id,
            is_active=is_active,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if self.find_by_email(email) is not None:
                raise ConflictError("User with this email already exists", field="email")
            logger.warning("User rejected by database constraints", email=email, error=str(e.orig))
            raise ValidationFailedError("User data violates a database constraint")
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to create user", email=email)
            raise InternalFailureError("Failed to create user")

        self.session.refresh(user)
        logger.info("User created", user_id=str(user.id), role=user.role.value, tenant_id=str(tenant_id))
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.session.get(User, user_id)

    def delete_user(self, user_id: uuid.UUID) -> None:
        user = self.session.get(User, user_id)
        if user is not None:
            self.session.delete(user)
            self.session.commit()
