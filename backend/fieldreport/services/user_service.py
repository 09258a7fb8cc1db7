"""User service - authentication, account management and role rules"""

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import datetime

from fieldreport.config import settings
from fieldreport.models.user import User, UserRole
from fieldreport.schemas.user import UserCreate, AssignableRole
from fieldreport.core.security import get_password_hash, verify_password
from fieldreport.core.exceptions import (
    InvalidCredentialsError,
    AuthorizationError,
    BusinessLogicError,
    DuplicateEmailError,
    ResourceNotFoundError,
)
from fieldreport.services.audit_service import audit_service, AuditAction
from fieldreport.services.token_service import token_service
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Service for user management"""

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)"""
        return db.query(User).filter(User.email == email.strip().lower()).first()

    @staticmethod
    def _get_or_404(db: Session, user_id: int) -> User:
        user = UserService.get_user_by_id(db, user_id)
        if not user:
            raise ResourceNotFoundError("User")
        return user

    @staticmethod
    def authenticate_user(
        db: Session,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Authenticate user by email and password

        Unknown emails and wrong passwords raise the same error; wrong
        passwords for a known account are written to the audit trail.
        """
        user = UserService.get_user_by_email(db, email)
        if not user:
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            audit_service.log_event(
                db,
                action=AuditAction.LOGIN_FAILED,
                user_id=user.id,
                ip_address=ip_address,
                metadata={"email": user.email},
            )
            logger.info("Failed login for user_id=%s", user.id)
            raise InvalidCredentialsError()

        user.last_login = datetime.utcnow()
        db.commit()
        db.refresh(user)

        logger.info(f"User authenticated: {user.email}")
        return user

    @staticmethod
    def create_user(db: Session, user_data: UserCreate, creator: User) -> User:
        """
        Create a user with a temporary password

        Args:
            db: Database session
            user_data: Email, role and temporary password
            creator: Admin or ceo performing the action

        Returns:
            Created user, flagged for a forced password reset
        """
        if user_data.role == AssignableRole.ADMIN and creator.role != UserRole.CEO.value:
            raise AuthorizationError("Only CEO can create admin users")

        if UserService.get_user_by_email(db, user_data.email):
            raise DuplicateEmailError()

        user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.temp_password),
            role=user_data.role.value,
            force_password_reset=True,
            created_by=creator.id,
        )

        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Created user: {user.email} (role: {user.role}) by user_id={creator.id}")
        return user

    @staticmethod
    def list_users(db: Session, viewer: User) -> List[User]:
        """
        Users visible to the viewer, newest first

        The ceo sees everyone. An admin sees field users, itself, and the
        accounts it created.
        """
        query = db.query(User).options(joinedload(User.creator))

        if viewer.role == UserRole.ADMIN.value:
            query = query.filter(
                or_(
                    User.role == UserRole.USER.value,
                    User.id == viewer.id,
                    User.created_by == viewer.id,
                )
            )

        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def can_reset_password(actor: User, target: User) -> bool:
        if actor.role == UserRole.CEO.value:
            return True
        if target.id == actor.id:
            return True
        if target.role == UserRole.ADMIN.value:
            return False
        return target.created_by == actor.id or target.role == UserRole.USER.value

    @staticmethod
    def reset_password_by_admin(db: Session, actor: User, target_id: int, temp_password: str) -> User:
        """Set a temporary password, force a reset and end the target's sessions."""
        target = UserService._get_or_404(db, target_id)

        if not UserService.can_reset_password(actor, target):
            if target.role == UserRole.ADMIN.value:
                raise AuthorizationError("Cannot reset another admin's password")
            raise AuthorizationError("Cannot reset this user's password")

        target.password_hash = get_password_hash(temp_password)
        target.force_password_reset = True
        db.commit()
        token_service.revoke_user_tokens(db, target.id)

        logger.info("Password reset for user_id=%s by user_id=%s", target.id, actor.id)
        return target

    @staticmethod
    def update_role(db: Session, target_id: int, role: AssignableRole) -> User:
        target = UserService._get_or_404(db, target_id)
        if target.role == UserRole.CEO.value:
            raise AuthorizationError("Cannot change CEO role")

        target.role = role.value
        db.commit()
        db.refresh(target)

        logger.info("Role of user_id=%s changed to %s", target.id, target.role)
        return target

    @staticmethod
    def delete_user(db: Session, target_id: int) -> str:
        """
        Delete a user

        Submissions and refresh tokens go with the account; audit rows and
        created_by references are kept with a NULL user.

        Returns:
            Email of the deleted account
        """
        target = UserService._get_or_404(db, target_id)
        if target.role == UserRole.CEO.value:
            raise AuthorizationError("Cannot delete CEO account")

        email = target.email
        db.delete(target)
        db.commit()

        logger.info(f"Deleted user: {email}")
        return email

    @staticmethod
    def force_reset_password(db: Session, user: User, new_password: str) -> None:
        user.password_hash = get_password_hash(new_password)
        user.force_password_reset = False
        db.commit()

    @staticmethod
    def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise BusinessLogicError("Current password is incorrect")

        user.password_hash = get_password_hash(new_password)
        db.commit()

    @staticmethod
    def ensure_ceo_account(db: Session) -> Optional[User]:
        """
        Seed the executive account if it does not exist

        Returns:
            The created user, or None when an account already exists
        """
        email = settings.CEO_EMAIL.strip().lower()
        if UserService.get_user_by_email(db, email):
            return None

        ceo = User(
            email=email,
            password_hash=get_password_hash(settings.CEO_PASSWORD),
            role=UserRole.CEO.value,
            force_password_reset=True,
        )
        db.add(ceo)
        db.commit()
        db.refresh(ceo)

        logger.info(f"Created CEO user: {email} (password reset required on first login)")
        return ceo


# Singleton instance
user_service = UserService()
