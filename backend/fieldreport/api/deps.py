"""API dependencies - authentication, password-reset gate and role checks"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Callable, Optional

from fieldreport.core.database import get_db
from fieldreport.core.security import verify_access_token
from fieldreport.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    PasswordResetRequiredError,
)
from fieldreport.models.user import User, UserRole
from fieldreport.services.user_service import user_service

# HTTP Bearer token scheme; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from the bearer access token

    Raises:
        AuthenticationError: If the token is missing, invalid or expired,
            or the user no longer exists
    """
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Access token required")

    payload = verify_access_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    user = user_service.get_user_by_id(db, int(user_id))
    if not user:
        raise AuthenticationError("User not found")

    return user


async def get_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Current user, provided the temporary password has been replaced

    Raises:
        PasswordResetRequiredError: While the force-reset flag is set
    """
    if current_user.force_password_reset:
        raise PasswordResetRequiredError()
    return current_user


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory restricting a route to the given roles."""
    allowed = {role.value for role in roles}

    async def _check_role(current_user: User = Depends(get_active_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return _check_role


get_staff_user = require_roles(UserRole.ADMIN, UserRole.CEO)
get_ceo_user = require_roles(UserRole.CEO)
