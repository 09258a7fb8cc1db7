"""Authentication routes"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from fieldreport.core.database import get_db
from fieldreport.config import settings
from fieldreport.schemas.user import (
    UserLogin,
    TokenResponse,
    UserResponse,
    ForceResetRequest,
    ChangePasswordRequest,
)
from fieldreport.schemas.response import MessageResponse
from fieldreport.services.user_service import user_service
from fieldreport.services.token_service import token_service
from fieldreport.services.audit_service import audit_service, AuditAction
from fieldreport.services.rate_limiter import rate_limiter
from fieldreport.api.deps import client_ip, get_current_user, get_active_user
from fieldreport.models.user import User
from fieldreport.core.exceptions import AuthenticationError, RateLimitExceededError

router = APIRouter()


def _enforce_rate_limit(scope: str, request: Request, limit: int) -> None:
    key = f"{scope}:{client_ip(request) or 'unknown'}"
    allowed, retry_after = rate_limiter.hit(key, limit, settings.RATE_LIMIT_WINDOW_SECONDS)
    if not allowed:
        raise RateLimitExceededError(
            f"Too many {scope} attempts, please try again later",
            retry_after=retry_after,
        )


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.refresh_cookie_max_age,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.REFRESH_COOKIE_SAMESITE,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.REFRESH_COOKIE_SAMESITE,
    )


def _token_response(user: User, access_token: str) -> TokenResponse:
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Authenticate with email and password

    Returns the access token in the body and sets the refresh token as an
    HTTP-only cookie.
    """
    _enforce_rate_limit("login", request, settings.LOGIN_RATE_LIMIT)

    ip = client_ip(request)
    user = user_service.authenticate_user(db, credentials.email, credentials.password, ip_address=ip)
    access_token, refresh_token = token_service.issue_token_pair(db, user)
    _set_refresh_cookie(response, refresh_token)

    audit_service.log_event(
        db,
        action=AuditAction.LOGIN_SUCCESS,
        user_id=user.id,
        ip_address=ip,
        metadata={"email": user.email},
    )

    return _token_response(user, access_token)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """Exchange the refresh cookie for a new access token, rotating the cookie"""
    _enforce_rate_limit("refresh", request, settings.REFRESH_RATE_LIMIT)

    token = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not token:
        raise AuthenticationError("Refresh token required")

    user, access_token, new_refresh_token = token_service.rotate_refresh_token(db, token)
    _set_refresh_cookie(response, new_refresh_token)
    return _token_response(user, access_token)


@router.post("/force-reset", response_model=MessageResponse)
def force_reset_password(
    body: ForceResetRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace the temporary password and lift the password-reset gate"""
    user_service.force_reset_password(db, current_user, body.new_password)
    audit_service.log_event(
        db,
        action=AuditAction.PASSWORD_FORCE_RESET,
        user_id=current_user.id,
        ip_address=client_ip(request),
    )
    return MessageResponse(message="Password updated successfully")


@router.post("/reset-password", response_model=MessageResponse)
def reset_own_password(
    body: ChangePasswordRequest,
    request: Request,
    current_user: User = Depends(get_active_user),
    db: Session = Depends(get_db)
):
    """Change the caller's password after checking the current one"""
    user_service.change_password(db, current_user, body.current_password, body.new_password)
    audit_service.log_event(
        db,
        action=AuditAction.PASSWORD_RESET,
        user_id=current_user.id,
        ip_address=client_ip(request),
    )
    return MessageResponse(message="Password updated successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Revoke the refresh cookie's token and clear the cookie"""
    token: Optional[str] = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if token:
        token_service.revoke_refresh_token(db, token)

    audit_service.log_event(
        db,
        action=AuditAction.LOGOUT,
        user_id=current_user.id,
        ip_address=client_ip(request),
    )

    _clear_refresh_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Profile of the caller, including the force-reset flag"""
    return UserResponse.model_validate(current_user)
