"""User management routes (admin / ceo)"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List

from fieldreport.core.database import get_db
from fieldreport.schemas.user import UserCreate, UserResponse, TempPasswordReset, RoleUpdate
from fieldreport.schemas.response import MessageResponse
from fieldreport.services.user_service import user_service
from fieldreport.services.audit_service import audit_service, AuditAction
from fieldreport.api.deps import client_ip, get_staff_user, get_ceo_user
from fieldreport.models.user import User

router = APIRouter()


@router.get("", response_model=List[UserResponse])
def get_users(
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """
    List users visible to the caller

    The ceo sees every account; an admin sees field users, its own account
    and the accounts it created.
    """
    return user_service.list_users(db, current_user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    request: Request,
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """
    Create a user with a temporary password

    Only the ceo may create admins. The new account must reset its password
    on first login.
    """
    user = user_service.create_user(db, user_data, creator=current_user)
    audit_service.log_event(
        db,
        action=AuditAction.USER_CREATED,
        user_id=current_user.id,
        ip_address=client_ip(request),
        metadata={"new_user_id": user.id, "email": user.email, "role": user.role},
    )
    return user


@router.patch("/{user_id}/reset-password", response_model=MessageResponse)
def reset_user_password(
    user_id: int,
    body: TempPasswordReset,
    request: Request,
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """Issue a temporary password to another account"""
    user_service.reset_password_by_admin(db, current_user, user_id, body.temp_password)
    audit_service.log_event(
        db,
        action=AuditAction.PASSWORD_RESET_BY_ADMIN,
        user_id=current_user.id,
        ip_address=client_ip(request),
        metadata={"target_user_id": user_id},
    )
    return MessageResponse(message="Password reset successfully")


@router.patch("/{user_id}/role", response_model=MessageResponse)
def update_user_role(
    user_id: int,
    body: RoleUpdate,
    request: Request,
    current_user: User = Depends(get_ceo_user),
    db: Session = Depends(get_db)
):
    """Promote or demote between user and admin (ceo only)"""
    user_service.update_role(db, user_id, body.role)
    audit_service.log_event(
        db,
        action=AuditAction.ROLE_CHANGED,
        user_id=current_user.id,
        ip_address=client_ip(request),
        metadata={"target_user_id": user_id, "new_role": body.role.value},
    )
    return MessageResponse(message="Role updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    request: Request,
    current_user: User = Depends(get_ceo_user),
    db: Session = Depends(get_db)
):
    """Delete an account and its submissions (ceo only)"""
    email = user_service.delete_user(db, user_id)
    audit_service.log_event(
        db,
        action=AuditAction.USER_DELETED,
        user_id=current_user.id,
        ip_address=client_ip(request),
        metadata={"deleted_user_id": user_id, "email": email},
    )
    return MessageResponse(message="User deleted successfully")
