"""Audit service for authentication, user management and submission events."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fieldreport.models.audit import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    PASSWORD_FORCE_RESET = "PASSWORD_FORCE_RESET"
    PASSWORD_RESET = "PASSWORD_RESET"
    PASSWORD_RESET_BY_ADMIN = "PASSWORD_RESET_BY_ADMIN"
    USER_CREATED = "USER_CREATED"
    ROLE_CHANGED = "ROLE_CHANGED"
    USER_DELETED = "USER_DELETED"
    SUBMISSION_CREATED = "SUBMISSION_CREATED"
    SUBMISSIONS_EXPORTED = "SUBMISSIONS_EXPORTED"


class AuditService:
    """Persist audit trail entries.

    Writing the trail must never fail the request that produced it, so database
    errors are logged and rolled back here.
    """

    @staticmethod
    def log_event(
        db: Session,
        *,
        action: str,
        user_id: Optional[int],
        ip_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        event = AuditLog(
            action=action,
            user_id=user_id,
            ip_address=ip_address,
            meta=metadata or {},
        )
        try:
            db.add(event)
            db.commit()
            db.refresh(event)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Audit log write failed: action=%s user_id=%s", action, user_id)
            return None
        return event


audit_service = AuditService()
