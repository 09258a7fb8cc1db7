"""Refresh token rotation and revocation service."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple
import logging
import secrets

from sqlalchemy.orm import Session

from fieldreport.config import settings
from fieldreport.core.exceptions import AuthenticationError
from fieldreport.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from fieldreport.models.security import RefreshToken
from fieldreport.models.user import User

logger = logging.getLogger(__name__)


class TokenService:
    """Manage refresh-token family lifecycle."""

    @staticmethod
    def _naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
        return dt.replace(tzinfo=None) if dt and dt.tzinfo else dt

    @staticmethod
    def _claims(user: User) -> dict:
        return {"sub": str(user.id), "role": user.role}

    @staticmethod
    def _issue_refresh(db: Session, user: User, family_id: str) -> Tuple[str, str]:
        """Create and persist a refresh token; returns (token, jti)."""
        refresh_token = create_refresh_token(TokenService._claims(user), family_id=family_id)
        payload = decode_token(refresh_token, refresh=True) or {}
        token_jti = payload.get("jti")
        exp = payload.get("exp")
        if not token_jti or not exp:
            raise AuthenticationError("Failed to generate refresh token")

        db.add(
            RefreshToken(
                user_id=user.id,
                family_id=family_id,
                token_jti=token_jti,
                expires_at=datetime.utcfromtimestamp(exp),
                revoked=False,
            )
        )
        db.flush()
        return refresh_token, token_jti

    @staticmethod
    def issue_token_pair(db: Session, user: User) -> Tuple[str, str]:
        access_token = create_access_token(TokenService._claims(user))
        refresh_token, _ = TokenService._issue_refresh(db, user, secrets.token_urlsafe(32))
        db.commit()
        return access_token, refresh_token

    @staticmethod
    def revoke_family(db: Session, family_id: str) -> int:
        tokens = (
            db.query(RefreshToken)
            .filter(RefreshToken.family_id == family_id, RefreshToken.revoked == False)  # noqa: E712
            .all()
        )
        now = datetime.utcnow()
        for token in tokens:
            token.revoked = True
            token.revoked_at = now
        db.commit()
        return len(tokens)

    @staticmethod
    def revoke_user_tokens(db: Session, user_id: int) -> int:
        """Revoke every live refresh token of a user (forced logout everywhere)."""
        tokens = (
            db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked == False)  # noqa: E712
            .all()
        )
        now = datetime.utcnow()
        for token in tokens:
            token.revoked = True
            token.revoked_at = now
        db.commit()
        return len(tokens)

    @staticmethod
    def rotate_refresh_token(db: Session, refresh_token: str) -> Tuple[User, str, str]:
        payload = decode_token(refresh_token, refresh=True)
        if not payload:
            raise AuthenticationError("Invalid refresh token")
        if payload.get("typ") != REFRESH_TOKEN_TYPE:
            raise AuthenticationError("Invalid refresh token")

        user_id_raw = payload.get("sub")
        token_jti = payload.get("jti")
        family_id = payload.get("fam")
        if not user_id_raw or not token_jti or not family_id:
            raise AuthenticationError("Invalid refresh token")

        user = db.query(User).filter(User.id == int(user_id_raw)).first()
        if not user:
            raise AuthenticationError("User not found")

        record = (
            db.query(RefreshToken)
            .filter(RefreshToken.token_jti == token_jti, RefreshToken.user_id == user.id)
            .first()
        )
        if not record:
            # Signed by us but unknown: treat as a replay and burn the family.
            TokenService.revoke_family(db, family_id)
            raise AuthenticationError("Invalid refresh token")

        if record.revoked:
            revoked = TokenService.revoke_family(db, record.family_id)
            logger.warning(
                "Revoked refresh token replayed: user_id=%s family=%s revoked=%s",
                user.id, record.family_id, revoked,
            )
            raise AuthenticationError("Invalid refresh token")

        now = datetime.utcnow()
        record_exp = TokenService._naive_utc(record.expires_at)
        if record_exp and record_exp <= now:
            record.revoked = True
            record.revoked_at = now
            db.commit()
            raise AuthenticationError("Refresh token expired")

        new_access = create_access_token(TokenService._claims(user))
        new_refresh, new_jti = TokenService._issue_refresh(db, user, record.family_id)

        record.revoked = True
        record.revoked_at = now
        record.replaced_by_jti = new_jti

        # Keep token family bounded.
        family_tokens = (
            db.query(RefreshToken)
            .filter(RefreshToken.family_id == record.family_id)
            .order_by(RefreshToken.created_at.desc(), RefreshToken.id.desc())
            .all()
        )
        if len(family_tokens) > settings.MAX_REFRESH_TOKEN_FAMILY_SIZE:
            for stale in family_tokens[settings.MAX_REFRESH_TOKEN_FAMILY_SIZE:]:
                db.delete(stale)

        db.commit()
        return user, new_access, new_refresh

    @staticmethod
    def revoke_refresh_token(db: Session, refresh_token: str) -> bool:
        payload = decode_token(refresh_token, refresh=True)
        if not payload or payload.get("typ") != REFRESH_TOKEN_TYPE:
            return False
        token_jti = payload.get("jti")
        if not token_jti:
            return False
        record = db.query(RefreshToken).filter(RefreshToken.token_jti == token_jti).first()
        if not record:
            return False
        if not record.revoked:
            record.revoked = True
            record.revoked_at = datetime.utcnow()
            db.commit()
        return True


token_service = TokenService()
