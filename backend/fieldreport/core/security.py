"""Security utilities - JWT, password hashing, password policy"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List
from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt
import re
import secrets

from fieldreport.config import settings
from fieldreport.core.exceptions import TokenExpiredError, TokenInvalidError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

PASSWORD_MIN_LENGTH = 8
TEMP_PASSWORD_MIN_LENGTH = 6
# bcrypt rejects longer input
PASSWORD_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    ).decode('utf-8')


def password_exceeds_hash_limit(password: str) -> bool:
    return len(password.encode("utf-8")) > PASSWORD_MAX_BYTES


def password_policy_violations(password: str) -> List[str]:
    """Return the rules a user-chosen password breaks (empty when it is acceptable)."""
    problems = []
    if password_exceeds_hash_limit(password):
        problems.append(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain an uppercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("Password must contain a number")
    return problems


def _encode(data: Dict[str, Any], token_type: str, expires_delta: timedelta, key: str) -> str:
    to_encode = data.copy()
    now = datetime.utcnow()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "jti": secrets.token_urlsafe(32),  # Unique token ID
        "typ": token_type,
    })
    return jwt.encode(to_encode, key, algorithm=settings.ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Data to encode in token
        expires_delta: Token expiration time

    Returns:
        str: Encoded JWT token
    """
    return _encode(
        data,
        ACCESS_TOKEN_TYPE,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        settings.SECRET_KEY,
    )


def create_refresh_token(
    data: Dict[str, Any],
    family_id: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a refresh token bound to a rotation family."""
    payload = dict(data)
    payload["fam"] = family_id
    return _encode(
        payload,
        REFRESH_TOKEN_TYPE,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        settings.get_refresh_secret_key(),
    )


def decode_token(token: str, refresh: bool = False) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a JWT signed with the access or refresh key

    Returns:
        Optional[Dict]: Decoded token data or None if invalid or expired
    """
    key = settings.get_refresh_secret_key() if refresh else settings.SECRET_KEY
    try:
        return jwt.decode(token, key, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decode an access token, distinguishing expiry from other failures

    Raises:
        TokenExpiredError: Signature valid but token past its expiry
        TokenInvalidError: Anything else
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise TokenInvalidError()

    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        raise TokenInvalidError()
    return payload
