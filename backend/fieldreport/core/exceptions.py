"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password"""
    def __init__(self):
        super().__init__("Invalid credentials")


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""
    def __init__(self):
        super().__init__("Token expired")


class TokenInvalidError(AuthenticationError):
    """JWT token is invalid"""
    def __init__(self):
        super().__init__("Invalid token")


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


class PasswordResetRequiredError(BaseAPIException):
    """User must replace the temporary password before doing anything else"""
    def __init__(self):
        super().__init__(
            "Password reset required",
            status_code=403,
            details={"forceReset": True}
        )


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


# Business Logic Errors
class BusinessLogicError(BaseAPIException):
    """Business logic error"""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class DuplicateEmailError(BusinessLogicError):
    """Email already registered"""
    def __init__(self):
        super().__init__("Email already exists")


class InvalidSubmissionTypeError(BusinessLogicError):
    """Submission type outside the six known categories"""
    def __init__(self):
        super().__init__("Invalid submission type")


# System Errors
class RateLimitExceededError(BaseAPIException):
    """Rate limit exceeded"""
    def __init__(self, message: str = "Rate limit exceeded. Please try again later.", retry_after: int = 0):
        super().__init__(message, status_code=429, details={"retryAfter": retry_after} if retry_after else None)
