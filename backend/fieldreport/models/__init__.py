"""Database models"""

from fieldreport.models.user import User, UserRole
from fieldreport.models.submission import (
    SUBMISSION_MODELS,
    SUBMISSION_TYPES,
    DepoSubmission,
    VendorSubmission,
    DealerSubmission,
    StallSubmission,
    ReaderSubmission,
    OohSubmission,
)
from fieldreport.models.security import RefreshToken
from fieldreport.models.audit import AuditLog

__all__ = [
    "User", "UserRole",
    "SUBMISSION_MODELS", "SUBMISSION_TYPES",
    "DepoSubmission", "VendorSubmission", "DealerSubmission",
    "StallSubmission", "ReaderSubmission", "OohSubmission",
    "RefreshToken", "AuditLog",
]
