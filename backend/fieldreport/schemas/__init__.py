"""Pydantic schemas for API validation"""

from fieldreport.schemas.base import CamelModel
from fieldreport.schemas.user import (
    AssignableRole,
    UserLogin,
    UserCreate,
    UserResponse,
    TokenResponse,
    TempPasswordReset,
    RoleUpdate,
    ForceResetRequest,
    ChangePasswordRequest,
)
from fieldreport.schemas.submission import (
    SubmissionCreate,
    SubmissionCreatedResponse,
    SubmissionListItem,
    SubmissionPage,
    SubmissionDetail,
    Pagination,
)
from fieldreport.schemas.analytics import ChartData, MonthlyChartData, SummaryResponse
from fieldreport.schemas.response import MessageResponse, ErrorResponse, HealthResponse

__all__ = [
    "CamelModel", "AssignableRole", "UserLogin", "UserCreate", "UserResponse", "TokenResponse",
    "TempPasswordReset", "RoleUpdate", "ForceResetRequest", "ChangePasswordRequest",
    "SubmissionCreate", "SubmissionCreatedResponse", "SubmissionListItem",
    "SubmissionPage", "SubmissionDetail", "Pagination",
    "ChartData", "MonthlyChartData", "SummaryResponse",
    "MessageResponse", "ErrorResponse", "HealthResponse",
]
