"""Generic API response schemas"""

from pydantic import BaseModel
from typing import Optional, Any, Dict


class MessageResponse(BaseModel):
    """Generic API success response"""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Generic API error response"""
    success: bool = False
    error: str
    details: Optional[Any] = None
    path: Optional[str] = None
    timestamp: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    timestamp: str
    readiness: Dict[str, Any] = {}
