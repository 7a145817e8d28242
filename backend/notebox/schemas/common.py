"""
Notebox Backend — Shared Response Schemas
=========================================

What:  Error and health payloads shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "status": "fail",
            "error": "invalid_credentials",
            "message": "Invalid email or password",
            "request_id": "a1b2c3d4"
        }
    """
    status: str = Field(description="'fail' for client errors, 'error' for server errors")
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class StatusResponse(BaseModel):
    status: str = Field(default="success")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
