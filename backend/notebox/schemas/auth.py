"""Request schema for the login endpoint."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """
    Body of POST /api/auth/login.

    Emails are normalized (stripped, lower-cased) by the login flow, not here,
    so the flow applies the same rules whatever the caller.
    """
    email: str = Field(max_length=320, description="Login email; case-insensitive")
    password: str = Field(max_length=1024, description="Plain-text password")
