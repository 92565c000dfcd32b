"""Auth API schemas."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ferna.core.config import get_settings


class SignupRequest(BaseModel):
    """Schema for local account registration.

    Password policy is enforced here; the credential hasher accepts any input.
    """

    email: str = Field(..., max_length=255)
    password: str
    full_name: Optional[str] = Field(None, max_length=255)
    timezone: Optional[str] = Field(None, max_length=64)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("email is required")
        if "@" not in v or "." not in v:
            raise ValueError("invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        min_length = get_settings().min_password_length
        if len(v.strip()) < min_length:
            raise ValueError(f"password must be at least {min_length} characters long")
        return v


class SignupResponse(BaseModel):
    """Schema for signup response."""

    success: bool = True
    user_id: str
    message: str = "User registered successfully"


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def check_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("email and password are required")
        return v


class LoginResponse(BaseModel):
    """Schema for login response."""

    success: bool = True
    user_id: str
    message: str = "Login successful"
