"""Pydantic request and response schemas."""

from ferna.api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "SignupRequest",
    "SignupResponse",
]
