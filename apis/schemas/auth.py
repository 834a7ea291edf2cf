from pydantic import AfterValidator, Field
from typing import Annotated
from datetime import datetime
from models.user import UserRole
from .common import CamelModel


def _validate_email(value: str) -> str:
    email = value.strip().lower()
    local, _, domain = email.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return email


Email = Annotated[str, AfterValidator(_validate_email)]


class RegisterRequest(CamelModel):
    """Schema for account registration."""
    name: str = Field(..., min_length=1, description="Display name")
    email: Email = Field(..., description="Email address, unique case-insensitively")
    password: str = Field(..., min_length=6, description="Plain text password")


class LoginRequest(CamelModel):
    """Schema for user login."""
    email: Email = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Plain text password")


class ForgotPasswordRequest(CamelModel):
    """Schema for requesting a password reset."""
    email: Email = Field(..., description="Email address of the account")


class ResetPasswordRequest(CamelModel):
    """Schema for consuming a reset token."""
    token: str = Field(..., min_length=1, description="Reset token received by the user")
    new_password: str = Field(..., min_length=6, description="New password")


class ChangePasswordRequest(CamelModel):
    """Schema for changing the password of the current user."""
    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=6, description="New password")


class UpdateProfileRequest(CamelModel):
    """Schema for updating the current user's profile."""
    name: str = Field(..., min_length=1, description="New display name")


# Response Schemas
class UserResponse(CamelModel):
    """Schema for user responses (excludes sensitive information)."""
    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    role: UserRole = Field(..., description="User role (ADMIN, MEMBER or VIEWER)")


class LoginResponse(CamelModel):
    """Schema for login response."""
    access_token: str = Field(..., description="Signed bearer token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="When the access token expires")
    user: UserResponse = Field(..., description="Authenticated user information")
