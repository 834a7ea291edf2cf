from sqlmodel import SQLModel, Field
from enum import Enum
from datetime import datetime
from .helper import id_generator, utc_now


class UserRole(str, Enum):
    """Available roles for users and project members."""
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class User(SQLModel, table=True):
    """Registered account that owns projects."""
    id: str = Field(default_factory=id_generator('user', 10), primary_key=True)
    name: str = Field(default="")
    email: str = Field(unique=True, index=True)
    hashed_password: str
    role: UserRole = Field(default=UserRole.MEMBER)
    created_at: datetime = Field(default_factory=utc_now)


class PasswordResetToken(SQLModel, table=True):
    """Server-side record of an issued reset token, so it can be used only once."""
    id: str = Field(default_factory=id_generator('reset', 10), primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    email: str
    token: str = Field(unique=True, index=True)
    expires_at: datetime
    used: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
