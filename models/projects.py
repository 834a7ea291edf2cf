from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from .helper import id_generator, utc_now
from .user import UserRole


class Project(SQLModel, table=True):
    """Top-level container of boards, owned by a single user."""
    id: str = Field(default_factory=id_generator('project', 10), primary_key=True)
    name: str = Field(index=True)
    description: str = Field(default="")
    owner_id: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = Field(default=None)


class ProjectMember(SQLModel, table=True):
    """Intermediate table granting a user access to a project."""
    project_id: str = Field(foreign_key="project.id", primary_key=True)
    user_id: str = Field(foreign_key="user.id", primary_key=True)
    role: UserRole = Field(default=UserRole.MEMBER)
