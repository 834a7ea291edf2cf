from pydantic import Field
from typing import List, Optional
from datetime import datetime
from models.user import UserRole
from models.boards import TaskPriority
from .common import CamelModel


class CreateProjectRequest(CamelModel):
    """Schema for creating a new project."""
    name: str = Field(..., min_length=1, description="Project name")
    description: str = Field(default="", description="Project description")


class UpdateProjectRequest(CamelModel):
    """Schema for updating a project."""
    name: str = Field(..., min_length=1, description="New project name")
    description: str = Field(default="", description="New project description")


class AddMemberRequest(CamelModel):
    """Schema for sharing a project with another user."""
    user_id: str = Field(..., description="User to add")
    role: UserRole = Field(default=UserRole.MEMBER, description="Member role")


# Response Schemas
class ProjectResponse(CamelModel):
    """Schema for project responses."""
    id: str = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Project description")
    owner_id: str = Field(..., description="Owning user ID")


class ProjectListItem(CamelModel):
    """Schema for a project row in the project list."""
    id: str = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    description: str = Field(default="", description="Project description")
    task_count: int = Field(..., description="Number of tasks in the project")
    updated_at: Optional[str] = Field(default=None, description="Last update, formatted YYYY-MM-DD HH:MM")


class MemberResponse(CamelModel):
    """Schema for project member responses."""
    user_id: str = Field(..., description="Member user ID")
    role: UserRole = Field(..., description="Member role")


class ProjectSummary(CamelModel):
    """Project part of the project detail."""
    id: str
    name: str
    description: str = ""


class BoardSummary(CamelModel):
    """Board part of the project detail."""
    id: str
    name: str


class ColumnSummary(CamelModel):
    """Column entry of the project detail."""
    id: str
    name: str
    position: int
    wip_limit: Optional[int] = None


class TaskSummary(CamelModel):
    """Task entry of the project detail."""
    id: str
    title: str
    description: str = ""
    priority: TaskPriority
    column_id: str
    position: int = 0
    due_date: Optional[datetime] = None


class ProjectDetailResponse(CamelModel):
    """Schema for a project with its board, columns and tasks."""
    project: ProjectSummary
    board: Optional[BoardSummary] = None
    columns: List[ColumnSummary] = Field(default_factory=list)
    tasks: List[TaskSummary] = Field(default_factory=list)
