from pydantic import AfterValidator, Field
from typing import Annotated, List, Optional
from datetime import datetime
from models.boards import TaskPriority
from models.helper import as_utc
from .common import CamelModel


# Dates without an offset (including date-only values) are taken as UTC
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CreateTaskRequest(CamelModel):
    """Schema for creating a new task."""
    column_id: str = Field(..., description="Column where the task is placed")
    title: str = Field(..., min_length=1, description="Task title")
    description: str = Field(default="", description="Task description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    start_date: Optional[UtcDatetime] = Field(default=None, description="Planned start")
    due_date: Optional[UtcDatetime] = Field(default=None, description="Due date")
    position: int = Field(default=0, ge=0, description="Position inside the column")
    assignees: List[str] = Field(default_factory=list, description="Assigned user IDs")
    labels: List[str] = Field(default_factory=list, description="Label IDs")


class UpdateTaskRequest(CamelModel):
    """Schema for updating a task."""
    title: Optional[str] = Field(default=None, min_length=1, description="New task title")
    description: Optional[str] = Field(default=None, description="New task description")
    priority: Optional[TaskPriority] = Field(default=None, description="New priority")
    start_date: Optional[UtcDatetime] = Field(default=None, description="New planned start")
    due_date: Optional[UtcDatetime] = Field(default=None, description="New due date")
    position: Optional[int] = Field(default=None, ge=0, description="New position inside the column")
    assignees: Optional[List[str]] = Field(default=None, description="New assigned user IDs")
    labels: Optional[List[str]] = Field(default=None, description="New label IDs")


class MoveTaskRequest(CamelModel):
    """Schema for moving a task to another column."""
    task_id: str = Field(..., description="Task to move")
    to_column_id: str = Field(..., description="Destination column")
    position: Optional[int] = Field(default=None, ge=0, description="Position in the destination column")


# Response Schemas
class TaskCreatedResponse(CamelModel):
    """Schema for the task creation acknowledgement."""
    id: str = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")


class TaskResponse(CamelModel):
    """Schema for task responses."""
    id: str = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="Task description")
    priority: TaskPriority = Field(..., description="Task priority")
    start_date: Optional[UtcDatetime] = Field(default=None, description="Planned start")
    due_date: Optional[UtcDatetime] = Field(default=None, description="Due date")
    position: int = Field(..., description="Position inside the column")
    board_id: str = Field(..., description="Board ID")
    column_id: str = Field(..., description="Column ID")
    created_by_id: Optional[str] = Field(default=None, description="Creator user ID")
    assignees: List[str] = Field(default_factory=list, description="Assigned user IDs")
    labels: List[str] = Field(default_factory=list, description="Label IDs")
