from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON
from enum import Enum
from typing import Optional, List
from datetime import datetime
from .helper import id_generator, utc_now


DEFAULT_BOARD_NAME = "Main board"


class TaskPriority(str, Enum):
    """Priority levels shown on task cards."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Board(SQLModel, table=True):
    """Kanban-style board belonging to a project."""
    id: str = Field(default_factory=id_generator('board', 10), primary_key=True)
    name: str = Field(index=True)
    project_id: str = Field(foreign_key="project.id", index=True)
    # Set to the project id on the auto-created board; unique, so a project
    # can hold only one of them
    default_for: Optional[str] = Field(default=None, unique=True)


class BoardColumn(SQLModel, table=True):
    """Ordered column of a board holding tasks."""
    id: str = Field(default_factory=id_generator('column', 10), primary_key=True)
    name: str
    position: int = Field(default=0)
    wip_limit: Optional[int] = Field(default=None)
    board_id: str = Field(foreign_key="board.id", index=True)


class Task(SQLModel, table=True):
    """Work unit placed in a column."""
    id: str = Field(default_factory=id_generator('task', 10), primary_key=True)
    title: str
    description: str = Field(default="")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    start_date: Optional[datetime] = Field(default=None)
    due_date: Optional[datetime] = Field(default=None)
    position: int = Field(default=0)
    board_id: str = Field(foreign_key="board.id", index=True)
    column_id: str = Field(foreign_key="boardcolumn.id", index=True)
    created_by_id: Optional[str] = Field(default=None, foreign_key="user.id", index=True)
    assignees: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    labels: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime] = Field(default=None)
