from pydantic import Field
from typing import List, Optional
from .common import CamelModel


class CreateColumnRequest(CamelModel):
    """Schema for creating a column on a board, or on a project's default board."""
    name: str = Field(..., min_length=1, description="Column name")
    board_id: Optional[str] = Field(default=None, description="Target board ID")
    project_id: Optional[str] = Field(default=None, description="Project whose board receives the column")
    position: Optional[int] = Field(default=None, ge=0, description="Display position, appended when omitted")
    wip_limit: Optional[int] = Field(default=None, ge=1, description="Work-in-progress limit")


class UpdateColumnRequest(CamelModel):
    """Schema for updating a column."""
    name: Optional[str] = Field(default=None, min_length=1, description="New column name")
    position: Optional[int] = Field(default=None, ge=0, description="New display position")
    wip_limit: Optional[int] = Field(default=None, ge=1, description="New work-in-progress limit")


class ColumnResponse(CamelModel):
    """Schema for column responses."""
    id: str = Field(..., description="Column ID")
    name: str = Field(..., description="Column name")
    position: int = Field(..., description="Display position")
    wip_limit: Optional[int] = Field(default=None, description="Work-in-progress limit")
    board_id: str = Field(..., description="Board ID")


class BoardResponse(CamelModel):
    """Schema for board responses."""
    id: str = Field(..., description="Board ID")
    name: str = Field(..., description="Board name")
    project_id: str = Field(..., description="Project ID")
    columns: List[ColumnResponse] = Field(default_factory=list, description="Columns in display order")
