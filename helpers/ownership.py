"""
Ownership chain resolution.

Mutations are authorized by walking task -> column -> board -> project and
comparing the project's owner with the requesting user. Nothing is cached;
every call reads the current rows.
"""

from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session, select

from models.boards import Board, BoardColumn, Task
from models.projects import Project, ProjectMember
from settings import logger


def _not_found(entity: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{entity} not found"
    )


def get_task_or_404(db_session: Session, task_id: str) -> Task:
    task = db_session.exec(select(Task).where(Task.id == task_id)).first()
    if not task:
        raise _not_found("Task")
    return task


def get_column_or_404(db_session: Session, column_id: str) -> BoardColumn:
    column = db_session.exec(select(BoardColumn).where(BoardColumn.id == column_id)).first()
    if not column:
        raise _not_found("Column")
    return column


def get_board_or_404(db_session: Session, board_id: str) -> Board:
    board = db_session.exec(select(Board).where(Board.id == board_id)).first()
    if not board:
        raise _not_found("Board")
    return board


def get_project_or_404(db_session: Session, project_id: str) -> Project:
    project = db_session.exec(select(Project).where(Project.id == project_id)).first()
    if not project:
        raise _not_found("Project")
    return project


def resolve_project(
    db_session: Session,
    task_id: Optional[str] = None,
    column_id: Optional[str] = None,
    board_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> Project:
    """Walk up from the most specific id given to the owning project."""
    if task_id is not None:
        column_id = get_task_or_404(db_session, task_id).column_id
    if column_id is not None:
        board_id = get_column_or_404(db_session, column_id).board_id
    if board_id is not None:
        project_id = get_board_or_404(db_session, board_id).project_id
    if project_id is None:
        raise ValueError("One of task_id, column_id, board_id or project_id is required")
    return get_project_or_404(db_session, project_id)


def resolve_project_owner(
    db_session: Session,
    task_id: Optional[str] = None,
    column_id: Optional[str] = None,
    board_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> str:
    """Return the owner id at the top of the chain, 404 at the first broken link."""
    return resolve_project(
        db_session,
        task_id=task_id,
        column_id=column_id,
        board_id=board_id,
        project_id=project_id,
    ).owner_id


def authorize_mutation(requesting_user_id: str, owner_id: str) -> None:
    """Only the project owner may mutate anything beneath the project."""
    if requesting_user_id != owner_id:
        logger.warning("Mutation denied by ownership check", extra={
            "requesting_user_id": requesting_user_id,
            "owner_id": owner_id,
        })
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to modify this project"
        )


def require_project_owner(db_session: Session, user_id: str, project_id: str) -> Project:
    project = get_project_or_404(db_session, project_id)
    authorize_mutation(user_id, project.owner_id)
    return project


def is_project_member(db_session: Session, user_id: str, project_id: str) -> bool:
    statement = select(ProjectMember).where(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
    )
    return db_session.exec(statement).first() is not None


def require_project_reader(db_session: Session, user_id: str, project_id: str) -> Project:
    """Owner and members may read a project."""
    project = get_project_or_404(db_session, project_id)
    if project.owner_id != user_id and not is_project_member(db_session, user_id, project_id):
        logger.warning("Project read denied", extra={
            "requesting_user_id": user_id,
            "project_id": project_id,
        })
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this project"
        )
    return project
