"""
Cascade deletes and default board provisioning.

Deletion policy: project -> boards -> columns -> tasks. Each public delete
function commits once, so a cascade is a single database transaction.
"""

from sqlalchemy import delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.boards import Board, BoardColumn, Task, DEFAULT_BOARD_NAME
from models.projects import Project, ProjectMember
from models.user import User, PasswordResetToken
from settings import logger


def ensure_default_board(db_session: Session, project_id: str) -> Board:
    """Return the project's board, creating "Main board" when it has none."""
    statement = select(Board).where(Board.project_id == project_id)
    board = db_session.exec(statement).first()
    if board:
        return board

    board = Board(name=DEFAULT_BOARD_NAME, project_id=project_id, default_for=project_id)
    db_session.add(board)
    try:
        db_session.commit()
    except IntegrityError:
        # A concurrent request inserted the default board first
        db_session.rollback()
        existing = db_session.exec(select(Board).where(Board.default_for == project_id)).one()
        logger.info("Default board already created concurrently", extra={
            "project_id": project_id,
            "board_id": existing.id,
        })
        return existing

    db_session.refresh(board)
    logger.info("Default board created", extra={"project_id": project_id, "board_id": board.id})
    return board


def _delete_column_rows(db_session: Session, column_id: str) -> int:
    # Tasks first so no task ever points at a missing column
    result = db_session.exec(delete(Task).where(Task.column_id == column_id))
    db_session.exec(delete(BoardColumn).where(BoardColumn.id == column_id))
    return result.rowcount


def _delete_board_rows(db_session: Session, board_id: str) -> int:
    column_ids = select(BoardColumn.id).where(BoardColumn.board_id == board_id)
    on_board = or_(Task.board_id == board_id, Task.column_id.in_(column_ids))
    # Counted up front: rowcount is unreliable when the delete falls back to RETURNING
    task_count = db_session.exec(select(func.count(Task.id)).where(on_board)).one()
    db_session.exec(delete(Task).where(on_board))
    db_session.exec(delete(BoardColumn).where(BoardColumn.board_id == board_id))
    db_session.exec(delete(Board).where(Board.id == board_id))
    return task_count


def _delete_project_rows(db_session: Session, project_id: str) -> int:
    board_ids = db_session.exec(select(Board.id).where(Board.project_id == project_id)).all()
    deleted_tasks = 0
    for board_id in board_ids:
        deleted_tasks += _delete_board_rows(db_session, board_id)
    db_session.exec(delete(ProjectMember).where(ProjectMember.project_id == project_id))
    db_session.exec(delete(Project).where(Project.id == project_id))
    return deleted_tasks


def delete_column_cascade(db_session: Session, column: BoardColumn) -> int:
    """Delete a column and its tasks. Returns the number of tasks removed."""
    column_id = column.id
    try:
        deleted_tasks = _delete_column_rows(db_session, column_id)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise
    logger.info("Column deleted", extra={"column_id": column_id, "deleted_tasks": deleted_tasks})
    return deleted_tasks


def delete_board_cascade(db_session: Session, board: Board) -> int:
    """Delete a board with its columns and tasks."""
    board_id = board.id
    try:
        deleted_tasks = _delete_board_rows(db_session, board_id)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise
    logger.info("Board deleted", extra={"board_id": board_id, "deleted_tasks": deleted_tasks})
    return deleted_tasks


def delete_project_cascade(db_session: Session, project: Project) -> int:
    """Delete a project with its members, boards, columns and tasks."""
    project_id = project.id
    try:
        deleted_tasks = _delete_project_rows(db_session, project_id)
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise
    logger.info("Project deleted", extra={"project_id": project_id, "deleted_tasks": deleted_tasks})
    return deleted_tasks


def delete_user_cascade(db_session: Session, user: User) -> int:
    """Delete an account, every project it owns, its memberships and reset tokens.

    Returns the number of owned projects removed.
    """
    user_id = user.id
    try:
        project_ids = db_session.exec(select(Project.id).where(Project.owner_id == user_id)).all()
        for project_id in project_ids:
            _delete_project_rows(db_session, project_id)
        db_session.exec(delete(ProjectMember).where(ProjectMember.user_id == user_id))
        db_session.exec(delete(PasswordResetToken).where(PasswordResetToken.user_id == user_id))
        db_session.exec(delete(User).where(User.id == user_id))
        db_session.commit()
    except Exception:
        db_session.rollback()
        raise
    logger.info("Account deleted", extra={"user_id": user_id, "deleted_projects": len(project_ids)})
    return len(project_ids)
