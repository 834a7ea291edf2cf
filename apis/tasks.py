from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from database import get_session
from models.boards import Task
from models.helper import utc_now
from apis.schemas.tasks import (
    CreateTaskRequest, UpdateTaskRequest, MoveTaskRequest, TaskCreatedResponse, TaskResponse
)
from apis.schemas.common import OkResponse
from helpers.auth import get_auth_token
from helpers.ownership import authorize_mutation, get_column_or_404, get_task_or_404, resolve_project_owner
from helpers.tokens import TokenClaims
from settings import logger

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: CreateTaskRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> TaskCreatedResponse:
    """Create a task in a column."""

    column = get_column_or_404(db_session, task_data.column_id)
    owner_id = resolve_project_owner(db_session, board_id=column.board_id)
    authorize_mutation(token.subject_id, owner_id)

    task = Task(
        title=task_data.title,
        description=task_data.description,
        priority=task_data.priority,
        start_date=task_data.start_date,
        due_date=task_data.due_date,
        position=task_data.position,
        column_id=column.id,
        board_id=column.board_id,
        created_by_id=token.subject_id,
        assignees=task_data.assignees,
        labels=task_data.labels
    )

    db_session.add(task)
    db_session.commit()
    db_session.refresh(task)

    logger.info("Task created", extra={"task_id": task.id, "column_id": column.id})
    return TaskCreatedResponse(id=task.id, title=task.title)


# Declared before /{task_id} so "move" is not taken for a task id
@router.patch("/move")
async def move_task(
    move_data: MoveTaskRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Move a task to another column."""

    task = get_task_or_404(db_session, move_data.task_id)
    destination = get_column_or_404(db_session, move_data.to_column_id)

    # Both ends of the move must belong to the caller
    authorize_mutation(token.subject_id, resolve_project_owner(db_session, column_id=task.column_id))
    authorize_mutation(token.subject_id, resolve_project_owner(db_session, board_id=destination.board_id))

    task.column_id = destination.id
    task.board_id = destination.board_id
    if move_data.position is not None:
        task.position = move_data.position
    task.updated_at = utc_now()

    db_session.add(task)
    db_session.commit()

    logger.info("Task moved", extra={"task_id": task.id, "to_column_id": destination.id})
    return OkResponse(ok=True)


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    task_data: UpdateTaskRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> TaskResponse:
    """Update task fields (use /tasks/move to change column)."""

    owner_id = resolve_project_owner(db_session, task_id=task_id)
    authorize_mutation(token.subject_id, owner_id)

    task = get_task_or_404(db_session, task_id)

    # Update only provided fields
    if task_data.title is not None:
        task.title = task_data.title
    if task_data.description is not None:
        task.description = task_data.description
    if task_data.priority is not None:
        task.priority = task_data.priority
    # Dates can be cleared with an explicit null
    if "start_date" in task_data.model_fields_set:
        task.start_date = task_data.start_date
    if "due_date" in task_data.model_fields_set:
        task.due_date = task_data.due_date
    if task_data.position is not None:
        task.position = task_data.position
    if task_data.assignees is not None:
        task.assignees = task_data.assignees
    if task_data.labels is not None:
        task.labels = task_data.labels
    task.updated_at = utc_now()

    db_session.add(task)
    db_session.commit()
    db_session.refresh(task)

    logger.info("Task updated", extra={"task_id": task_id})
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Delete a task."""

    owner_id = resolve_project_owner(db_session, task_id=task_id)
    authorize_mutation(token.subject_id, owner_id)

    task = get_task_or_404(db_session, task_id)
    db_session.delete(task)
    db_session.commit()

    logger.info("Task deleted", extra={"task_id": task_id})
    return OkResponse(ok=True)
