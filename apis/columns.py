from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlmodel import Session, select
from database import get_session
from models.boards import BoardColumn
from .schemas.boards import CreateColumnRequest, UpdateColumnRequest, ColumnResponse
from .schemas.common import OkResponse
from helpers.auth import get_auth_token
from helpers.cascade import delete_column_cascade, ensure_default_board
from helpers.ownership import (
    authorize_mutation, get_column_or_404, require_project_owner, resolve_project_owner
)
from helpers.tokens import TokenClaims
from settings import logger

router = APIRouter(prefix="/columns", tags=["columns"])


@router.post("")
async def create_column(
    column_data: CreateColumnRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> ColumnResponse:
    """Create a column on a board, or on the project's board when only projectId is given."""

    if column_data.board_id:
        owner_id = resolve_project_owner(db_session, board_id=column_data.board_id)
        authorize_mutation(token.subject_id, owner_id)
        board_id = column_data.board_id
    elif column_data.project_id:
        # Authorize before provisioning so a stranger cannot create boards
        require_project_owner(db_session, token.subject_id, column_data.project_id)
        board_id = ensure_default_board(db_session, column_data.project_id).id
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="boardId or projectId is required"
        )

    position = column_data.position
    if position is None:
        count_statement = select(func.count(BoardColumn.id)).where(BoardColumn.board_id == board_id)
        position = db_session.exec(count_statement).one()

    column = BoardColumn(
        name=column_data.name,
        position=position,
        wip_limit=column_data.wip_limit,
        board_id=board_id
    )
    db_session.add(column)
    db_session.commit()
    db_session.refresh(column)

    logger.info("Column created", extra={"column_id": column.id, "board_id": board_id})
    return ColumnResponse.model_validate(column)


@router.patch("/{column_id}")
async def update_column(
    column_id: str,
    column_data: UpdateColumnRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> ColumnResponse:
    """Rename, reorder or change the WIP limit of a column."""

    owner_id = resolve_project_owner(db_session, column_id=column_id)
    authorize_mutation(token.subject_id, owner_id)

    column = get_column_or_404(db_session, column_id)

    # Update only provided fields
    if column_data.name is not None:
        column.name = column_data.name
    if column_data.position is not None:
        column.position = column_data.position
    if column_data.wip_limit is not None:
        column.wip_limit = column_data.wip_limit

    db_session.add(column)
    db_session.commit()
    db_session.refresh(column)

    logger.info("Column updated", extra={"column_id": column_id})
    return ColumnResponse.model_validate(column)


@router.delete("/{column_id}")
async def delete_column(
    column_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Delete a column and every task in it."""

    owner_id = resolve_project_owner(db_session, column_id=column_id)
    authorize_mutation(token.subject_id, owner_id)

    column = get_column_or_404(db_session, column_id)
    delete_column_cascade(db_session, column)

    return OkResponse(ok=True)
