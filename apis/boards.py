from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from database import get_session
from models.boards import BoardColumn
from .schemas.boards import BoardResponse, ColumnResponse
from .schemas.common import OkResponse
from helpers.auth import get_auth_token
from helpers.cascade import delete_board_cascade
from helpers.ownership import (
    authorize_mutation, get_board_or_404, require_project_reader, resolve_project_owner
)
from helpers.tokens import TokenClaims

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("/{board_id}")
async def get_board(
    board_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> BoardResponse:
    """Get a board with its columns in display order."""

    board = get_board_or_404(db_session, board_id)
    require_project_reader(db_session, token.subject_id, board.project_id)

    columns_statement = (
        select(BoardColumn)
        .where(BoardColumn.board_id == board_id)
        .order_by(BoardColumn.position)
    )
    columns = db_session.exec(columns_statement).all()

    return BoardResponse(
        id=board.id,
        name=board.name,
        project_id=board.project_id,
        columns=[ColumnResponse.model_validate(column) for column in columns]
    )


@router.delete("/{board_id}")
async def delete_board(
    board_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Delete a board with its columns and tasks (project owner only)."""

    owner_id = resolve_project_owner(db_session, board_id=board_id)
    authorize_mutation(token.subject_id, owner_id)

    board = get_board_or_404(db_session, board_id)

    delete_board_cascade(db_session, board)

    return OkResponse(ok=True)
