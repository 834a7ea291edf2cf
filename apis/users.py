from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select
from database import get_session
from models.user import User
from .schemas.auth import UpdateProfileRequest, UserResponse
from .schemas.common import MessageResponse
from helpers.auth import get_auth_token, require_self
from helpers.cascade import delete_user_cascade
from helpers.tokens import TokenClaims
from settings import logger

router = APIRouter(tags=["users"])


@router.get("/me")
async def me(
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> UserResponse:
    """Get the authenticated user."""

    user_statement = select(User).where(User.id == token.subject_id)
    user = db_session.exec(user_statement).first()

    # The token outlives a deleted account
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)


@router.patch("/users/{user_id}")
async def update_profile(
    user_id: str,
    profile_data: UpdateProfileRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> UserResponse:
    """Update the display name. Users may only update themselves."""

    await require_self(token=token, user_id=user_id, action="update")

    user_statement = select(User).where(User.id == user_id)
    user = db_session.exec(user_statement).first()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    user.name = profile_data.name
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)

    logger.info("Profile updated", extra={"user_id": user_id})
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}")
async def delete_account(
    user_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Delete the account together with every project it owns."""

    await require_self(token=token, user_id=user_id, action="delete")

    user_statement = select(User).where(User.id == user_id)
    user = db_session.exec(user_statement).first()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    delete_user_cascade(db_session, user)

    return MessageResponse(message="account deleted")
