from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from database import get_session
from models.user import User, UserRole, PasswordResetToken
from models.helper import as_utc, utc_now
from .schemas.auth import (
    RegisterRequest, LoginRequest, LoginResponse, ForgotPasswordRequest, ResetPasswordRequest,
    ChangePasswordRequest, UserResponse
)
from .schemas.common import MessageResponse
from helpers.auth import get_auth_token, hash_password, verify_password
from helpers.tokens import (
    TokenClaims, InvalidToken, RESET, issue_access_token, issue_reset_token, token_expiry, verify_token
)
from settings import logger

router = APIRouter(prefix="/auth", tags=["authentication"])

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent"


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Create a new account."""

    # Check the email is not taken (emails are stored lower-cased)
    user_statement = select(User).where(User.email == register_data.email)
    if db_session.exec(user_statement).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )

    new_user = User(
        name=register_data.name,
        email=register_data.email,
        hashed_password=hash_password(register_data.password),
        role=UserRole.MEMBER
    )

    db_session.add(new_user)
    try:
        db_session.commit()
    except IntegrityError:
        # Unique index caught a concurrent registration with the same email
        db_session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )
    db_session.refresh(new_user)

    logger.info("User registered", extra={"user_id": new_user.id})
    return MessageResponse(message="registered")


@router.post("/login")
async def login(
    login_data: LoginRequest,
    db_session: Session = Depends(get_session)
) -> LoginResponse:
    """Exchange email and password for an access token."""

    user_statement = select(User).where(User.email == login_data.email)
    user = db_session.exec(user_statement).first()

    # Same response for unknown email and wrong password
    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.info("Login failed", extra={"user_found": user is not None})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    access_token = issue_access_token(user.id, user.role.value)

    logger.info("User logged in", extra={"user_id": user.id})
    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        expires_at=token_expiry(access_token),
        user=UserResponse.model_validate(user)
    )


@router.post("/forgot-password")
async def forgot_password(
    forgot_data: ForgotPasswordRequest,
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Issue a single-use reset token. The response never reveals whether the account exists."""

    user_statement = select(User).where(User.email == forgot_data.email)
    user = db_session.exec(user_statement).first()

    if user:
        reset_token = issue_reset_token(user.id)
        db_session.add(PasswordResetToken(
            user_id=user.id,
            email=user.email,
            token=reset_token,
            expires_at=token_expiry(reset_token)
        ))
        db_session.commit()

        # No mail delivery: the token is handed over through the log
        logger.info("Password reset token issued", extra={
            "user_id": user.id,
            "reset_token": reset_token
        })

    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
async def reset_password(
    reset_data: ResetPasswordRequest,
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Set a new password using a reset token."""

    invalid_token = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid or expired token"
    )

    try:
        claims = verify_token(reset_data.token, expected_type=RESET)
    except InvalidToken as e:
        logger.info("Reset token rejected", extra={"reason": str(e)})
        raise invalid_token

    record_statement = select(PasswordResetToken).where(PasswordResetToken.token == reset_data.token)
    record = db_session.exec(record_statement).first()

    if not record or record.used or record.user_id != claims.subject_id:
        raise invalid_token
    if as_utc(record.expires_at) <= utc_now():
        raise invalid_token

    user_statement = select(User).where(User.id == record.user_id)
    user = db_session.exec(user_statement).first()
    if not user:
        raise invalid_token

    user.hashed_password = hash_password(reset_data.new_password)
    record.used = True
    db_session.add(user)
    db_session.add(record)
    db_session.commit()

    logger.info("Password reset", extra={"user_id": user.id})
    return MessageResponse(message="password reset")


@router.post("/change-password")
async def change_password(
    password_data: ChangePasswordRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> MessageResponse:
    """Change the password of the authenticated user."""

    user_statement = select(User).where(User.id == token.subject_id)
    user = db_session.exec(user_statement).first()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if not verify_password(password_data.current_password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect"
        )

    user.hashed_password = hash_password(password_data.new_password)
    db_session.add(user)
    db_session.commit()

    logger.info("Password changed", extra={"user_id": user.id})
    return MessageResponse(message="password changed")
