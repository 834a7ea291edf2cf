"""
Feature: Register and log in
  As a new user
  I want to create an account and log in
  So that I can manage my projects

Scenario: Successful registration then login
  Given no account exists for an email
  When I register and then log in with the same credentials
  Then the login returns a token whose subject is my user id

Scenario: Duplicate email
  Given an account exists for an email
  When I register again with the same email in different case
  Then the system returns 409 Conflict error

Scenario: Wrong password and unknown email look the same
  Given an account exists
  When I log in with a wrong password or an unknown email
  Then the system returns the same 401 Unauthorized error

Scenario: Current user lookup
  Given I am logged in
  When I request /me
  Then the system returns my profile without the password hash
"""

import pytest
from fastapi import HTTPException
from sqlmodel import create_engine, Session, SQLModel, select
from models.user import User, UserRole
from models.projects import Project  # Need to import to create tables
from models.boards import Board  # Need to import to create tables
from apis.auth import register, login
from apis.users import me
from apis.schemas.auth import RegisterRequest, LoginRequest
from helpers.auth import get_auth_token, verify_password
from helpers.tokens import verify_token


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.mark.asyncio
async def test_register_then_login(session):
    # When I register
    result = await register(
        register_data=RegisterRequest(name="Alice", email="a@x.com", password="pw123456"),
        db_session=session
    )
    assert result.message == "registered"

    # Then the password is stored hashed
    user = session.exec(select(User).where(User.email == "a@x.com")).one()
    assert user.hashed_password != "pw123456"
    assert verify_password("pw123456", user.hashed_password)
    assert user.role == UserRole.MEMBER

    # And login with the same credentials returns a token for that user
    response = await login(
        login_data=LoginRequest(email="a@x.com", password="pw123456"),
        db_session=session
    )
    assert response.token_type == "bearer"
    assert response.user.id == user.id
    assert response.user.email == "a@x.com"
    assert verify_token(response.access_token).subject_id == user.id


@pytest.mark.asyncio
async def test_register_normalizes_email(session):
    await register(
        register_data=RegisterRequest(name="Alice", email="  Alice@Example.COM ", password="pw123456"),
        db_session=session
    )

    user = session.exec(select(User)).one()
    assert user.email == "alice@example.com"

    # Login is case-insensitive as well
    response = await login(
        login_data=LoginRequest(email="ALICE@example.com", password="pw123456"),
        db_session=session
    )
    assert response.user.id == user.id


@pytest.mark.asyncio
async def test_register_duplicate_email_conflict(session):
    await register(
        register_data=RegisterRequest(name="Alice", email="a@x.com", password="pw123456"),
        db_session=session
    )

    with pytest.raises(HTTPException) as exc_info:
        await register(
            register_data=RegisterRequest(name="Other", email="A@X.COM", password="another1"),
            db_session=session
        )

    assert exc_info.value.status_code == 409
    assert len(session.exec(select(User)).all()) == 1


def test_register_request_validation():
    with pytest.raises(ValueError):
        RegisterRequest(name="Alice", email="not-an-email", password="pw123456")
    with pytest.raises(ValueError):
        RegisterRequest(name="Alice", email="a@x.com", password="short")
    with pytest.raises(ValueError):
        RegisterRequest(name="", email="a@x.com", password="pw123456")


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(session):
    await register(
        register_data=RegisterRequest(name="Alice", email="a@x.com", password="pw123456"),
        db_session=session
    )

    with pytest.raises(HTTPException) as wrong_password:
        await login(login_data=LoginRequest(email="a@x.com", password="wrong-pass"), db_session=session)

    with pytest.raises(HTTPException) as unknown_email:
        await login(login_data=LoginRequest(email="nobody@x.com", password="pw123456"), db_session=session)

    assert wrong_password.value.status_code == unknown_email.value.status_code == 401
    assert wrong_password.value.detail == unknown_email.value.detail == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_returns_current_user(session):
    await register(
        register_data=RegisterRequest(name="Alice", email="a@x.com", password="pw123456"),
        db_session=session
    )
    response = await login(login_data=LoginRequest(email="a@x.com", password="pw123456"), db_session=session)

    token = await get_auth_token(authorization=f"Bearer {response.access_token}")
    result = await me(token=token, db_session=session)

    assert result.id == response.user.id
    assert result.name == "Alice"
    assert result.role == UserRole.MEMBER
    assert not hasattr(result, "hashed_password")


@pytest.mark.asyncio
async def test_me_after_account_removed(session):
    user = User(name="Ghost", email="ghost@x.com", hashed_password="x")
    session.add(user)
    session.commit()
    session.refresh(user)
    user_id = user.id

    from helpers.tokens import issue_access_token
    token = await get_auth_token(authorization=f"Bearer {issue_access_token(user_id, 'MEMBER')}")

    session.delete(user)
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        await me(token=token, db_session=session)

    assert exc_info.value.status_code == 404
