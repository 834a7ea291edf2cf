"""
Feature: Signed bearer tokens
  As the API
  I want to issue and verify signed, time-limited tokens
  So that possession of a valid token authenticates a user

Scenario: Access token round trip
  Given an access token issued for a user and role
  When it is verified
  Then the subject and role are returned

Scenario: Expired token
  Given a token whose expiry has passed
  When it is verified
  Then verification fails with InvalidToken

Scenario: Tampered or foreign token
  Given a token signed with another secret or altered
  When it is verified
  Then verification fails with InvalidToken

Scenario: Reset tokens are not access tokens
  Given a reset token
  When it is presented as a bearer token
  Then verification fails with InvalidToken

Scenario: Bearer header handling
  Given a request without a valid Authorization header
  When the auth dependency runs
  Then the system returns 401 Unauthorized error
"""

import pytest
import jwt
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException
from helpers.auth import get_auth_token
from helpers.tokens import (
    InvalidToken, RESET, issue_access_token, issue_reset_token, token_expiry, verify_token
)


def test_access_token_round_trip():
    # Given an access token issued for a user and role
    token = issue_access_token("user_abc", "MEMBER")

    # When it is verified
    claims = verify_token(token)

    # Then the subject and role are returned
    assert claims.subject_id == "user_abc"
    assert claims.role == "MEMBER"
    assert claims.expires_at > datetime.now(timezone.utc)


def test_access_token_expires_after_one_hour():
    issued_at = datetime.now(timezone.utc)
    token = issue_access_token("user_abc", "MEMBER", now=issued_at)

    expiry = token_expiry(token)

    assert timedelta(minutes=59) < expiry - issued_at <= timedelta(minutes=60)


def test_expired_token_rejected():
    # Given a token issued two hours ago
    token = issue_access_token("user_abc", "MEMBER", now=datetime.now(timezone.utc) - timedelta(hours=2))

    # Then verification fails
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_token_signed_with_other_secret_rejected():
    foreign = jwt.encode(
        {"sub": "user_abc", "role": "ADMIN", "type": "access",
         "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "some-other-secret",
        algorithm="HS256"
    )

    with pytest.raises(InvalidToken):
        verify_token(foreign)


def test_malformed_token_rejected():
    with pytest.raises(InvalidToken):
        verify_token("not-a-token")


def test_altered_token_rejected():
    token = issue_access_token("user_abc", "MEMBER")
    header, payload, signature = token.split(".")
    altered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])

    with pytest.raises(InvalidToken):
        verify_token(altered)


def test_reset_token_has_no_role_and_lasts_a_day():
    issued_at = datetime.now(timezone.utc)
    token = issue_reset_token("user_abc", now=issued_at)

    claims = verify_token(token, expected_type=RESET)

    assert claims.subject_id == "user_abc"
    assert claims.role is None
    assert timedelta(hours=23) < claims.expires_at - issued_at <= timedelta(hours=24)


def test_reset_tokens_are_unique():
    issued_at = datetime.now(timezone.utc)
    assert issue_reset_token("user_abc", now=issued_at) != issue_reset_token("user_abc", now=issued_at)


def test_reset_token_not_accepted_as_access_token():
    token = issue_reset_token("user_abc")

    with pytest.raises(InvalidToken):
        verify_token(token)


@pytest.mark.asyncio
async def test_get_auth_token_valid():
    token = issue_access_token("user_abc", "MEMBER")

    claims = await get_auth_token(authorization=f"Bearer {token}")

    assert claims.subject_id == "user_abc"


@pytest.mark.asyncio
@pytest.mark.parametrize("authorization", [
    None,
    "",
    "Token abc",
    "Bearer ",
    "Bearer invalid_token",
])
async def test_get_auth_token_rejects(authorization):
    with pytest.raises(HTTPException) as exc_info:
        await get_auth_token(authorization=authorization)

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_get_auth_token_rejects_expired():
    token = issue_access_token("user_abc", "MEMBER", now=datetime.now(timezone.utc) - timedelta(hours=2))

    with pytest.raises(HTTPException) as exc_info:
        await get_auth_token(authorization=f"Bearer {token}")

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid token"
