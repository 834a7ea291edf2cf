"""
Signed bearer tokens.

Access tokens carry the user id (`sub`) and role and expire after
ACCESS_TOKEN_TTL_MINUTES. Reset tokens carry only the user id and expire after
RESET_TOKEN_TTL_HOURS; they are also stored server-side so they can be
consumed once. Access tokens are not tracked and stay valid until expiry.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

import settings

ALGORITHM = "HS256"
ACCESS = "access"
RESET = "reset"


class InvalidToken(Exception):
    """Raised when a token is malformed, tampered with, expired or of the wrong type."""


@dataclass(frozen=True)
class TokenClaims:
    subject_id: str
    role: Optional[str]
    expires_at: datetime


def _encode(payload: dict) -> str:
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def issue_access_token(subject_id: str, role: str, now: Optional[datetime] = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    return _encode({
        "sub": subject_id,
        "role": role,
        "type": ACCESS,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.ACCESS_TOKEN_TTL_MINUTES),
    })


def issue_reset_token(subject_id: str, now: Optional[datetime] = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    return _encode({
        "sub": subject_id,
        "type": RESET,
        "jti": secrets.token_urlsafe(16),
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.RESET_TOKEN_TTL_HOURS),
    })


def verify_token(token: str, expected_type: str = ACCESS) -> TokenClaims:
    """Decode and validate a token, returning its claims."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidToken(str(e)) from e

    if payload.get("type") != expected_type:
        raise InvalidToken(f"Expected {expected_type} token")

    return TokenClaims(
        subject_id=payload["sub"],
        role=payload.get("role"),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def token_expiry(token: str) -> datetime:
    """Expiry of a token this service issued, read without re-verifying."""
    payload = jwt.decode(token, options={"verify_signature": False})
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
