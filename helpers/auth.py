import hashlib
import hmac
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from helpers.tokens import InvalidToken, TokenClaims, verify_token
from settings import logger

PBKDF2_ITERATIONS = 260_000
HASH_SCHEME = "pbkdf2_sha256"


def hash_password(password: str) -> str:
    """Salted PBKDF2 hash stored as `scheme$iterations$salt$digest`."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{HASH_SCHEME}${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        scheme, iterations, salt, expected = hashed_password.split("$")
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_auth_token(
    authorization: Optional[str] = Header(default=None)
) -> TokenClaims:
    """Resolve the bearer token of the request into its claims."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    raw_token = authorization[len("Bearer "):].strip()
    if not raw_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return verify_token(raw_token)
    except InvalidToken as e:
        logger.info("Rejected bearer token", extra={"reason": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_self(token: TokenClaims, user_id: str, action: str = "modify") -> None:
    """Only the account holder may act on their own account."""
    if token.subject_id != user_id:
        logger.warning("Account access denied", extra={
            "requesting_user_id": token.subject_id,
            "target_user_id": user_id,
        })
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own account"
        )
