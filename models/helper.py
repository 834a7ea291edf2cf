import secrets
import string
from datetime import datetime, timezone
from typing import Callable

ALPHABET = string.ascii_letters + string.digits


def id_generator(prefix: str, length: int) -> Callable[[], str]:
    """Return a factory producing ids like `<prefix>_<random chars>`."""
    def generate() -> str:
        suffix = "".join(secrets.choice(ALPHABET) for _ in range(length))
        return f"{prefix}_{suffix}"
    return generate


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on read; treat naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
