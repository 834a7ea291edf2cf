from typing import Generator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from settings import DATABASE_URL, STORE_TIMEOUT_SECONDS


def build_engine(url: str = DATABASE_URL, timeout: float = STORE_TIMEOUT_SECONDS) -> Engine:
    """Create the store engine with bounded waits on connections."""
    if url.startswith("sqlite"):
        # SQLite waits on locks through the driver busy timeout
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )
    return create_engine(url, pool_timeout=timeout, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    """Create all tables registered on SQLModel metadata."""
    # Import models so every table is registered before create_all
    import models.user  # noqa: F401
    import models.projects  # noqa: F401
    import models.boards  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Generator[Session, None, None]:
    """Yield a session bound to the engine the app was built with."""
    with Session(request.app.state.engine) as session:
        yield session
