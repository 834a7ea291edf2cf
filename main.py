from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as StoreTimeoutError

from apis import auth, users, projects, boards, columns, tasks
from database import build_engine, init_db
from settings import API_PREFIX, CORS_ORIGINS, ENVIRONMENT, logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    logger.info("Task Manager API started", extra={"environment": ENVIRONMENT})
    yield
    app.state.engine.dispose()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing input is a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())}
    )


async def store_timeout_handler(request: Request, exc: StoreTimeoutError) -> JSONResponse:
    logger.error("Store timeout", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Store timeout"}
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Details stay in the log
    logger.exception("Store failure", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


def is_lock_timeout(exc: OperationalError) -> bool:
    """SQLite reports an expired busy timeout as "database is locked"."""
    return "is locked" in str(exc.orig).lower()


async def store_operational_handler(request: Request, exc: OperationalError) -> JSONResponse:
    if is_lock_timeout(exc):
        return await store_timeout_handler(request, exc)
    return await store_error_handler(request, exc)


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """Build the API around the given store engine."""
    app = FastAPI(
        title="Task Manager API",
        version="1.0.0",
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=f"{API_PREFIX}/redoc",
        lifespan=lifespan
    )
    app.state.engine = engine if engine is not None else build_engine()

    # CORS middleware for development
    if ENVIRONMENT == "development":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreTimeoutError, store_timeout_handler)
    app.add_exception_handler(OperationalError, store_operational_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(projects.router, prefix=API_PREFIX)
    app.include_router(boards.router, prefix=API_PREFIX)
    app.include_router(columns.router, prefix=API_PREFIX)
    app.include_router(tasks.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health():
        """API health check."""
        return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from settings import PORT

    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
