#!/usr/bin/env python3
"""
Management commands for the Task Manager API.

Usage:
    python manage.py init_db
    python manage.py check_db
    python manage.py reset_db
    python manage.py create_user <email> <password> [name]
"""

import sys
from sqlalchemy import inspect
from sqlmodel import SQLModel, Session, select
from database import build_engine, init_db as create_tables
from settings import logger
from helpers.auth import hash_password, normalize_email
from models.user import User, UserRole
# Import all models to ensure tables are registered
from models.projects import Project, ProjectMember  # noqa: F401
from models.boards import Board, BoardColumn, Task  # noqa: F401


def init_db(engine):
    """Initialize database tables."""
    logger.info("Creating database tables...")
    create_tables(engine)
    logger.info("Database tables created successfully")


def check_db(engine):
    """Check database connection and tables."""
    try:
        tables = inspect(engine).get_table_names()
        logger.info(f"Database connected. Found {len(tables)} tables: {tables}")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        sys.exit(1)


def reset_db(engine):
    """Drop and recreate all database tables."""
    logger.warning("Dropping all database tables...")
    SQLModel.metadata.drop_all(engine)
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Database reset successfully")


def create_user(engine, email: str, password: str, name: str = ""):
    """Create a user account."""
    email = normalize_email(email)
    with Session(engine) as session:
        if session.exec(select(User).where(User.email == email)).first():
            logger.error(f"User '{email}' already exists")
            sys.exit(1)

        user = User(
            name=name or email.split("@")[0],
            email=email,
            hashed_password=hash_password(password),
            role=UserRole.MEMBER
        )
        session.add(user)
        session.commit()
        session.refresh(user)

        logger.info(f"User '{email}' created successfully with ID: {user.id}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python manage.py <command> [args]")
        print("Commands:")
        print("  init_db                                - Initialize database tables")
        print("  check_db                               - Check database connection")
        print("  reset_db                               - Drop and recreate all tables")
        print("  create_user <email> <password> [name]  - Create a user account")
        sys.exit(1)

    command = sys.argv[1]
    engine = build_engine()

    if command == "init_db":
        init_db(engine)
    elif command == "check_db":
        check_db(engine)
    elif command == "reset_db":
        reset_db(engine)
    elif command == "create_user":
        if len(sys.argv) not in (4, 5):
            print("Usage: python manage.py create_user <email> <password> [name]")
            sys.exit(1)
        create_user(engine, *sys.argv[2:])
    else:
        print(f"Unknown command: {command}")
        print("Run 'python manage.py' to see available commands")
        sys.exit(1)


if __name__ == "__main__":
    main()
