"""
Feature: Ownership chain
  As the API
  I want to resolve any task, column or board to its project owner
  So that only the owner can mutate what lives beneath a project

Scenario: Resolve from each level
  Given a project with a board, a column and a task
  When I resolve the owner from the task, the column, the board or the project
  Then the project owner is returned each time

Scenario: Broken link
  Given a chain where one link is missing
  When I resolve the owner
  Then the system returns 404 Not Found error
"""

import pytest
from fastapi import HTTPException
from sqlmodel import create_engine, Session, SQLModel
from models.user import User
from models.projects import Project, ProjectMember
from models.boards import Board, BoardColumn, Task
from helpers.ownership import (
    authorize_mutation, require_project_reader, resolve_project, resolve_project_owner
)


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="chain")
def chain_fixture(session):
    owner = User(name="Owner", email="owner@x.com", hashed_password="hashed_secret")
    session.add(owner)
    session.commit()
    project = Project(name="Demo", owner_id=owner.id)
    session.add(project)
    session.commit()
    board = Board(name="Main board", project_id=project.id)
    session.add(board)
    session.commit()
    column = BoardColumn(name="To Do", board_id=board.id)
    session.add(column)
    session.commit()
    task = Task(title="T1", board_id=board.id, column_id=column.id)
    session.add(task)
    session.commit()
    return {
        "owner_id": owner.id,
        "project_id": project.id,
        "board_id": board.id,
        "column_id": column.id,
        "task_id": task.id,
    }


@pytest.mark.parametrize("level", ["task_id", "column_id", "board_id", "project_id"])
def test_resolve_owner_from_each_level(session, chain, level):
    owner_id = resolve_project_owner(session, **{level: chain[level]})

    assert owner_id == chain["owner_id"]


def test_resolve_project_returns_project(session, chain):
    project = resolve_project(session, task_id=chain["task_id"])

    assert project.id == chain["project_id"]
    assert project.name == "Demo"


def test_resolve_requires_an_id(session):
    with pytest.raises(ValueError):
        resolve_project(session)


@pytest.mark.parametrize("level", ["task_id", "column_id", "board_id", "project_id"])
def test_unknown_id_not_found(session, level):
    with pytest.raises(HTTPException) as exc_info:
        resolve_project_owner(session, **{level: "missing_abc"})

    assert exc_info.value.status_code == 404


def test_broken_link_not_found(session, chain):
    # The column's board disappears underneath it
    board = session.get(Board, chain["board_id"])
    session.delete(board)
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        resolve_project_owner(session, task_id=chain["task_id"])

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Board not found"


def test_authorize_mutation():
    authorize_mutation("user_owner", "user_owner")

    with pytest.raises(HTTPException) as exc_info:
        authorize_mutation("user_other", "user_owner")

    assert exc_info.value.status_code == 403


def test_require_project_reader(session, chain):
    member = User(name="Member", email="member@x.com", hashed_password="hashed_secret")
    session.add(member)
    session.commit()
    member_id = member.id

    # Not shared yet
    with pytest.raises(HTTPException) as exc_info:
        require_project_reader(session, member_id, chain["project_id"])
    assert exc_info.value.status_code == 403

    session.add(ProjectMember(project_id=chain["project_id"], user_id=member_id))
    session.commit()

    assert require_project_reader(session, member_id, chain["project_id"]).id == chain["project_id"]
    assert require_project_reader(session, chain["owner_id"], chain["project_id"]).id == chain["project_id"]
