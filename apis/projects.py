from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlmodel import Session, select
from database import get_session
from models.boards import Board, BoardColumn, Task
from models.helper import utc_now
from models.projects import Project, ProjectMember
from models.user import User, UserRole
from .schemas.projects import (
    CreateProjectRequest, UpdateProjectRequest, AddMemberRequest, ProjectResponse, ProjectListItem,
    MemberResponse, ProjectDetailResponse, ProjectSummary, BoardSummary, ColumnSummary, TaskSummary
)
from .schemas.common import OkResponse
from helpers.auth import get_auth_token
from helpers.cascade import delete_project_cascade
from helpers.ownership import require_project_owner, require_project_reader
from helpers.tokens import TokenClaims
from settings import logger
from typing import List

router = APIRouter(prefix="/projects", tags=["projects"])

UPDATED_AT_FORMAT = "%Y-%m-%d %H:%M"


@router.get("")
async def list_projects(
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> List[ProjectListItem]:
    """List projects the user owns or is a member of, with their task counts."""

    user_id = token.subject_id
    member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)
    statement = (
        select(Project)
        .where(or_(Project.owner_id == user_id, Project.id.in_(member_of)))
        .order_by(Project.created_at)
    )
    projects = db_session.exec(statement).all()

    results = []
    for project in projects:
        # One count query per project; project lists per user are small
        count_statement = (
            select(func.count(Task.id))
            .join(Board, Board.id == Task.board_id)
            .where(Board.project_id == project.id)
        )
        task_count = db_session.exec(count_statement).one()

        results.append(ProjectListItem(
            id=project.id,
            name=project.name,
            description=project.description,
            task_count=task_count,
            updated_at=project.updated_at.strftime(UPDATED_AT_FORMAT) if project.updated_at else None
        ))

    return results


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: CreateProjectRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> ProjectResponse:
    """Create a project owned by the authenticated user."""

    new_project = Project(
        name=project_data.name,
        description=project_data.description,
        owner_id=token.subject_id
    )
    db_session.add(new_project)
    db_session.flush()

    # The owner is recorded as the first member
    db_session.add(ProjectMember(
        project_id=new_project.id,
        user_id=token.subject_id,
        role=UserRole.ADMIN
    ))
    db_session.commit()
    db_session.refresh(new_project)

    logger.info("Project created", extra={"project_id": new_project.id, "owner_id": token.subject_id})
    return ProjectResponse.model_validate(new_project)


@router.get("/{project_id}")
async def get_project_detail(
    project_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> ProjectDetailResponse:
    """Get a project with its board, columns and tasks."""

    project = require_project_reader(db_session, token.subject_id, project_id)
    project_out = ProjectSummary.model_validate(project)

    board_statement = select(Board).where(Board.project_id == project_id)
    board = db_session.exec(board_statement).first()

    # No board yet: return the project alone
    if not board:
        return ProjectDetailResponse(project=project_out, board=None, columns=[], tasks=[])

    columns_statement = (
        select(BoardColumn)
        .where(BoardColumn.board_id == board.id)
        .order_by(BoardColumn.position)
    )
    columns = db_session.exec(columns_statement).all()

    tasks_statement = (
        select(Task)
        .where(Task.board_id == board.id)
        .order_by(Task.position, Task.created_at)
    )
    tasks = db_session.exec(tasks_statement).all()

    return ProjectDetailResponse(
        project=project_out,
        board=BoardSummary.model_validate(board),
        columns=[ColumnSummary.model_validate(column) for column in columns],
        tasks=[TaskSummary.model_validate(task) for task in tasks]
    )


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    project_data: UpdateProjectRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Rename a project or change its description (owner only)."""

    project = require_project_owner(db_session, token.subject_id, project_id)

    project.name = project_data.name
    project.description = project_data.description
    project.updated_at = utc_now()

    db_session.add(project)
    db_session.commit()

    logger.info("Project updated", extra={"project_id": project_id})
    return OkResponse(ok=True)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Delete a project with all its boards, columns and tasks (owner only)."""

    project = require_project_owner(db_session, token.subject_id, project_id)
    delete_project_cascade(db_session, project)

    return OkResponse(ok=True)


@router.get("/{project_id}/members")
async def list_members(
    project_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> List[MemberResponse]:
    """List the members of a project."""

    require_project_reader(db_session, token.subject_id, project_id)

    statement = select(ProjectMember).where(ProjectMember.project_id == project_id)
    members = db_session.exec(statement).all()

    return [MemberResponse.model_validate(member) for member in members]


@router.post("/{project_id}/members", status_code=status.HTTP_201_CREATED)
async def add_member(
    project_id: str,
    member_data: AddMemberRequest,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> MemberResponse:
    """Share a project with another user (owner only). Members get read access."""

    require_project_owner(db_session, token.subject_id, project_id)

    user_statement = select(User).where(User.id == member_data.user_id)
    if not db_session.exec(user_statement).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    member_statement = select(ProjectMember).where(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == member_data.user_id
    )
    if db_session.exec(member_statement).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this project"
        )

    member = ProjectMember(project_id=project_id, user_id=member_data.user_id, role=member_data.role)
    db_session.add(member)
    db_session.commit()
    db_session.refresh(member)

    logger.info("Project member added", extra={"project_id": project_id, "user_id": member_data.user_id})
    return MemberResponse.model_validate(member)


@router.delete("/{project_id}/members/{user_id}")
async def remove_member(
    project_id: str,
    user_id: str,
    token: TokenClaims = Depends(get_auth_token),
    db_session: Session = Depends(get_session)
) -> OkResponse:
    """Revoke a user's access to a project (owner only)."""

    project = require_project_owner(db_session, token.subject_id, project_id)

    if user_id == project.owner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The project owner cannot be removed"
        )

    member_statement = select(ProjectMember).where(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id
    )
    member = db_session.exec(member_statement).first()

    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )

    db_session.delete(member)
    db_session.commit()

    logger.info("Project member removed", extra={"project_id": project_id, "user_id": user_id})
    return OkResponse(ok=True)
