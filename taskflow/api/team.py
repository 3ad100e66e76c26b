#taskflow/api/team.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional
from taskflow.schemas.team import TeamMemberCreate, TeamMemberUpdate, TeamMemberRead, TeamStats
from taskflow.schemas.response import SimpleMessage
from taskflow.crud.team import (
    create_team_member,
    get_team_member,
    get_team_members,
    get_team_stats,
    update_team_member,
    delete_team_member,
)
from taskflow.core.constants import ActivityAction, UserRole
from taskflow.core.exceptions import TeamMemberNotFound, TeamMemberValidationError
from taskflow.services.activity_logger import log_team_member_activity
from taskflow.dependencies import get_db, get_current_active_user, require_roles
from taskflow.models.user import User as UserModel
import logging

router = APIRouter(prefix="/team-members", tags=["Team"])
logger = logging.getLogger("TaskFlow.TeamAPI")

@router.get("/", response_model=List[TeamMemberRead])
def list_team_members(
    department: Optional[str] = Query(None),
    member_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    return get_team_members(db, {"department": department, "status": member_status, "search": search})

@router.get("/stats/overview", response_model=TeamStats)
def team_stats_overview(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    return get_team_stats(db)

@router.get("/{member_id}", response_model=TeamMemberRead)
def get_one_team_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    try:
        return get_team_member(db, member_id)
    except TeamMemberNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.post("/", response_model=TeamMemberRead, status_code=status.HTTP_201_CREATED)
def add_team_member(
    data: TeamMemberCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER)),
):
    try:
        member = create_team_member(db, data.model_dump(), created_by_id=current_user.id)
    except TeamMemberValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating team member: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error creating team member")

    log_team_member_activity(db, current_user.id, ActivityAction.TEAM_MEMBER_ADDED, member, request=request, metadata={
        "department": member.department,
        "role": member.role,
    })
    return member

@router.put("/{member_id}", response_model=TeamMemberRead)
def edit_team_member(
    member_id: int,
    data: TeamMemberUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER)),
):
    payload = data.model_dump(exclude_unset=True)
    try:
        member = update_team_member(db, member_id, payload)
    except TeamMemberNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TeamMemberValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    log_team_member_activity(db, current_user.id, ActivityAction.TEAM_MEMBER_UPDATED, member, request=request, metadata={
        "updated_fields": sorted(payload.keys()),
    })
    return member

@router.delete("/{member_id}", response_model=SimpleMessage)
def remove_team_member(
    member_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(UserRole.ADMIN)),
):
    try:
        member = delete_team_member(db, member_id)
    except TeamMemberNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TeamMemberValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    log_team_member_activity(db, current_user.id, ActivityAction.TEAM_MEMBER_REMOVED, member, request=request)
    return SimpleMessage(message="Team member deleted successfully")
