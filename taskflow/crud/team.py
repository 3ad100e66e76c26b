#taskflow/crud/team.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, or_
from taskflow.models.team import TeamMember
from taskflow.core.constants import TeamMemberStatus, parse_enum
from taskflow.core.exceptions import TeamMemberNotFound, TeamMemberValidationError
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger("TaskFlow.Team")

REQUIRED_FIELDS = ("name", "email", "role", "department", "joining_date")

def _normalize_status(value) -> str:
    status = parse_enum(TeamMemberStatus, value or TeamMemberStatus.ACTIVE)
    if status is None:
        raise TeamMemberValidationError("Status must be active or inactive.")
    return status.value

def create_team_member(db: Session, data: dict, created_by_id: Optional[int] = None) -> TeamMember:
    """
    Add a member to the team directory; email must be unique.
    """
    missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
    if missing:
        raise TeamMemberValidationError(f"Missing required fields: {', '.join(missing)}")
    email = data["email"].strip().lower()
    if db.query(TeamMember).filter_by(email=email).first():
        raise TeamMemberValidationError("Team member with this email already exists.")
    member = TeamMember(
        name=data["name"].strip(),
        email=email,
        role=data["role"].strip(),
        department=data["department"].strip(),
        joining_date=data["joining_date"],
        status=_normalize_status(data.get("status")),
        avatar=data.get("avatar"),
        created_by_id=created_by_id,
    )
    db.add(member)
    try:
        db.commit()
        db.refresh(member)
        logger.info(f"Created team member '{member.name}' (ID: {member.id})")
        return member
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error while creating team member: {e}")
        raise TeamMemberValidationError("Team member with this email already exists.")

def get_team_member(db: Session, member_id: int) -> TeamMember:
    member = db.query(TeamMember).filter(TeamMember.id == member_id).first()
    if not member:
        raise TeamMemberNotFound(f"Team member with id={member_id} not found.")
    return member

def get_team_members(db: Session, filters: Optional[Dict[str, Any]] = None) -> List[TeamMember]:
    """
    Directory listing ordered by name; filters: department, status, search (name/email).
    """
    query = db.query(TeamMember)
    filters = filters or {}
    if filters.get("department"):
        query = query.filter(TeamMember.department == filters["department"])
    if filters.get("status"):
        query = query.filter(TeamMember.status == filters["status"])
    if filters.get("search"):
        val = f"%{filters['search']}%"
        query = query.filter(or_(TeamMember.name.ilike(val), TeamMember.email.ilike(val)))
    return query.order_by(TeamMember.name).all()

def update_team_member(db: Session, member_id: int, data: dict) -> TeamMember:
    member = get_team_member(db, member_id)
    if data.get("email"):
        new_email = data["email"].strip().lower()
        existing = db.query(TeamMember).filter(TeamMember.email == new_email, TeamMember.id != member_id).first()
        if existing:
            raise TeamMemberValidationError("Team member with this email already exists.")
        member.email = new_email
    for field in ["name", "role", "department"]:
        if data.get(field) is not None:
            value = data[field].strip()
            if not value:
                raise TeamMemberValidationError(f"Team member {field} cannot be empty.")
            setattr(member, field, value)
    if data.get("joining_date") is not None:
        member.joining_date = data["joining_date"]
    if data.get("status") is not None:
        member.status = _normalize_status(data["status"])
    if "avatar" in data:
        member.avatar = data["avatar"]
    try:
        db.commit()
        db.refresh(member)
        logger.info(f"Updated team member '{member.name}' (ID: {member.id})")
        return member
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating team member {member_id}: {e}")
        raise TeamMemberValidationError("Database error while updating team member.")

def delete_team_member(db: Session, member_id: int) -> TeamMember:
    member = get_team_member(db, member_id)
    try:
        db.delete(member)
        db.commit()
        logger.info(f"Removed team member {member_id}")
        return member
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to remove team member {member_id}: {e}")
        raise TeamMemberValidationError("Database error while removing team member.")

def _count_by(db: Session, column, status: Optional[str] = None) -> List[Dict[str, Any]]:
    count = func.count(TeamMember.id)
    query = db.query(column, count)
    if status:
        query = query.filter(TeamMember.status == status)
    rows = query.group_by(column).order_by(count.desc(), column).all()
    return [{"name": name, "count": n} for name, n in rows]

def get_team_stats(db: Session) -> Dict[str, Any]:
    """
    Headcount by status, department distribution, and role distribution of active members.
    """
    active = TeamMemberStatus.ACTIVE.value
    return {
        "total_members": db.query(TeamMember).count(),
        "active_members": db.query(TeamMember).filter(TeamMember.status == active).count(),
        "inactive_members": db.query(TeamMember).filter(TeamMember.status == TeamMemberStatus.INACTIVE.value).count(),
        "department_stats": _count_by(db, TeamMember.department),
        "role_stats": _count_by(db, TeamMember.role, status=active),
    }
