#taskflow/models/team.py
from datetime import datetime, date
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from taskflow.models.base import Base, utcnow

class TeamMember(Base):
    """
    TeamMember — entry of the organization's team directory, managed by admins and managers.
    """
    __tablename__ = "team_members"

    id: int = Column(Integer, primary_key=True)
    name: str = Column(String(128), nullable=False, doc="Full name")
    email: str = Column(String(255), nullable=False, unique=True, index=True)
    role: str = Column(String(64), nullable=False, doc="Job role, free text")
    department: str = Column(String(64), nullable=False, index=True)
    joining_date: date = Column(Date, nullable=False)
    status: str = Column(String(16), nullable=False, default="active", doc="active or inactive")
    avatar: str = Column(String(255), nullable=True)
    created_by_id: int = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    created_by = relationship("User")

    def __repr__(self):
        return f"<TeamMember(id={self.id}, name='{self.name}', department='{self.department}')>"
