#taskflow/models/activity_log.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship
from taskflow.models.base import Base, utcnow

class ActivityLog(Base):
    """
    ActivityLog — append-only audit entry: who did what to which entity, and when.
    Rows are removed only by the age-based cleanup.
    """
    __tablename__ = "activity_logs"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action: str = Column(String(32), nullable=False, doc="ActivityAction value")
    description: str = Column(String(500), nullable=False)
    entity_type: str = Column(String(16), nullable=True)
    entity_id: int = Column(Integer, nullable=True)
    entity_name: str = Column(String(255), nullable=True)
    related_entity_type: str = Column(String(16), nullable=True)
    related_entity_id: int = Column(Integer, nullable=True)
    related_entity_name: str = Column(String(255), nullable=True)
    # "metadata" is reserved on declarative classes
    details: dict = Column("metadata", JSON, nullable=False, default=lambda: {})
    ip_address: str = Column(String(64), nullable=True)
    user_agent: str = Column(String(255), nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User")

    __table_args__ = (
        Index("ix_activity_logs_user_created", "user_id", "created_at"),
        Index("ix_activity_logs_action_created", "action", "created_at"),
        Index("ix_activity_logs_entity_created", "entity_type", "entity_id", "created_at"),
        Index("ix_activity_logs_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<ActivityLog(id={self.id}, action={self.action}, user_id={self.user_id})>"
