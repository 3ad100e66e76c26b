#taskflow/models/notification.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Boolean, Index, func
)
from sqlalchemy.orm import relationship
from taskflow.models.base import Base, utcnow

class Notification(Base):
    """
    Notification — message for one recipient about something another user did.
    read_at is set exactly while is_read is True.
    """
    __tablename__ = "notifications"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    recipient_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type: str = Column(String(32), nullable=False, doc="NotificationType value")
    title: str = Column(String(160), nullable=False)
    message: str = Column(String(500), nullable=False)
    related_task_id: int = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)
    related_project_id: int = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    is_read: bool = Column(Boolean, default=False, nullable=False)
    read_at: datetime = Column(DateTime(timezone=True), nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    recipient = relationship("User", foreign_keys=[recipient_id])
    sender = relationship("User", foreign_keys=[sender_id])
    related_task = relationship("Task", foreign_keys=[related_task_id])
    related_project = relationship("Project", foreign_keys=[related_project_id])

    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "is_read", "created_at"),
    )

    def __repr__(self):
        return (
            f"<Notification(id={self.id}, type={self.type}, recipient_id={self.recipient_id}, "
            f"is_read={self.is_read})>"
        )
