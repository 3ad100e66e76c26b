#taskflow/models/task.py
from datetime import datetime, date
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Text, ForeignKey, Index, func
)
from sqlalchemy.orm import relationship
from taskflow.models.base import Base, utcnow

class Task(Base):
    """
    Task — unit of work with an assignee, optional project and a comment thread.
    completed_at is set exactly while task_status == "completed".
    """
    __tablename__ = "tasks"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(160), nullable=False, doc="Task title")
    description: str = Column(Text, nullable=False, default="", doc="Description")
    assignee_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Assignee")
    project_id: int = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True, doc="Optional project")
    task_status: str = Column(String(24), nullable=False, default="todo", doc="todo, in-progress, completed")
    priority: str = Column(String(16), nullable=False, default="medium", doc="low, medium, high")
    due_date: date = Column(Date, nullable=True, doc="Due date")
    created_by_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Creator")
    completed_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Set while completed")
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    assignee = relationship("User", foreign_keys=[assignee_id])
    created_by = relationship("User", foreign_keys=[created_by_id])
    project = relationship("Project", backref="tasks")
    comments = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.id",
    )

    __table_args__ = (
        Index("ix_tasks_status", "task_status"),
        Index("ix_tasks_priority", "priority"),
        Index("ix_tasks_due_date", "due_date"),
    )

    def __repr__(self):
        return (
            f"<Task(id={self.id}, title='{self.title}', status={self.task_status}, "
            f"assignee_id={self.assignee_id}, project_id={self.project_id})>"
        )

class TaskComment(Base):
    """
    TaskComment — comment in a task's thread; edited or removed only by its author or an admin.
    """
    __tablename__ = "task_comments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    task_id: int = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    text: str = Column(Text, nullable=False)
    timestamp: datetime = Column(DateTime(timezone=True), default=utcnow, nullable=False, doc="Created or last edited")

    task = relationship("Task", back_populates="comments")
    author = relationship("User")

    def __repr__(self):
        return f"<TaskComment(id={self.id}, task_id={self.task_id}, author_id={self.author_id})>"
