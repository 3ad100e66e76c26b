#taskflow/models/project.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import relationship
from taskflow.models.base import Base, utcnow

class Project(Base):
    """
    Project — groups tasks under an owner. Deletable only while it has no tasks.
    """
    __tablename__ = "projects"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(160), nullable=False, index=True, doc="Project title")
    description: str = Column(Text, nullable=False, default="", doc="Description")
    owner_id: int = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True, doc="Owner")
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    owner = relationship("User", foreign_keys=[owner_id])

    def __repr__(self):
        return f"<Project(id={self.id}, title='{self.title}', owner_id={self.owner_id})>"
