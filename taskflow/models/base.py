#taskflow/models/base.py
"""
Declarative base for every ORM model of the project.

    from taskflow.models.base import Base
"""

from datetime import datetime, timezone
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def utcnow() -> datetime:
    return datetime.now(timezone.utc)
