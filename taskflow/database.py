# taskflow/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from taskflow.core.settings import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = scoped_session(
    sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )
)

def init_db() -> None:
    """
    Create all tables (used by initial_data.py; migrations are not part of this service).
    """
    import taskflow.models  # noqa: F401  registers every model on Base.metadata
    from taskflow.models.base import Base
    Base.metadata.create_all(bind=engine)
