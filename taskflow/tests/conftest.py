import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os
from datetime import timedelta
from typing import Generator, Any, Callable

# Environment must be in place before taskflow.core.settings is imported.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "testsecretkey"
os.environ["FIRST_SUPERUSER_EMAIL"] = "testadmin@example.com"
os.environ["FIRST_SUPERUSER_PASSWORD"] = "testpassword"
os.environ["BCRYPT_ROUNDS"] = "4"

# Registers every model on Base.metadata
import taskflow.models  # noqa: F401
from taskflow.models.base import Base
from taskflow.core.settings import settings as app_settings
from taskflow.main import app

engine = create_engine(
    app_settings.DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

from taskflow.dependencies import get_db
from taskflow.crud.user import create_user, get_user_by_email
from taskflow.crud.project import create_project
from taskflow.crud.task import create_task
from taskflow.core import security

TEST_PASSWORD = "testpassword"


@pytest.fixture(scope="session", autouse=True)
def create_test_tables_session_scope():
    """
    Create all tables once per test session, drop them afterwards.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Session bound to an outer transaction that is rolled back after each test.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    TestClient sharing the test session through the get_db override.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    del app.dependency_overrides[get_db]


def _make_user(db: Session, name: str, email: str, role: str) -> Any:
    user = get_user_by_email(db, email)
    if not user:
        user = create_user(db, {"name": name, "email": email, "password": TEST_PASSWORD, "role": role, "company": "Acme"})
    return user


@pytest.fixture(scope="function")
def admin_user(db: Session) -> Any:
    return _make_user(db, "Test Admin", app_settings.FIRST_SUPERUSER_EMAIL, "admin")


@pytest.fixture(scope="function")
def manager_user(db: Session) -> Any:
    return _make_user(db, "Test Manager", "manager@example.com", "manager")


@pytest.fixture(scope="function")
def member_user(db: Session) -> Any:
    return _make_user(db, "Test Member", "member@example.com", "member")


@pytest.fixture(scope="function")
def other_member(db: Session) -> Any:
    return _make_user(db, "Other Member", "other@example.com", "member")


@pytest.fixture(scope="function")
def token_headers() -> Callable[[Any], dict]:
    """
    Factory: bearer headers for any user.
    """
    def _headers(user: Any) -> dict[str, str]:
        token, _ = security.create_access_token(
            data={"sub": user.email},
            expires_delta=timedelta(minutes=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture(scope="function")
def admin_headers(admin_user: Any, token_headers) -> dict[str, str]:
    return token_headers(admin_user)


@pytest.fixture(scope="function")
def manager_headers(manager_user: Any, token_headers) -> dict[str, str]:
    return token_headers(manager_user)


@pytest.fixture(scope="function")
def member_headers(member_user: Any, token_headers) -> dict[str, str]:
    return token_headers(member_user)


@pytest.fixture(scope="function")
def project(db: Session, manager_user: Any) -> Any:
    return create_project(db, {"title": "Website relaunch", "description": "Rebuild the site", "owner_id": manager_user.id})


@pytest.fixture(scope="function")
def task(db: Session, manager_user: Any, member_user: Any, project: Any) -> Any:
    """
    Task created by the manager, assigned to the member, inside `project`.
    """
    return create_task(db, {
        "title": "Design landing page",
        "description": "Hero, pricing and footer sections",
        "assignee_id": member_user.id,
        "project_id": project.id,
        "priority": "high",
    }, created_by_id=manager_user.id)
