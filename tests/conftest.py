"""Test configuration and fixtures."""

from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from strategic_planning.api import app
from strategic_planning.auth.credentials import CredentialService
from strategic_planning.auth.deps import actor_from_user
from strategic_planning.auth.guard import Actor
from strategic_planning.auth.passwords import hash_password
from strategic_planning.db.base import drop_database, get_db, init_database
from strategic_planning.db.models import (
    ProjectModel,
    StrategicIssueModel,
    StrategyModel,
    UserModel,
)

# Create an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

DEFAULT_PASSWORD = "secret123"


def override_get_db():
    """Override the get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency before creating the test client
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """Fresh tables for every test."""
    drop_database(test_engine)
    init_database(test_engine)
    yield
    drop_database(test_engine)


@pytest.fixture
def session_factory() -> sessionmaker:
    return TestSessionLocal


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_user(db: Session) -> Callable[..., UserModel]:
    """Factory that stores a user with ``DEFAULT_PASSWORD``."""
    counter = {"n": 0}

    def _make(role: str = "department", **overrides) -> UserModel:
        counter["n"] += 1
        values = {
            "email": f"user{counter['n']}@example.com",
            "role": role,
            "first_name": f"First{counter['n']}",
            "last_name": f"Last{counter['n']}",
            "department": "Planning",
            "is_active": True,
        }
        values.update(overrides)
        password = values.pop("password", DEFAULT_PASSWORD)
        user = UserModel(**values, password_hash=hash_password(password))
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user) -> UserModel:
    return make_user("admin", email="admin@example.com", department="IT")


@pytest.fixture
def dept_user(make_user) -> UserModel:
    return make_user("department", email="dept@example.com")


@pytest.fixture
def other_user(make_user) -> UserModel:
    return make_user("department", email="other@example.com", department="Finance")


def _auth_headers(user: UserModel) -> Dict[str, str]:
    token = CredentialService.from_settings().issue_for(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[UserModel], Dict[str, str]]:
    """Bearer header carrying a freshly signed credential for a user."""
    return _auth_headers


@pytest.fixture
def actor_for() -> Callable[[UserModel], Actor]:
    return actor_from_user


@pytest.fixture
def make_issue(db: Session) -> Callable[..., StrategicIssueModel]:
    def _make(created_by: str, **overrides) -> StrategicIssueModel:
        values = {
            "title": "Human resource development",
            "description": "People first",
            "start_year": 2567,
            "end_year": 2571,
            "order": 1,
            "status": "active",
        }
        values.update(overrides)
        issue = StrategicIssueModel(**values, created_by=created_by)
        db.add(issue)
        db.commit()
        db.refresh(issue)
        return issue

    return _make


@pytest.fixture
def make_strategy(db: Session) -> Callable[..., StrategyModel]:
    def _make(created_by: str, strategic_issue_id: str, **overrides) -> StrategyModel:
        values = {"name": "Digital skills training", "order": 1}
        values.update(overrides)
        strategy = StrategyModel(
            **values, strategic_issue_id=strategic_issue_id, created_by=created_by
        )
        db.add(strategy)
        db.commit()
        db.refresh(strategy)
        return strategy

    return _make


@pytest.fixture
def make_project(db: Session) -> Callable[..., ProjectModel]:
    def _make(created_by: str, **overrides) -> ProjectModel:
        values = {
            "name": "Community training",
            "project_type": "new",
            "status": "planning",
            "budget": 1000.0,
            "districts": [],
            "strategic_issues": [],
            "strategies": [],
            "document_links": [],
            "province": "Yala",
        }
        values.update(overrides)
        project = ProjectModel(**values, created_by=created_by)
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make
