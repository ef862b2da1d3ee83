from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from app.core.config import get_settings

get_settings.cache_clear()

from app.db import session as session_module  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models import Project, Skill, SkillCategory, User  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.schemas.project import ProjectCreate  # noqa: E402
from app.services.projects import ProjectService  # noqa: E402

DATABASE_URL = os.environ["DATABASE_URL"]
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal

app = create_app()


@pytest.fixture(autouse=True)
def clean_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    counter = {"value": 0}

    def _make_user(first_name: str = "Test", last_name: str | None = None, **fields) -> User:
        counter["value"] += 1
        index = counter["value"]
        user = User(
            email=fields.pop("email", f"user{index}@example.com"),
            password_hash=hash_password(fields.pop("password", "changeme123")),
            first_name=first_name,
            last_name=last_name or f"User{index}",
            custom_skills=[],
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def make_project(db_session: Session) -> Callable[..., Project]:
    def _make_project(owner: User, title: str = "Campus Rideshare", **fields) -> Project:
        payload = ProjectCreate(
            title=title,
            description=fields.pop("description", "Matching students who share rides to campus."),
            **fields,
        )
        return ProjectService(db_session, owner).create_project(payload)

    return _make_project


@pytest.fixture()
def seeded_skills(db_session: Session) -> list[Skill]:
    skills = [
        Skill(name="Python", category=SkillCategory.LANGUAGE),
        Skill(name="React", category=SkillCategory.FRAMEWORK),
        Skill(name="Docker", category=SkillCategory.TOOL),
        Skill(name="GraphQL", category=SkillCategory.CONCEPT),
    ]
    db_session.add_all(skills)
    db_session.commit()
    return skills
