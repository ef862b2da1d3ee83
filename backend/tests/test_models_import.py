from __future__ import annotations

from sqlalchemy.orm import configure_mappers

import app.models as models_module
from app.db.base import Base


def test_models_import_smoke() -> None:
    """Importing the models package registers every table and configures mappers."""
    configure_mappers()

    expected = {
        "users",
        "skills",
        "user_skills",
        "projects",
        "project_skills",
        "project_members",
        "project_tasks",
        "project_interests",
        "join_requests",
        "join_request_events",
        "notifications",
        "refresh_tokens",
    }
    assert expected <= set(Base.metadata.tables)
    assert models_module.JoinRequest.__tablename__ == "join_requests"


def test_join_request_events_enforce_single_decision() -> None:
    table = Base.metadata.tables["join_request_events"]
    unique_names = {constraint.name for constraint in table.constraints if constraint.name}

    assert "uq_join_request_events_request_sequence" in unique_names


def test_project_members_unique_per_user() -> None:
    table = Base.metadata.tables["project_members"]
    unique_names = {constraint.name for constraint in table.constraints if constraint.name}

    assert "uq_project_members_project_user" in unique_names
