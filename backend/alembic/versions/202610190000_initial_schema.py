"""Initial CollabHub schema

Revision ID: 202610190000
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "202610190000"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

BIGINT_ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

skill_category_enum = sa.Enum("LANGUAGE", "FRAMEWORK", "TOOL", "CONCEPT", "OTHER", name="skill_category_enum")
project_status_enum = sa.Enum("RECRUITING", "IN_PROGRESS", "COMPLETED", "ARCHIVED", name="project_status_enum")
project_visibility_enum = sa.Enum("PUBLIC", "UNLISTED", name="project_visibility_enum")
join_request_status_enum = sa.Enum("PENDING", "APPROVED", "REJECTED", "CANCELLED", name="join_request_status_enum")
notification_type_enum = sa.Enum(
    "JOIN_REQUEST_RECEIVED",
    "JOIN_REQUEST_APPROVED",
    "JOIN_REQUEST_REJECTED",
    "JOIN_REQUEST_CANCELLED",
    "MEMBER_LEFT",
    "MEMBER_REMOVED",
    "PROJECT_UPDATED",
    name="notification_type_enum",
)

SEED_SKILLS: dict[str, tuple[str, ...]] = {
    "LANGUAGE": ("JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Go", "Rust", "Swift", "Kotlin"),
    "FRAMEWORK": (
        "React",
        "Next.js",
        "Angular",
        "Vue.js",
        "Spring Boot",
        "Django",
        "Express.js",
        "Flask",
        "React Native",
        "Flutter",
    ),
    "TOOL": ("Git", "Docker", "AWS", "PostgreSQL", "MongoDB", "MySQL", "Redis", "Figma"),
    "CONCEPT": ("Machine Learning", "REST APIs", "GraphQL", "CI/CD", "Agile/Scrum"),
}


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    skills = op.create_table(
        "skills",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("category", skill_category_enum, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_skills")),
        sa.UniqueConstraint("name", name=op.f("uq_skills_name")),
    )

    op.create_table(
        "users",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_pic_url", sa.String(length=500), nullable=True),
        sa.Column("linkedin_url", sa.String(length=500), nullable=True),
        sa.Column("github_url", sa.String(length=500), nullable=True),
        sa.Column("school_name", sa.String(length=200), nullable=True),
        sa.Column("custom_skills", sa.JSON(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_school_name"), "users", ["school_name"])

    op.create_table(
        "projects",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("owner_id", BIGINT_ID, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("max_team_size", sa.Integer(), nullable=False),
        sa.Column("github_url", sa.String(length=500), nullable=True),
        sa.Column("status", project_status_enum, nullable=False),
        sa.Column("visibility", project_visibility_enum, nullable=False),
        sa.Column("custom_skills", sa.JSON(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "max_team_size >= 2 AND max_team_size <= 20",
            name=op.f("ck_projects_max_team_size_range"),
        ),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], name=op.f("fk_projects_owner_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_projects")),
    )
    op.create_index(op.f("ix_projects_owner_id"), "projects", ["owner_id"])
    op.create_index(op.f("ix_projects_status"), "projects", ["status"])

    for table_name, owner_column, owner_table in (
        ("project_skills", "project_id", "projects"),
        ("user_skills", "user_id", "users"),
    ):
        op.create_table(
            table_name,
            sa.Column(owner_column, BIGINT_ID, nullable=False),
            sa.Column("skill_id", BIGINT_ID, nullable=False),
            sa.ForeignKeyConstraint(
                [owner_column],
                [f"{owner_table}.id"],
                name=op.f(f"fk_{table_name}_{owner_column}_{owner_table}"),
                ondelete="CASCADE",
            ),
            sa.ForeignKeyConstraint(
                ["skill_id"], ["skills.id"], name=op.f(f"fk_{table_name}_skill_id_skills"), ondelete="CASCADE"
            ),
            sa.PrimaryKeyConstraint(owner_column, "skill_id", name=op.f(f"pk_{table_name}")),
        )

    op.create_table(
        "project_members",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("project_id", BIGINT_ID, nullable=False),
        sa.Column("user_id", BIGINT_ID, nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name=op.f("fk_project_members_project_id_projects"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_project_members_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_project_members")),
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
    )
    op.create_index(op.f("ix_project_members_project_id"), "project_members", ["project_id"])
    op.create_index(op.f("ix_project_members_user_id"), "project_members", ["user_id"])

    op.create_table(
        "project_tasks",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("project_id", BIGINT_ID, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_filled", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name=op.f("fk_project_tasks_project_id_projects"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_project_tasks")),
    )
    op.create_index(op.f("ix_project_tasks_project_id"), "project_tasks", ["project_id"])

    op.create_table(
        "join_requests",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("project_id", BIGINT_ID, nullable=False),
        sa.Column("user_id", BIGINT_ID, nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name=op.f("fk_join_requests_project_id_projects"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_join_requests_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_join_requests")),
    )
    op.create_index(op.f("ix_join_requests_project_id"), "join_requests", ["project_id"])
    op.create_index(op.f("ix_join_requests_user_id"), "join_requests", ["user_id"])

    op.create_table(
        "join_request_events",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("join_request_id", BIGINT_ID, nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", join_request_status_enum, nullable=False),
        sa.Column("actor_id", BIGINT_ID, nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["join_request_id"],
            ["join_requests.id"],
            name=op.f("fk_join_request_events_join_request_id_join_requests"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["actor_id"], ["users.id"], name=op.f("fk_join_request_events_actor_id_users"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_join_request_events")),
        sa.UniqueConstraint("join_request_id", "sequence", name="uq_join_request_events_request_sequence"),
    )
    op.create_index(op.f("ix_join_request_events_join_request_id"), "join_request_events", ["join_request_id"])

    op.create_table(
        "project_interests",
        sa.Column("user_id", BIGINT_ID, nullable=False),
        sa.Column("project_id", BIGINT_ID, nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_project_interests_user_id_users"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name=op.f("fk_project_interests_project_id_projects"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("user_id", "project_id", name=op.f("pk_project_interests")),
    )
    op.create_index(op.f("ix_project_interests_project_id"), "project_interests", ["project_id"])

    op.create_table(
        "notifications",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("user_id", BIGINT_ID, nullable=False),
        sa.Column("type", notification_type_enum, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("reference_id", sa.BigInteger(), nullable=True),
        sa.Column("reference_type", sa.String(length=50), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_notifications_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notifications")),
    )
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"])
    op.create_index("ix_notifications_user_id_is_read", "notifications", ["user_id", "is_read"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", BIGINT_ID, autoincrement=True, nullable=False),
        sa.Column("user_id", BIGINT_ID, nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_refresh_tokens_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_refresh_tokens")),
        sa.UniqueConstraint("token_hash", name=op.f("uq_refresh_tokens_token_hash")),
    )
    op.create_index(op.f("ix_refresh_tokens_user_id"), "refresh_tokens", ["user_id"])

    op.bulk_insert(
        skills,
        [
            {"name": name, "category": category}
            for category, names in SEED_SKILLS.items()
            for name in names
        ],
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_refresh_tokens_user_id"), table_name="refresh_tokens")
    op.drop_table("refresh_tokens")
    op.drop_index("ix_notifications_user_id_is_read", table_name="notifications")
    op.drop_index(op.f("ix_notifications_user_id"), table_name="notifications")
    op.drop_table("notifications")
    op.drop_index(op.f("ix_project_interests_project_id"), table_name="project_interests")
    op.drop_table("project_interests")
    op.drop_index(op.f("ix_join_request_events_join_request_id"), table_name="join_request_events")
    op.drop_table("join_request_events")
    op.drop_index(op.f("ix_join_requests_user_id"), table_name="join_requests")
    op.drop_index(op.f("ix_join_requests_project_id"), table_name="join_requests")
    op.drop_table("join_requests")
    op.drop_index(op.f("ix_project_tasks_project_id"), table_name="project_tasks")
    op.drop_table("project_tasks")
    op.drop_index(op.f("ix_project_members_user_id"), table_name="project_members")
    op.drop_index(op.f("ix_project_members_project_id"), table_name="project_members")
    op.drop_table("project_members")
    op.drop_table("user_skills")
    op.drop_table("project_skills")
    op.drop_index(op.f("ix_projects_status"), table_name="projects")
    op.drop_index(op.f("ix_projects_owner_id"), table_name="projects")
    op.drop_table("projects")
    op.drop_index(op.f("ix_users_school_name"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
    op.drop_table("skills")

    bind = op.get_bind()
    for enum_type in (
        notification_type_enum,
        join_request_status_enum,
        project_visibility_enum,
        project_status_enum,
        skill_category_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
