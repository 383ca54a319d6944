"""Create users, strategic issues, strategies and projects

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("admin", "department", name="user_role"),
            nullable=False,
        ),
        sa.Column("title_prefix", sa.String(50), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("position", sa.String(100), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_department", "users", ["department"])
    op.create_index("ix_users_is_active", "users", ["is_active"])

    # Create strategic_issues table
    op.create_table(
        "strategic_issues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("start_year", sa.Integer, nullable=False),
        sa.Column("end_year", sa.Integer, nullable=False),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "inactive", "completed", name="strategic_issue_status"),
            nullable=False,
        ),
        sa.Column("created_by", sa.String(36), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_strategic_issues_status", "strategic_issues", ["status"])
    op.create_index("ix_strategic_issues_created_by", "strategic_issues", ["created_by"])
    op.create_index("ix_strategic_issues_years", "strategic_issues", ["start_year", "end_year"])
    op.create_index("ix_strategic_issues_order", "strategic_issues", ["order"])

    # Create strategies table
    op.create_table(
        "strategies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("strategic_issue_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order", sa.Integer, nullable=False),
        sa.Column("created_by", sa.String(36), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_strategies_strategic_issue_id", "strategies", ["strategic_issue_id"])
    op.create_index("ix_strategies_created_by", "strategies", ["created_by"])
    op.create_index("ix_strategies_order", "strategies", ["order"])

    # Create projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("key_activities", sa.Text, nullable=True),
        sa.Column("expected_results", sa.Text, nullable=True),
        sa.Column("budget", sa.Float, nullable=True),
        sa.Column(
            "project_type",
            sa.Enum("new", "continuous", name="project_type"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date, nullable=True),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("responsible_title_prefix", sa.String(50), nullable=True),
        sa.Column("responsible_first_name", sa.String(100), nullable=True),
        sa.Column("responsible_last_name", sa.String(100), nullable=True),
        sa.Column("responsible_position", sa.String(100), nullable=True),
        sa.Column("responsible_phone", sa.String(20), nullable=True),
        sa.Column("responsible_email", sa.String(100), nullable=True),
        sa.Column("activity_location", sa.Text, nullable=True),
        sa.Column("districts", sa.JSON, nullable=False),
        sa.Column("province", sa.String(50), nullable=True),
        sa.Column("strategic_issues", sa.JSON, nullable=False),
        sa.Column("strategies", sa.JSON, nullable=False),
        sa.Column("document_links", sa.JSON, nullable=False),
        sa.Column(
            "status",
            sa.Enum("planning", "active", "completed", "cancelled", name="project_status"),
            nullable=False,
        ),
        sa.Column("created_by", sa.String(36), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_projects_project_type", "projects", ["project_type"])
    op.create_index("ix_projects_start_date", "projects", ["start_date"])
    op.create_index("ix_projects_end_date", "projects", ["end_date"])
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_created_by", "projects", ["created_by"])
    op.create_index("ix_projects_status_type", "projects", ["status", "project_type"])


def downgrade() -> None:
    op.drop_table("projects")
    op.drop_table("strategies")
    op.drop_table("strategic_issues")
    op.drop_table("users")

    # Drop enums (PostgreSQL only)
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name in ("project_status", "project_type", "strategic_issue_status", "user_role"):
            sa.Enum(name=name).drop(bind, checkfirst=True)
