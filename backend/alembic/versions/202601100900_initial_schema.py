"""Initial morning routine schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202601100900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "task_templates",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("default_minutes", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "day_plans",
        sa.Column("plan_date", sa.Date(), primary_key=True, nullable=False),
        sa.Column("leave_time", sa.String(length=5), nullable=False),
        sa.Column("sleep_minutes", sa.Integer(), nullable=False),
        sa.Column("buffer_minutes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "plan_tasks",
        sa.Column("plan_date", sa.Date(), nullable=False),
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("template_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("minutes", sa.Integer(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("plan_date", "id"),
        sa.ForeignKeyConstraint(["plan_date"], ["day_plans.plan_date"], ondelete="CASCADE"),
    )
    op.create_index("ix_plan_tasks_plan_date", "plan_tasks", ["plan_date"], unique=False)

    op.create_table(
        "runtime_state",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("active_date", sa.Date(), nullable=False),
        sa.Column("is_running", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("current_task_index", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("remaining_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )


def downgrade() -> None:
    op.drop_table("runtime_state")
    op.drop_index("ix_plan_tasks_plan_date", table_name="plan_tasks")
    op.drop_table("plan_tasks")
    op.drop_table("day_plans")
    op.drop_table("task_templates")
