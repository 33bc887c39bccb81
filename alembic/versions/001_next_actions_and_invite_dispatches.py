"""Create next_actions and calendar_invite_dispatches tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

next_actions holds the GTD next actions that calendar invites are sent for.
calendar_invite_dispatches logs every invite send under an idempotency key
so a send that was never recorded can be found and reconciled.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        "CREATE TYPE next_action_status AS ENUM ('queued', 'scheduled', 'done')"
    )
    op.execute(
        "CREATE TYPE invite_dispatch_status AS ENUM ('pending', 'sent', 'failed')"
    )

    op.create_table(
        "next_actions",
        sa.Column("action_id", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="next_action_status", create_type=False),
            server_default="queued",
            nullable=False,
        ),
        sa.Column("context", sa.Text(), nullable=True),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("scheduled_date", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completed_date", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("project_id", sa.Text(), nullable=True),
        sa.Column(
            "calendar_invite_sent",
            sa.Boolean(),
            server_default="false",
            nullable=True,
        ),
        sa.Column("user_email", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("action_id", name=op.f("pk_next_actions")),
    )
    op.create_index("idx_next_actions_user_id", "next_actions", ["user_id"])
    op.create_index(
        "idx_next_actions_user_created", "next_actions", ["user_id", "created_at"]
    )

    op.create_table(
        "calendar_invite_dispatches",
        sa.Column("dispatch_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("idempotency_key", sa.Text(), nullable=False),
        sa.Column("action_id", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("recipients", sa.Text(), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(name="invite_dispatch_status", create_type=False),
            nullable=False,
        ),
        sa.Column("provider_message_id", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column("completed_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["action_id"],
            ["next_actions.action_id"],
            name=op.f("fk_calendar_invite_dispatches_action_id_next_actions"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "dispatch_id", name=op.f("pk_calendar_invite_dispatches")
        ),
        sa.UniqueConstraint(
            "idempotency_key",
            name=op.f("uq_calendar_invite_dispatches_idempotency_key"),
        ),
    )
    op.create_index(
        "idx_calendar_invite_dispatches_action_id",
        "calendar_invite_dispatches",
        ["action_id"],
    )
    op.create_index(
        "idx_calendar_invite_dispatches_status",
        "calendar_invite_dispatches",
        ["status", "created_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "idx_calendar_invite_dispatches_status",
        table_name="calendar_invite_dispatches",
    )
    op.drop_index(
        "idx_calendar_invite_dispatches_action_id",
        table_name="calendar_invite_dispatches",
    )
    op.drop_table("calendar_invite_dispatches")
    op.drop_index("idx_next_actions_user_created", table_name="next_actions")
    op.drop_index("idx_next_actions_user_id", table_name="next_actions")
    op.drop_table("next_actions")
    op.execute("DROP TYPE invite_dispatch_status")
    op.execute("DROP TYPE next_action_status")
