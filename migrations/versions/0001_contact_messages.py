"""contact messages

Revision ID: 0001_contact_messages
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_contact_messages"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the contact message table and its lookup indexes."""
    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("service", sa.String(length=255), nullable=True),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("preferred_date", sa.String(length=50), nullable=True),
        sa.Column("preferred_time", sa.String(length=50), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="unread"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("ip_address", sa.String(length=50), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('unread', 'read', 'archived')",
            name="ck_contact_messages_status",
        ),
    )
    op.create_index("idx_created_at", "contact_messages", ["created_at"])
    op.create_index("idx_status", "contact_messages", ["status"])


def downgrade() -> None:
    """Drop the contact message table."""
    op.drop_index("idx_status", table_name="contact_messages")
    op.drop_index("idx_created_at", table_name="contact_messages")
    op.drop_table("contact_messages")
