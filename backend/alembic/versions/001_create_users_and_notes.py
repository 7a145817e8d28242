"""Create users and notes tables

Revision ID: 001
Revises: None
Create Date: 2023-04-02 14:26:55.000000+00:00

What:  Creates `users` (login credentials) and `notes` (owner-scoped tagged notes).
How:   PostgreSQL types: SERIAL keys, TEXT[] tags, TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops both tables (destructive — all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(320), nullable=False, comment="Lower-cased login email"),
        sa.Column(
            "password_hash",
            sa.Text(),
            nullable=False,
            comment="Argon2 PHC string; embeds algorithm, parameters and salt",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "owner_id",
            sa.Integer(),
            nullable=False,
            comment="Owning user; taken from the verified session, never from the request body",
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.String(64)),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
    )

    # "notes of this owner after this instant"
    op.create_index(
        "idx_notes_owner_created_at",
        "notes",
        ["owner_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_owner_created_at", table_name="notes")
    op.drop_table("notes")
    op.drop_table("users")
