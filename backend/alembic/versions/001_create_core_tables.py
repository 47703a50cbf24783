"""Core schema: replays, users, tokens, permissions, users_permissions.

Revision ID: 001_core_tables
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY

revision: str = "001_core_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "replays",
        sa.Column("id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("runtime", sa.Integer, nullable=False),
        sa.Column("heroes", ARRAY(sa.Text), nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.CheckConstraint("runtime >= 0", name="replays_runtime_check"),
        sa.CheckConstraint("year BETWEEN 2011 AND date_part('year', now())", name="replays_year_check"),
        sa.CheckConstraint("array_length(heroes, 1) = 10", name="heroes_length_check"),
    )
    op.execute(
        "CREATE INDEX replays_title_idx ON replays "
        "USING GIN (to_tsvector('simple', title))"
    )
    op.execute("CREATE INDEX replays_heroes_idx ON replays USING GIN (heroes)")

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("password_hash", sa.LargeBinary, nullable=False),
        sa.Column("activated", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.UniqueConstraint("email", name="users_email_key"),
    )

    op.create_table(
        "tokens",
        sa.Column("hash", sa.LargeBinary, primary_key=True),
        sa.Column(
            "user_id", sa.BigInteger,
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("expiry", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scope", sa.Text, nullable=False),
    )

    op.create_table(
        "permissions",
        sa.Column("id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("code", sa.Text, nullable=False, unique=True),
    )

    op.create_table(
        "users_permissions",
        sa.Column(
            "user_id", sa.BigInteger,
            sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "permission_id", sa.BigInteger,
            sa.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("users_permissions")
    op.drop_table("permissions")
    op.drop_table("tokens")
    op.drop_table("users")
    op.execute("DROP INDEX IF EXISTS replays_heroes_idx")
    op.execute("DROP INDEX IF EXISTS replays_title_idx")
    op.drop_table("replays")
