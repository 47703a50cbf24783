"""Seed the permission codes the API checks.

Revision ID: 002_seed_permissions
Revises: 001_core_tables
Create Date: 2026-10-18

Codes are data, not API-creatable: new ones arrive by migration only.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_seed_permissions"
down_revision: Union[str, None] = "001_core_tables"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_CODES = ("replays:read", "replays:write")

_permissions = sa.table("permissions", sa.column("code", sa.Text))


def upgrade() -> None:
    op.bulk_insert(_permissions, [{"code": code} for code in _CODES])


def downgrade() -> None:
    op.execute(
        _permissions.delete().where(_permissions.c.code.in_(_CODES)),
    )
