"""Permission ORM — permission codes and the users ↔ permissions link table.

Invariants:
    - code is unique; the set of codes is seeded by migration, not by the API
    - (user_id, permission_id) is the link table's primary key
"""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from dotareplays.db.base import Base

users_permissions = Table(
    "users_permissions",
    Base.metadata,
    Column(
        "user_id", BigInteger().with_variant(Integer(), "sqlite"),
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "permission_id", BigInteger().with_variant(Integer(), "sqlite"),
        ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class PermissionModel(Base):
    """Permission code row."""
    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True, autoincrement=True,
    )
    code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
