"""Token ORM — SHA-256 digests of issued tokens, keyed by hash.

Invariants:
    - Only the digest is stored; plaintext never reaches this table
    - Rows cascade-delete with their user
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, LargeBinary, Text
from sqlalchemy.orm import Mapped, mapped_column

from dotareplays.db.base import Base


class TokenModel(Base):
    """Token row."""
    __tablename__ = "tokens"

    hash: Mapped[bytes] = mapped_column(LargeBinary, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    expiry: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    scope: Mapped[str] = mapped_column(Text, nullable=False)
