"""Credential — bcrypt hash of a user's secret, plus the plaintext for one request only.

Invariants:
    - The plaintext lives in memory only: never persisted, never in repr(), never logged
    - matches() returns False for a wrong secret; it raises only on a genuine fault
    - bcrypt's checkpw is the comparison (constant-time)

Design Decisions:
    - Cost is a parameter, not read from settings: core stays free of config imports
    - Secrets longer than 72 bytes are rejected by validate_password_plaintext upstream;
      matches() answers False for them since no stored secret can be that long
"""

import bcrypt

from dotareplays.core.errors import HashingError

DEFAULT_BCRYPT_COST = 12
BCRYPT_MAX_BYTES = 72


class Credential:
    """Write-only secret representation embedded in a User."""

    __slots__ = ("_plaintext", "_hash")

    def __init__(self, password_hash: bytes | None = None):
        self._plaintext: str | None = None
        self._hash = password_hash

    @classmethod
    def from_hash(cls, password_hash: bytes) -> "Credential":
        """Credential loaded from storage (no plaintext)."""
        return cls(password_hash)

    @property
    def plaintext(self) -> str | None:
        return self._plaintext

    @property
    def hash(self) -> bytes | None:
        return self._hash

    @property
    def has_hash(self) -> bool:
        return bool(self._hash)

    def set(self, plaintext: str, cost: int = DEFAULT_BCRYPT_COST) -> None:
        """Hash plaintext with a fresh salt and keep plaintext for this request."""
        try:
            hashed = bcrypt.hashpw(
                plaintext.encode("utf-8"), bcrypt.gensalt(rounds=cost),
            )
        except (ValueError, TypeError) as e:
            raise HashingError(str(e)) from e
        self._plaintext = plaintext
        self._hash = hashed

    def matches(self, plaintext: str) -> bool:
        """Compare a candidate secret against the stored hash."""
        if not self._hash:
            return False
        candidate = plaintext.encode("utf-8")
        if len(candidate) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(candidate, self._hash)
        except (ValueError, TypeError) as e:
            raise HashingError(str(e)) from e

    def __repr__(self) -> str:
        return f"Credential(has_hash={self.has_hash})"
