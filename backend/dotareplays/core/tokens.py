"""Opaque Tokens — random plaintext for the client, SHA-256 digest for storage.

Invariants:
    - plaintext is 16 CSPRNG bytes, base32 without padding (26 chars)
    - hash == SHA-256(plaintext); the digest never yields the plaintext back
    - plaintext leaves the process exactly once, in the issuing response

Design Decisions:
    - Unsalted SHA-256 for lookup: the input is high-entropy, so the slow salted hash
      used for passwords buys nothing and would prevent an indexed equality lookup
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from dotareplays.core.domain_types import TokenScope, UserId

TOKEN_ENTROPY_BYTES = 16
TOKEN_PLAINTEXT_LENGTH = 26


@dataclass
class Token:
    plaintext: str = field(repr=False)
    hash: bytes = field(repr=False)
    user_id: UserId
    expiry: datetime
    scope: TokenScope


def hash_token(plaintext: str) -> bytes:
    """Deterministic lookup digest for a presented token."""
    return hashlib.sha256(plaintext.encode("utf-8")).digest()


def generate_token(
    user_id: UserId, ttl: timedelta, scope: TokenScope,
    now: datetime | None = None,
) -> Token:
    """Mint a token expiring ttl from now."""
    issued_at = now or datetime.now(timezone.utc)
    plaintext = base64.b32encode(
        secrets.token_bytes(TOKEN_ENTROPY_BYTES),
    ).decode("ascii").rstrip("=")
    return Token(
        plaintext=plaintext,
        hash=hash_token(plaintext),
        user_id=user_id,
        expiry=issued_at + ttl,
        scope=scope,
    )
