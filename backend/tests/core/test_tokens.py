"""Tokens — opaque plaintext generation and lookup digest.

Tests:
    - Plaintext is 26 base32 characters with no padding
    - hash is SHA-256 of the plaintext and deterministic
    - expiry == now + ttl
    - Two tokens never share a plaintext
    - repr() shows neither plaintext nor hash
"""

import hashlib
import re
from datetime import datetime, timedelta, timezone

from dotareplays.core.domain_types import TokenScope, UserId
from dotareplays.core.tokens import TOKEN_PLAINTEXT_LENGTH, generate_token, hash_token

NOW = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def test_plaintext_shape():
    token = generate_token(UserId(1), timedelta(hours=1), TokenScope.AUTHENTICATION)
    assert len(token.plaintext) == TOKEN_PLAINTEXT_LENGTH == 26
    assert re.fullmatch(r"[A-Z2-7]{26}", token.plaintext)


def test_hash_is_sha256_of_plaintext():
    token = generate_token(UserId(1), timedelta(hours=1), TokenScope.ACTIVATION)
    assert token.hash == hashlib.sha256(token.plaintext.encode()).digest()
    assert hash_token(token.plaintext) == token.hash


def test_expiry_and_fields():
    token = generate_token(UserId(7), timedelta(days=3), TokenScope.ACTIVATION, now=NOW)
    assert token.expiry == NOW + timedelta(days=3)
    assert token.user_id == 7
    assert token.scope is TokenScope.ACTIVATION


def test_plaintexts_are_unique():
    seen = {
        generate_token(UserId(1), timedelta(hours=1), TokenScope.AUTHENTICATION).plaintext
        for _ in range(50)
    }
    assert len(seen) == 50


def test_repr_hides_secret():
    token = generate_token(UserId(1), timedelta(hours=1), TokenScope.AUTHENTICATION)
    assert token.plaintext not in repr(token)
