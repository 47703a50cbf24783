"""Permissions & authorize — set membership and the subject check.

Tests:
    - include() accepts enum members and raw codes
    - Anonymous is never authorized, whatever the permission set
    - An authenticated subject is authorized iff the code is held
"""

from dotareplays.core.domain_types import (
    ANONYMOUS, Authenticated, PermissionCode, User,
)
from dotareplays.core.permissions import Permissions, authorize

READER = Permissions.of(PermissionCode.REPLAYS_READ)


def test_include():
    assert READER.include(PermissionCode.REPLAYS_READ)
    assert READER.include("replays:read")
    assert not READER.include(PermissionCode.REPLAYS_WRITE)
    assert len(READER) == 1


def test_empty_permissions():
    assert not Permissions().include("replays:read")
    assert len(Permissions()) == 0


def test_anonymous_is_never_authorized():
    everything = Permissions.of(*PermissionCode)
    assert not authorize(ANONYMOUS, everything, PermissionCode.REPLAYS_READ)


def test_authenticated_needs_the_code():
    subject = Authenticated(User(name="Alice", email="alice@example.com"))
    assert authorize(subject, READER, PermissionCode.REPLAYS_READ)
    assert not authorize(subject, READER, PermissionCode.REPLAYS_WRITE)
