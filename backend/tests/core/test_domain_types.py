"""Domain Types — verifies enums, record defaults, and the subject variant.

Tests:
    - TokenScope / PermissionCode values are the wire strings
    - New records carry id 0 and version 0 until a store assigns them
    - Anonymous is a singleton-equal value; Authenticated wraps a user
    - User repr never includes the credential
"""

from dotareplays.core.domain_types import (
    ANONYMOUS, Anonymous, Authenticated, PermissionCode, Replay, Subject, TokenScope, User,
)


def test_token_scopes():
    assert {s.value for s in TokenScope} == {"activation", "authentication"}


def test_permission_codes():
    assert PermissionCode.REPLAYS_READ.value == "replays:read"
    assert PermissionCode.REPLAYS_WRITE.value == "replays:write"


def test_new_replay_is_unassigned():
    replay = Replay(title="t", year=2020, runtime=1, heroes=[])
    assert replay.id == 0
    assert replay.version == 0
    assert replay.created_at is None


def test_subject_variants():
    assert isinstance(ANONYMOUS, Anonymous)
    assert ANONYMOUS == Anonymous()
    user = User(name="Alice", email="alice@example.com")
    subject = Authenticated(user)
    assert not isinstance(subject, Anonymous)
    assert subject.user is user
    assert isinstance(ANONYMOUS, Subject)
    assert isinstance(subject, Subject)
    assert not isinstance(user, Subject)


def test_user_repr_hides_credential():
    user = User(name="Alice", email="alice@example.com")
    user.credential.set("pa55word!", 4)
    assert "pa55word" not in repr(user)
    assert "credential" not in repr(user)
