"""Record Validation Rules — field checks for replays, users, secrets, tokens, filters.

Invariants:
    - Every rule only appends to a Validator; none raises for bad client input
    - validate_user raises MissingCredentialHash when the user has no hash:
      that is a caller bug, not a client error, and never lands in the violation map
    - Lengths are measured in UTF-8 bytes
"""

from datetime import datetime, timezone

from dotareplays.core.domain_types import Replay, User
from dotareplays.core.errors import MissingCredentialHash
from dotareplays.core.filters import MAX_PAGE, MAX_PAGE_SIZE, Filters
from dotareplays.core.tokens import TOKEN_PLAINTEXT_LENGTH
from dotareplays.core.validator import EMAIL_RX, Validator, matches, permitted_value, unique

FIRST_REPLAY_YEAR = 2011
HEROES_PER_REPLAY = 10
MAX_TEXT_BYTES = 500
MIN_PASSWORD_BYTES = 8
MAX_PASSWORD_BYTES = 72


def _byte_len(value: str) -> int:
    return len(value.encode("utf-8"))


def validate_replay(v: Validator, replay: Replay, today: datetime | None = None) -> None:
    current_year = (today or datetime.now(timezone.utc)).year
    v.check(replay.title != "", "title", "must be provided")
    v.check(_byte_len(replay.title) <= MAX_TEXT_BYTES, "title", "must not be more than 500 bytes long")
    v.check(replay.year != 0, "year", "must be provided")
    v.check(replay.year >= FIRST_REPLAY_YEAR, "year", "must be greater than 2011")
    v.check(replay.year <= current_year, "year", "must not be in the future")
    v.check(replay.runtime != 0, "runtime", "must be provided")
    v.check(replay.runtime > 0, "runtime", "must be a positive integer")
    v.check(replay.heroes is not None, "heroes", "must be provided")
    heroes = replay.heroes or []
    v.check(len(heroes) == HEROES_PER_REPLAY, "heroes", "must contain 10 heroes")
    v.check(unique(heroes), "heroes", "must not contain duplicate values")


def validate_email(v: Validator, email: str) -> None:
    v.check(email != "", "email", "must be provided")
    v.check(matches(email, EMAIL_RX), "email", "must be a valid email address")


def validate_password_plaintext(v: Validator, password: str) -> None:
    v.check(password != "", "password", "must be provided")
    v.check(_byte_len(password) >= MIN_PASSWORD_BYTES, "password", "must be at least 8 bytes long")
    v.check(_byte_len(password) <= MAX_PASSWORD_BYTES, "password", "must not be more than 72 bytes long")


def validate_user_details(v: Validator, user: User) -> None:
    v.check(user.name != "", "name", "must be provided")
    v.check(_byte_len(user.name) <= MAX_TEXT_BYTES, "name", "must not be more than 500 bytes long")
    validate_email(v, user.email)


def validate_user(v: Validator, user: User) -> None:
    validate_user_details(v, user)
    if user.credential.plaintext is not None:
        validate_password_plaintext(v, user.credential.plaintext)
    if not user.credential.has_hash:
        raise MissingCredentialHash("missing password hash for user")


def validate_token_plaintext(v: Validator, token_plaintext: str) -> None:
    v.check(token_plaintext != "", "token", "must be provided")
    v.check(len(token_plaintext) == TOKEN_PLAINTEXT_LENGTH, "token", "must be 26 bytes long")


def validate_filters(v: Validator, f: Filters) -> None:
    v.check(f.page > 0, "page", "must be greater than zero")
    v.check(f.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(f.page_size > 0, "page_size", "must be greater than zero")
    v.check(f.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")
    v.check(permitted_value(f.sort, *f.sort_safelist), "sort", "invalid sort value")
