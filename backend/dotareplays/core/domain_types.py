"""Domain Types — records, closed enumerations, and the request subject variant.

Invariants:
    - Replay.version and User.version are owned by the stores: 0 until inserted, 1 after
    - TokenScope and PermissionCode are closed sets — no raw string matching elsewhere
    - Subject is Anonymous | Authenticated; anonymity is a type match, never a field check

Design Decisions:
    - Plain dataclasses for records, separate from the ORM rows in models/:
      stores issue conditional writes and hand back detached values
    - str Enums: serialize to JSON and bind to SQL without custom adapters
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import NewType

from dotareplays.core.credentials import Credential


# ─── Identity Types ──────────────────────────────────────────────

ReplayId = NewType("ReplayId", int)
UserId = NewType("UserId", int)


# ─── Enums ───────────────────────────────────────────────────────

class TokenScope(str, Enum):
    """Partitions token purpose: an activation token never authenticates."""
    ACTIVATION = "activation"
    AUTHENTICATION = "authentication"


class PermissionCode(str, Enum):
    """Every permission code the API checks."""
    REPLAYS_READ = "replays:read"
    REPLAYS_WRITE = "replays:write"


# ─── Records ─────────────────────────────────────────────────────

@dataclass
class Replay:
    """A versioned catalog record."""
    title: str
    year: int
    runtime: int
    heroes: list[str]
    id: ReplayId = ReplayId(0)
    created_at: datetime | None = None
    version: int = 0


@dataclass
class User:
    """An account. credential is write-only and never serialized."""
    name: str
    email: str
    credential: Credential = field(default_factory=Credential, repr=False, compare=False)
    activated: bool = False
    id: UserId = UserId(0)
    created_at: datetime | None = None
    version: int = 0


# ─── Subject ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Anonymous:
    """No authenticated identity."""


@dataclass(frozen=True, eq=False)
class Authenticated:
    """A request carrying a valid authentication token."""
    user: User


ANONYMOUS = Anonymous()

Subject = Anonymous | Authenticated
