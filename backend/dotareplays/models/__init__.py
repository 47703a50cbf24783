"""ORM Models — SQLAlchemy declarative tables for replays, users, tokens, permissions.

Invariants:
    - All models inherit from Base (db/base.py)
    - Stores read columns, not entities: rows never enter a session identity map

Design Decisions:
    - One file per table
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from dotareplays.models.replay import ReplayModel  # noqa: F401
from dotareplays.models.user import UserModel  # noqa: F401
from dotareplays.models.token import TokenModel  # noqa: F401
from dotareplays.models.permission import PermissionModel, users_permissions  # noqa: F401
