"""Permission Store — resolves and grants permission codes per user.

Invariants:
    - add_for_user grants only codes present in the permissions table;
      unknown codes are dropped silently and nothing reports which ones
    - Re-granting a code the user already holds is a no-op
    - get_all_for_user returns an immutable Permissions, sorted by code
"""

from sqlalchemy import BigInteger, exists, insert, literal, select

from dotareplays.core.domain_types import PermissionCode, UserId
from dotareplays.core.permissions import Permissions
from dotareplays.models.permission import PermissionModel, users_permissions
from dotareplays.services.store_base import Store


class PermissionStore(Store):
    """Persistence for users ↔ permissions."""

    async def get_all_for_user(self, user_id: UserId) -> Permissions:
        stmt = (
            select(PermissionModel.code)
            .join(
                users_permissions,
                users_permissions.c.permission_id == PermissionModel.id,
            )
            .where(users_permissions.c.user_id == user_id)
            .order_by(PermissionModel.code)
        )
        async with self.bounded("permission.get_all_for_user"):
            codes = (await self.db.execute(stmt)).scalars().all()
            await self.db.commit()
        return Permissions(tuple(codes))

    async def add_for_user(self, user_id: UserId, *codes: str | PermissionCode) -> None:
        wanted = [c.value if isinstance(c, PermissionCode) else c for c in codes]
        if not wanted:
            return
        already_held = exists().where(
            users_permissions.c.user_id == user_id,
            users_permissions.c.permission_id == PermissionModel.id,
        )
        source = (
            select(literal(user_id, type_=BigInteger), PermissionModel.id)
            .where(PermissionModel.code.in_(wanted), ~already_held)
        )
        stmt = insert(users_permissions).from_select(
            ["user_id", "permission_id"], source,
        )
        async with self.bounded("permission.add_for_user"):
            await self.db.execute(stmt)
            await self.db.commit()
