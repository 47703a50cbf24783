"""Token Store — issues and revokes scoped, expiring tokens.

Invariants:
    - new() persists (hash, user_id, expiry, scope) and returns the only copy of the plaintext
    - The store has no decode path: UserStore.get_for_token is the sole resolver
"""

import logging
from datetime import timedelta

from sqlalchemy import delete, insert

from dotareplays.core.domain_types import TokenScope, UserId
from dotareplays.core.tokens import Token, generate_token
from dotareplays.models.token import TokenModel
from dotareplays.services.store_base import Store

logger = logging.getLogger(__name__)


class TokenStore(Store):
    """Persistence for token digests."""

    async def new(self, user_id: UserId, ttl: timedelta, scope: TokenScope) -> Token:
        token = generate_token(user_id, ttl, scope)
        await self.insert(token)
        return token

    async def insert(self, token: Token) -> None:
        stmt = insert(TokenModel).values(
            hash=token.hash,
            user_id=token.user_id,
            expiry=token.expiry,
            scope=token.scope.value,
        )
        async with self.bounded("token.insert"):
            await self.db.execute(stmt)
            await self.db.commit()
        logger.info(
            "Token issued",
            extra={"user_id": token.user_id, "scope": token.scope.value},
        )

    async def delete_all_for_user(self, scope: TokenScope, user_id: UserId) -> int:
        """Revoke every token of one scope held by a user."""
        stmt = (
            delete(TokenModel)
            .where(TokenModel.scope == scope.value, TokenModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        async with self.bounded("token.delete_all_for_user"):
            result = await self.db.execute(stmt)
            await self.db.commit()
        return result.rowcount
