"""User Store — account persistence, email uniqueness, token → user resolution.

Invariants:
    - An email unique-constraint violation surfaces as DuplicateEmailError, after rollback
    - update carries the same conditional-write contract as ReplayStore.update
    - get_for_token is the only path from a presented token to a user: it matches the
      SHA-256 of the plaintext, the scope, and expiry > now in one query
    - Wrong scope, expired, and unknown tokens are the same RecordNotFoundError
    - Only users carrying a credential hash are written (MissingCredentialHash otherwise)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from dotareplays.core.credentials import Credential
from dotareplays.core.domain_types import TokenScope, User, UserId
from dotareplays.core.errors import (
    DuplicateEmailError, EditConflictError, MissingCredentialHash, RecordNotFoundError,
)
from dotareplays.core.tokens import hash_token
from dotareplays.models.token import TokenModel
from dotareplays.models.user import UserModel
from dotareplays.services.store_base import Store

logger = logging.getLogger(__name__)

_COLUMNS = (
    UserModel.id,
    UserModel.created_at,
    UserModel.name,
    UserModel.email,
    UserModel.password_hash,
    UserModel.activated,
    UserModel.version,
)


def _to_user(row) -> User:
    return User(
        id=UserId(row.id),
        created_at=row.created_at,
        name=row.name,
        email=row.email,
        credential=Credential.from_hash(row.password_hash),
        activated=row.activated,
        version=row.version,
    )


def _is_email_violation(e: IntegrityError) -> bool:
    detail = str(e.orig).lower()
    return "users_email_key" in detail or "users.email" in detail


def _require_hash(user: User) -> bytes:
    if not user.credential.has_hash:
        raise MissingCredentialHash("missing password hash for user")
    return user.credential.hash


class UserStore(Store):
    """Persistence for user accounts."""

    async def insert(self, user: User) -> User:
        stmt = (
            insert(UserModel)
            .values(
                name=user.name,
                email=user.email,
                password_hash=_require_hash(user),
                activated=user.activated,
            )
            .returning(UserModel.id, UserModel.created_at, UserModel.version)
        )
        async with self.bounded("user.insert"):
            try:
                row = (await self.db.execute(stmt)).one()
                await self.db.commit()
            except IntegrityError as e:
                if _is_email_violation(e):
                    raise DuplicateEmailError() from e
                raise
        user.id = UserId(row.id)
        user.created_at = row.created_at
        user.version = row.version
        logger.info("User created", extra={"user_id": user.id})
        return user

    async def get(self, user_id: int) -> User:
        if user_id < 1:
            raise RecordNotFoundError("user")
        return await self._fetch_one(
            select(*_COLUMNS).where(UserModel.id == user_id), "user.get",
        )

    async def get_by_email(self, email: str) -> User:
        return await self._fetch_one(
            select(*_COLUMNS).where(UserModel.email == email), "user.get_by_email",
        )

    async def update(self, user: User) -> User:
        """Conditional write against the version the caller last read."""
        stmt = (
            update(UserModel)
            .where(UserModel.id == user.id, UserModel.version == user.version)
            .values(
                name=user.name,
                email=user.email,
                password_hash=_require_hash(user),
                activated=user.activated,
                version=UserModel.version + 1,
            )
            .returning(UserModel.version)
            .execution_options(synchronize_session=False)
        )
        async with self.bounded("user.update"):
            try:
                new_version = (await self.db.execute(stmt)).scalar_one_or_none()
            except IntegrityError as e:
                if _is_email_violation(e):
                    raise DuplicateEmailError() from e
                raise
            if new_version is None:
                raise EditConflictError("user")
            await self.db.commit()
        user.version = new_version
        return user

    async def get_for_token(
        self, scope: TokenScope | str, token_plaintext: str,
        now: datetime | None = None,
    ) -> User:
        """Resolve a presented token to its owner, or RecordNotFoundError."""
        stmt = (
            select(*_COLUMNS)
            .join(TokenModel, TokenModel.user_id == UserModel.id)
            .where(
                TokenModel.hash == hash_token(token_plaintext),
                TokenModel.scope == (scope.value if isinstance(scope, TokenScope) else scope),
                TokenModel.expiry > (now or datetime.now(timezone.utc)),
            )
        )
        return await self._fetch_one(stmt, "user.get_for_token")

    async def _fetch_one(self, stmt, operation: str) -> User:
        async with self.bounded(operation):
            row = (await self.db.execute(stmt)).one_or_none()
            await self.db.commit()
        if row is None:
            raise RecordNotFoundError("user")
        return _to_user(row)
