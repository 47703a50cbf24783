"""Request Dependencies — stores per request, bearer authentication, permission guards.

Invariants:
    - No Authorization header → Anonymous subject (not an error by itself)
    - A malformed header or an unresolvable token → InvalidAuthenticationTokenError (401)
    - require_permission: Anonymous → 401, inactive → 403, missing code → 403;
      the allow/deny decision itself is core.permissions.authorize
    - Permissions are loaded per request; nothing is cached across requests
"""

import logging
from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from dotareplays.config import Settings, get_settings
from dotareplays.core.domain_types import (
    ANONYMOUS, Anonymous, Authenticated, PermissionCode, Subject, TokenScope, User,
)
from dotareplays.core.errors import (
    AuthenticationRequiredError, InactiveAccountError,
    InvalidAuthenticationTokenError, NotPermittedError, RecordNotFoundError,
)
from dotareplays.core.permissions import authorize
from dotareplays.core.validation_rules import validate_token_plaintext
from dotareplays.core.validator import Validator
from dotareplays.infrastructure.database import get_db
from dotareplays.infrastructure.mailer import Mailer
from dotareplays.services.permission_store import PermissionStore
from dotareplays.services.replay_store import ReplayStore
from dotareplays.services.token_store import TokenStore
from dotareplays.services.user_store import UserStore

logger = logging.getLogger(__name__)


def get_replay_store(db: AsyncSession = Depends(get_db)) -> ReplayStore:
    return ReplayStore(db)


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_token_store(db: AsyncSession = Depends(get_db)) -> TokenStore:
    return TokenStore(db)


def get_permission_store(db: AsyncSession = Depends(get_db)) -> PermissionStore:
    return PermissionStore(db)


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer.from_settings(settings)


async def get_subject(
    authorization: str | None = Header(None),
    users: UserStore = Depends(get_user_store),
) -> Subject:
    """Resolve the Authorization header to a Subject."""
    if authorization is None:
        return ANONYMOUS

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise InvalidAuthenticationTokenError()
    token = parts[1]

    v = Validator()
    validate_token_plaintext(v, token)
    if not v.valid:
        raise InvalidAuthenticationTokenError()

    try:
        user = await users.get_for_token(TokenScope.AUTHENTICATION, token)
    except RecordNotFoundError:
        raise InvalidAuthenticationTokenError()
    return Authenticated(user)


async def require_authenticated_user(
    subject: Subject = Depends(get_subject),
) -> User:
    if isinstance(subject, Anonymous):
        raise AuthenticationRequiredError()
    return subject.user


async def require_activated_user(
    user: User = Depends(require_authenticated_user),
) -> User:
    if not user.activated:
        raise InactiveAccountError()
    return user


def require_permission(code: PermissionCode) -> Callable:
    """Dependency factory: activated user holding `code`."""

    async def check_permission(
        user: User = Depends(require_activated_user),
        permissions: PermissionStore = Depends(get_permission_store),
    ) -> User:
        granted = await permissions.get_all_for_user(user.id)
        if not authorize(Authenticated(user), granted, code):
            logger.info(
                f"Permission {code.value} denied",
                extra={"user_id": user.id},
            )
            raise NotPermittedError(code.value)
        return user

    return check_permission
