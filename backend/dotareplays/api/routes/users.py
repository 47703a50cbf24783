"""User Routes — registration and account activation.

Invariants:
    - Registration hashes the password off the event loop, inserts the user,
      grants replays:read, and issues an activation token mailed in the background
    - The activation token plaintext goes only into the mail body
    - Activation consumes every activation token the user holds
    - Unknown / expired / wrong-scope activation tokens are one validation message
"""

import asyncio
import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse

from dotareplays.api.dependencies import (
    get_mailer, get_permission_store, get_token_store, get_user_store,
)
from dotareplays.config import Settings, get_settings
from dotareplays.core.domain_types import PermissionCode, TokenScope, User
from dotareplays.core.errors import FailedValidationError, RecordNotFoundError
from dotareplays.core.validation_rules import (
    validate_password_plaintext, validate_token_plaintext, validate_user,
    validate_user_details,
)
from dotareplays.core.validator import Validator
from dotareplays.infrastructure.mailer import Mailer
from dotareplays.schemas.user import UserActivate, UserRegister, UserResponse
from dotareplays.services.permission_store import PermissionStore
from dotareplays.services.token_store import TokenStore
from dotareplays.services.user_store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/users", tags=["users"])


def _welcome_body(user: User, token: str) -> str:
    return (
        f"Hi {user.name},\n\n"
        "Thanks for signing up for a Dota Replays account.\n\n"
        "Please send a request to the PUT /v1/users/activated endpoint with the "
        "following JSON body to activate your account:\n\n"
        f'{{"token": "{token}"}}\n\n'
        "Please note that this is a one-time use token and it will expire in 3 days.\n"
    )


@router.post("")
async def register_user(
    body: UserRegister,
    background: BackgroundTasks,
    users: UserStore = Depends(get_user_store),
    permissions: PermissionStore = Depends(get_permission_store),
    tokens: TokenStore = Depends(get_token_store),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    user = User(name=body.name, email=body.email, activated=False)

    v = Validator()
    validate_user_details(v, user)
    validate_password_plaintext(v, body.password)
    v.raise_if_invalid()

    await asyncio.to_thread(user.credential.set, body.password, settings.bcrypt_cost)
    validate_user(v, user)
    v.raise_if_invalid()

    await users.insert(user)
    await permissions.add_for_user(user.id, PermissionCode.REPLAYS_READ)
    token = await tokens.new(
        user.id,
        timedelta(hours=settings.activation_token_ttl_hours),
        TokenScope.ACTIVATION,
    )
    background.add_task(
        mailer.deliver, user.email, "Welcome to Dota Replays!",
        _welcome_body(user, token.plaintext),
    )

    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={"user": UserResponse.from_user(user).model_dump(mode="json")},
    )


@router.put("/activated")
async def activate_user(
    body: UserActivate,
    users: UserStore = Depends(get_user_store),
    tokens: TokenStore = Depends(get_token_store),
):
    v = Validator()
    validate_token_plaintext(v, body.token)
    v.raise_if_invalid()

    try:
        user = await users.get_for_token(TokenScope.ACTIVATION, body.token)
    except RecordNotFoundError:
        raise FailedValidationError({"token": "invalid or expired activation token"})

    user.activated = True
    await users.update(user)
    await tokens.delete_all_for_user(TokenScope.ACTIVATION, user.id)
    logger.info("User activated", extra={"user_id": user.id})

    return {"user": UserResponse.from_user(user).model_dump(mode="json")}
