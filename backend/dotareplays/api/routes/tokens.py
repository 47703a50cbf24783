"""Token Routes — exchange email + password for an authentication token.

Invariants:
    - Unknown email and wrong password give the same 401
    - The token plaintext appears once, in this response
"""

import asyncio
from datetime import timedelta

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from dotareplays.api.dependencies import get_token_store, get_user_store
from dotareplays.config import Settings, get_settings
from dotareplays.core.domain_types import TokenScope
from dotareplays.core.errors import InvalidCredentialsError, RecordNotFoundError
from dotareplays.core.validation_rules import validate_email, validate_password_plaintext
from dotareplays.core.validator import Validator
from dotareplays.schemas.user import TokenRequest, TokenResponse
from dotareplays.services.token_store import TokenStore
from dotareplays.services.user_store import UserStore

router = APIRouter(prefix="/v1/tokens", tags=["tokens"])


@router.post("/authentication")
async def create_authentication_token(
    body: TokenRequest,
    users: UserStore = Depends(get_user_store),
    tokens: TokenStore = Depends(get_token_store),
    settings: Settings = Depends(get_settings),
):
    v = Validator()
    validate_email(v, body.email)
    validate_password_plaintext(v, body.password)
    v.raise_if_invalid()

    try:
        user = await users.get_by_email(body.email)
    except RecordNotFoundError:
        raise InvalidCredentialsError()

    if not await asyncio.to_thread(user.credential.matches, body.password):
        raise InvalidCredentialsError()

    token = await tokens.new(
        user.id,
        timedelta(hours=settings.authentication_token_ttl_hours),
        TokenScope.AUTHENTICATION,
    )
    payload = TokenResponse(token=token.plaintext, expiry=token.expiry)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"authentication_token": payload.model_dump(mode="json")},
    )
