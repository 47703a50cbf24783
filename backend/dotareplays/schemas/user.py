"""User & Token Schemas — registration, activation, login bodies and public views.

Invariants:
    - Passwords are accepted, never returned
    - UserResponse exposes no credential material and no version
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from dotareplays.core.domain_types import User


class UserRegister(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    email: str = ""
    password: str = ""


class UserActivate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token: str = ""


class TokenRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: int
    created_at: datetime | None
    name: str
    email: str
    activated: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            created_at=user.created_at,
            name=user.name,
            email=user.email,
            activated=user.activated,
        )


class TokenResponse(BaseModel):
    token: str
    expiry: datetime
