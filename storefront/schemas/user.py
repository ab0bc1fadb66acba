# storefront/schemas/user.py
from typing import Literal

from pydantic import ConfigDict, EmailStr
from sqlmodel import SQLModel

# App-level roles. "guest" = no session, so it never appears here.
Role = Literal["user", "admin"]


class CurrentUser(SQLModel):
    """
    Signed-in user as reported by the authentication oracle.

    The wishlist is keyed by `email`; everything else is informational.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str
    name: str | None = None
    role: Role = "user"


class LoginRequest(SQLModel):
    """
    Email/password sign-in payload.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str
