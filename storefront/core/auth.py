# storefront/core/auth.py
import logging
import time
from typing import Any, Callable

from jose import jwt, JWTError
from supabase import AsyncClient

from storefront.core.config import get_settings
from storefront.schemas.user import CurrentUser

settings = get_settings()
logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode a Supabase access token (JWT).

    Verification:
      - signature (SUPABASE_JWT_SECRET) only when a secret is configured
      - expiration time (exp) always
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        JWTError: if the token is malformed, badly signed or expired.
    """
    if settings.SUPABASE_JWT_SECRET:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )

    claims = jwt.get_unverified_claims(token)
    exp = claims.get("exp")
    if exp is not None and float(exp) <= time.time():
        raise JWTError("Signature has expired.")
    return claims


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if the user has not
    completed their profile yet.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


class SupabaseAuthOracle:
    """
    Authentication oracle backed by Supabase Auth.

    Contract consumed by the wishlist store:
      - is_authenticated() -> bool
      - me() -> CurrentUser | None
      - redirect_to_login() -> None (navigation side effect only)

    `navigate` is the hook the hosting UI supplies to actually move the
    user to the sign-in page; without one the redirect is only logged.
    """

    def __init__(
        self,
        client: AsyncClient,
        login_url: str | None = None,
        navigate: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.login_url = login_url or settings.LOGIN_URL
        self.navigate = navigate

    async def is_authenticated(self) -> bool:
        session = await self.client.auth.get_session()
        if session is None or not session.access_token:
            return False
        try:
            decode_access_token(session.access_token)
        except JWTError as e:
            logger.info(f"Stored session rejected: {e}")
            return False
        return True

    async def me(self) -> CurrentUser | None:
        resp = await self.client.auth.get_user()
        if resp is None or resp.user is None or not resp.user.email:
            return None

        user = resp.user
        metadata = user.user_metadata or {}
        role = metadata.get("role")
        return CurrentUser(
            id=str(user.id),
            email=user.email,
            name=metadata.get("name") or _default_name_from_email(user.email),
            role=role if role in ("user", "admin") else "user",
        )

    def redirect_to_login(self, url: str | None = None) -> None:
        target = url or self.login_url
        logger.info(f"Sign-in required, redirecting to {target}")
        if self.navigate is not None:
            self.navigate(target)

    async def sign_in(self, email: str, password: str) -> CurrentUser | None:
        """
        Email/password sign-in; the Supabase client keeps the session.

        Raises:
            Any AuthApiError raised by Supabase on bad credentials.
        """
        await self.client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        return await self.me()

    async def sign_out(self) -> None:
        await self.client.auth.sign_out()
