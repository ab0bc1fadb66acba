# storefront/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.core.providers import Providers, use_providers
from storefront.schemas.user import CurrentUser, LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=CurrentUser)
async def login(payload: LoginRequest, providers: Providers = Depends(use_providers)):
    """
    Sign in with email/password and rebind the wishlist to the new user.

    Raises:
        HTTPException(401): if Supabase rejects the credentials.
    """
    try:
        await providers.auth.sign_in(payload.email, payload.password)
    except Exception as e:
        logger.info(f"Sign-in failed for {payload.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    await providers.wishlist.reload_user()
    if providers.wishlist.current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session could not be established",
        )
    return providers.wishlist.current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(providers: Providers = Depends(use_providers)):
    """
    Sign out; the wishlist falls back to the signed-out (empty) state.
    The local cart is kept.
    """
    await providers.auth.sign_out()
    await providers.wishlist.reload_user()
