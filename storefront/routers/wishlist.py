# storefront/routers/wishlist.py
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from storefront.core.config import get_settings
from storefront.core.providers import use_wishlist
from storefront.schemas.product import Product
from storefront.schemas.wishlist import (
    WishlistStatus,
    WishlistSummary,
    WishlistToggleResult,
)
from storefront.services.wishlist_store import WishlistStore

settings = get_settings()

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


@router.get("", response_model=WishlistSummary)
async def get_my_wishlist(wishlist: WishlistStore = Depends(use_wishlist)):
    """
    Cached wishlist of the signed-in user (empty when signed out).
    """
    return wishlist.summary()


@router.get("/{product_id}", response_model=WishlistStatus)
async def get_wishlist_status(
    product_id: str,
    wishlist: WishlistStore = Depends(use_wishlist),
):
    return WishlistStatus(
        product_id=product_id,
        wishlisted=wishlist.is_wishlisted(product_id),
    )


@router.post(
    "/toggle",
    response_model=WishlistToggleResult,
    status_code=status.HTTP_202_ACCEPTED,
)
async def toggle_wishlist(
    product: Product,
    wishlist: WishlistStore = Depends(use_wishlist),
):
    """
    Add or remove a product from the wishlist.

    Auth:
      - Signed out => 303 redirect to the sign-in page, nothing is written.

    The remote write runs in the background; the cached list refreshes
    once it succeeds, so the response only says which write was issued.
    """
    was_wishlisted = wishlist.is_wishlisted(product.id)
    task = await wishlist.toggle(product)
    if task is None:
        return RedirectResponse(settings.LOGIN_URL, status_code=status.HTTP_303_SEE_OTHER)

    return WishlistToggleResult(
        product_id=product.id,
        status="removing" if was_wishlisted else "adding",
    )
