# storefront/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.core.providers import use_cart
from storefront.schemas.cart import CartSummary, CartItemCreate, CartItemUpdate
from storefront.services.cart_store import CartStore

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(cart: CartStore = Depends(use_cart)):
    """
    Get the local cart summary.

    Works signed out; the cart never talks to the backend.
    """
    return cart.summary()


@router.post("", response_model=CartSummary)
def add_to_cart(payload: CartItemCreate, cart: CartStore = Depends(use_cart)):
    """
    Add a product to the cart (repeat adds sum quantities).

    Returns the updated cart summary.
    """
    cart.add(
        payload.product,
        payload.quantity,
        is_custom=payload.is_custom,
        customizations=payload.customizations,
    )
    return cart.summary()


@router.patch("/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: str,
    payload: CartItemUpdate,
    cart: CartStore = Depends(use_cart),
):
    """
    Set the quantity of a product in the cart; zero or less removes it.

    Returns the updated cart summary.
    """
    cart.update_quantity(product_id, payload.quantity)
    return cart.summary()


@router.delete("/{product_id}", response_model=CartSummary)
def remove_cart_item(product_id: str, cart: CartStore = Depends(use_cart)):
    """
    Remove a product from the cart.

    Returns the updated cart summary.
    """
    cart.remove(product_id)
    return cart.summary()


@router.delete("", response_model=CartSummary)
def clear_cart(cart: CartStore = Depends(use_cart)):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    cart.clear()
    return cart.summary()
