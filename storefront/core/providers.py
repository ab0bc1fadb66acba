# storefront/core/providers.py
"""
Process-wide provider lifecycle for the commerce state.

Initialisation order:
    query engine -> language context -> wishlist store -> cart store

The wishlist store needs the query engine; the cart store only needs
local storage. Accessors raise ProviderScopeError outside the scope.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from storefront.core.auth import SupabaseAuthOracle
from storefront.core.config import Settings, get_settings
from storefront.core.query_client import QueryClient
from storefront.repositories.local_storage_repo import LocalStorageRepository
from storefront.services.cart_store import CartStore
from storefront.services.language import LanguageContext
from storefront.services.wishlist_store import (
    WishlistSource,
    WishlistStore,
)

logger = logging.getLogger(__name__)


class ProviderScopeError(RuntimeError):
    """A store was used outside (or re-entered inside) the provider scope."""


@dataclass
class Providers:
    query_client: QueryClient
    language: LanguageContext
    wishlist: WishlistStore
    cart: CartStore
    auth: SupabaseAuthOracle


_active: Providers | None = None


@asynccontextmanager
async def storefront_providers(
    storage: LocalStorageRepository,
    auth: SupabaseAuthOracle,
    wishlist_repo: WishlistSource,
    settings: Settings | None = None,
) -> AsyncIterator[Providers]:
    """
    Build every provider, publish them for the accessors below, and tear
    them down on exit (in-flight wishlist work is awaited first).

    Raises:
        ProviderScopeError: if a provider scope is already active.
    """
    global _active
    if _active is not None:
        raise ProviderScopeError("storefront providers are already active")

    settings = settings or get_settings()

    query_client = QueryClient(
        retry=settings.QUERY_RETRY,
        retry_delay=settings.QUERY_RETRY_DELAY,
    )
    language = LanguageContext(storage, settings.LANGUAGE_STORAGE_KEY)
    wishlist = WishlistStore(query_client, auth, wishlist_repo)
    await wishlist.initialize()
    cart = CartStore(storage, settings.CART_STORAGE_KEY)

    _active = Providers(
        query_client=query_client,
        language=language,
        wishlist=wishlist,
        cart=cart,
        auth=auth,
    )
    logger.info(f"Storefront providers ready ({cart.count} item(s) in cart)")
    try:
        yield _active
    finally:
        _active = None
        await query_client.settle()
        wishlist.close()
        await query_client.close()


def _require() -> Providers:
    if _active is None:
        raise ProviderScopeError(
            "storefront stores must be used within storefront_providers()"
        )
    return _active


def use_providers() -> Providers:
    return _require()


def use_query_client() -> QueryClient:
    return _require().query_client


def use_language() -> LanguageContext:
    return _require().language


def use_wishlist() -> WishlistStore:
    return _require().wishlist


def use_cart() -> CartStore:
    return _require().cart
