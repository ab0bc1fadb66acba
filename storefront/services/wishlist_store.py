# storefront/services/wishlist_store.py
import asyncio
import logging
from typing import Protocol

from storefront.core.query_client import QueryClient, QueryObserver
from storefront.schemas.product import Product
from storefront.schemas.user import CurrentUser
from storefront.schemas.wishlist import (
    WishlistEntry,
    WishlistEntryCreate,
    WishlistSummary,
)

logger = logging.getLogger(__name__)

WISHLIST_QUERY_PREFIX = ("wishlist",)


class AuthOracle(Protocol):
    async def is_authenticated(self) -> bool: ...

    async def me(self) -> CurrentUser | None: ...

    def redirect_to_login(self) -> None: ...


class WishlistSource(Protocol):
    async def filter(self, *, user_email: str) -> list[WishlistEntry]: ...

    async def create(self, payload: WishlistEntryCreate) -> WishlistEntry: ...

    async def delete(self, entry_id: str) -> None: ...


class WishlistStore:
    """
    Signed-in user's wishlist, cached through the query engine.

    Responsibilities:
      - resolve the current user once at startup (failures = signed out)
      - expose the cached entries, membership checks and count
      - toggle add/remove remotely, then invalidate the cached list

    The cached list is never patched locally: after a successful write the
    query is invalidated and refetched, so reads right after a toggle still
    see the previous server state until the refetch lands.
    """

    def __init__(
        self,
        query_client: QueryClient,
        auth: AuthOracle,
        repo: WishlistSource,
    ):
        self.query_client = query_client
        self.auth = auth
        self.repo = repo
        self.current_user: CurrentUser | None = None
        self._observer: QueryObserver | None = None

        self._add = query_client.mutation(repo.create, on_success=self._invalidate)
        self._remove = query_client.mutation(repo.delete, on_success=self._invalidate)

    # ---- internal helpers ----

    async def _resolve_user(self) -> CurrentUser | None:
        try:
            if not await self.auth.is_authenticated():
                return None
            return await self.auth.me()
        except Exception as e:
            logger.warning(f"Could not resolve current user, treating as signed out: {e!r}")
            return None

    def _observe(self) -> None:
        if self._observer is not None:
            self._observer.close()

        email = self.current_user.email if self.current_user else None

        async def fetch_entries() -> list[WishlistEntry]:
            return await self.repo.filter(user_email=email)

        self._observer = self.query_client.observe(
            (*WISHLIST_QUERY_PREFIX, email),
            fetch_entries,
            enabled=bool(email),
            default=[],
        )

    def _invalidate(self, *_) -> None:
        self.query_client.invalidate_queries(WISHLIST_QUERY_PREFIX)

    # ---- lifecycle ----

    async def initialize(self) -> None:
        """Resolve the current user and start observing their wishlist."""
        self.current_user = await self._resolve_user()
        if self.current_user:
            logger.info(f"Wishlist bound to {self.current_user.email}")
        self._observe()

    async def reload_user(self) -> None:
        """Re-resolve the user after a sign in / sign out."""
        await self.initialize()

    def close(self) -> None:
        if self._observer is not None:
            self._observer.close()
            self._observer = None

    # ---- reads ----

    @property
    def entries(self) -> list[WishlistEntry]:
        if self._observer is None:
            return []
        return list(self._observer.data)

    def is_wishlisted(self, product_id: str) -> bool:
        return any(entry.product_id == product_id for entry in self.entries)

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_mutating(self) -> bool:
        return self._add.is_pending or self._remove.is_pending

    def summary(self) -> WishlistSummary:
        entries = self.entries
        return WishlistSummary(items=entries, count=len(entries))

    # ---- mutations ----

    async def toggle(self, product: Product) -> asyncio.Task | None:
        """
        Add `product` to the wishlist, or remove it if already there.

        Signed out: sends the user to sign in and returns None.
        Signed in: schedules exactly one remote create or delete and
        returns its task; the cached list refreshes after it succeeds.
        """
        if self.current_user is None:
            self.auth.redirect_to_login()
            return None

        existing = next(
            (entry for entry in self.entries if entry.product_id == product.id),
            None,
        )
        if existing is not None:
            return self._remove.mutate(existing.id)

        return self._add.mutate(
            WishlistEntryCreate.from_product(self.current_user.email, product)
        )
