# storefront/repositories/wishlist_repo.py
from supabase import AsyncClient

from storefront.schemas.wishlist import WishlistEntry, WishlistEntryCreate


class WishlistRepository:
    """
    Remote Wishlist collection in Supabase.

    Responsibilities:
      - filter / create / delete rows over PostgREST
      - map raw rows to WishlistEntry
      - no caching, no auth gating (that lives in the store)
    """

    def __init__(self, client: AsyncClient, table: str = "Wishlist"):
        self.client = client
        self.table = table

    async def filter(self, *, user_email: str) -> list[WishlistEntry]:
        """Return every wishlist row owned by `user_email`."""
        resp = await (
            self.client.table(self.table)
            .select("*")
            .eq("user_email", user_email)
            .execute()
        )
        return [WishlistEntry.model_validate(row) for row in resp.data or []]

    async def create(self, payload: WishlistEntryCreate) -> WishlistEntry:
        """
        Insert a new row and return it with the id assigned by Supabase.

        Raises:
            RuntimeError: if the insert returned no row (e.g. blocked by RLS).
        """
        resp = await (
            self.client.table(self.table)
            .insert(payload.model_dump(mode="json"))
            .execute()
        )
        if not resp.data:
            raise RuntimeError(f"{self.table} insert returned no row")
        return WishlistEntry.model_validate(resp.data[0])

    async def delete(self, entry_id: str) -> None:
        """Delete a row by id."""
        await self.client.table(self.table).delete().eq("id", entry_id).execute()
